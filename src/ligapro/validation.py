"""Validation rules for tournaments and match results."""

from typing import Optional

from ligapro.models import Match, SlotState, TournamentConfig, TournamentMode, Tiebreaker


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


class BracketOrderError(ValidationError):
    """Raised when undoing a bracket match whose next match is already decided."""

    pass


class NotFoundError(ValidationError):
    """Raised when a tournament or match ID does not exist."""

    pass


MIN_PARTICIPANTS = 2


def validate_tournament(
    name: str, mode: str, player_ids: list[int]
) -> tuple[bool, str]:
    """Validate the data needed to create a tournament.

    Args:
        name: Tournament name
        mode: Pairing mode value
        player_ids: Selected participants

    Returns:
        Tuple of (is_valid, error_message)

    Examples:
        >>> validate_tournament("Selective #1", "swiss", [1, 2])
        (True, '')
        >>> validate_tournament("Selective #1", "swiss", [1])
        (False, 'Select at least 2 players (got 1)')
    """
    if not name or not name.strip():
        return False, "Tournament name cannot be empty"

    valid_modes = {m.value for m in TournamentMode}
    if mode not in valid_modes:
        return False, f"Mode must be one of {sorted(valid_modes)}, got '{mode}'"

    if len(player_ids) < MIN_PARTICIPANTS:
        return False, f"Select at least {MIN_PARTICIPANTS} players (got {len(player_ids)})"

    if len(set(player_ids)) != len(player_ids):
        return False, "A player cannot be entered twice in the same tournament"

    return True, ""


def validate_tournament_config(config: TournamentConfig) -> tuple[bool, str]:
    """Validate tournament config values.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(config.rounds, int) or config.rounds < 1:
        return False, f"rounds must be an integer >= 1, got {config.rounds!r}"

    for field_name in ("points_per_win", "points_per_loss"):
        value = getattr(config, field_name)
        if not isinstance(value, int) or value < 0:
            return False, f"{field_name} must be an integer >= 0, got {value!r}"

    valid_tiebreakers = {t.value for t in Tiebreaker}
    tiebreaker = config.tiebreaker.value if isinstance(config.tiebreaker, Tiebreaker) else config.tiebreaker
    if tiebreaker not in valid_tiebreakers:
        return False, f"tiebreaker must be one of {sorted(valid_tiebreakers)}"

    return True, ""


def validate_result(match: Match, winner_id: Optional[int]) -> tuple[bool, str]:
    """Validate a reported winner for a match.

    Args:
        match: The match being decided
        winner_id: ID of the player reported as winner

    Returns:
        Tuple of (is_valid, error_message)
    """
    if match.is_completed:
        return False, f"Match {match.id} is already decided; undo it first"

    if SlotState.PENDING in (match.slot_state(1), match.slot_state(2)):
        return False, f"Match {match.id} is waiting for an earlier result"

    if winner_id is None:
        return False, "A winner is required"

    if winner_id not in (match.player1_id, match.player2_id):
        return False, "The winner must be one of the two players of the match"

    return True, ""
