"""Bracket progression: elimination advancement and swiss round generation."""

import logging
from typing import Optional

from ligapro.bracket import parent_position, target_slot
from ligapro.models import Match, SwissRoundResult, Tournament
from ligapro.ranking import provisional_points
from ligapro.swiss import generate_swiss_round
from ligapro.validation import BracketOrderError

logger = logging.getLogger(__name__)

DEFAULT_SWISS_ROUNDS = 3


# ============================================================================
# Elimination
# ============================================================================


def find_next_match(match: Match, matches: list[Match]) -> Optional[Match]:
    """Find the next-round match the winner of ``match`` feeds into."""
    if match.bracket_position is None:
        return None
    next_round = match.round + 1
    next_position = parent_position(match.bracket_position)
    for candidate in matches:
        if candidate.round == next_round and candidate.bracket_position == next_position:
            return candidate
    return None


def slot_field(match: Match) -> str:
    """Name of the next-match field this match's winner goes into."""
    return "player1_id" if target_slot(match.bracket_position) == 1 else "player2_id"


def advance_winner(store, match: Match, winner_id: int) -> Optional[Match]:
    """Write the winner into its slot of the next-round match.

    The next match is not auto-completed, even when its other slot is a bye.

    Returns:
        The updated next match, or None for the final
    """
    matches = store.get_matches_by_tournament(match.tournament_id)
    next_match = find_next_match(match, matches)
    if next_match is None:
        return None
    return store.update_match(next_match.id, **{slot_field(match): winner_id})


def check_undo_allowed(match: Match, matches: list[Match]) -> None:
    """Refuse to undo a match whose next-round match is already decided.

    Raises:
        BracketOrderError: If the next match is completed
    """
    next_match = find_next_match(match, matches)
    if next_match is not None and next_match.is_completed:
        raise BracketOrderError(
            f"Cannot undo match {match.id}: the next bracket match "
            f"(round {next_match.round}) was already played. Undo it first."
        )


def rollback_winner(store, match: Match) -> Optional[Match]:
    """Clear this match's winner from the next-round match.

    Raises:
        BracketOrderError: If the next match is already decided
    """
    matches = store.get_matches_by_tournament(match.tournament_id)
    check_undo_allowed(match, matches)
    next_match = find_next_match(match, matches)
    if next_match is None:
        return None
    return store.update_match(next_match.id, **{slot_field(match): None})


# ============================================================================
# Swiss
# ============================================================================


def swiss_round_cap(tournament: Tournament) -> int:
    return tournament.config.rounds or DEFAULT_SWISS_ROUNDS


def swiss_round_complete(matches: list[Match], round_number: int) -> bool:
    """True when every match of the round is completed."""
    round_matches = [m for m in matches if m.round == round_number]
    return bool(round_matches) and all(m.is_completed for m in round_matches)


def should_generate_next_round(tournament: Tournament, matches: list[Match], round_number: int) -> bool:
    """Round done, cap not reached and round r+1 not created yet."""
    if not swiss_round_complete(matches, round_number):
        return False
    if round_number >= swiss_round_cap(tournament):
        return False
    return not any(m.round == round_number + 1 for m in matches)


def maybe_generate_next_swiss_round(
    store, tournament: Tournament, round_number: int
) -> Optional[SwissRoundResult]:
    """Generate and persist round r+1 when round r just finished.

    Seeding uses provisional standings (points per win only, no
    tiebreakers) from the tournament's completed matches, which are also
    the rematch history.

    Returns:
        SwissRoundResult with the persisted matches, or None if no round
        was generated
    """
    matches = store.get_matches_by_tournament(tournament.id)
    if not should_generate_next_round(tournament, matches, round_number):
        return None

    completed = [m for m in matches if m.is_decided]
    standings = provisional_points(tournament.player_ids, completed, tournament.config.points_per_win)

    result = generate_swiss_round(
        tournament.player_ids,
        standings,
        round_number + 1,
        completed,
        tournament_id=tournament.id,
    )
    persisted = [store.create_match(m) for m in result.matches]

    logger.info(
        "Swiss round %s complete, generated %s matches for round %s",
        round_number,
        len(persisted),
        round_number + 1,
        extra={"event": "swiss_next_round", "tournament_id": tournament.id},
    )
    return SwissRoundResult(matches=persisted)
