"""Tournament lifecycle: create, report, undo, complete, delete.

Each operation is a short sequence of independent store writes with no
enclosing transaction. If one fails halfway, undo_result is the way to
reconcile.
"""

import logging
from typing import Optional

from ligapro.bracket import generate_elimination_bracket
from ligapro.models import (
    Match,
    MatchStatus,
    Tournament,
    TournamentConfig,
    TournamentMode,
    TournamentStatus,
)
from ligapro.progression import (
    DEFAULT_SWISS_ROUNDS,
    advance_winner,
    check_undo_allowed,
    maybe_generate_next_swiss_round,
    rollback_winner,
)
from ligapro.rating import apply_match_result, reverse_match_result
from ligapro.round_robin import generate_round_robin
from ligapro.swiss import generate_swiss_round
from ligapro.validation import (
    NotFoundError,
    ValidationError,
    validate_result,
    validate_tournament,
    validate_tournament_config,
)

logger = logging.getLogger(__name__)


def generate_matches_for_tournament(tournament: Tournament, random_seed: Optional[int] = None) -> list[Match]:
    """Initial match shells for a tournament.

    Elimination and round robin get every round up front; swiss only
    gets round 1 (seeded in participant order, no history).
    """
    mode = TournamentMode(tournament.mode)

    if mode == TournamentMode.ELIMINATION:
        return generate_elimination_bracket(
            tournament.player_ids, tournament_id=tournament.id, random_seed=random_seed
        ).matches

    if mode == TournamentMode.ROUND_ROBIN:
        return generate_round_robin(
            tournament.player_ids, tournament.config.rounds, tournament_id=tournament.id
        ).matches

    return generate_swiss_round(tournament.player_ids, [], 1, [], tournament_id=tournament.id).matches


def _get_tournament(store, tournament_id: int) -> Tournament:
    tournament = store.get_tournament(tournament_id)
    if tournament is None:
        raise NotFoundError(f"Tournament {tournament_id} not found")
    return tournament


def _get_match(store, match_id: int) -> Match:
    match = store.get_match(match_id)
    if match is None:
        raise NotFoundError(f"Match {match_id} not found")
    return match


def create_tournament(
    store,
    name: str,
    mode,
    player_ids: list[int],
    config: Optional[TournamentConfig] = None,
    random_seed: Optional[int] = None,
) -> tuple[Tournament, list[Match]]:
    """Create a tournament and persist its initial matches.

    Args:
        store: LeagueStore (or compatible)
        name: Tournament name
        mode: TournamentMode or its value
        player_ids: Participants (at least 2, no duplicates)
        config: Tournament config; swiss defaults to a 3 round cap
        random_seed: Optional seed for the elimination draw

    Returns:
        Tuple of (tournament, persisted matches)

    Raises:
        ValidationError: If the input is invalid
    """
    mode_value = mode.value if isinstance(mode, TournamentMode) else mode
    is_valid, error = validate_tournament(name, mode_value, player_ids)
    if not is_valid:
        raise ValidationError(error)

    mode = TournamentMode(mode_value)
    if config is None:
        config = TournamentConfig(rounds=DEFAULT_SWISS_ROUNDS if mode == TournamentMode.SWISS else 1)
    is_valid, error = validate_tournament_config(config)
    if not is_valid:
        raise ValidationError(error)

    tournament = store.create_tournament(
        Tournament(
            id=None,
            name=name.strip(),
            mode=mode,
            player_ids=list(player_ids),
            config=config,
            status=TournamentStatus.ACTIVE,
        )
    )

    matches = [store.create_match(m) for m in generate_matches_for_tournament(tournament, random_seed)]

    logger.info(
        "Created tournament %s (%s) with %s players and %s matches",
        tournament.id, mode.value, len(player_ids), len(matches),
        extra={"event": "tournament_created", "tournament_id": tournament.id},
    )
    return tournament, matches


def report_result(store, match_id: int, winner_id: int) -> Match:
    """Record the winner of a match.

    Ratings are applied only when both slots hold a player. Elimination
    winners advance to their next-round slot; a finished swiss round
    triggers the next one.

    Returns:
        The updated match

    Raises:
        NotFoundError: Unknown match or tournament
        ValidationError: Winner not in the match or match already decided
    """
    match = _get_match(store, match_id)
    tournament = _get_tournament(store, match.tournament_id)

    is_valid, error = validate_result(match, winner_id)
    if not is_valid:
        raise ValidationError(error)

    updated = store.update_match(
        match.id,
        winner_id=winner_id,
        score1=1 if winner_id == match.player1_id else 0,
        score2=1 if winner_id == match.player2_id else 0,
        status=MatchStatus.COMPLETED,
    )

    if match.has_both_players:
        apply_match_result(store, winner_id, match.loser_id_for(winner_id), tournament.config)

    mode = TournamentMode(tournament.mode)
    if mode == TournamentMode.ELIMINATION and match.bracket_position is not None:
        advance_winner(store, match, winner_id)
    elif mode == TournamentMode.SWISS:
        maybe_generate_next_swiss_round(store, tournament, match.round)

    return updated


def undo_result(store, match_id: int) -> Match:
    """Reset a decided match to pending and reverse its rating effect.

    A match without a winner is returned unchanged.

    Raises:
        NotFoundError: Unknown match or tournament
        BracketOrderError: The next bracket match was already decided
    """
    match = _get_match(store, match_id)
    if match.winner_id is None:
        return match
    tournament = _get_tournament(store, match.tournament_id)

    is_bracket = (
        TournamentMode(tournament.mode) == TournamentMode.ELIMINATION
        and match.bracket_position is not None
    )
    if is_bracket:
        check_undo_allowed(match, store.get_matches_by_tournament(tournament.id))

    if match.has_both_players:
        reverse_match_result(store, match.winner_id, match.loser_id(), tournament.config)

    updated = store.update_match(
        match.id,
        winner_id=None,
        score1=None,
        score2=None,
        status=MatchStatus.PENDING,
    )

    if is_bracket:
        rollback_winner(store, match)

    return updated


def tournament_progress(tournament: Tournament, matches: list[Match]) -> tuple[int, int]:
    """Return (completed, total) matches.

    Elimination only counts the N-1 real decisions; bye matches are excluded.
    """
    if TournamentMode(tournament.mode) == TournamentMode.ELIMINATION:
        matches = [m for m in matches if not m.is_bye]
    completed = sum(1 for m in matches if m.is_completed)
    return completed, len(matches)


def complete_tournament(store, tournament_id: int, force: bool = False) -> Tournament:
    """Mark a tournament completed.

    Requires every real match to be decided unless ``force`` is set (the
    external trigger used to close a swiss tournament early).

    Raises:
        NotFoundError: Unknown tournament
        ValidationError: Already completed or matches still pending
    """
    tournament = _get_tournament(store, tournament_id)
    if tournament.status == TournamentStatus.COMPLETED:
        raise ValidationError(f"Tournament {tournament_id} is already completed")

    if not force:
        completed, total = tournament_progress(tournament, store.get_matches_by_tournament(tournament_id))
        if total == 0 or completed < total:
            raise ValidationError(
                f"Tournament {tournament_id} still has pending matches ({completed}/{total} decided)"
            )

    store.update_tournament_status(tournament_id, TournamentStatus.COMPLETED)
    return store.get_tournament(tournament_id)


def delete_tournament(store, tournament_id: int) -> int:
    """Reverse every decided match, then delete the tournament and its matches.

    Reversals are applied one at a time; independent reversals commute so
    their order does not matter.

    Returns:
        Number of reversed matches
    """
    tournament = _get_tournament(store, tournament_id)
    reversed_count = 0

    for match in store.get_matches_by_tournament(tournament_id):
        if not match.is_decided or not match.has_both_players:
            continue
        reverse_match_result(store, match.winner_id, match.loser_id(), tournament.config)
        reversed_count += 1

    store.delete_tournament(tournament_id)
    logger.info(
        "Deleted tournament %s, reversed %s results",
        tournament_id, reversed_count,
        extra={"event": "tournament_deleted", "tournament_id": tournament_id},
    )
    return reversed_count
