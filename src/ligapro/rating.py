"""Rating engine: fixed points and Elo.

Both models are updated on every decided match, whichever one the league
displays, so reversing a result has to undo both.
"""

import logging
from typing import Optional

from ligapro.models import DEFAULT_RATING, Player, TournamentConfig

logger = logging.getLogger(__name__)

K_FACTOR = 32
ELO_FLOOR = 100


def expected_score(rating_a: float, rating_b: float) -> float:
    """Expected score (0.0 to 1.0) of player A against player B.

    Examples:
        >>> expected_score(1000, 1000)
        0.5
    """
    return 1 / (1 + 10 ** ((rating_b - rating_a) / 400))


def compute_elo(winner_rating: int, loser_rating: int) -> tuple[int, int]:
    """Return (new_winner_rating, new_loser_rating) after one decided game.

    The loser never drops below ELO_FLOOR.

    Examples:
        >>> compute_elo(1000, 1000)
        (1016, 984)
    """
    expected_win = expected_score(winner_rating, loser_rating)
    expected_lose = expected_score(loser_rating, winner_rating)
    new_winner = round(winner_rating + K_FACTOR * (1 - expected_win))
    new_loser = round(loser_rating + K_FACTOR * (0 - expected_lose))
    return new_winner, max(ELO_FLOOR, new_loser)


def reverse_elo(winner_rating: int, loser_rating: int) -> tuple[int, int]:
    """Undo compute_elo using the current (post-match) ratings.

    The deltas are estimated from the current ratings, then the pre-match
    pair closest to that estimate which compute_elo maps back onto the
    current ratings is returned. Such a pair only exists when neither player
    has been rated since; otherwise the estimate is used as is.

    compute_elo is not injective (100 v 133 and 101 v 132 both give
    118 v 115), so an immediate undo lands on the closest pre-image. That
    is the original pair whenever it is the only one, and within 1 point
    of it otherwise.

    The winner is floored at ELO_FLOOR. A loser that was floored by
    compute_elo is not un-floored.

    Examples:
        >>> reverse_elo(1016, 984)
        (1000, 1000)
    """
    expected = expected_score(winner_rating, loser_rating)
    winner_delta = round(K_FACTOR * (1 - expected))
    loser_delta = round(K_FACTOR * expected)

    candidates = sorted(
        ((dw, dl) for dw in range(K_FACTOR + 1) for dl in range(K_FACTOR + 1)),
        key=lambda d: (abs(d[0] - winner_delta) + abs(d[1] - loser_delta), d),
    )
    for dw, dl in candidates:
        if compute_elo(winner_rating - dw, loser_rating + dl) == (winner_rating, loser_rating):
            winner_delta, loser_delta = dw, dl
            break

    return max(ELO_FLOOR, winner_rating - winner_delta), loser_rating + loser_delta


def next_win_streak(streak: int) -> int:
    return max(0, streak) + 1


def _resolve_config(config) -> TournamentConfig:
    if config is None:
        return TournamentConfig()
    if isinstance(config, dict):
        return TournamentConfig.from_dict(config)
    return config


def compute_fixed_points(
    winner: Player, loser: Optional[Player], config=None
) -> tuple[dict, Optional[dict]]:
    """Field updates of the fixed-points model for one decided game.

    Returns:
        Tuple of (winner_fields, loser_fields); loser_fields is None when
        there is no loser
    """
    cfg = _resolve_config(config)
    streak = next_win_streak(winner.streak)
    winner_fields = {
        "wins": winner.wins + 1,
        "points": winner.points + cfg.points_per_win,
        "streak": streak,
        "best_streak": max(winner.best_streak, streak),
    }
    if loser is None:
        return winner_fields, None
    loser_fields = {
        "losses": loser.losses + 1,
        "points": loser.points + cfg.points_per_loss,
        "streak": 0,
    }
    return winner_fields, loser_fields


def _load_pair(store, winner_id, loser_id, event: str) -> Optional[tuple[Player, Player]]:
    """Read both players; log and return None when one is missing."""
    winner = store.get_player(winner_id) if winner_id is not None else None
    loser = store.get_player(loser_id) if loser_id is not None else None
    if winner is None or loser is None:
        missing = winner_id if winner is None else loser_id
        logger.warning(
            "%s skipped: player %s not found",
            event,
            missing,
            extra={"event": event, "player_id": missing, "winner_id": winner_id, "loser_id": loser_id},
        )
        return None
    return winner, loser


# ============================================================================
# Single-model updates
# ============================================================================


def apply_fixed_points(store, winner_id: int, loser_id: Optional[int], config=None) -> None:
    """Apply only the fixed-points model.

    The loser is optional; when absent only the winner is updated.
    """
    winner = store.get_player(winner_id)
    if winner is None:
        logger.warning(
            "apply_fixed_points skipped: player %s not found",
            winner_id,
            extra={"event": "apply_fixed_points", "player_id": winner_id},
        )
        return

    loser = store.get_player(loser_id) if loser_id is not None else None
    if loser_id is not None and loser is None:
        logger.warning(
            "apply_fixed_points: loser %s not found",
            loser_id,
            extra={"event": "apply_fixed_points", "player_id": loser_id},
        )

    winner_fields, loser_fields = compute_fixed_points(winner, loser, config)
    store.update_player(winner_id, **winner_fields)
    if loser_fields is not None:
        store.update_player(loser_id, **loser_fields)


def apply_elo_rating(store, winner_id: int, loser_id: int) -> None:
    """Apply only the Elo model."""
    pair = _load_pair(store, winner_id, loser_id, "apply_elo_rating")
    if pair is None:
        return
    winner, loser = pair

    new_winner, new_loser = compute_elo(winner.elo_rating, loser.elo_rating)
    streak = next_win_streak(winner.streak)
    store.update_player(
        winner_id,
        wins=winner.wins + 1,
        elo_rating=new_winner,
        streak=streak,
        best_streak=max(winner.best_streak, streak),
    )
    store.update_player(
        loser_id,
        losses=loser.losses + 1,
        elo_rating=new_loser,
        streak=0,
    )


# ============================================================================
# Combined updates (both models)
# ============================================================================


def apply_match_result(store, winner_id: int, loser_id: int, config=None) -> bool:
    """Apply a decided match to both players under both rating models.

    New values are computed from the pre-match snapshot of both players
    before anything is written.

    Args:
        store: Object with get_player / update_player
        winner_id: Winning player ID
        loser_id: Losing player ID
        config: TournamentConfig (or dict) with points_per_win / points_per_loss

    Returns:
        True if applied, False if a player was missing (no-op)
    """
    pair = _load_pair(store, winner_id, loser_id, "apply_match_result")
    if pair is None:
        return False
    winner, loser = pair

    new_winner_rating, new_loser_rating = compute_elo(
        winner.elo_rating or DEFAULT_RATING, loser.elo_rating or DEFAULT_RATING
    )
    winner_fields, loser_fields = compute_fixed_points(winner, loser, config)
    winner_fields["elo_rating"] = new_winner_rating
    loser_fields["elo_rating"] = new_loser_rating

    store.update_player(winner_id, **winner_fields)
    store.update_player(loser_id, **loser_fields)

    logger.debug(
        "Applied result: %s beat %s (Elo %s->%s, %s->%s)",
        winner_id, loser_id,
        winner.elo_rating, new_winner_rating,
        loser.elo_rating, new_loser_rating,
    )
    return True


def reverse_match_result(store, winner_id: int, loser_id: int, config=None) -> bool:
    """Undo apply_match_result for both models.

    Counts and points are decremented with a floor at 0, both streaks are
    reset to 0 (the previous streak is not recoverable).

    Returns:
        True if reversed, False if a player was missing (no-op)
    """
    pair = _load_pair(store, winner_id, loser_id, "reverse_match_result")
    if pair is None:
        return False
    winner, loser = pair
    cfg = _resolve_config(config)

    new_winner_rating, new_loser_rating = reverse_elo(
        winner.elo_rating or DEFAULT_RATING, loser.elo_rating or DEFAULT_RATING
    )

    store.update_player(
        winner_id,
        wins=max(0, winner.wins - 1),
        points=max(0, winner.points - cfg.points_per_win),
        elo_rating=new_winner_rating,
        streak=0,
    )
    store.update_player(
        loser_id,
        losses=max(0, loser.losses - 1),
        points=max(0, loser.points - cfg.points_per_loss),
        elo_rating=new_loser_rating,
        streak=0,
    )

    logger.debug("Reversed result: %s beat %s", winner_id, loser_id)
    return True
