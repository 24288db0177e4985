"""Ranking composer with tie-breaking rules."""

from functools import cmp_to_key
from typing import Iterable, Optional

from ligapro.models import (
    Match,
    Player,
    RankingEntry,
    RankingMode,
    Tournament,
    TournamentStanding,
)


def get_head_to_head_result(player_a_id: int, player_b_id: int, matches: Iterable[Match]) -> int:
    """Compare two players on their direct meetings.

    Only completed matches with a winner between exactly these two players
    count.

    Returns:
        1 if A has more direct wins, -1 if B has, 0 if tied or never met
    """
    a_wins = 0
    b_wins = 0
    for match in matches:
        if not match.is_decided or not match.involves(player_a_id, player_b_id):
            continue
        if match.winner_id == player_a_id:
            a_wins += 1
        elif match.winner_id == player_b_id:
            b_wins += 1

    if a_wins > b_wins:
        return 1
    if b_wins > a_wins:
        return -1
    return 0


def compute_sb_scores(players: list[Player], matches: Iterable[Match]) -> dict[int, int]:
    """Sonneborn-Berger style score for every player.

    For each completed match a player won, add the current point total of
    the defeated opponent. Global: every tournament counts.

    Returns:
        Dict of player_id -> score (0 for players without wins)
    """
    points_by_id = {p.id: p.points for p in players}
    scores = {p.id: 0 for p in players}

    for match in matches:
        if not match.is_decided or match.winner_id not in scores:
            continue
        loser_id = match.loser_id()
        if loser_id in points_by_id:
            scores[match.winner_id] += points_by_id[loser_id]

    return scores


def compute_win_rate(wins: int, losses: int) -> float:
    """Wins / max(1, wins + losses).

    Examples:
        >>> compute_win_rate(0, 0)
        0.0
        >>> compute_win_rate(3, 1)
        0.75
    """
    return wins / max(1, wins + losses)


def compare_points_mode(
    a: RankingEntry, b: RankingEntry, matches: list[Match]
) -> int:
    """Comparator for the points ranking (negative = a ranks first).

    Tie-breaking criteria, first non-zero wins:
    1. Total points (DESC)
    2. Head-to-head direct wins
    3. SB score (DESC)
    4. Win rate (DESC)
    5. Raw wins (DESC)
    """
    pa, pb = a.player, b.player

    if pa.points != pb.points:
        return pb.points - pa.points

    h2h = get_head_to_head_result(pa.id, pb.id, matches)
    if h2h != 0:
        return -h2h

    if a.sb_score != b.sb_score:
        return b.sb_score - a.sb_score

    rate_a = compute_win_rate(pa.wins, pa.losses)
    rate_b = compute_win_rate(pb.wins, pb.losses)
    if rate_a != rate_b:
        return -1 if rate_a > rate_b else 1

    return pb.wins - pa.wins


def get_rankings(
    players: list[Player],
    matches: list[Match],
    ranking_mode: RankingMode = RankingMode.POINTS,
) -> list[RankingEntry]:
    """Produce the league ranking snapshot.

    The ranking mode is an explicit argument; use rankings_from_store() to
    read it from the league settings.

    Args:
        players: All players
        matches: All matches (every tournament)
        ranking_mode: "points" or "elo"

    Returns:
        List of RankingEntry sorted by position (1 = best). In elo mode ties
        keep the input order.
    """
    matches = list(matches)
    sb_scores = compute_sb_scores(players, matches)
    entries = [RankingEntry(player=p, sb_score=sb_scores.get(p.id, 0)) for p in players]

    if RankingMode(ranking_mode) == RankingMode.ELO:
        entries.sort(key=lambda e: e.player.elo_rating, reverse=True)
    else:
        entries.sort(key=cmp_to_key(lambda a, b: compare_points_mode(a, b, matches)))

    for position, entry in enumerate(entries, start=1):
        entry.position = position

    return entries


def rankings_from_store(store, ranking_mode: Optional[RankingMode] = None) -> list[RankingEntry]:
    """Rankings from a store; the mode defaults to the stored settings."""
    mode = ranking_mode or store.get_settings().ranking_mode
    return get_rankings(store.get_players(), store.get_matches(), mode)


def player_score(player: Player, ranking_mode: RankingMode) -> int:
    """The number shown next to a player for the active ranking mode."""
    if RankingMode(ranking_mode) == RankingMode.ELO:
        return player.elo_rating
    return player.points


# ============================================================================
# Per-tournament standings
# ============================================================================


def compute_tournament_standings(
    tournament: Tournament, matches: list[Match]
) -> list[TournamentStanding]:
    """Result table for one tournament.

    Uses the tournament's points_per_win / points_per_loss over its own
    completed matches.

    Tie-breaking criteria:
    1. Points (DESC)
    2. Head-to-head within this tournament
    3. Wins (DESC)
    4. Losses (ASC)

    Args:
        tournament: Tournament with participants and config
        matches: Matches of this tournament

    Returns:
        List of TournamentStanding sorted by position (1 = best)
    """
    config = tournament.config
    standings_dict = {
        pid: TournamentStanding(player_id=pid, tournament_id=tournament.id)
        for pid in tournament.player_ids
    }

    decided = [m for m in matches if m.is_decided and m.tournament_id in (None, tournament.id)]

    for match in decided:
        winner = standings_dict.get(match.winner_id)
        if winner is not None:
            winner.wins += 1
            winner.points += config.points_per_win
        loser_id = match.loser_id()
        if loser_id is not None and loser_id in standings_dict:
            standings_dict[loser_id].losses += 1
            standings_dict[loser_id].points += config.points_per_loss

    def compare(a: TournamentStanding, b: TournamentStanding) -> int:
        if a.points != b.points:
            return b.points - a.points
        h2h = get_head_to_head_result(a.player_id, b.player_id, decided)
        if h2h != 0:
            return -h2h
        if a.wins != b.wins:
            return b.wins - a.wins
        return a.losses - b.losses

    standings = sorted(standings_dict.values(), key=cmp_to_key(compare))
    for position, standing in enumerate(standings, start=1):
        standing.position = position

    return standings


def provisional_points(
    player_ids: list[int], matches: Iterable[Match], points_per_win: int
) -> list[TournamentStanding]:
    """Points-only standings used to seed the next swiss round.

    No tiebreakers: equal totals keep participant order.
    """
    table = {pid: TournamentStanding(player_id=pid) for pid in player_ids}
    for match in matches:
        if match.is_decided and match.winner_id in table:
            table[match.winner_id].wins += 1
            table[match.winner_id].points += points_per_win
    return sorted(table.values(), key=lambda s: s.points, reverse=True)


def get_global_stats(players: list[Player]) -> dict:
    """League-wide stats.

    The best win rate only considers players with at least 3 games.
    """
    best_streak = 0
    best_streak_player = None
    best_win_rate = 0
    best_win_rate_player = None

    for player in players:
        if player.best_streak > best_streak:
            best_streak = player.best_streak
            best_streak_player = player
        rate = round(compute_win_rate(player.wins, player.losses) * 100)
        if player.games_played >= 3 and rate > best_win_rate:
            best_win_rate = rate
            best_win_rate_player = player

    return {
        "total_players": len(players),
        "total_matches": sum(p.wins for p in players),
        "best_streak": best_streak,
        "best_streak_player": best_streak_player,
        "best_win_rate": best_win_rate,
        "best_win_rate_player": best_win_rate_player,
    }
