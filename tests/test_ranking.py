"""Tests for the ranking composer and tie-breaking."""

from ligapro.models import (
    Match,
    MatchStatus,
    Player,
    RankingEntry,
    RankingMode,
    Tournament,
    TournamentConfig,
    TournamentMode,
)
from ligapro.ranking import (
    compare_points_mode,
    compute_sb_scores,
    compute_tournament_standings,
    get_global_stats,
    get_head_to_head_result,
    get_rankings,
    provisional_points,
)


def decided(p1, p2, winner, tournament_id=1):
    return Match(
        id=None,
        tournament_id=tournament_id,
        round=1,
        player1_id=p1,
        player2_id=p2,
        status=MatchStatus.COMPLETED,
        winner_id=winner,
    )


def ranked_ids(entries):
    return [e.player.id for e in entries]


class TestHeadToHead:
    def test_antisymmetric(self):
        matches = [decided(1, 2, 1), decided(2, 1, 1), decided(1, 2, 2)]

        assert get_head_to_head_result(1, 2, matches) == 1
        assert get_head_to_head_result(2, 1, matches) == -1

    def test_never_met_or_pending(self):
        pending = Match(id=None, tournament_id=1, round=1, player1_id=1, player2_id=2)

        assert get_head_to_head_result(1, 2, []) == 0
        assert get_head_to_head_result(1, 2, [pending, decided(1, 3, 1)]) == 0

    def test_equal_direct_wins(self):
        matches = [decided(1, 2, 1), decided(1, 2, 2)]
        assert get_head_to_head_result(1, 2, matches) == 0


def test_sb_score_sums_beaten_opponents_points():
    players = [
        Player(id=1, name="A", points=3),
        Player(id=2, name="B", points=6),
        Player(id=3, name="C", points=9),
    ]
    matches = [decided(1, 2, 1), decided(1, 3, 1), decided(3, 2, 3)]

    scores = compute_sb_scores(players, matches)

    assert scores == {1: 15, 2: 0, 3: 6}


class TestPointsModeCascade:
    """Each test isolates one tie-breaking level."""

    def test_points_first(self):
        players = [Player(id=1, name="A", points=3), Player(id=2, name="B", points=6)]
        assert ranked_ids(get_rankings(players, [])) == [2, 1]

    def test_head_to_head_breaks_points_tie(self):
        players = [
            Player(id=1, name="A", points=3, wins=1, losses=1),
            Player(id=2, name="B", points=3, wins=1, losses=1),
        ]
        matches = [decided(1, 2, 2)]

        assert ranked_ids(get_rankings(players, matches)) == [2, 1]

    def test_sb_breaks_head_to_head_tie(self):
        players = [
            Player(id=1, name="A", points=3, wins=1),
            Player(id=2, name="B", points=3, wins=1),
            Player(id=3, name="C", points=0),
            Player(id=4, name="D", points=6),
        ]
        matches = [decided(1, 3, 1), decided(2, 4, 2)]

        ranking = get_rankings(players, matches)

        assert ranked_ids(ranking) == [4, 2, 1, 3]
        assert {e.player.id: e.sb_score for e in ranking}[2] == 6

    def test_win_rate_breaks_sb_tie(self):
        players = [
            Player(id=1, name="A", points=3, wins=1, losses=2),
            Player(id=2, name="B", points=3, wins=1, losses=0),
        ]
        assert ranked_ids(get_rankings(players, [])) == [2, 1]

    def test_raw_wins_break_win_rate_tie(self):
        players = [
            Player(id=1, name="A", points=6, wins=1, losses=1),
            Player(id=2, name="B", points=6, wins=2, losses=2),
        ]
        assert ranked_ids(get_rankings(players, [])) == [2, 1]

    def test_comparator_is_antisymmetric_and_transitive(self):
        players = [
            Player(id=1, name="A", points=9, wins=3),
            Player(id=2, name="B", points=6, wins=2, losses=1),
            Player(id=3, name="C", points=6, wins=2, losses=1),
            Player(id=4, name="D", points=3, wins=1, losses=2),
            Player(id=5, name="E", points=0, losses=3),
        ]
        matches = [decided(2, 3, 2), decided(1, 2, 1), decided(4, 5, 4)]
        sb = compute_sb_scores(players, matches)
        entries = [RankingEntry(player=p, sb_score=sb[p.id]) for p in players]

        def sign(value):
            return (value > 0) - (value < 0)

        for a in entries:
            for b in entries:
                assert sign(compare_points_mode(a, b, matches)) == -sign(compare_points_mode(b, a, matches))

        ranking = get_rankings(players, matches)
        for i, a in enumerate(ranking):
            for b in ranking[i + 1:]:
                assert compare_points_mode(a, b, matches) <= 0


def test_positions_are_one_based_and_contiguous():
    players = [Player(id=i, name=f"P{i}", points=i) for i in range(1, 6)]
    ranking = get_rankings(players, [])

    assert [e.position for e in ranking] == [1, 2, 3, 4, 5]
    assert ranked_ids(ranking) == [5, 4, 3, 2, 1]


def test_elo_mode_sorts_by_rating_and_keeps_ties_stable():
    players = [
        Player(id=1, name="A", elo_rating=1000, points=30),
        Player(id=2, name="B", elo_rating=1100),
        Player(id=3, name="C", elo_rating=1000),
    ]

    ranking = get_rankings(players, [], RankingMode.ELO)

    assert ranked_ids(ranking) == [2, 1, 3]


class TestTournamentStandings:
    def make_tournament(self, player_ids, points_per_loss=0):
        return Tournament(
            id=1,
            name="Selective",
            mode=TournamentMode.ROUND_ROBIN,
            player_ids=player_ids,
            config=TournamentConfig(points_per_win=3, points_per_loss=points_per_loss),
        )

    def test_uses_tournament_points(self):
        tournament = self.make_tournament([1, 2, 3], points_per_loss=1)
        matches = [decided(1, 2, 1), decided(1, 3, 1), decided(2, 3, 2)]

        standings = compute_tournament_standings(tournament, matches)

        assert [s.player_id for s in standings] == [1, 2, 3]
        assert [s.points for s in standings] == [6, 4, 2]
        assert [s.position for s in standings] == [1, 2, 3]

    def test_fewest_losses_breaks_wins_tie(self):
        tournament = self.make_tournament([1, 2, 3, 4])
        matches = [decided(1, 3, 1), decided(2, 4, 2), decided(4, 2, 4)]

        standings = compute_tournament_standings(tournament, matches)
        order = [s.player_id for s in standings]

        assert order.index(1) < order.index(2)
        assert order[-1] == 3

    def test_ignores_other_tournaments(self):
        tournament = self.make_tournament([1, 2])
        matches = [decided(1, 2, 1), decided(1, 2, 2, tournament_id=2)]

        standings = compute_tournament_standings(tournament, matches)

        assert [(s.player_id, s.wins) for s in standings] == [(1, 1), (2, 0)]


def test_provisional_points_no_tiebreakers():
    matches = [decided(3, 4, 3), decided(1, 2, 2)]

    table = provisional_points([1, 2, 3, 4], matches, points_per_win=3)

    assert [s.player_id for s in table] == [2, 3, 1, 4]
    assert [s.points for s in table] == [3, 3, 0, 0]


def test_global_stats():
    players = [
        Player(id=1, name="A", wins=2, losses=0, best_streak=2),
        Player(id=2, name="B", wins=3, losses=1, best_streak=3),
        Player(id=3, name="C", wins=0, losses=4),
    ]

    stats = get_global_stats(players)

    assert stats["total_players"] == 3
    assert stats["total_matches"] == 5
    assert stats["best_streak_player"].id == 2
    assert stats["best_win_rate"] == 75
    assert stats["best_win_rate_player"].id == 2
