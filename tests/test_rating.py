"""Tests for the rating engine (fixed points and Elo)."""

import logging
from unittest.mock import MagicMock

import pytest

from ligapro.models import Player, TournamentConfig
from ligapro.rating import (
    ELO_FLOOR,
    apply_elo_rating,
    apply_fixed_points,
    apply_match_result,
    compute_elo,
    compute_fixed_points,
    expected_score,
    reverse_elo,
    reverse_match_result,
)


class TestElo:
    """Pure Elo arithmetic."""

    def test_expected_scores_sum_to_one(self):
        assert expected_score(1000, 1000) == 0.5
        assert expected_score(1200, 1000) + expected_score(1000, 1200) == pytest.approx(1.0)
        assert expected_score(1200, 1000) > 0.5

    def test_equal_ratings(self):
        assert compute_elo(1000, 1000) == (1016, 984)

    def test_loser_floored(self):
        assert compute_elo(105, 105) == (121, ELO_FLOOR)

    def test_reverse_equal_ratings(self):
        assert reverse_elo(1016, 984) == (1000, 1000)

    def test_reverse_never_drops_winner_below_floor(self):
        assert reverse_elo(100, 2000) == (ELO_FLOOR, 2032)

    def test_reverse_of_shared_result_picks_closest_pair(self):
        assert compute_elo(100, 133) == compute_elo(101, 132) == (118, 115)
        assert reverse_elo(118, 115) == (101, 132)

    @pytest.mark.parametrize("winner", range(300, 2300, 97))
    def test_apply_then_reverse_over_rating_grid(self, winner):
        for loser in range(300, 2300, 89):
            after = compute_elo(winner, loser)
            restored = reverse_elo(*after)

            assert compute_elo(*restored) == after
            assert abs(restored[0] - winner) <= 1
            assert abs(restored[1] - loser) <= 1

            neighbours = [
                (winner + dw, loser + dl)
                for dw in (-1, 0, 1)
                for dl in (-1, 0, 1)
                if (dw, dl) != (0, 0)
            ]
            if all(compute_elo(*pair) != after for pair in neighbours):
                assert restored == (winner, loser)


class TestApplyMatchResult:
    """Combined updates against a real store."""

    def test_apply_updates_both_models(self, store, make_players):
        winner, loser = make_players(2)

        assert apply_match_result(store, winner.id, loser.id) is True

        w = store.get_player(winner.id)
        l = store.get_player(loser.id)
        assert (w.wins, w.losses, w.points, w.elo_rating) == (1, 0, 3, 1016)
        assert (w.streak, w.best_streak) == (1, 1)
        assert (l.wins, l.losses, l.points, l.elo_rating) == (0, 1, 0, 984)
        assert l.streak == 0

    def test_points_per_loss_from_config(self, store, make_players):
        winner, loser = make_players(2)

        apply_match_result(store, winner.id, loser.id, {"points_per_win": 2, "points_per_loss": 1})

        assert store.get_player(winner.id).points == 2
        assert store.get_player(loser.id).points == 1

    def test_streak_tracking(self, store, make_players):
        a, b = make_players(2)

        apply_match_result(store, a.id, b.id)
        apply_match_result(store, a.id, b.id)
        assert store.get_player(a.id).streak == 2

        apply_match_result(store, b.id, a.id)
        a_after = store.get_player(a.id)
        assert a_after.streak == 0
        assert a_after.best_streak == 2
        assert store.get_player(b.id).streak == 1

    def test_apply_then_reverse_restores_stats(self, store, make_players):
        winner, loser = make_players(2)
        config = TournamentConfig(points_per_win=3, points_per_loss=1)

        apply_match_result(store, winner.id, loser.id, config)
        assert reverse_match_result(store, winner.id, loser.id, config) is True

        for player in (store.get_player(winner.id), store.get_player(loser.id)):
            assert (player.wins, player.losses, player.points) == (0, 0, 0)
            assert player.elo_rating == 1000
            assert player.streak == 0

    def test_reverse_floors_counts_at_zero(self, store, make_players):
        winner, loser = make_players(2)

        reverse_match_result(store, winner.id, loser.id)

        w = store.get_player(winner.id)
        l = store.get_player(loser.id)
        assert (w.wins, w.points) == (0, 0)
        assert (l.losses, l.points) == (0, 0)

    def test_missing_player_is_noop(self, caplog):
        store = MagicMock()
        store.get_player.side_effect = lambda pid: Player(id=1, name="Ana") if pid == 1 else None

        with caplog.at_level(logging.WARNING, logger="ligapro.rating"):
            assert apply_match_result(store, 1, 99) is False
            assert reverse_match_result(store, 99, 1) is False

        store.update_player.assert_not_called()
        events = [r.event for r in caplog.records]
        assert events == ["apply_match_result", "reverse_match_result"]
        assert all(r.player_id == 99 for r in caplog.records)


class TestSingleModelUpdates:
    def test_fixed_points_without_loser(self, store, make_players):
        (winner,) = make_players(1)

        apply_fixed_points(store, winner.id, None, TournamentConfig(points_per_win=5))

        w = store.get_player(winner.id)
        assert (w.wins, w.points, w.elo_rating) == (1, 5, 1000)

    def test_elo_only_leaves_points(self, store, make_players):
        winner, loser = make_players(2)

        apply_elo_rating(store, winner.id, loser.id)

        w = store.get_player(winner.id)
        l = store.get_player(loser.id)
        assert (w.elo_rating, w.points, w.wins) == (1016, 0, 1)
        assert (l.elo_rating, l.points, l.losses) == (984, 0, 1)


def test_compute_fixed_points_from_snapshot():
    winner = Player(id=1, name="Ana", wins=2, points=6, streak=-1, best_streak=3)
    loser = Player(id=2, name="Bia", losses=1, points=3, streak=4)

    winner_fields, loser_fields = compute_fixed_points(winner, loser, {"points_per_loss": 1})

    assert winner_fields == {"wins": 3, "points": 9, "streak": 1, "best_streak": 3}
    assert loser_fields == {"losses": 2, "points": 4, "streak": 0}
    assert compute_fixed_points(winner, None)[1] is None
