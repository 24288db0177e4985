"""Tests for tournament and result validation rules."""

from ligapro.models import Match, MatchStatus, TournamentConfig
from ligapro.validation import (
    BracketOrderError,
    NotFoundError,
    ValidationError,
    validate_result,
    validate_tournament,
    validate_tournament_config,
)


class TestValidateTournament:
    """Test cases for validate_tournament function."""

    def test_valid(self):
        assert validate_tournament("Selective #1", "elimination", [1, 2, 3]) == (True, "")
        assert validate_tournament("Selective #1", "round-robin", [1, 2]) == (True, "")

    def test_empty_name(self):
        is_valid, msg = validate_tournament("   ", "swiss", [1, 2])
        assert is_valid is False
        assert "name" in msg

    def test_unknown_mode(self):
        is_valid, msg = validate_tournament("Cup", "double-elimination", [1, 2])
        assert is_valid is False
        assert "double-elimination" in msg

    def test_too_few_players(self):
        assert validate_tournament("Cup", "swiss", []) == (False, "Select at least 2 players (got 0)")

    def test_duplicate_players(self):
        is_valid, msg = validate_tournament("Cup", "swiss", [1, 2, 2])
        assert is_valid is False
        assert "twice" in msg


class TestValidateTournamentConfig:
    def test_defaults_valid(self):
        assert validate_tournament_config(TournamentConfig()) == (True, "")

    def test_rounds_must_be_positive(self):
        is_valid, msg = validate_tournament_config(TournamentConfig(rounds=0))
        assert is_valid is False
        assert "rounds" in msg

    def test_negative_points(self):
        is_valid, msg = validate_tournament_config(TournamentConfig(points_per_loss=-1))
        assert is_valid is False
        assert "points_per_loss" in msg

    def test_unknown_tiebreaker(self):
        is_valid, msg = validate_tournament_config(TournamentConfig(tiebreaker="coin-flip"))
        assert is_valid is False
        assert "tiebreaker" in msg

    def test_tiebreaker_as_string(self):
        assert validate_tournament_config(TournamentConfig(tiebreaker="win-rate")) == (True, "")


class TestValidateResult:
    def make_match(self, **kwargs):
        return Match(id=1, tournament_id=1, round=1, player1_id=10, player2_id=20, **kwargs)

    def test_either_player_can_win(self):
        assert validate_result(self.make_match(), 10) == (True, "")
        assert validate_result(self.make_match(), 20) == (True, "")

    def test_outsider_rejected(self):
        is_valid, msg = validate_result(self.make_match(), 30)
        assert is_valid is False
        assert "one of the two players" in msg

    def test_winner_required(self):
        assert validate_result(self.make_match(), None) == (False, "A winner is required")

    def test_decided_match_rejected(self):
        match = self.make_match(status=MatchStatus.COMPLETED, winner_id=10)
        is_valid, msg = validate_result(match, 20)
        assert is_valid is False
        assert "undo" in msg

    def test_pending_slot_rejected(self):
        match = Match(id=3, tournament_id=1, round=2, player1_id=10)
        assert validate_result(match, 10) == (False, "Match 3 is waiting for an earlier result")

    def test_bye_with_player_accepted(self):
        match = Match(id=4, tournament_id=1, round=2, player1_id=10, is_bye=True)
        assert validate_result(match, 10) == (True, "")


def test_error_hierarchy():
    assert issubclass(BracketOrderError, ValidationError)
    assert issubclass(NotFoundError, ValidationError)
