"""Shared fixtures for ligapro tests."""

import pytest

from ligapro.storage import LeagueStore


@pytest.fixture
def store(tmp_path):
    """Fresh SQLite-backed store per test."""
    return LeagueStore.from_path(str(tmp_path / "league.sqlite"))


@pytest.fixture
def make_players(store):
    """Create N players named Player1..PlayerN and return them."""

    def _make(count):
        return [store.create_player(f"Player{i}") for i in range(1, count + 1)]

    return _make


def find_match(matches, player_a, player_b):
    """Return the match between two players (either slot order)."""
    for match in matches:
        if match.involves(player_a, player_b):
            return match
    raise AssertionError(f"No match between {player_a} and {player_b}")
