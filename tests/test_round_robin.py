"""Tests for round robin fixture generation."""

from collections import Counter

import pytest

from ligapro.round_robin import generate_round_pairings, generate_round_robin, rotate


def pair_set(matches):
    return [frozenset((m.player1_id, m.player2_id)) for m in matches]


def test_rotate_keeps_first_fixed():
    assert rotate([1, 2, 3, 4]) == [1, 4, 2, 3]
    assert rotate([1, 2]) == [1, 2]


def test_pairings_skip_bye():
    assert generate_round_pairings([1, 2, 3, None]) == [(2, 3)]


def test_four_players_one_cycle():
    result = generate_round_robin([1, 2, 3, 4])

    assert result.total_rounds == 3
    assert len(result.matches) == 6
    assert len(set(pair_set(result.matches))) == 6

    round1 = [m for m in result.matches if m.round == 1]
    assert pair_set(round1) == [frozenset((1, 4)), frozenset((2, 3))]

    for round_number in (1, 2, 3):
        seated = [
            pid
            for m in result.matches
            if m.round == round_number
            for pid in (m.player1_id, m.player2_id)
        ]
        assert sorted(seated) == [1, 2, 3, 4]


def test_five_players_bye_rotates():
    ids = [1, 2, 3, 4, 5]
    result = generate_round_robin(ids, 1)

    assert len(result.matches) == 10
    assert result.total_rounds == 5
    assert {m.round for m in result.matches} == {1, 2, 3, 4, 5}

    per_round = Counter(m.round for m in result.matches)
    assert all(count <= 2 for count in per_round.values())

    for pid in ids:
        rounds_played = {m.round for m in result.matches if pid in (m.player1_id, m.player2_id)}
        assert len(rounds_played) == 4  # sits out exactly one round

    assert all(count == 1 for count in Counter(pair_set(result.matches)).values())


def test_multiple_cycles_numbered_sequentially():
    result = generate_round_robin([1, 2, 3, 4], num_rounds=2, tournament_id=3)

    assert result.total_rounds == 6
    assert len(result.matches) == 12
    assert sorted({m.round for m in result.matches}) == [1, 2, 3, 4, 5, 6]
    assert all(count == 2 for count in Counter(pair_set(result.matches)).values())
    assert all(m.tournament_id == 3 for m in result.matches)

    round1 = pair_set(m for m in result.matches if m.round == 1)
    round4 = pair_set(m for m in result.matches if m.round == 4)
    assert round1 == round4


@pytest.mark.parametrize("num_players", range(2, 11))
def test_match_count_is_n_choose_2(num_players):
    result = generate_round_robin(list(range(1, num_players + 1)))
    assert len(result.matches) == num_players * (num_players - 1) // 2


def test_fewer_than_two_players():
    for ids in ([], [1]):
        result = generate_round_robin(ids)
        assert result.matches == []
        assert result.total_rounds == 0
