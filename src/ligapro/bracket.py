"""Single elimination bracket generator."""

import math
import random
from typing import Optional

from ligapro.models import BracketResult, Match, MatchStatus


# ============================================================================
# Feeder arithmetic (shared with ligapro.progression)
# ============================================================================


def total_rounds_for(num_players: int) -> int:
    """Return the number of rounds needed to find a champion.

    Examples:
        >>> total_rounds_for(1)
        0
        >>> total_rounds_for(5)
        3
        >>> total_rounds_for(8)
        3
    """
    if num_players <= 1:
        return 0
    return math.ceil(math.log2(num_players))


def parent_position(position: int) -> int:
    """Bracket position of the next-round match fed by ``position``."""
    return position // 2


def feeder_positions(position: int) -> tuple[int, int]:
    """Previous-round positions feeding the match at ``position``."""
    return 2 * position, 2 * position + 1


def target_slot(position: int) -> int:
    """Slot (1 or 2) the winner of ``position`` takes in the next round.

    Even positions feed player 1, odd positions feed player 2.
    """
    return 1 if position % 2 == 0 else 2


# ============================================================================
# Generator
# ============================================================================


def _bye_match(tournament_id, round_number, position, player_id) -> Match:
    """Create a match with no second feeder.

    If the sole player is already known, they advance immediately.
    """
    match = Match(
        id=None,
        tournament_id=tournament_id,
        round=round_number,
        player1_id=player_id,
        player2_id=None,
        bracket_position=position,
        is_bye=True,
    )
    if player_id is not None:
        match.status = MatchStatus.COMPLETED
        match.winner_id = player_id
        match.score1 = 1
        match.score2 = 0
    return match


def generate_elimination_bracket(
    participant_ids: list[int],
    tournament_id: Optional[int] = None,
    random_seed: Optional[int] = None,
) -> BracketResult:
    """Build every round of a single elimination bracket.

    Draw strategy:
    1. Shuffle participants (Fisher-Yates via random.shuffle)
    2. Round 1 pairs consecutive entries; an odd last entry gets a bye
    3. Round r match k is fed by round r-1 positions 2k and 2k+1
    4. A match without a 2k+1 feeder is a bye; if its feeder winner is
       already known (a bye cascade) it is created completed

    Args:
        participant_ids: Player IDs entering the bracket
        tournament_id: Owning tournament (copied onto every match)
        random_seed: Optional seed for a deterministic draw

    Returns:
        BracketResult with matches for all rounds, total_rounds and
        bracket_size (the original participant count)
    """
    num_players = len(participant_ids)
    total_rounds = total_rounds_for(num_players)

    if num_players < 2:
        return BracketResult(matches=[], total_rounds=0, bracket_size=num_players)

    rng = random.Random(random_seed) if random_seed is not None else random
    shuffled = list(participant_ids)
    rng.shuffle(shuffled)

    # Round 1
    previous_round: list[Match] = []
    for position, i in enumerate(range(0, num_players, 2)):
        if i + 1 < num_players:
            match = Match(
                id=None,
                tournament_id=tournament_id,
                round=1,
                player1_id=shuffled[i],
                player2_id=shuffled[i + 1],
                bracket_position=position,
            )
        else:
            match = _bye_match(tournament_id, 1, position, shuffled[i])
        previous_round.append(match)

    matches = list(previous_round)

    # Later rounds only need the previous round's winners
    round_number = 1
    while len(previous_round) > 1:
        round_number += 1
        current_round = []
        num_matches = math.ceil(len(previous_round) / 2)

        for position in range(num_matches):
            left, right = feeder_positions(position)
            left_winner = previous_round[left].winner_id

            if right >= len(previous_round):
                current_round.append(_bye_match(tournament_id, round_number, position, left_winner))
                continue

            current_round.append(
                Match(
                    id=None,
                    tournament_id=tournament_id,
                    round=round_number,
                    player1_id=left_winner,
                    player2_id=previous_round[right].winner_id,
                    bracket_position=position,
                )
            )

        matches.extend(current_round)
        previous_round = current_round

    return BracketResult(matches=matches, total_rounds=total_rounds, bracket_size=num_players)


def count_real_matches(matches: list[Match]) -> int:
    """Count matches that need a two-player decision (byes excluded)."""
    return sum(1 for m in matches if not m.is_bye)
