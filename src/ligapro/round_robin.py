"""Round robin fixtures using the circle method."""

from typing import Optional

from ligapro.models import Match, RoundRobinResult


def rotate(players: list) -> list:
    """Rotate every entry except the first one position clockwise.

    Examples:
        >>> rotate([1, 2, 3, 4])
        [1, 4, 2, 3]
    """
    if len(players) <= 2:
        return list(players)
    return [players[0], players[-1]] + players[1:-1]


def generate_round_pairings(players: list) -> list[tuple]:
    """Pair position i with position n-1-i for one round.

    Pairings against the None bye are dropped.
    """
    n = len(players)
    pairings = []
    for i in range(n // 2):
        p1 = players[i]
        p2 = players[n - 1 - i]
        if p1 is not None and p2 is not None:
            pairings.append((p1, p2))
    return pairings


def generate_round_robin(
    participant_ids: list[int],
    num_rounds: int = 1,
    tournament_id: Optional[int] = None,
) -> RoundRobinResult:
    """Generate every match of a round robin.

    Circle method: participant 0 stays fixed and the rest rotate one
    position per round. With an odd count a None bye is appended, so each
    participant sits out exactly once per cycle.

    For 4 players (one cycle):
        Round 1: (1,4), (2,3)
        Round 2: (1,3), (4,2)
        Round 3: (1,2), (3,4)

    Args:
        participant_ids: Player IDs
        num_rounds: Number of full cycles (everyone meets everyone once per cycle)
        tournament_id: Owning tournament

    Returns:
        RoundRobinResult with matches and total_rounds = (n-1) * num_rounds,
        n counted after bye padding
    """
    players = list(participant_ids)
    if len(players) < 2:
        return RoundRobinResult(matches=[], total_rounds=0)

    num_rounds = max(1, num_rounds or 1)

    if len(players) % 2 != 0:
        players.append(None)

    n = len(players)
    rounds_per_cycle = n - 1
    matches = []

    for cycle in range(num_rounds):
        rotating = list(players)
        for local_round in range(rounds_per_cycle):
            round_number = cycle * rounds_per_cycle + local_round + 1
            for p1, p2 in generate_round_pairings(rotating):
                matches.append(
                    Match(
                        id=None,
                        tournament_id=tournament_id,
                        round=round_number,
                        player1_id=p1,
                        player2_id=p2,
                    )
                )
            rotating = rotate(rotating)

    return RoundRobinResult(matches=matches, total_rounds=rounds_per_cycle * num_rounds)
