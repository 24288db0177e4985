"""Swiss system pairing (one round per call)."""

from collections import defaultdict
from typing import Iterable, Optional

from ligapro.models import Match, SwissRoundResult


def _snapshot_id(entry):
    """Accept plain IDs or ranking rows (RankingEntry, TournamentStanding, Player)."""
    if isinstance(entry, int):
        return entry
    for attr in ("id", "player_id"):
        if hasattr(entry, attr):
            return getattr(entry, attr)
    if isinstance(entry, dict):
        return entry.get("id", entry.get("player_id"))
    return entry


def seed_order(participant_ids: list[int], ranking_snapshot: Iterable) -> list[int]:
    """Sort participants by their index in the ranking snapshot.

    Participants missing from the snapshot go last, keeping their original
    relative order (sorted() is stable).
    """
    rank_index = {}
    for index, entry in enumerate(ranking_snapshot or []):
        rank_index.setdefault(_snapshot_id(entry), index)

    unranked = len(rank_index)
    return sorted(participant_ids, key=lambda pid: rank_index.get(pid, unranked))


def build_opponent_history(previous_matches: Iterable[Match]) -> dict[int, set[int]]:
    """Map each player to the set of opponents already faced."""
    played_against = defaultdict(set)
    for match in previous_matches or []:
        if match.player1_id is None or match.player2_id is None:
            continue
        played_against[match.player1_id].add(match.player2_id)
        played_against[match.player2_id].add(match.player1_id)
    return played_against


def generate_swiss_round(
    participant_ids: list[int],
    ranking_snapshot: Optional[Iterable],
    round_number: int,
    previous_matches: Optional[Iterable[Match]] = None,
    tournament_id: Optional[int] = None,
) -> SwissRoundResult:
    """Pair one swiss round.

    1. Seed participants by ranking snapshot position
    2. Greedy pass: each unpaired player takes the first unpaired player
       below them they have not met yet
    3. Leftovers are paired in seed order even if it is a rematch;
       with an odd count the last one sits out

    Args:
        participant_ids: Player IDs in the tournament
        ranking_snapshot: Ordered IDs or ranking rows (may be partial or empty)
        round_number: Round number stamped on the matches
        previous_matches: Matches already played (rematch avoidance)
        tournament_id: Owning tournament

    Returns:
        SwissRoundResult with the round's matches
    """
    ordered = seed_order(participant_ids, ranking_snapshot)
    played_against = build_opponent_history(previous_matches)

    paired = set()
    pairings = []

    for i, player in enumerate(ordered):
        if player in paired:
            continue
        for opponent in ordered[i + 1:]:
            if opponent in paired:
                continue
            if opponent in played_against[player]:
                continue
            pairings.append((player, opponent))
            paired.add(player)
            paired.add(opponent)
            break

    # Last resort: rematches
    unpaired = [pid for pid in ordered if pid not in paired]
    for i in range(0, len(unpaired) - 1, 2):
        pairings.append((unpaired[i], unpaired[i + 1]))

    matches = [
        Match(
            id=None,
            tournament_id=tournament_id,
            round=round_number,
            player1_id=p1,
            player2_id=p2,
        )
        for p1, p2 in pairings
    ]
    return SwissRoundResult(matches=matches)
