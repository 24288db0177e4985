"""Data models for ligapro.

Domain model hierarchy:
- Player carries the league-wide stats (points, Elo, wins, streaks)
- Tournament ("selective") owns its participants, config and Matches
- Match holds two player slots and the decided winner
- RankingEntry / TournamentStanding are computed on demand, never stored
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


DEFAULT_RATING = 1000


class TournamentMode(str, Enum):
    """Pairing format of a tournament."""

    ELIMINATION = "elimination"
    ROUND_ROBIN = "round-robin"
    SWISS = "swiss"


class TournamentStatus(str, Enum):
    """Tournament status (active -> completed only)."""

    ACTIVE = "active"
    COMPLETED = "completed"


class MatchStatus(str, Enum):
    """Match status."""

    PENDING = "pending"  # Not decided yet
    COMPLETED = "completed"  # Winner recorded (or auto-advanced bye)


class RankingMode(str, Enum):
    """Global rating model used for display."""

    POINTS = "points"
    ELO = "elo"


class Tiebreaker(str, Enum):
    """Tiebreaker preference stored on a tournament config."""

    HEAD_TO_HEAD = "head-to-head"
    WIN_RATE = "win-rate"


class SlotState(str, Enum):
    """State of one player slot in a match."""

    BYE = "bye"  # No opponent will ever arrive
    PENDING = "pending"  # Winner of an earlier match not known yet
    FILLED = "filled"  # Player assigned


# ============================================================================
# Core Domain Models
# ============================================================================


@dataclass
class Player:
    """League player.

    Stat fields are only mutated by the rating engine.
    """

    id: int
    name: str
    nickname: str = ""
    elo_rating: int = DEFAULT_RATING
    points: int = 0
    wins: int = 0
    losses: int = 0
    streak: int = 0  # Consecutive wins, reset on any loss
    best_streak: int = 0
    badges: list[str] = field(default_factory=list)

    @property
    def games_played(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> float:
        """Wins / max(1, games played)."""
        return self.wins / max(1, self.games_played)

    def __str__(self) -> str:
        nick = f' "{self.nickname}"' if self.nickname else ""
        return f"{self.name}{nick} ({self.points}pts, {self.elo_rating} Elo)"


@dataclass
class TournamentConfig:
    """Per-tournament settings, fixed at creation time."""

    rounds: int = 1  # Round-robin cycles / swiss round cap
    points_per_win: int = 3
    points_per_loss: int = 0
    tiebreaker: Tiebreaker = Tiebreaker.HEAD_TO_HEAD

    def to_dict(self) -> dict:
        return {
            "rounds": self.rounds,
            "points_per_win": self.points_per_win,
            "points_per_loss": self.points_per_loss,
            "tiebreaker": Tiebreaker(self.tiebreaker).value,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "TournamentConfig":
        data = data or {}
        return cls(
            rounds=data.get("rounds") or 1,
            points_per_win=data.get("points_per_win", 3),
            points_per_loss=data.get("points_per_loss", 0),
            tiebreaker=Tiebreaker(data.get("tiebreaker") or Tiebreaker.HEAD_TO_HEAD.value),
        )


@dataclass
class Tournament:
    """A tournament ("selective") with its pairing mode and participants."""

    id: int
    name: str
    mode: TournamentMode
    player_ids: list[int] = field(default_factory=list)
    config: TournamentConfig = field(default_factory=TournamentConfig)
    status: TournamentStatus = TournamentStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == TournamentStatus.ACTIVE

    def __str__(self) -> str:
        return f"{self.name} [{TournamentMode(self.mode).value}] ({len(self.player_ids)} players)"


@dataclass
class Match:
    """A match between two player slots.

    A None slot is either a bye (no feeder, see is_bye) or a winner that
    is not known yet. Use slot_state() instead of testing for None.
    """

    id: Optional[int]
    tournament_id: Optional[int]
    round: int
    player1_id: Optional[int] = None
    player2_id: Optional[int] = None
    bracket_position: Optional[int] = None  # Elimination only, 0-based per round
    is_bye: bool = False  # Player 2 slot has no feeder
    status: MatchStatus = MatchStatus.PENDING
    winner_id: Optional[int] = None
    score1: Optional[int] = None
    score2: Optional[int] = None

    @property
    def is_completed(self) -> bool:
        return self.status == MatchStatus.COMPLETED

    @property
    def is_decided(self) -> bool:
        """Completed with a recorded winner."""
        return self.is_completed and self.winner_id is not None

    @property
    def has_both_players(self) -> bool:
        """True for a real two-player match (ratings apply)."""
        return self.player1_id is not None and self.player2_id is not None

    def slot_state(self, slot: int) -> SlotState:
        """Return the state of slot 1 or 2."""
        if slot not in (1, 2):
            raise ValueError(f"Slot must be 1 or 2, got {slot}")
        player_id = self.player1_id if slot == 1 else self.player2_id
        if player_id is not None:
            return SlotState.FILLED
        if slot == 2 and self.is_bye:
            return SlotState.BYE
        return SlotState.PENDING

    def loser_id_for(self, winner_id: int) -> Optional[int]:
        """Return the other player of the match."""
        return self.player2_id if winner_id == self.player1_id else self.player1_id

    def loser_id(self) -> Optional[int]:
        """Return the non-winning player of a decided match."""
        if self.winner_id is None:
            return None
        return self.loser_id_for(self.winner_id)

    def involves(self, player_a: int, player_b: int) -> bool:
        return {self.player1_id, self.player2_id} == {player_a, player_b}

    def __str__(self) -> str:
        p1 = f"P{self.player1_id}" if self.player1_id is not None else self.slot_state(1).value.upper()
        p2 = f"P{self.player2_id}" if self.player2_id is not None else self.slot_state(2).value.upper()
        score = f"{self.score1}-{self.score2}" if self.is_completed else "vs"
        return f"R{self.round} Match {self.id}: {p1} {score} {p2}"


@dataclass
class Settings:
    """League-wide settings."""

    ranking_mode: RankingMode = RankingMode.POINTS


# ============================================================================
# Result Models
# ============================================================================


@dataclass
class BracketResult:
    """Output of the elimination bracket generator."""

    matches: list[Match]
    total_rounds: int
    bracket_size: int


@dataclass
class RoundRobinResult:
    """Output of the round-robin generator."""

    matches: list[Match]
    total_rounds: int


@dataclass
class SwissRoundResult:
    """Output of the swiss pairing generator (one round)."""

    matches: list[Match]


@dataclass
class RankingEntry:
    """One row of a ranking snapshot.

    sb_score is the strength-of-schedule score: the sum of the current
    points of every opponent this player has beaten.
    """

    player: Player
    sb_score: int = 0
    position: Optional[int] = None

    @property
    def id(self) -> int:
        return self.player.id

    def __str__(self) -> str:
        pos = f"#{self.position}" if self.position else "unranked"
        return f"{pos} {self.player.name}: {self.player.points}pts SB={self.sb_score}"


@dataclass
class TournamentStanding:
    """Standing for a player within one tournament."""

    player_id: int
    tournament_id: Optional[int] = None
    points: int = 0
    wins: int = 0
    losses: int = 0
    position: Optional[int] = None

    @property
    def id(self) -> int:
        return self.player_id

    def __str__(self) -> str:
        pos = f"#{self.position}" if self.position else "unranked"
        return f"{pos} P{self.player_id}: {self.points}pts {self.wins}W-{self.losses}L"
