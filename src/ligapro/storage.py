"""SQLite storage layer for ligapro.

Provides ORM models, the repository pattern for data persistence, and
LeagueStore: the store interface the engines consume (players, matches,
tournaments, settings) returning domain dataclasses.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.pool import NullPool

from ligapro.models import (
    DEFAULT_RATING,
    Match,
    MatchStatus,
    Player,
    RankingMode,
    Settings,
    Tournament,
    TournamentConfig,
    TournamentMode,
    TournamentStatus,
)

Base = declarative_base()


# ============================================================================
# ORM Models
# ============================================================================


class PlayerORM(Base):
    """Player table.

    Stat columns (points, elo_rating, wins, losses, streak, best_streak) are
    written by the rating engine only.
    """

    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    nickname = Column(String(100), nullable=False, default="")
    elo_rating = Column(Integer, nullable=False, default=DEFAULT_RATING)
    points = Column(Integer, nullable=False, default=0)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    streak = Column(Integer, nullable=False, default=0)
    best_streak = Column(Integer, nullable=False, default=0)
    # Store badges as JSON array
    badges_json = Column(Text, nullable=False, default="[]")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def badges(self) -> list[str]:
        """Get badges from JSON."""
        return json.loads(self.badges_json or "[]")

    @badges.setter
    def badges(self, value: list[str]):
        """Set badges as JSON."""
        self.badges_json = json.dumps(value)


class TournamentORM(Base):
    """Tournament ("selective") table."""

    __tablename__ = "tournaments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    mode = Column(String(20), nullable=False)  # elimination, round-robin, swiss
    status = Column(String(20), nullable=False, default="active")  # active, completed
    # Participants and config stored as JSON
    player_ids_json = Column(Text, nullable=False, default="[]")
    config_json = Column(Text, nullable=False, default="{}")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    matches = relationship("MatchORM", back_populates="tournament", cascade="all, delete-orphan")

    @property
    def player_ids(self) -> list[int]:
        """Get player IDs from JSON."""
        return json.loads(self.player_ids_json)

    @player_ids.setter
    def player_ids(self, value: list[int]):
        """Set player IDs as JSON."""
        self.player_ids_json = json.dumps(value)

    @property
    def config(self) -> dict:
        """Get config from JSON."""
        return json.loads(self.config_json or "{}")

    @config.setter
    def config(self, value: dict):
        """Set config as JSON."""
        self.config_json = json.dumps(value)


class MatchORM(Base):
    """Match table."""

    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=True)
    round = Column(Integer, nullable=False, default=1)
    bracket_position = Column(Integer, nullable=True)  # Elimination only
    player1_id = Column(Integer, ForeignKey("players.id"), nullable=True)  # None for pending slot
    player2_id = Column(Integer, ForeignKey("players.id"), nullable=True)  # None for bye or pending slot
    is_bye = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default="pending")
    winner_id = Column(Integer, nullable=True)
    score1 = Column(Integer, nullable=True)
    score2 = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tournament = relationship("TournamentORM", back_populates="matches")


class SettingsORM(Base):
    """Single-row league settings table."""

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ranking_mode = Column(String(10), nullable=False, default="points")
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ============================================================================
# ORM <-> domain conversion
# ============================================================================


def player_to_domain(player_orm: PlayerORM) -> Player:
    return Player(
        id=player_orm.id,
        name=player_orm.name,
        nickname=player_orm.nickname or "",
        elo_rating=player_orm.elo_rating if player_orm.elo_rating is not None else DEFAULT_RATING,
        points=player_orm.points or 0,
        wins=player_orm.wins or 0,
        losses=player_orm.losses or 0,
        streak=player_orm.streak or 0,
        best_streak=player_orm.best_streak or 0,
        badges=player_orm.badges,
    )


def tournament_to_domain(tournament_orm: TournamentORM) -> Tournament:
    return Tournament(
        id=tournament_orm.id,
        name=tournament_orm.name,
        mode=TournamentMode(tournament_orm.mode),
        player_ids=tournament_orm.player_ids,
        config=TournamentConfig.from_dict(tournament_orm.config),
        status=TournamentStatus(tournament_orm.status),
    )


def match_to_domain(match_orm: MatchORM) -> Match:
    return Match(
        id=match_orm.id,
        tournament_id=match_orm.tournament_id,
        round=match_orm.round,
        player1_id=match_orm.player1_id,
        player2_id=match_orm.player2_id,
        bracket_position=match_orm.bracket_position,
        is_bye=bool(match_orm.is_bye),
        status=MatchStatus(match_orm.status),
        winner_id=match_orm.winner_id,
        score1=match_orm.score1,
        score2=match_orm.score2,
    )


def _plain(value):
    """Store enum members by value."""
    return value.value if hasattr(value, "value") else value


# ============================================================================
# Database Manager
# ============================================================================


class DatabaseManager:
    """Manages SQLite database connection and session."""

    def __init__(self, db_path: str = ".ligapro/ligapro.sqlite"):
        """Initialize database manager.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # Use NullPool for SQLite to avoid connection pool issues
        self.engine = create_engine(
            f"sqlite:///{self.db_path}",
            echo=False,
            poolclass=NullPool,
            connect_args={"check_same_thread": False},
        )
        self.SessionLocal = sessionmaker(bind=self.engine)

    def create_tables(self):
        """Create all tables in the database."""
        Base.metadata.create_all(self.engine)

    def get_session(self):
        """Get a new database session."""
        return self.SessionLocal()


# ============================================================================
# Repository Pattern
# ============================================================================


class PlayerRepository:
    """Repository for Player operations."""

    def __init__(self, session):
        self.session = session

    def create(self, name: str, nickname: str = "", elo_rating: int = DEFAULT_RATING) -> PlayerORM:
        """Create a new player with fresh stats.

        Args:
            name: Display name
            nickname: Optional nickname
            elo_rating: Starting rating

        Returns:
            Created PlayerORM instance with auto-generated ID
        """
        player_orm = PlayerORM(
            name=name,
            nickname=nickname or "",
            elo_rating=elo_rating,
            points=0,
            wins=0,
            losses=0,
            streak=0,
            best_streak=0,
            badges_json="[]",
        )
        self.session.add(player_orm)
        self.session.commit()
        self.session.refresh(player_orm)
        return player_orm

    def get_by_id(self, player_id: int) -> Optional[PlayerORM]:
        """Get player by database ID."""
        return self.session.query(PlayerORM).filter(PlayerORM.id == player_id).first()

    def get_all(self) -> list[PlayerORM]:
        """Get all players in insertion order."""
        return self.session.query(PlayerORM).order_by(PlayerORM.id).all()

    def update_fields(self, player_id: int, **fields) -> Optional[PlayerORM]:
        """Update selected columns of a player.

        Args:
            player_id: Database ID
            **fields: Column values to write (badges accepted as a list)

        Returns:
            Updated PlayerORM, or None if not found
        """
        player_orm = self.get_by_id(player_id)
        if player_orm is None:
            return None
        for key, value in fields.items():
            if key == "badges":
                player_orm.badges = value
            elif hasattr(PlayerORM, key):
                setattr(player_orm, key, value)
            else:
                raise AttributeError(f"Unknown player field: {key}")
        self.session.commit()
        self.session.refresh(player_orm)
        return player_orm


class TournamentRepository:
    """Repository for Tournament operations."""

    def __init__(self, session):
        self.session = session

    def create(self, tournament: Tournament) -> TournamentORM:
        """Create a new tournament from a domain model (id is ignored)."""
        tournament_orm = TournamentORM(
            name=tournament.name,
            mode=_plain(tournament.mode),
            status=_plain(tournament.status),
            player_ids_json=json.dumps(list(tournament.player_ids)),
            config_json=json.dumps(tournament.config.to_dict()),
        )
        self.session.add(tournament_orm)
        self.session.commit()
        self.session.refresh(tournament_orm)
        return tournament_orm

    def get_by_id(self, tournament_id: int) -> Optional[TournamentORM]:
        """Get tournament by ID."""
        return self.session.query(TournamentORM).filter(
            TournamentORM.id == tournament_id
        ).first()

    def get_all(self) -> list[TournamentORM]:
        """Get all tournaments in creation order."""
        return self.session.query(TournamentORM).order_by(TournamentORM.id).all()

    def update_status(self, tournament_id: int, status: str) -> bool:
        """Update tournament status."""
        result = self.session.query(TournamentORM).filter(
            TournamentORM.id == tournament_id
        ).update({"status": _plain(status)})
        self.session.commit()
        return result > 0

    def delete(self, tournament_id: int) -> bool:
        """Delete a tournament and all its matches."""
        tournament = self.get_by_id(tournament_id)
        if tournament:
            self.session.delete(tournament)
            self.session.commit()
            return True
        return False


class MatchRepository:
    """Repository for Match operations."""

    def __init__(self, session):
        self.session = session

    def create(self, match: Match) -> MatchORM:
        """Create a new match from a domain model (id is ignored)."""
        match_orm = MatchORM(
            tournament_id=match.tournament_id,
            round=match.round,
            bracket_position=match.bracket_position,
            player1_id=match.player1_id,
            player2_id=match.player2_id,
            is_bye=match.is_bye,
            status=_plain(match.status),
            winner_id=match.winner_id,
            score1=match.score1,
            score2=match.score2,
        )
        self.session.add(match_orm)
        self.session.commit()
        self.session.refresh(match_orm)
        return match_orm

    def get_by_id(self, match_id: int) -> Optional[MatchORM]:
        """Get match by ID."""
        return self.session.query(MatchORM).filter(MatchORM.id == match_id).first()

    def get_all(self) -> list[MatchORM]:
        """Get all matches."""
        return self.session.query(MatchORM).order_by(MatchORM.id).all()

    def get_by_tournament(self, tournament_id: int) -> list[MatchORM]:
        """Get all matches of a tournament ordered by round and bracket position."""
        return (
            self.session.query(MatchORM)
            .filter(MatchORM.tournament_id == tournament_id)
            .order_by(MatchORM.round, MatchORM.bracket_position, MatchORM.id)
            .all()
        )

    def update_fields(self, match_id: int, **fields) -> Optional[MatchORM]:
        """Update selected columns of a match."""
        match_orm = self.get_by_id(match_id)
        if match_orm is None:
            return None
        for key, value in fields.items():
            if not hasattr(MatchORM, key):
                raise AttributeError(f"Unknown match field: {key}")
            setattr(match_orm, key, _plain(value))
        self.session.commit()
        self.session.refresh(match_orm)
        return match_orm

    def delete_by_tournament(self, tournament_id: int) -> int:
        """Delete all matches of a tournament.

        Returns:
            Number of deleted matches
        """
        count = (
            self.session.query(MatchORM)
            .filter(MatchORM.tournament_id == tournament_id)
            .delete()
        )
        self.session.commit()
        return count


class SettingsRepository:
    """Repository for the single settings row."""

    def __init__(self, session):
        self.session = session

    def get(self) -> SettingsORM:
        """Get settings, creating the default row on first access."""
        settings = self.session.query(SettingsORM).first()
        if settings is None:
            settings = SettingsORM(ranking_mode=RankingMode.POINTS.value)
            self.session.add(settings)
            self.session.commit()
            self.session.refresh(settings)
        return settings

    def set_ranking_mode(self, ranking_mode: str) -> SettingsORM:
        settings = self.get()
        settings.ranking_mode = RankingMode(_plain(ranking_mode)).value
        self.session.commit()
        return settings


# ============================================================================
# Store consumed by the engines
# ============================================================================


class LeagueStore:
    """Collection-scoped store returning domain models.

    Every write commits immediately; multi-step operations built on top of
    it are not transactional.
    """

    def __init__(self, session):
        self.session = session
        self.players = PlayerRepository(session)
        self.tournaments = TournamentRepository(session)
        self.matches = MatchRepository(session)
        self.settings = SettingsRepository(session)

    @classmethod
    def from_path(cls, db_path: str) -> "LeagueStore":
        """Open (and create if needed) a SQLite store."""
        db = DatabaseManager(db_path)
        db.create_tables()
        return cls(db.get_session())

    # Players

    def get_players(self) -> list[Player]:
        return [player_to_domain(p) for p in self.players.get_all()]

    def get_player(self, player_id: int) -> Optional[Player]:
        player_orm = self.players.get_by_id(player_id)
        return player_to_domain(player_orm) if player_orm else None

    def create_player(self, name: str, nickname: str = "", elo_rating: int = DEFAULT_RATING) -> Player:
        return player_to_domain(self.players.create(name, nickname, elo_rating))

    def update_player(self, player_id: int, **fields) -> Optional[Player]:
        player_orm = self.players.update_fields(player_id, **fields)
        return player_to_domain(player_orm) if player_orm else None

    # Tournaments

    def get_tournaments(self) -> list[Tournament]:
        return [tournament_to_domain(t) for t in self.tournaments.get_all()]

    def get_tournament(self, tournament_id: int) -> Optional[Tournament]:
        tournament_orm = self.tournaments.get_by_id(tournament_id)
        return tournament_to_domain(tournament_orm) if tournament_orm else None

    def create_tournament(self, tournament: Tournament) -> Tournament:
        return tournament_to_domain(self.tournaments.create(tournament))

    def update_tournament_status(self, tournament_id: int, status: TournamentStatus) -> bool:
        return self.tournaments.update_status(tournament_id, status)

    def delete_tournament(self, tournament_id: int) -> bool:
        """Remove a tournament and its matches (no rating reversal here)."""
        self.matches.delete_by_tournament(tournament_id)
        return self.tournaments.delete(tournament_id)

    # Matches

    def get_matches(self) -> list[Match]:
        return [match_to_domain(m) for m in self.matches.get_all()]

    def get_matches_by_tournament(self, tournament_id: int) -> list[Match]:
        return [match_to_domain(m) for m in self.matches.get_by_tournament(tournament_id)]

    def get_match(self, match_id: int) -> Optional[Match]:
        match_orm = self.matches.get_by_id(match_id)
        return match_to_domain(match_orm) if match_orm else None

    def create_match(self, match: Match) -> Match:
        return match_to_domain(self.matches.create(match))

    def update_match(self, match_id: int, **fields) -> Optional[Match]:
        match_orm = self.matches.update_fields(match_id, **fields)
        return match_to_domain(match_orm) if match_orm else None

    # Settings

    def get_settings(self) -> Settings:
        return Settings(ranking_mode=RankingMode(self.settings.get().ranking_mode))

    def update_settings(self, ranking_mode: str) -> Settings:
        settings_orm = self.settings.set_ranking_mode(ranking_mode)
        return Settings(ranking_mode=RankingMode(settings_orm.ranking_mode))
