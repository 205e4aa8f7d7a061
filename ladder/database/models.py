from sqlalchemy import (
    Column, Integer, String, DateTime, Text,
    ForeignKey, Enum as SQLEnum, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from ladder.config import Config
from ladder.data_models.records import ChallengeStatus

Base = declarative_base()

class UserRow(Base):
    __tablename__ = 'users'

    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False, index=True)

    # Overall stats (rating is derived from game_stats)
    rating = Column(Integer, nullable=False, default=Config.STARTING_ELO)
    total_wins = Column(Integer, nullable=False, default=0)
    total_losses = Column(Integer, nullable=False, default=0)

    # Metadata
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    game_stats = relationship(
        "UserGameStatsRow",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin"
    )

    def __repr__(self):
        return f"<UserRow(id='{self.id}', name='{self.name}', rating={self.rating})>"

class UserGameStatsRow(Base):
    __tablename__ = 'user_game_stats'

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), ForeignKey('users.id'), nullable=False, index=True)
    game = Column(String(200), nullable=False)

    rating = Column(Integer, nullable=False, default=Config.STARTING_ELO)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)

    user = relationship("UserRow", back_populates="game_stats")

    __table_args__ = (
        UniqueConstraint('user_id', 'game', name='uq_user_game_stats'),
        CheckConstraint('wins >= 0', name='ck_game_stats_wins_non_negative'),
        CheckConstraint('losses >= 0', name='ck_game_stats_losses_non_negative'),
    )

    def __repr__(self):
        return f"<UserGameStatsRow(user_id='{self.user_id}', game='{self.game}', rating={self.rating})>"

class MatchRow(Base):
    __tablename__ = 'matches'

    id = Column(Integer, primary_key=True)
    match_type = Column(String(20), nullable=False)  # "1v1" or "multiplayer"
    game = Column(String(200), nullable=False)

    # 1v1 only: magnitude applied to winner (+) and loser (-)
    rating_change = Column(Integer, nullable=True)

    # Optional challenge link (1v1 matches recorded against a challenge)
    challenge_id = Column(String(64), ForeignKey('challenges.id'), nullable=True)

    date = Column(DateTime(timezone=True), nullable=False, index=True)

    participants = relationship(
        "MatchParticipantRow",
        back_populates="match",
        cascade="all, delete-orphan",
        order_by="MatchParticipantRow.placement",
        lazy="selectin"
    )

    def __repr__(self):
        return f"<MatchRow(id={self.id}, type='{self.match_type}', game='{self.game}')>"

class MatchParticipantRow(Base):
    __tablename__ = 'match_participants'

    id = Column(Integer, primary_key=True)
    match_id = Column(Integer, ForeignKey('matches.id'), nullable=False, index=True)
    user_id = Column(String(64), ForeignKey('users.id'), nullable=False, index=True)
    user_name = Column(String(100), nullable=False)  # Name at the time of the match

    placement = Column(Integer, nullable=False)  # 1v1: winner 1, loser 2
    rating_before = Column(Integer, nullable=False)
    rating_after = Column(Integer, nullable=False)
    rating_change = Column(Integer, nullable=False)

    match = relationship("MatchRow", back_populates="participants")

    __table_args__ = (
        UniqueConstraint('match_id', 'user_id', name='uq_match_participant'),
        UniqueConstraint('match_id', 'placement', name='uq_match_placement'),
        CheckConstraint('placement >= 1', name='ck_participant_placement_positive'),
    )

class ChallengeRow(Base):
    __tablename__ = 'challenges'

    id = Column(String(64), primary_key=True)
    challenger_id = Column(String(64), ForeignKey('users.id'), nullable=False)
    challenger_name = Column(String(100), nullable=False)
    challenged_id = Column(String(64), ForeignKey('users.id'), nullable=False)
    challenged_name = Column(String(100), nullable=False)

    game = Column(String(200), nullable=False)
    message = Column(Text, nullable=False, default="")
    status = Column(SQLEnum(ChallengeStatus), nullable=False, default=ChallengeStatus.PENDING)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint('challenger_id != challenged_id', name='ck_challenge_distinct_users'),
    )

    def __repr__(self):
        return f"<ChallengeRow(id='{self.id}', status={self.status.value})>"

class GameRow(Base):
    __tablename__ = 'games'

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False, unique=True)
    created_at = Column(DateTime, default=func.now())

    def __repr__(self):
        return f"<GameRow(name='{self.name}')>"
