"""
Record types shared by the rating engine, the operations layer and the
repositories.

Users are the long-lived mutable records. Matches are immutable facts and
challenges are replaced (never mutated in place) on every transition.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from ladder.config import Config


class ChallengeStatus(Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COMPLETED = "completed"


@dataclass
class GameStats:
    """Per-game rating and record for one user."""
    rating: int = Config.STARTING_ELO
    wins: int = 0
    losses: int = 0


@dataclass
class User:
    """A ladder participant."""
    id: str
    name: str
    created_at: datetime
    rating: int = Config.STARTING_ELO
    total_wins: int = 0
    total_losses: int = 0
    game_stats: Dict[str, GameStats] = field(default_factory=dict)

    @property
    def matches_played(self) -> int:
        return self.total_wins + self.total_losses

    @property
    def win_rate(self) -> float:
        if self.matches_played == 0:
            return 0.0
        return (self.total_wins / self.matches_played) * 100


@dataclass(frozen=True)
class OneVsOneMatch:
    """Head-to-head result. Ratings before/after are overall ratings."""
    game: str
    winner_id: str
    winner_name: str
    winner_rating_before: int
    winner_rating_after: int
    loser_id: str
    loser_name: str
    loser_rating_before: int
    loser_rating_after: int
    rating_change: int
    date: datetime
    challenge_id: Optional[str] = None
    id: Optional[str] = None

    @property
    def participant_ids(self) -> List[str]:
        return [self.winner_id, self.loser_id]


@dataclass(frozen=True)
class MultiplayerPlacement:
    """One participant's line in a multiplayer match."""
    user_id: str
    name: str
    placement: int  # 1 = first place
    rating_before: int
    rating_after: int
    rating_change: int


@dataclass(frozen=True)
class MultiplayerMatch:
    """Four-player placement result, players ordered by placement."""
    game: str
    players: Tuple[MultiplayerPlacement, ...]
    date: datetime
    id: Optional[str] = None

    @property
    def participant_ids(self) -> List[str]:
        return [p.user_id for p in self.players]


Match = Union[OneVsOneMatch, MultiplayerMatch]


@dataclass(frozen=True)
class Challenge:
    """A proposed 1v1 match between two users."""
    id: str
    challenger_id: str
    challenger_name: str
    challenged_id: str
    challenged_name: str
    game: str
    created_at: datetime
    updated_at: datetime
    message: str = ""
    status: ChallengeStatus = ChallengeStatus.PENDING

    def involves_pair(self, user_a: str, user_b: str) -> bool:
        """True when the challenge is between exactly these two users."""
        return {self.challenger_id, self.challenged_id} == {user_a, user_b}


@dataclass(frozen=True)
class UserStats:
    """A user together with every match they took part in, newest first."""
    user: User
    matches: List[Match]
