"""
In-memory Repository used when no database is configured and in tests.

Everything is lost on restart. Records are deep-copied on the way in and
out so callers never share state with the store.
"""

import copy
import dataclasses
from typing import Dict, List, Optional

from ladder.config import Config
from ladder.data_models.records import Challenge, Match, User
from ladder.database.repository import Repository
from ladder.utils.logger import setup_logger

logger = setup_logger(__name__)


class InMemoryRepository(Repository):
    def __init__(self, id_factory, default_games: Optional[List[str]] = None):
        """
        Args:
            id_factory: Callable returning a fresh match id
            default_games: Initial game catalogue (Config default when None)
        """
        self._new_id = id_factory
        self._users: Dict[str, User] = {}
        self._matches: List[Match] = []
        self._challenges: Dict[str, Challenge] = {}
        self._games: List[str] = list(
            Config.get_default_games() if default_games is None else default_games
        )
        logger.info(f"In-memory storage ready with {len(self._games)} games")

    # Users
    async def get_user(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return copy.deepcopy(user) if user else None

    async def list_users(self) -> List[User]:
        return [copy.deepcopy(user) for user in self._users.values()]

    async def save_user(self, user: User) -> None:
        self._users[user.id] = copy.deepcopy(user)

    # Matches
    async def append_match(self, match: Match) -> Match:
        if match.id is None:
            match = dataclasses.replace(match, id=self._new_id())
        self._matches.append(match)
        return match

    async def list_matches(self) -> List[Match]:
        # Equal timestamps: most recently appended first
        return sorted(reversed(self._matches), key=lambda m: m.date, reverse=True)

    # Challenges
    async def get_challenge(self, challenge_id: str) -> Optional[Challenge]:
        return self._challenges.get(challenge_id)

    async def list_challenges(self) -> List[Challenge]:
        return sorted(
            reversed(list(self._challenges.values())),
            key=lambda c: c.created_at,
            reverse=True,
        )

    async def save_challenge(self, challenge: Challenge) -> None:
        self._challenges[challenge.id] = challenge

    async def delete_challenge(self, challenge_id: str) -> None:
        self._challenges.pop(challenge_id, None)

    # Game catalogue
    async def list_games(self) -> List[str]:
        return list(self._games)

    async def add_game(self, name: str) -> None:
        if name not in self._games:
            self._games.append(name)

    async def delete_game(self, name: str) -> None:
        self._games = [game for game in self._games if game != name]
