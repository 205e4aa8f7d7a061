"""
Player Operations - user lifecycle and standings

Key functionality:
- create_user() / rename_user(): names are trimmed and unique ignoring case
- get_user() / list_users(): single lookup and the leaderboard (rating desc)
- get_user_stats(): a user with every match they played, newest first

Users are never deleted: they are referenced by the match history.
"""

import asyncio
from typing import List, Optional

from ladder.config import Config
from ladder.data_models.records import User, UserStats
from ladder.database.repository import Repository
from ladder.services.record_locks import KeyedLockRegistry, user_key
from ladder.utils.clock import Clock
from ladder.utils.exceptions import InvalidArgumentError, NotFoundError
from ladder.utils.logger import setup_logger

logger = setup_logger(__name__)


class PlayerOperations:
    """
    Business logic operations for user management.
    """

    def __init__(self, repository: Repository, clock: Clock, locks: KeyedLockRegistry):
        """Initialize with the storage collaborator, id/time source and record locks"""
        self.repository = repository
        self.clock = clock
        self.locks = locks
        self.logger = logger
        self._name_lock = asyncio.Lock()  # Uniqueness check and write must not interleave

    async def _validate_name(self, name: Optional[str], exclude_user_id: Optional[str] = None) -> str:
        """Return the trimmed name, raising if empty or already taken"""
        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidArgumentError("Name is required")

        for user in await self.repository.list_users():
            if user.id != exclude_user_id and user.name.lower() == cleaned.lower():
                self.logger.warning(f"Rejected duplicate user name '{cleaned}'")
                raise InvalidArgumentError("User with this name already exists")

        return cleaned

    async def create_user(self, name: str) -> User:
        """
        Create a new user at the starting rating.

        Raises:
            InvalidArgumentError: If the name is empty or already in use
        """
        async with self._name_lock:
            cleaned = await self._validate_name(name)
            user = User(
                id=self.clock.new_id(),
                name=cleaned,
                created_at=self.clock.now(),
                rating=Config.STARTING_ELO,
                total_wins=0,
                total_losses=0,
                game_stats={},
            )
            await self.repository.save_user(user)

        self.logger.info(f"Created user {user.id} ({user.name})")
        return user

    async def rename_user(self, user_id: str, name: str) -> User:
        """
        Change a user's display name.

        Raises:
            InvalidArgumentError: If the name is empty or used by another user
            NotFoundError: If the user does not exist
        """
        async with self._name_lock, self.locks.hold(user_key(user_id)):
            user = await self.get_user(user_id)
            user.name = await self._validate_name(name, exclude_user_id=user_id)
            await self.repository.save_user(user)

        self.logger.info(f"Renamed user {user_id} to {user.name}")
        return user

    async def get_user(self, user_id: str) -> User:
        """Get a user by ID, raising NotFoundError if absent"""
        user = await self.repository.get_user(user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        return user

    async def list_users(self) -> List[User]:
        """All users, highest overall rating first"""
        users = await self.repository.list_users()
        return sorted(users, key=lambda u: u.rating, reverse=True)

    async def get_user_stats(self, user_id: str) -> UserStats:
        """Get a user together with every match they took part in"""
        user = await self.get_user(user_id)
        matches = [
            match for match in await self.repository.list_matches()
            if user_id in match.participant_ids
        ]
        return UserStats(user=user, matches=matches)
