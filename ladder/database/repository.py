import abc
from typing import List, Optional, Sequence

from ladder.data_models.records import Challenge, Match, User

__all__ = ["Repository"]


class Repository(abc.ABC):
    """
    Storage collaborator used by the operations layer.

    Implementations are interchangeable and selected once at process start.
    Records handed out must be private copies: mutating a returned record
    never changes stored state until it is saved.
    """

    # Users
    @abc.abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_users(self) -> List[User]:
        raise NotImplementedError

    @abc.abstractmethod
    async def save_user(self, user: User) -> None:
        raise NotImplementedError

    # Matches
    @abc.abstractmethod
    async def append_match(self, match: Match) -> Match:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_matches(self) -> List[Match]:
        """All matches, newest first."""
        raise NotImplementedError

    async def save_match_result(
        self,
        users: Sequence[User],
        match: Match,
        challenge: Optional[Challenge] = None,
    ) -> Match:
        """Persist updated users, the new match and an optional challenge together."""
        for user in users:
            await self.save_user(user)
        if challenge is not None:
            await self.save_challenge(challenge)
        return await self.append_match(match)

    # Challenges
    @abc.abstractmethod
    async def get_challenge(self, challenge_id: str) -> Optional[Challenge]:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_challenges(self) -> List[Challenge]:
        """All challenges, newest first."""
        raise NotImplementedError

    @abc.abstractmethod
    async def save_challenge(self, challenge: Challenge) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def delete_challenge(self, challenge_id: str) -> None:
        raise NotImplementedError

    # Game catalogue
    @abc.abstractmethod
    async def list_games(self) -> List[str]:
        raise NotImplementedError

    @abc.abstractmethod
    async def add_game(self, name: str) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def delete_game(self, name: str) -> None:
        raise NotImplementedError
