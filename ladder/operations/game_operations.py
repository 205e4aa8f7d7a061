"""
Game Operations - the catalogue of games offered to clients

The catalogue is advisory: recording a match does not check it, and
removing a game keeps every user's existing stats for that game.
"""

from typing import List

from ladder.database.repository import Repository
from ladder.utils.exceptions import InvalidArgumentError
from ladder.utils.logger import setup_logger

logger = setup_logger(__name__)


class GameOperations:
    """Business logic for the game catalogue"""

    def __init__(self, repository: Repository):
        self.repository = repository
        self.logger = logger

    async def list_games(self) -> List[str]:
        """Get all games in the catalogue"""
        return await self.repository.list_games()

    async def add_game(self, name: str) -> str:
        """
        Add a game to the catalogue.

        Returns:
            The stored (trimmed) game name

        Raises:
            InvalidArgumentError: If the name is empty or already present
        """
        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidArgumentError("Game name is required")

        if cleaned in await self.repository.list_games():
            raise InvalidArgumentError("Game already exists")

        await self.repository.add_game(cleaned)
        self.logger.info(f"Added game {cleaned}")
        return cleaned

    async def delete_game(self, name: str) -> None:
        """Remove a game from the catalogue (no error if it is absent)"""
        await self.repository.delete_game(name)
        self.logger.info(f"Deleted game {name}")
