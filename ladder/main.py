import asyncio
from dataclasses import dataclass, field
from typing import Optional

from ladder.config import Config
from ladder.database.database import Database
from ladder.database.memory_repository import InMemoryRepository
from ladder.database.repository import Repository
from ladder.database.sql_repository import SqlAlchemyRepository
from ladder.operations.challenge_operations import ChallengeOperations
from ladder.operations.game_operations import GameOperations
from ladder.operations.match_operations import MatchOperations
from ladder.operations.player_operations import PlayerOperations
from ladder.services.record_locks import KeyedLockRegistry
from ladder.utils.clock import Clock, SystemClock
from ladder.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class LadderEngine:
    """Operations bundle sharing one repository, clock and lock registry"""
    repository: Repository
    players: PlayerOperations
    matches: MatchOperations
    challenges: ChallengeOperations
    games: GameOperations
    db: Optional[Database] = field(default=None)

    async def close(self):
        if self.db:
            await self.db.close()


def create_engine(repository: Repository, clock: Optional[Clock] = None) -> LadderEngine:
    """Wire the operations objects around a repository"""
    clock = clock or SystemClock()
    locks = KeyedLockRegistry()
    return LadderEngine(
        repository=repository,
        players=PlayerOperations(repository, clock, locks),
        matches=MatchOperations(repository, clock, locks),
        challenges=ChallengeOperations(repository, clock, locks),
        games=GameOperations(repository),
    )


async def build_engine(clock: Optional[Clock] = None) -> LadderEngine:
    """
    Build the engine for the configured storage backend.

    The backend is chosen once here; nothing below the repository
    interface knows which one is in use.
    """
    Config.validate()
    clock = clock or SystemClock()

    if Config.STORAGE_BACKEND == 'database':
        db = Database()
        await db.initialize()
        engine = create_engine(SqlAlchemyRepository(db), clock)
        engine.db = db
        logger.info("Using database storage")
    else:
        engine = create_engine(InMemoryRepository(id_factory=clock.new_id), clock)
        logger.warning("Running without a database. Data will not persist between restarts.")

    return engine


async def main():
    engine = await build_engine()
    try:
        games = await engine.games.list_games()
        users = await engine.players.list_users()
        logger.info(f"Ladder ready: {len(users)} users, {len(games)} games")
        for rank, user in enumerate(users, start=1):
            logger.info(f"{rank:>3}. {user.name} {user.rating} ({user.total_wins}W/{user.total_losses}L)")
    finally:
        await engine.close()


if __name__ == "__main__":
    asyncio.run(main())
