"""Shared fixtures: deterministic clock, in-memory engine and user factory."""

import os

os.environ.setdefault("LOG_TO_FILE", "false")

from datetime import datetime, timedelta, timezone

import pytest

from ladder.database.memory_repository import InMemoryRepository
from ladder.main import create_engine
from ladder.utils.clock import Clock


class FixedClock(Clock):
    """Clock that advances one second per reading and hands out sequential ids."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.current = start
        self.counter = 0

    def now(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current

    def new_id(self) -> str:
        self.counter += 1
        return f"id-{self.counter}"


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def repository(clock):
    return InMemoryRepository(id_factory=clock.new_id)


@pytest.fixture
def engine(repository, clock):
    return create_engine(repository, clock)


@pytest.fixture
def make_users(engine):
    """Create users by name and return them in the same order."""
    async def _make(*names):
        return [await engine.players.create_user(name) for name in names]
    return _make
