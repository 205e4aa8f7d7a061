"""
Per-record serialization for read-modify-write sequences.

Rating updates read several user records, mutate them and write them back.
Two matches touching the same user must not interleave inside that window,
so the operations layer holds one asyncio lock per record id while it works.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from ladder.utils.logger import setup_logger

logger = setup_logger(__name__)

class KeyedLockRegistry:
    """In-memory registry of asyncio locks keyed by record id.

    A key's lock exists only while some task holds or waits on it, so ids
    that are looked up once (including unknown ones) leave nothing behind.

    Note: locks only serialize callers inside this process. Multiple
    processes sharing one database need the storage layer to serialize
    updates as well.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._claims: Dict[str, int] = {}  # Tasks holding or waiting per key

    def __len__(self) -> int:
        """Number of keys currently held or waited on."""
        return len(self._locks)

    def _claim(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._claims[key] = self._claims.get(key, 0) + 1
        return lock

    def _release_claim(self, key: str) -> None:
        self._claims[key] -= 1
        if self._claims[key] == 0:
            del self._claims[key]
            del self._locks[key]

    @asynccontextmanager
    async def hold(self, *keys: str) -> AsyncIterator[None]:
        """Acquire the locks for all keys, always in sorted order."""
        ordered_keys = sorted(set(keys))
        locks = [self._claim(key) for key in ordered_keys]
        acquired = []
        try:
            for lock in locks:
                await lock.acquire()
                acquired.append(lock)
            logger.debug(f"Holding locks for {ordered_keys}")
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for key in ordered_keys:
                self._release_claim(key)

    def is_locked(self, key: str) -> bool:
        """Check whether a key is currently held."""
        lock = self._locks.get(key)
        return lock is not None and lock.locked()


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


def challenge_key(challenge_id: str) -> str:
    return f"challenge:{challenge_id}"
