"""In-process keyed locks used to serialize booking admission per car."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from app.core.exceptions import InternalError

logger = logging.getLogger(__name__)


class KeyedLock:
    """One asyncio.Lock per key, discarded once nobody holds or awaits it."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._refs: dict[str, int] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._locks

    @asynccontextmanager
    async def hold(self, key: str, timeout: float | None = None) -> AsyncIterator[None]:
        """Hold the lock for key.

        Raises:
            InternalError: If the lock is not acquired within timeout seconds
        """
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._refs[key] = self._refs.get(key, 0) + 1
        try:
            try:
                async with asyncio.timeout(timeout):
                    await lock.acquire()
            except TimeoutError:
                logger.warning(f"Timed out after {timeout}s waiting for lock '{key}'")
                raise InternalError("Timed out waiting for booking lock")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._refs[key] -= 1
            if not self._refs[key]:
                del self._refs[key]
                del self._locks[key]
