# ABOUTME: Lazily-created asyncio locks, one per normalized book title or user name.
# ABOUTME: Locks are never discarded, so a key maps to the same lock for the registry's lifetime.

import asyncio
import logging
import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)


class LockTimeoutError(Exception):
    """Raised when a per-key lock is not acquired within the configured timeout."""


class KeyedLockRegistry:
    """Hands out one asyncio.Lock per key, creating it on first request.

    The registry's own map is guarded by a threading.Lock so that get-or-create
    stays atomic even when callers run on different threads or event loops.
    """

    def __init__(self, name: str = "locks") -> None:
        self._name = name
        self._locks: dict[str, asyncio.Lock] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def __contains__(self, key: object) -> bool:
        with self._guard:
            return key in self._locks

    def get(self, key: str) -> asyncio.Lock:
        """Return the lock for `key`, creating an unlocked one if absent."""
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[key] = lock
                logger.debug("Created %s lock for %r", self._name, key)
            return lock

    @asynccontextmanager
    async def hold(self, key: str, timeout: float | None = None) -> AsyncIterator[None]:
        """Acquire the lock for `key` for the duration of the block.

        Args:
            key: Normalized key to lock.
            timeout: Seconds to wait before giving up. None waits indefinitely.

        Raises:
            LockTimeoutError: If `timeout` elapses before the lock is acquired.
        """
        lock = self.get(key)
        if timeout is None:
            await lock.acquire()
        else:
            try:
                async with asyncio.timeout(timeout):
                    await lock.acquire()
            except TimeoutError as exc:
                raise LockTimeoutError(
                    f"Timed out after {timeout:g}s waiting for {self._name} lock {key!r}"
                ) from exc
        try:
            yield
        finally:
            lock.release()
