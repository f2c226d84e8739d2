"""Keyed advisory locks for mint records.

Mints for different record ids proceed concurrently; two mints for the
same record id are serialized. A key is forgotten once nobody holds or
waits for it, so the registry only grows with in-flight mints.
"""

import asyncio
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class LockTimeoutError(Exception):
    """Raised when a lock cannot be acquired within the timeout period."""

    pass


class KeyedLocks:
    """Registry of asyncio locks, one per key.

    Example:
        locks = KeyedLocks()
        async with locks.hold("mint-BSKT20260101ABCDEF12", operation="mint"):
            ...
    """

    def __init__(self, default_timeout: Optional[float] = 30.0):
        self.default_timeout = default_timeout
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def get(self, key: str) -> asyncio.Lock:
        """Get or create the lock for a key."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def hold(
        self,
        key: str,
        timeout: Optional[float] = None,
        operation: str = "mint",
    ) -> "KeyLock":
        return KeyLock(
            self, key, timeout if timeout is not None else self.default_timeout, operation
        )

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def clear(self) -> None:
        """Forget every idle lock."""
        for key in [k for k, lock in self._locks.items() if not lock.locked()]:
            if not self._users.get(key):
                del self._locks[key]

    def _enter(self, key: str) -> asyncio.Lock:
        self._users[key] = self._users.get(key, 0) + 1
        return self.get(key)

    def _leave(self, key: str) -> None:
        remaining = self._users.get(key, 0) - 1
        if remaining > 0:
            self._users[key] = remaining
            return
        self._users.pop(key, None)
        lock = self._locks.get(key)
        if lock is not None and not lock.locked():
            del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class KeyLock:
    """Context manager holding one key of a KeyedLocks registry."""

    def __init__(
        self,
        registry: KeyedLocks,
        key: str,
        timeout: Optional[float],
        operation: str,
    ):
        self.key = key
        self.timeout = timeout
        self.operation = operation
        self._registry = registry
        self._lock: Optional[asyncio.Lock] = None

    async def __aenter__(self) -> "KeyLock":
        lock = self._registry._enter(self.key)
        try:
            if self.timeout:
                await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
            else:
                await lock.acquire()
        except asyncio.TimeoutError:
            self._registry._leave(self.key)
            logger.warning(f"Lock timeout for {self.key} after {self.timeout}s: {self.operation}")
            raise LockTimeoutError(
                f"Could not acquire lock for {self.key} within {self.timeout}s"
            )
        except BaseException:
            self._registry._leave(self.key)
            raise

        self._lock = lock
        logger.debug(f"Lock acquired for {self.key}: {self.operation}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._lock is not None:
            self._lock.release()
            self._lock = None
            self._registry._leave(self.key)
            logger.debug(f"Lock released for {self.key}: {self.operation}")
        return False
