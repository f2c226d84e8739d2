"""Utility modules."""

from bskt.utils.locks import KeyedLocks, LockTimeoutError

__all__ = ["KeyedLocks", "LockTimeoutError"]
