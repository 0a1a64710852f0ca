"""Named mutexes for serializing writes that share a key.

A MutexRegistry maps composite string keys to locks. Keys are built with
lock_key() from a lock domain root and a discriminator (a mount accessor for
entity aliases), so unrelated domains can share one registry without their
critical sections colliding.

The registry is process-local: it serializes threads in this interpreter
only, not separate processes talking to the same Vault.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import lru_cache

logger = logging.getLogger(__name__)


class LockError(RuntimeError):
    """Misuse of a lock guard (e.g. releasing it twice)."""


def lock_key(root: str, discriminator: str) -> str:
    """Join a lock domain root and a discriminator into a registry key."""
    return "/".join([root, discriminator])


@dataclass
class LockGuard:
    """Proof of ownership for one acquisition of a named lock."""

    key: str
    _lock: threading.Lock = field(repr=False)
    released: bool = False


class MutexRegistry:
    """Table of named, non-reentrant, blocking locks.

    Locks are created on first use and kept for the life of the registry.
    """

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._table_lock = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._table_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def acquire(self, key: str) -> LockGuard:
        """Block until the lock for ``key`` is held by the caller."""
        lock = self._lock_for(key)
        logger.debug("Acquiring lock %s", key)
        lock.acquire()
        logger.debug("Acquired lock %s", key)
        return LockGuard(key=key, _lock=lock)

    def release(self, guard: LockGuard) -> None:
        """Release a lock previously returned by acquire().

        Raises:
            LockError: If the guard was already released.
        """
        if guard.released:
            raise LockError(f"lock {guard.key!r} already released")
        guard.released = True
        guard._lock.release()
        logger.debug("Released lock %s", guard.key)

    @contextmanager
    def hold(self, key: str) -> Iterator[LockGuard]:
        """Hold the lock for ``key`` for the duration of a ``with`` block."""
        guard = self.acquire(key)
        try:
            yield guard
        finally:
            self.release(guard)

    def is_locked(self, key: str) -> bool:
        """Return True if some caller currently holds ``key``."""
        with self._table_lock:
            lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        with self._table_lock:
            return len(self._locks)


@lru_cache(maxsize=1)
def get_mutex_registry() -> MutexRegistry:
    """Get the process-wide registry for callers that do not inject their own."""
    return MutexRegistry()
