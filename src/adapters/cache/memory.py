"""
In-memory code store adapter - Implements CodeStore protocol.

Process-local TTL map guarded by a single lock. Expired entries are
evicted lazily on access and swept by set() once the map grows past
a threshold; an expired entry is never returned, whether or not it has
been evicted yet.

Horizontally scaled deployments need a shared store behind the same
protocol instead.
"""

import threading
import time
from collections.abc import Callable
from typing import Any


class InMemoryCodeStore:
    """
    Implements CodeStore protocol with a dict and a lock.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_threshold: int = 1024,
    ) -> None:
        """
        Initialize an empty store.

        Args:
            clock: Monotonic seconds source (tests substitute a fake clock)
            sweep_threshold: Entry count at which set() sweeps expired entries
        """
        self._clock = clock
        self._sweep_threshold = sweep_threshold
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            if len(self._entries) >= self._sweep_threshold:
                self._sweep()
            self._entries[key] = (value, self._clock() + ttl_seconds)

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._live_entry(key)
            return entry[0] if entry is not None else None

    def delete(self, key: str) -> bool:
        with self._lock:
            entry = self._live_entry(key)
            self._entries.pop(key, None)
            return entry is not None

    def increment(self, key: str, ttl_seconds: float) -> int:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                count, expires_at = 0, self._clock() + ttl_seconds
            else:
                count, expires_at = int(entry[0]), entry[1]
            count += 1
            self._entries[key] = (count, expires_at)
            return count

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for _, expires_at in self._entries.values() if expires_at > now)

    def _sweep(self) -> None:
        # Caller holds the lock.
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    def _live_entry(self, key: str) -> tuple[Any, float] | None:
        # Caller holds the lock.
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry[1] <= self._clock():
            del self._entries[key]
            return None
        return entry
