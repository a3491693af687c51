"""Time-bounded key/value store.

Entries carry the time they were stored. Freshness is evaluated lazily
on read; nothing is evicted in the background.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

__all__ = ["StateStore"]


@dataclass(frozen=True, slots=True)
class _Entry[T]:
    value: T
    timestamp: float


class StateStore[T]:
    """Keyed memoization with explicit invalidation.

    Ages are measured in seconds against ``clock`` (``time.monotonic`` by
    default, injectable for tests).
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, _Entry[T]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> T | None:
        with self._lock:
            entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def set(self, key: str, value: T) -> None:
        with self._lock:
            self._entries[key] = _Entry(value=value, timestamp=self._clock())

    def is_fresh(self, key: str, max_age: float) -> bool:
        """True if ``key`` exists and was stored at most ``max_age`` seconds ago."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return False
        return self._clock() - entry.timestamp <= max_age

    def get_fresh(self, key: str, max_age: float) -> T | None:
        """Return the value if fresh, otherwise None."""
        if not self.is_fresh(key, max_age):
            return None
        return self.get(key)

    def invalidate(self, key: str | None = None) -> None:
        """Drop one entry, or everything when ``key`` is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every entry whose key starts with ``prefix``; return the count."""
        with self._lock:
            doomed = [k for k in self._entries if k.startswith(prefix)]
            for k in doomed:
                del self._entries[k]
        return len(doomed)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
