"""Delayed-callback scheduling independent of the concurrency primitive.

``ThreadingScheduler`` runs callbacks on timer threads. ``ManualScheduler``
keeps a virtual clock that tests advance explicitly, the same way
``MockConsole`` stands in for a real terminal.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

__all__ = [
    "Debouncer",
    "ManualScheduler",
    "ScheduledCall",
    "Scheduler",
    "ThreadingScheduler",
]


class ScheduledCall(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Schedule ``callback`` to run once after ``delay`` seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall: ...


class ThreadingScheduler:
    """Production scheduler backed by daemon ``threading.Timer`` threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


@dataclass
class _ManualCall:
    due: float
    seq: int
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


def _empty_calls() -> list[_ManualCall]:
    return []


@dataclass
class ManualScheduler:
    """Scheduler driven by ``advance()`` instead of wall-clock time."""

    now: float = 0.0
    _calls: list[_ManualCall] = field(default_factory=_empty_calls)
    _seq: int = 0

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        self._seq += 1
        call = _ManualCall(due=self.now + max(0.0, delay), seq=self._seq, callback=callback)
        self._calls.append(call)
        return call

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running due callbacks in order. Returns how many ran."""
        target = self.now + seconds
        ran = 0
        while True:
            due = sorted(
                (c for c in self._calls if not c.cancelled and c.due <= target),
                key=lambda c: (c.due, c.seq),
            )
            if not due:
                break
            call = due[0]
            self._calls.remove(call)
            self.now = call.due
            call.callback()
            ran += 1
        self.now = target
        self._calls = [c for c in self._calls if not c.cancelled]
        return ran

    @property
    def pending(self) -> int:
        return sum(1 for c in self._calls if not c.cancelled)


class Debouncer:
    """Collapse a burst of triggers into one call after a quiet period."""

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._handle: ScheduledCall | None = None
        self._lock = threading.Lock()

    def trigger(self, fn: Callable[[], None], delay: float) -> None:
        def fire() -> None:
            with self._lock:
                self._handle = None
            fn()

        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._handle = self._scheduler.call_later(delay, fire)

    def clear(self) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
                self._handle = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._handle is not None
