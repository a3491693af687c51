"""Coalesce refresh triggers into bounded refresh passes.

Three sources feed the orchestrator: a periodic tick, debounced bursts of
save/workspace events, and immediate repository open/close signals. A
pass refreshes the registry first and then every dependent view in
parallel, so views never observe a half-updated collection. A trigger
that arrives while a pass is running marks the pass dirty and it runs
once more instead of overlapping.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

from gitcc.core.config import Config
from gitcc.services.scheduler import Debouncer, ScheduledCall, Scheduler
from gitcc.state.registry import RepositoryRegistry

__all__ = ["RefreshOrchestrator", "Refreshable"]

logger = logging.getLogger(__name__)


class Refreshable(Protocol):
    """A read-only view recomputed after each registry refresh."""

    def refresh(self) -> None: ...


class RefreshOrchestrator:
    def __init__(
        self,
        registry: RepositoryRegistry,
        views: Sequence[Refreshable],
        scheduler: Scheduler,
        config: Config,
    ) -> None:
        self._registry = registry
        self._views = tuple(views)
        self._scheduler = scheduler
        self._debouncer = Debouncer(scheduler)
        self._interval = float(config.refresh_interval_seconds)
        self._debounce = config.debounce_ms / 1000
        self._max_workers = max(1, config.max_parallel_refresh)

        self._lock = threading.Lock()
        self._tick: ScheduledCall | None = None
        self._running = False
        self._in_flight = False
        self._pending = False
        self._pending_force = False
        self.passes = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._in_flight

    def start(self) -> None:
        """Begin periodic refreshes and run an immediate forced pass."""
        with self._lock:
            self._running = True
        self._schedule_tick()
        self.refresh_now(force=True)

    def stop(self) -> None:
        with self._lock:
            self._running = False
            tick, self._tick = self._tick, None
        if tick is not None:
            tick.cancel()
        self._debouncer.clear()

    def reschedule(self, interval_seconds: float) -> None:
        """Change the periodic interval (e.g. after a config reload)."""
        with self._lock:
            self._interval = float(interval_seconds)
        self._schedule_tick()

    # -------------------------------------------------------------------------
    # Triggers
    # -------------------------------------------------------------------------

    def trigger_debounced(self) -> None:
        """File saved or workspace folders changed."""
        self._debouncer.trigger(self.refresh_now, self._debounce)

    def on_repository_opened(self) -> None:
        self.refresh_now()

    def on_repository_closed(self) -> None:
        self.refresh_now()

    def _schedule_tick(self) -> None:
        with self._lock:
            if not self._running:
                return
            previous = self._tick
            self._tick = self._scheduler.call_later(self._interval, self._on_tick)
        if previous is not None:
            previous.cancel()

    def _on_tick(self) -> None:
        self._schedule_tick()
        self.refresh_now()

    # -------------------------------------------------------------------------
    # Passes
    # -------------------------------------------------------------------------

    def refresh_now(self, force: bool = False) -> bool:
        """Run a refresh pass, or coalesce into the one in flight.

        Returns False when the request was folded into a running pass.
        """
        with self._lock:
            if self._in_flight:
                self._pending = True
                self._pending_force = self._pending_force or force
                return False
            self._in_flight = True

        try:
            while True:
                self._run_pass(force)
                with self._lock:
                    if not self._pending:
                        break
                    force = self._pending_force
                    self._pending = False
                    self._pending_force = False
        finally:
            # a failed pass must not leave a queued re-run for the next trigger
            with self._lock:
                self._in_flight = False
                self._pending = False
                self._pending_force = False
        return True

    def _run_pass(self, force: bool) -> None:
        self.passes += 1
        logger.debug("refresh pass %d (force=%s)", self.passes, force)
        self._registry.refresh(force)

        if not self._views:
            return
        workers = min(self._max_workers, len(self._views))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="gitcc-view") as pool:
            futures = [pool.submit(view.refresh) for view in self._views]
        for view, future in zip(self._views, futures):
            error = future.exception()
            if error is not None:
                logger.error("view %s failed to refresh: %s", type(view).__name__, error)
