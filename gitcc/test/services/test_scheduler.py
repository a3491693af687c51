"""Tests for gitcc.services.scheduler."""

from __future__ import annotations

import threading

from gitcc.services.scheduler import Debouncer, ManualScheduler, ThreadingScheduler


class TestManualScheduler:
    def test_runs_due_callbacks_in_order(self) -> None:
        scheduler = ManualScheduler()
        seen: list[str] = []
        scheduler.call_later(2.0, lambda: seen.append("late"))
        scheduler.call_later(1.0, lambda: seen.append("early"))

        assert scheduler.advance(1.5) == 1
        assert seen == ["early"]
        assert scheduler.advance(1.0) == 1
        assert seen == ["early", "late"]
        assert scheduler.now == 2.5

    def test_cancelled_call_never_runs(self) -> None:
        scheduler = ManualScheduler()
        seen: list[int] = []
        call = scheduler.call_later(1.0, lambda: seen.append(1))
        call.cancel()
        assert scheduler.advance(5.0) == 0
        assert seen == []
        assert scheduler.pending == 0

    def test_callback_scheduled_during_advance_runs_if_due(self) -> None:
        scheduler = ManualScheduler()
        seen: list[float] = []

        def tick() -> None:
            seen.append(scheduler.now)
            scheduler.call_later(1.0, tick)

        scheduler.call_later(1.0, tick)
        scheduler.advance(3.0)
        assert seen == [1.0, 2.0, 3.0]
        assert scheduler.pending == 1


class TestDebouncer:
    def test_burst_collapses_to_one_call(self) -> None:
        scheduler = ManualScheduler()
        debouncer = Debouncer(scheduler)
        calls: list[int] = []

        for _ in range(5):
            debouncer.trigger(lambda: calls.append(1), 0.4)
            scheduler.advance(0.1)
        assert calls == []
        assert debouncer.pending

        scheduler.advance(0.4)
        assert calls == [1]
        assert not debouncer.pending

    def test_clear(self) -> None:
        scheduler = ManualScheduler()
        debouncer = Debouncer(scheduler)
        calls: list[int] = []
        debouncer.trigger(lambda: calls.append(1), 0.4)
        debouncer.clear()
        scheduler.advance(1.0)
        assert calls == []


class TestThreadingScheduler:
    def test_fires_once(self) -> None:
        fired = threading.Event()
        ThreadingScheduler().call_later(0.01, fired.set)
        assert fired.wait(timeout=2.0)

    def test_cancel(self) -> None:
        fired = threading.Event()
        call = ThreadingScheduler().call_later(0.5, fired.set)
        call.cancel()
        assert not fired.wait(timeout=0.7)
