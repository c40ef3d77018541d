"""Tests for the scheduler implementations."""

import pytest

from core.models import TestMode, TestSettings
from core.scheduler import ManualScheduler, QtScheduler
from core.session import TypingSession


class TestManualScheduler:
    """Tests for the virtual-clock scheduler."""

    def test_nothing_fires_without_advance(self, scheduler):
        calls = []
        scheduler.call_every(1.0, lambda: calls.append(scheduler.now()))
        assert calls == []

    def test_repeating_timer(self, scheduler):
        """A 1s timer fires at each whole second with the clock set to it."""
        calls = []
        scheduler.call_every(1.0, lambda: calls.append(scheduler.now()))
        scheduler.advance(3.5)

        assert calls == [1.0, 2.0, 3.0]
        assert scheduler.now() == 3.5

    def test_ties_fire_in_registration_order(self, scheduler):
        order = []
        scheduler.call_every(1.0, lambda: order.append("first"))
        scheduler.call_every(1.0, lambda: order.append("second"))
        scheduler.advance(2)

        assert order == ["first", "second", "first", "second"]

    def test_cancel_inside_tie(self, scheduler):
        """A timer cancelled by an earlier callback at the same instant does not fire."""
        order = []
        second = None

        def first_cb():
            order.append("first")
            second.cancel()

        scheduler.call_every(1.0, first_cb)
        second = scheduler.call_every(1.0, lambda: order.append("second"))
        scheduler.advance(1)

        assert order == ["first"]
        assert scheduler.active_timer_count == 1

    def test_call_soon_runs_once(self, scheduler):
        calls = []
        scheduler.call_soon(lambda: calls.append(1))
        scheduler.run_pending()
        scheduler.run_pending()

        assert calls == [1]
        assert scheduler.now() == 0

    def test_cancelled_call_soon(self, scheduler):
        calls = []
        handle = scheduler.call_soon(lambda: calls.append(1))
        handle.cancel()
        scheduler.run_pending()
        assert calls == []

    def test_custom_start(self):
        scheduler = ManualScheduler(start=100.0)
        calls = []
        scheduler.call_every(2.0, lambda: calls.append(scheduler.now()))
        scheduler.advance(4)
        assert calls == [102.0, 104.0]

    def test_invalid_interval(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.call_every(0, lambda: None)


class TestQtScheduler:
    """Tests for the QTimer-backed scheduler."""

    def test_clock_is_monotonic(self):
        scheduler = QtScheduler()
        assert scheduler.now() <= scheduler.now()

    def test_cancel_stops_timer(self):
        scheduler = QtScheduler()
        handle = scheduler.call_every(1.0, lambda: None)
        assert handle.timer.isActive()

        handle.cancel()
        assert not handle.active
        assert not handle.timer.isActive()

    def test_cancel_releases_handle(self):
        """Cancelled timers are no longer tracked by the scheduler."""
        scheduler = QtScheduler()
        first = scheduler.call_every(1.0, lambda: None)
        scheduler.call_every(1.0, lambda: None)
        assert scheduler.active_timer_count == 2

        first.cancel()
        first.cancel()
        assert scheduler.active_timer_count == 1

    def test_session_timers_released_on_reset(self):
        """Repeated start/reset cycles do not accumulate timers."""
        session = TypingSession(TestSettings(mode=TestMode.TIME, duration=15))
        for _ in range(3):
            session.start()
            assert session.scheduler.active_timer_count == 2
            session.reset()

        assert session.scheduler.active_timer_count == 0
