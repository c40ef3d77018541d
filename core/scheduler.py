"""Cancellable timers on a single-threaded event loop.

The typing session only needs "call this every N seconds" and "call
this on the next loop iteration". QtScheduler maps those onto QTimer;
ManualScheduler runs them against a virtual clock for headless replay
and tests.
"""

import itertools
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from PySide6.QtCore import QObject, Qt, QTimer


class TimerHandle:
    """Token for a scheduled callback; cancelling it is final."""

    def __init__(self):
        self.active = True

    def cancel(self) -> None:
        """Stop the callback from firing again."""
        self.active = False


class Scheduler(ABC):
    """Clock plus timer source used by the typing session."""

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds (monotonic)."""
        pass

    @abstractmethod
    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        """Call callback every interval seconds until cancelled.

        Args:
            interval: Period in seconds
            callback: Function to call on each tick

        Returns:
            Handle that cancels the timer
        """
        pass

    @abstractmethod
    def call_soon(self, callback: Callable[[], None]) -> TimerHandle:
        """Call callback once, after the current event has been handled."""
        pass


class _QtTimerHandle(TimerHandle):
    def __init__(self, timer: QTimer, on_cancel: Callable[["_QtTimerHandle"], None]):
        super().__init__()
        self.timer = timer
        self._on_cancel = on_cancel

    def cancel(self) -> None:
        if not self.active:
            return
        super().cancel()
        self.timer.stop()
        self.timer.deleteLater()
        self._on_cancel(self)


class QtScheduler(Scheduler):
    """Scheduler backed by QTimer on the Qt event loop.

    Cancelled timers and fired one-shot timers are released with
    deleteLater() and forgotten by the scheduler.
    """

    def __init__(self, parent: Optional[QObject] = None):
        self._parent = parent
        self._handles: set[_QtTimerHandle] = set()

    def now(self) -> float:
        return time.monotonic()

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        timer = QTimer(self._parent)
        timer.setTimerType(Qt.TimerType.PreciseTimer)
        timer.setInterval(int(interval * 1000))
        handle = _QtTimerHandle(timer, self._handles.discard)

        def on_timeout() -> None:
            if handle.active:
                callback()

        timer.timeout.connect(on_timeout)
        timer.start()
        self._handles.add(handle)
        return handle

    def call_soon(self, callback: Callable[[], None]) -> TimerHandle:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setInterval(0)
        handle = _QtTimerHandle(timer, self._handles.discard)

        def on_timeout() -> None:
            if handle.active:
                handle.cancel()
                callback()

        timer.timeout.connect(on_timeout)
        timer.start()
        self._handles.add(handle)
        return handle

    @property
    def active_timer_count(self) -> int:
        return len(self._handles)


class _ManualTimer(TimerHandle):
    def __init__(self, seq: int, due: float, interval: float,
                 callback: Callable[[], None], repeat: bool):
        super().__init__()
        self.seq = seq
        self.due = due
        self.interval = interval
        self.callback = callback
        self.repeat = repeat


class ManualScheduler(Scheduler):
    """Scheduler driven by an explicit virtual clock.

    Nothing fires until advance() is called. Callbacks that fall due at
    the same instant fire in the order they were scheduled.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._timers: list[_ManualTimer] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        timer = _ManualTimer(next(self._seq), self._now + interval, interval,
                             callback, repeat=True)
        self._timers.append(timer)
        return timer

    def call_soon(self, callback: Callable[[], None]) -> TimerHandle:
        timer = _ManualTimer(next(self._seq), self._now, 0.0, callback, repeat=False)
        self._timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every callback that falls due.

        Args:
            seconds: How far to move the clock (non-negative)
        """
        target = self._now + max(0.0, seconds)
        while True:
            due = [t for t in self._timers if t.active and t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.seq))
            self._now = max(self._now, timer.due)
            if timer.repeat:
                timer.due += timer.interval
            else:
                timer.active = False
            timer.callback()
        self._now = target
        self._timers = [t for t in self._timers if t.active]

    def run_pending(self) -> None:
        """Fire callbacks already due without moving the clock."""
        self.advance(0.0)

    @property
    def active_timer_count(self) -> int:
        return sum(1 for t in self._timers if t.active)
