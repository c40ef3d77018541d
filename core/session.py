"""Typing test session: lifecycle, input handling and WPM sampling."""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from core.ledger import Character, CharacterLedger
from core.models import Difficulty, TestMode, TestResult, TestSettings, TypingStats, WpmSample
from core.result_assembler import assemble_result
from core.result_saver import ResultSaver
from core.scheduler import QtScheduler, Scheduler, TimerHandle
from core.stats_calculator import compute_stats
from core.text_generator import generate_text
from core.validation import validate_elapsed_seconds

log = logging.getLogger("typesprint.session")

# Word budget for time mode, enough that nobody reaches the end
TIME_MODE_WORD_COUNT = 200
COUNTDOWN_INTERVAL_SEC = 1.0
SAMPLE_INTERVAL_SEC = 1.0


class SessionState(str, Enum):
    """Lifecycle of a single test."""

    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session for the presentation layer."""

    prompt_text: str
    characters: tuple[Character, ...]
    typed: str
    cursor_index: int
    state: SessionState
    time_left: int
    elapsed: float
    stats: TypingStats
    wpm_history: tuple[WpmSample, ...]
    settings: TestSettings

    @property
    def time_left_or_elapsed(self) -> float:
        """Countdown in time mode, stopwatch in words mode."""
        if self.settings.mode == TestMode.TIME:
            return self.time_left
        return self.elapsed


class TypingSession(QObject):
    """State machine for one typing test at a time.

    idle -> running on the first non-empty input, running -> finished on
    countdown expiry, on completing the prompt in words mode, or on an
    explicit finish(). A new test needs initialize() or reset().
    """

    signal_state_changed = Signal(str)  # SessionState value
    signal_stats_updated = Signal(object)  # TypingStats
    signal_time_changed = Signal(int)  # seconds left in time mode
    signal_finished = Signal(object)  # TestResult

    def __init__(
        self,
        settings: Optional[TestSettings] = None,
        scheduler: Optional[Scheduler] = None,
        saver: Optional[ResultSaver] = None,
        settings_store=None,
        rng: Optional[random.Random] = None,
        text_source: Optional[Callable[[int, Difficulty], str]] = None,
    ):
        """Initialize typing session.

        Args:
            settings: Test settings; loaded from settings_store if omitted
            scheduler: Timer source (defaults to QtScheduler)
            saver: Receives finished results; None keeps results in memory only
            settings_store: SettingsStore used to load and persist settings
            rng: Random source for prompt generation
            text_source: Prompt factory taking (word_count, difficulty);
                defaults to generate_text
        """
        super().__init__()
        self.scheduler = scheduler or QtScheduler(self)
        self.saver = saver
        self.settings_store = settings_store
        self.rng = rng
        self.text_source = text_source

        if settings is None:
            settings = settings_store.load() if settings_store else TestSettings()
        self.settings = settings

        self.ledger = CharacterLedger()
        self.prompt_text = ""
        self.typed = ""
        self.cursor_index = 0
        self.state = SessionState.IDLE
        self.time_left = 0
        self.stats = TypingStats()
        self.wpm_history: list[WpmSample] = []
        self.last_result: Optional[TestResult] = None

        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None
        self._finished = False
        self._generation = 0
        self._countdown: Optional[TimerHandle] = None
        self._sampler: Optional[TimerHandle] = None

        self.initialize()

    # ========== Lifecycle ==========

    def initialize(self, settings: Optional[TestSettings] = None) -> None:
        """Generate a new prompt and reset everything to idle.

        Safe to call at any time; a running test is abandoned.

        Args:
            settings: New settings, or None to keep the current ones
        """
        self._cancel_timers()
        if settings is not None:
            self.settings = settings

        if self.settings.mode == TestMode.WORDS:
            word_count = self.settings.duration
        else:
            word_count = TIME_MODE_WORD_COUNT

        if self.text_source is not None:
            self.prompt_text = self.text_source(word_count, self.settings.difficulty)
        else:
            self.prompt_text = generate_text(word_count, self.settings.difficulty, self.rng)
        self.ledger.reset(self.prompt_text)
        self.typed = ""
        self.cursor_index = 0
        self.state = SessionState.IDLE
        self.time_left = self.settings.duration if self.settings.mode == TestMode.TIME else 0
        self.stats = TypingStats()
        self.wpm_history = []
        self.last_result = None
        self._start_time = None
        self._end_time = None
        self._finished = False

        log.info(
            f"Initialized {self.settings.mode.value} test "
            f"(duration={self.settings.duration}, difficulty={self.settings.difficulty.value})"
        )
        self.signal_state_changed.emit(self.state.value)
        self.signal_stats_updated.emit(self.stats)

    def reset(self) -> None:
        """Stop timers and start over with the current settings."""
        self._cancel_timers()
        self.initialize(self.settings)

    def update_settings(self, settings: TestSettings) -> None:
        """Persist new settings and start a fresh test with them."""
        if self.settings_store is not None:
            self.settings_store.save(settings)
        self.initialize(settings)

    def start(self) -> None:
        """Transition idle -> running and start both timers.

        Called by the first keystroke, or directly by a start control.
        """
        if self.state != SessionState.IDLE:
            return
        self.state = SessionState.RUNNING
        self._start_time = self.scheduler.now()
        generation = self._generation

        # Countdown is registered first so it wins a tie with the sampler
        if self.settings.mode == TestMode.TIME:
            self._countdown = self.scheduler.call_every(
                COUNTDOWN_INTERVAL_SEC, lambda: self._on_countdown_tick(generation)
            )
        self._sampler = self.scheduler.call_every(
            SAMPLE_INTERVAL_SEC, lambda: self._on_sample_tick(generation)
        )

        log.info("Test started")
        self.signal_state_changed.emit(self.state.value)

    def finish(self) -> TestResult:
        """Finish the test and hand the result to the saver.

        Only the first call has any effect; later calls return the same
        result.

        Returns:
            The assembled TestResult
        """
        if self._finished:
            return self.last_result
        self._finished = True

        self._cancel_timers()
        if self._start_time is not None:
            self._end_time = self.scheduler.now()
        self.state = SessionState.FINISHED

        missed = self.ledger.mark_missed()
        self.stats = compute_stats(self.ledger.characters, self.elapsed)
        result = assemble_result(self.settings, self.stats, self.wpm_history)
        self.last_result = result

        log.info(
            f"Test finished: {result.wpm} wpm, {result.accuracy}% accuracy, "
            f"{missed} missed, {len(result.wpm_history)} samples"
        )
        self.signal_state_changed.emit(self.state.value)
        self.signal_stats_updated.emit(self.stats)
        self.signal_finished.emit(result)

        if self.saver is not None:
            self.saver.submit(result)
        return result

    def _cancel_timers(self) -> None:
        """Cancel both timers and invalidate callbacks already queued."""
        for handle in (self._countdown, self._sampler):
            if handle is not None:
                handle.cancel()
        self._countdown = None
        self._sampler = None
        self._generation += 1

    # ========== Input ==========

    def handle_input(self, typed: str) -> None:
        """Accept the full contents of the input buffer.

        Args:
            typed: Everything typed so far (backspace shortens it)
        """
        if self.state == SessionState.FINISHED:
            return
        if self.state == SessionState.IDLE and typed:
            self.start()

        self.typed = typed
        self.ledger.apply_input(typed)
        self.cursor_index = min(len(typed), len(self.prompt_text))
        self._refresh_stats()

        if self.settings.mode == TestMode.WORDS and len(typed) >= len(self.prompt_text):
            self.finish()

    def handle_space_skip(self, cursor_index: int) -> None:
        """Skip the rest of the current word.

        Args:
            cursor_index: Cursor position where space was pressed
        """
        if self.state == SessionState.FINISHED:
            return

        start = min(max(cursor_index, 0), len(self.typed))
        if start < len(self.typed):
            self.typed = self.typed[:start]
            self.ledger.apply_input(self.typed)

        skip = self.ledger.apply_space_skip(start)
        if not skip.consumed:
            return

        self.typed += skip.consumed
        self.cursor_index = skip.new_index
        self._refresh_stats()

        if self.settings.mode == TestMode.WORDS and len(self.typed) >= len(self.prompt_text):
            self.finish()

    def submit_space(self) -> None:
        """Route a space key press: type it if expected, else skip the word."""
        if self.state == SessionState.FINISHED:
            return
        index = self.cursor_index
        if index < len(self.prompt_text) and self.prompt_text[index] == " ":
            self.handle_input(self.typed + " ")
        else:
            self.handle_space_skip(index)

    def _refresh_stats(self) -> None:
        self.stats = compute_stats(self.ledger.characters, self.elapsed)
        self.signal_stats_updated.emit(self.stats)

    # ========== Timers ==========

    def _on_countdown_tick(self, generation: int) -> None:
        if generation != self._generation or self.state != SessionState.RUNNING:
            return
        self.time_left = max(0, self.time_left - 1)
        self.signal_time_changed.emit(self.time_left)
        if self.time_left <= 0:
            log.info("Time is up")
            self.finish()

    def _on_sample_tick(self, generation: int) -> None:
        if generation != self._generation or self.state != SessionState.RUNNING:
            return
        elapsed = self.elapsed
        stats = compute_stats(self.ledger.characters, elapsed)
        self.wpm_history.append(WpmSample(time=elapsed, wpm=stats.wpm))
        log.debug(f"WPM sample at {elapsed:.1f}s: {stats.wpm}")

    # ========== Queries ==========

    @property
    def elapsed(self) -> float:
        """Seconds since the first keystroke, frozen at finish."""
        end = self._end_time if self._end_time is not None else self.scheduler.now()
        return validate_elapsed_seconds(self._start_time, end)

    @property
    def is_running(self) -> bool:
        return self.state == SessionState.RUNNING

    @property
    def is_finished(self) -> bool:
        return self.state == SessionState.FINISHED

    def snapshot(self) -> SessionSnapshot:
        """Copy of everything the presentation layer renders."""
        return SessionSnapshot(
            prompt_text=self.prompt_text,
            characters=self.ledger.snapshot(),
            typed=self.typed,
            cursor_index=self.cursor_index,
            state=self.state,
            time_left=self.time_left,
            elapsed=self.elapsed,
            stats=self.stats,
            wpm_history=tuple(self.wpm_history),
            settings=self.settings,
        )
