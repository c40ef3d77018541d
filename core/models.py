"""Pydantic models for typesprint data structures."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CharStatus(str, Enum):
    """Status of one prompt position."""

    PENDING = "pending"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    MISSED = "missed"


class TestMode(str, Enum):
    """Whether a test ends on a clock or on a word count."""

    __test__ = False

    TIME = "time"
    WORDS = "words"


class Difficulty(str, Enum):
    """Word list tier used for prompt generation."""

    EASY = "easy"
    HARD = "hard"


# Choices offered by the settings selector; the engine accepts any positive value
DURATION_OPTIONS: dict[TestMode, tuple[int, ...]] = {
    TestMode.TIME: (15, 30, 60, 120),
    TestMode.WORDS: (10, 25, 50, 100),
}


class TestSettings(BaseModel):
    """Test configuration, chosen before a test starts."""

    __test__ = False

    mode: TestMode = Field(default=TestMode.TIME, description="time or words")
    duration: int = Field(
        default=30,
        gt=0,
        description="Seconds in time mode, word count in words mode",
    )
    difficulty: Difficulty = Field(
        default=Difficulty.EASY, description="Word list tier"
    )

    model_config = ConfigDict(extra="ignore", frozen=True)


class TypingStats(BaseModel):
    """Stats snapshot derived from the ledger and elapsed time."""

    wpm: int = Field(default=0, ge=0, description="Words per minute")
    accuracy: int = Field(default=0, ge=0, le=100, description="Accuracy percent")
    correct: int = Field(default=0, ge=0, description="Correct characters")
    incorrect: int = Field(default=0, ge=0, description="Incorrect characters")
    missed: int = Field(default=0, ge=0, description="Characters never reached")
    total_time: float = Field(default=0.0, ge=0.0, description="Elapsed seconds")
    char_count: int = Field(
        default=0, ge=0, description="correct + incorrect + missed"
    )

    model_config = ConfigDict(extra="ignore", frozen=True)


class WpmSample(BaseModel):
    """One point of the WPM-over-time history."""

    time: float = Field(..., ge=0.0, description="Seconds since test start")
    wpm: int = Field(..., ge=0, description="WPM at that time")

    model_config = ConfigDict(extra="ignore", frozen=True)


class TestResult(TypingStats):
    """Completed test, the unit of persistence."""

    __test__ = False

    id: str = Field(..., description="Unique result identifier")
    timestamp: datetime = Field(..., description="Assembly time (UTC)")
    settings: TestSettings = Field(..., description="Settings the test ran with")
    wpm_history: tuple[WpmSample, ...] = Field(
        default=(), description="WPM samples, one per second while running"
    )

    @property
    def raw_wpm(self) -> int:
        """WPM over all reached characters regardless of correctness."""
        from core.stats_calculator import calculate_wpm

        return calculate_wpm(self.char_count, self.total_time)


class AggregateStats(BaseModel):
    """Running per-user totals kept by the result store."""

    total_tests: int = Field(default=0, ge=0, description="Completed tests")
    best_wpm: int = Field(default=0, ge=0, description="Highest WPM")
    average_wpm: int = Field(default=0, ge=0, description="Rounded running mean WPM")
    average_accuracy: int = Field(
        default=0, ge=0, le=100, description="Rounded running mean accuracy"
    )
    total_time: float = Field(default=0.0, ge=0.0, description="Seconds typed")
    last_test_date: datetime | None = Field(
        default=None, description="Timestamp of the latest result"
    )

    model_config = ConfigDict(extra="ignore", frozen=True)
