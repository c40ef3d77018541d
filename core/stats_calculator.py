"""WPM, accuracy and aggregate statistics calculations."""

import math
from collections.abc import Iterable

from core.ledger import Character
from core.models import AggregateStats, CharStatus, TestResult, TypingStats


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return math.floor(value + 0.5)


def calculate_wpm(char_count: int, elapsed_seconds: float) -> int:
    """Calculate words per minute.

    Standard: 5 characters = 1 word

    Args:
        char_count: Number of characters (may be negative for net counts)
        elapsed_seconds: Duration in seconds

    Returns:
        Rounded WPM, or 0 if no time has elapsed
    """
    minutes = elapsed_seconds / 60.0
    if minutes <= 0:
        return 0
    return round_half_up((char_count / 5.0) / minutes)


def calculate_net_wpm(correct: int, incorrect: int, elapsed_seconds: float) -> int:
    """Calculate WPM penalized by incorrect characters.

    Args:
        correct: Correct characters
        incorrect: Incorrect characters
        elapsed_seconds: Duration in seconds

    Returns:
        Net WPM (never negative)
    """
    return max(0, calculate_wpm(correct - incorrect, elapsed_seconds))


def calculate_accuracy(correct: int, char_count: int) -> int:
    """Rounded percentage of correct characters, 0 when nothing was reached."""
    if char_count <= 0:
        return 0
    return round_half_up(100 * correct / char_count)


def compute_stats(
    characters: Iterable[Character], elapsed_seconds: float
) -> TypingStats:
    """Derive typing stats from a ledger snapshot.

    A perfectly accurate run is scored at raw speed. Otherwise WPM is
    net of incorrect characters and floored at zero.

    Args:
        characters: Ledger snapshot
        elapsed_seconds: Seconds since the test started

    Returns:
        TypingStats for this instant
    """
    correct = incorrect = missed = 0
    for character in characters:
        if character.status is CharStatus.CORRECT:
            correct += 1
        elif character.status is CharStatus.INCORRECT:
            incorrect += 1
        elif character.status is CharStatus.MISSED:
            missed += 1

    char_count = correct + incorrect + missed
    elapsed = max(0.0, elapsed_seconds)

    if char_count > 0 and correct == char_count:
        wpm = calculate_wpm(char_count, elapsed)
    else:
        wpm = calculate_net_wpm(correct, incorrect, elapsed)

    return TypingStats(
        wpm=wpm,
        accuracy=calculate_accuracy(correct, char_count),
        correct=correct,
        incorrect=incorrect,
        missed=missed,
        total_time=elapsed,
        char_count=char_count,
    )


def update_aggregate_stats(old: AggregateStats, result: TestResult) -> AggregateStats:
    """Fold one result into running per-user totals.

    Averages are updated incrementally so a write never needs the
    full history.

    Args:
        old: Totals before this result
        result: Newly completed test

    Returns:
        Updated totals
    """
    count = old.total_tests
    return AggregateStats(
        total_tests=count + 1,
        best_wpm=max(old.best_wpm, result.wpm),
        average_wpm=round_half_up((old.average_wpm * count + result.wpm) / (count + 1)),
        average_accuracy=round_half_up(
            (old.average_accuracy * count + result.accuracy) / (count + 1)
        ),
        total_time=old.total_time + result.total_time,
        last_test_date=result.timestamp,
    )
