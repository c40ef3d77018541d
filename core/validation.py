"""Validation helpers for typesprint."""

import logging

log = logging.getLogger("typesprint.validation")


def clamp_index(index: int, length: int) -> int:
    """Clamp a cursor index into [0, length].

    Args:
        index: Requested cursor position
        length: Length of the prompt

    Returns:
        Index within bounds
    """
    if index < 0:
        log.warning(f"Negative cursor index {index}, clamping to 0")
        return 0
    if index > length:
        log.warning(f"Cursor index {index} past end ({length}), clamping")
        return length
    return index


def validate_elapsed_seconds(start: float | None, end: float) -> float:
    """Calculate elapsed time, ensuring a non-negative result.

    Args:
        start: Start time in seconds, or None if never started
        end: End time in seconds

    Returns:
        Elapsed seconds (non-negative)
    """
    if start is None:
        return 0.0

    elapsed = end - start
    if elapsed < 0:
        log.warning(f"Negative elapsed time: {elapsed}s (start={start}, end={end})")
        return 0.0

    return elapsed
