"""Packaging of a finished test into an immutable result record."""

import copy
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone

from core.models import TestResult, TestSettings, TypingStats, WpmSample


def assemble_result(
    settings: TestSettings,
    final_stats: TypingStats,
    wpm_history: Sequence[WpmSample],
) -> TestResult:
    """Build the result record for a completed test.

    The history and settings are copied so the record is independent of
    the live session, which keeps mutating after a restart.

    Args:
        settings: Settings the test ran with
        final_stats: Stats computed at finish
        wpm_history: Samples recorded while running

    Returns:
        New TestResult with a fresh id and timestamp
    """
    return TestResult(
        id=uuid.uuid4().hex,
        timestamp=datetime.now(timezone.utc),
        settings=settings.model_copy(deep=True),
        wpm_history=tuple(copy.deepcopy(list(wpm_history))),
        **final_stats.model_dump(),
    )
