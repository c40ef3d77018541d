"""Fire-and-forget persistence of finished test results."""

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from core.database_adapter import PersistenceError, ResultStore
from core.models import TestResult
from core.scheduler import Scheduler

log = logging.getLogger("typesprint.result_saver")


class ResultSaver(QObject):
    """Hands finished results to the result store off the input path.

    Only the most recent result is tracked, and it is written at most
    once. A failed save stays failed until retry() is called; nothing is
    retried automatically.
    """

    signal_saved = Signal(str)  # stored record id
    signal_save_failed = Signal(object)  # PersistenceError

    def __init__(self, store: ResultStore, scheduler: Scheduler,
                 user_id: Optional[str] = None):
        """Initialize result saver.

        Args:
            store: Result store to write to
            scheduler: Scheduler used to defer the write
            user_id: Owner of saved results; None disables saving
        """
        super().__init__()
        self.store = store
        self.scheduler = scheduler
        self.user_id = user_id

        self.pending: Optional[TestResult] = None
        self.last_error: Optional[PersistenceError] = None
        self.is_saving = False
        self._attempted_id: Optional[str] = None
        self._saved_id: Optional[str] = None

    def submit(self, result: TestResult) -> bool:
        """Queue a result for saving.

        Args:
            result: Finished test

        Returns:
            True if a save was scheduled
        """
        if self.user_id is None:
            log.info("No user signed in, not saving result")
            return False
        if result.id == self._attempted_id:
            log.debug(f"Save already attempted for result {result.id}")
            return False

        self._attempted_id = result.id
        self.pending = result
        self.last_error = None
        self.is_saving = True
        self.scheduler.call_soon(lambda: self._save(result))
        return True

    def retry(self) -> bool:
        """Retry the last failed save (explicit user action).

        Returns:
            True if a save was scheduled
        """
        if self.pending is None or self.last_error is None:
            return False
        result = self.pending
        self._attempted_id = None
        return self.submit(result)

    def is_saved(self, result_id: str) -> bool:
        """Check whether the most recent result has been stored."""
        return result_id == self._saved_id

    def _save(self, result: TestResult) -> None:
        """Write a result to the store and report the outcome."""
        try:
            record_id = self.store.save_result(self.user_id, result)
        except PersistenceError as e:
            log.error(f"Failed to save result {result.id} ({e.kind.value}): {e}")
            self.last_error = e
            self.is_saving = False
            self.signal_save_failed.emit(e)
            return

        self._saved_id = result.id
        if self.pending is result:
            self.pending = None
        self.is_saving = False
        self.signal_saved.emit(record_id)
