"""Tests for ResultSaver."""

import pytest

from core.database_adapter import PersistenceErrorKind, UnavailableError
from core.models import TestSettings, TypingStats
from core.result_assembler import assemble_result
from core.result_saver import ResultSaver


@pytest.fixture
def result():
    return assemble_result(TestSettings(), TypingStats(wpm=40, accuracy=95), [])


@pytest.fixture
def saver(fake_store, scheduler):
    return ResultSaver(fake_store, scheduler, user_id="alice")


class TestSubmit:
    """Tests for submitting results."""

    def test_save_is_deferred(self, saver, fake_store, scheduler, result):
        """Nothing is written until the scheduler runs."""
        assert saver.submit(result) is True
        assert fake_store.saved == []
        assert saver.is_saving

        scheduler.run_pending()
        assert fake_store.saved == [("alice", result)]
        assert saver.is_saved(result.id)
        assert not saver.is_saving
        assert saver.pending is None

    def test_saved_signal(self, saver, scheduler, result):
        ids = []
        saver.signal_saved.connect(lambda record_id: ids.append(record_id))
        saver.submit(result)
        scheduler.run_pending()
        assert ids == [result.id]

    def test_same_result_saved_once(self, saver, fake_store, scheduler, result):
        saver.submit(result)
        assert saver.submit(result) is False
        scheduler.run_pending()
        assert len(fake_store.saved) == 1

    def test_only_latest_result_tracked(self, saver, fake_store, scheduler, result):
        """Tracking moves on to each new result instead of growing."""
        second = assemble_result(TestSettings(), TypingStats(wpm=50, accuracy=99), [])
        saver.submit(result)
        scheduler.run_pending()
        saver.submit(second)
        scheduler.run_pending()

        assert saver.is_saved(second.id)
        assert not saver.is_saved(result.id)
        assert saver.submit(second) is False
        assert [r.id for _, r in fake_store.saved] == [result.id, second.id]

    def test_new_result_while_saving(self, saver, fake_store, scheduler, result):
        """A finished earlier save does not clear the newer pending result."""
        second = assemble_result(TestSettings(), TypingStats(wpm=50, accuracy=99), [])
        saver.submit(result)
        saver.submit(second)
        assert saver.pending is second
        pending_after_save = []
        saver.signal_saved.connect(lambda record_id: pending_after_save.append(saver.pending))

        scheduler.run_pending()
        assert len(fake_store.saved) == 2
        assert pending_after_save == [second, None]

    def test_anonymous_user_not_saved(self, fake_store, scheduler, result):
        saver = ResultSaver(fake_store, scheduler, user_id=None)
        assert saver.submit(result) is False
        scheduler.run_pending()
        assert fake_store.saved == []


class TestFailure:
    """Tests for failed saves and explicit retry."""

    def test_failure_is_reported(self, saver, fake_store, scheduler, result):
        errors = []
        saver.signal_save_failed.connect(lambda error: errors.append(error))
        fake_store.fail_with = UnavailableError("offline")

        saver.submit(result)
        scheduler.run_pending()

        assert len(errors) == 1
        assert errors[0].kind == PersistenceErrorKind.UNAVAILABLE
        assert saver.last_error is errors[0]
        assert saver.pending is result
        assert not saver.is_saved(result.id)

    def test_no_automatic_retry(self, saver, fake_store, scheduler, result):
        fake_store.fail_with = UnavailableError("offline")
        saver.submit(result)
        scheduler.run_pending()

        fake_store.fail_with = None
        scheduler.advance(60)
        assert fake_store.saved == []

    def test_explicit_retry(self, saver, fake_store, scheduler, result):
        fake_store.fail_with = UnavailableError("offline")
        saver.submit(result)
        scheduler.run_pending()

        fake_store.fail_with = None
        assert saver.retry() is True
        scheduler.run_pending()

        assert fake_store.saved == [("alice", result)]
        assert saver.last_error is None

    def test_retry_without_failure(self, saver, result):
        assert saver.retry() is False
