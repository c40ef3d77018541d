"""SQLite result store for typesprint."""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from core.database_adapter import (
    PermissionDeniedError,
    PersistenceError,
    ResultStore,
    SchemaMissingError,
    UnavailableError,
    UnknownPersistenceError,
)
from core.models import AggregateStats, TestResult, TestSettings, WpmSample
from core.stats_calculator import update_aggregate_stats

log = logging.getLogger("typesprint.sqlite_adapter")

_PERMISSION_MARKERS = ("readonly", "read-only", "permission", "not authorized")
_UNAVAILABLE_MARKERS = ("unable to open", "locked", "disk i/o", "busy")
_SCHEMA_MARKERS = ("no such table", "no such column", "no such index")


def _classify(error: sqlite3.Error) -> type[PersistenceError]:
    """Map a sqlite3 exception onto the persistence error taxonomy."""
    message = str(error).lower()
    if any(marker in message for marker in _SCHEMA_MARKERS):
        return SchemaMissingError
    if any(marker in message for marker in _PERMISSION_MARKERS):
        return PermissionDeniedError
    if any(marker in message for marker in _UNAVAILABLE_MARKERS):
        return UnavailableError
    return UnknownPersistenceError


@contextmanager
def _translate_errors(operation: str):
    """Re-raise sqlite3 failures as PersistenceError subclasses."""
    try:
        yield
    except sqlite3.Error as e:
        error_class = _classify(e)
        log.error(f"{operation} failed ({error_class.kind.value}): {e}")
        raise error_class(f"{operation} failed: {e}") from e


class SQLiteResultStore(ResultStore):
    """Result store backed by a local SQLite file."""

    def __init__(self, db_path: Path, read_only: bool = False):
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file
            read_only: Open the database in read-only mode
        """
        self.db_path = Path(db_path)
        self.read_only = read_only

    @contextmanager
    def get_connection(self):
        """Get a database connection, closed on exit.

        Yields:
            sqlite3.Connection
        """
        if self.read_only:
            conn = sqlite3.connect(f"file:{self.db_path}?mode=ro", uri=True)
        else:
            conn = sqlite3.connect(self.db_path)
        try:
            yield conn
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create all tables if they don't exist."""
        with _translate_errors("initialize"), self.get_connection() as conn:
            self._create_test_results_table(conn)
            self._create_user_stats_table(conn)
            conn.commit()

    def close(self) -> None:
        """Connections are per-operation; nothing to release."""
        pass

    def _create_test_results_table(self, conn: sqlite3.Connection) -> None:
        """Create test_results table."""
        conn.execute("""
            CREATE TABLE IF NOT EXISTS test_results (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                created_at_ms INTEGER NOT NULL,
                timestamp TEXT NOT NULL,
                mode TEXT NOT NULL,
                duration INTEGER NOT NULL,
                difficulty TEXT NOT NULL,
                wpm INTEGER NOT NULL,
                accuracy INTEGER NOT NULL,
                correct INTEGER NOT NULL,
                incorrect INTEGER NOT NULL,
                missed INTEGER NOT NULL,
                total_time REAL NOT NULL,
                char_count INTEGER NOT NULL,
                wpm_history TEXT NOT NULL DEFAULT '[]'
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_test_results_user_created "
            "ON test_results(user_id, created_at_ms)"
        )

    def _create_user_stats_table(self, conn: sqlite3.Connection) -> None:
        """Create user_stats table."""
        conn.execute("""
            CREATE TABLE IF NOT EXISTS user_stats (
                user_id TEXT PRIMARY KEY,
                total_tests INTEGER NOT NULL DEFAULT 0,
                best_wpm INTEGER NOT NULL DEFAULT 0,
                average_wpm INTEGER NOT NULL DEFAULT 0,
                average_accuracy INTEGER NOT NULL DEFAULT 0,
                total_time REAL NOT NULL DEFAULT 0,
                last_test_date TEXT
            )
        """)

    # ========== Results ==========

    def save_result(self, user_id: str, result: TestResult) -> str:
        """Store a result and update the user's running aggregates.

        Saving a result id that is already stored is a no-op, so a retried
        save never counts twice toward the aggregates.
        """
        history = json.dumps([sample.model_dump() for sample in result.wpm_history])
        created_at_ms = int(result.timestamp.timestamp() * 1000)

        with _translate_errors("save_result"), self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT OR IGNORE INTO test_results (
                    id, user_id, created_at_ms, timestamp, mode, duration,
                    difficulty, wpm, accuracy, correct, incorrect, missed,
                    total_time, char_count, wpm_history
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    result.id,
                    user_id,
                    created_at_ms,
                    result.timestamp.isoformat(),
                    result.settings.mode.value,
                    result.settings.duration,
                    result.settings.difficulty.value,
                    result.wpm,
                    result.accuracy,
                    result.correct,
                    result.incorrect,
                    result.missed,
                    result.total_time,
                    result.char_count,
                    history,
                ),
            )
            if cursor.rowcount == 0:
                log.info(f"Result {result.id} already stored, skipping")
                return result.id

            updated = update_aggregate_stats(self._read_aggregate(cursor, user_id), result)
            self._write_aggregate(cursor, user_id, updated)
            conn.commit()

        log.info(f"Saved result {result.id} for user {user_id} ({result.wpm} wpm)")
        return result.id

    def get_recent_results(self, user_id: str, limit: int = 10) -> list[TestResult]:
        """Get the most recent results for a user."""
        if limit <= 0:
            return []

        with _translate_errors("get_recent_results"), self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, timestamp, mode, duration, difficulty, wpm, accuracy,
                       correct, incorrect, missed, total_time, char_count, wpm_history
                FROM test_results
                WHERE user_id = ?
                ORDER BY created_at_ms DESC, rowid DESC
                LIMIT ?
            """,
                (user_id, limit),
            )
            rows = cursor.fetchall()

        return [self._row_to_result(row) for row in rows]

    def _row_to_result(self, row: tuple) -> TestResult:
        (result_id, timestamp, mode, duration, difficulty, wpm, accuracy,
         correct, incorrect, missed, total_time, char_count, history) = row
        return TestResult(
            id=result_id,
            timestamp=datetime.fromisoformat(timestamp),
            settings=TestSettings(mode=mode, duration=duration, difficulty=difficulty),
            wpm_history=tuple(WpmSample(**sample) for sample in json.loads(history)),
            wpm=wpm,
            accuracy=accuracy,
            correct=correct,
            incorrect=incorrect,
            missed=missed,
            total_time=total_time,
            char_count=char_count,
        )

    # ========== Aggregates ==========

    def get_aggregate_stats(self, user_id: str) -> AggregateStats:
        """Get running totals, creating a zeroed profile for new users."""
        with _translate_errors("get_aggregate_stats"), self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT total_tests, best_wpm, average_wpm, average_accuracy,
                       total_time, last_test_date
                FROM user_stats WHERE user_id = ?
            """,
                (user_id,),
            )
            row = cursor.fetchone()
            if row is None:
                log.info(f"No profile for user {user_id}, creating one")
                if not self.read_only:
                    self._write_aggregate(cursor, user_id, AggregateStats())
                    conn.commit()
                return AggregateStats()

        return self._row_to_aggregate(row)

    def _read_aggregate(self, cursor: sqlite3.Cursor, user_id: str) -> AggregateStats:
        cursor.execute(
            """
            SELECT total_tests, best_wpm, average_wpm, average_accuracy,
                   total_time, last_test_date
            FROM user_stats WHERE user_id = ?
        """,
            (user_id,),
        )
        row = cursor.fetchone()
        return self._row_to_aggregate(row) if row else AggregateStats()

    def _write_aggregate(self, cursor: sqlite3.Cursor, user_id: str,
                         stats: AggregateStats) -> None:
        cursor.execute(
            """
            INSERT OR REPLACE INTO user_stats (
                user_id, total_tests, best_wpm, average_wpm, average_accuracy,
                total_time, last_test_date
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
            (
                user_id,
                stats.total_tests,
                stats.best_wpm,
                stats.average_wpm,
                stats.average_accuracy,
                stats.total_time,
                stats.last_test_date.isoformat() if stats.last_test_date else None,
            ),
        )

    def _row_to_aggregate(self, row: tuple) -> AggregateStats:
        total_tests, best_wpm, average_wpm, average_accuracy, total_time, last = row
        return AggregateStats(
            total_tests=total_tests,
            best_wpm=best_wpm,
            average_wpm=average_wpm,
            average_accuracy=average_accuracy,
            total_time=total_time,
            last_test_date=datetime.fromisoformat(last) if last else None,
        )
