"""Result store abstraction for typesprint.

Provides a pluggable backend interface for durable storage of test
results and per-user aggregates, plus the error taxonomy every backend
reports failures with.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum

from core.models import AggregateStats, TestResult

log = logging.getLogger("typesprint.database_adapter")


class ResultStore(ABC):
    """Abstract base class for result stores.

    All backends must implement this interface so the save path and the
    CLI can work against any of them.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Create the schema if it does not exist."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release any held resources."""
        pass

    @abstractmethod
    def save_result(self, user_id: str, result: TestResult) -> str:
        """Store a result and fold it into the user's aggregates.

        Args:
            user_id: Owner of the result
            result: Completed test

        Returns:
            Identifier of the stored record

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    def get_aggregate_stats(self, user_id: str) -> AggregateStats:
        """Get running totals for a user.

        Unknown users get a zeroed profile.

        Raises:
            PersistenceError: If the read fails
        """
        pass

    @abstractmethod
    def get_recent_results(self, user_id: str, limit: int = 10) -> list[TestResult]:
        """Get a user's results, most recent first.

        Args:
            user_id: Owner of the results
            limit: Maximum number of results to return

        Raises:
            PersistenceError: If the read fails
        """
        pass


class PersistenceErrorKind(str, Enum):
    """Distinguishable classes of storage failure."""

    PERMISSION_DENIED = "permission_denied"
    UNAVAILABLE = "unavailable"
    SCHEMA_MISSING = "schema_missing"
    UNKNOWN = "unknown"


class PersistenceError(Exception):
    """Base exception for result store errors."""

    kind = PersistenceErrorKind.UNKNOWN


class PermissionDeniedError(PersistenceError):
    """The store refused the operation."""

    kind = PersistenceErrorKind.PERMISSION_DENIED


class UnavailableError(PersistenceError):
    """The store could not be reached."""

    kind = PersistenceErrorKind.UNAVAILABLE


class SchemaMissingError(PersistenceError):
    """A table or index the query needs does not exist."""

    kind = PersistenceErrorKind.SCHEMA_MISSING


class UnknownPersistenceError(PersistenceError):
    """Any other storage failure."""

    pass
