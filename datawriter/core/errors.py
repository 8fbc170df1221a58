"""Exceptions raised by the data writer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datawriter.models import WorkerResult


class DataWriterError(Exception):
    """Base class for data writer errors."""


class ConfigurationError(DataWriterError, ValueError):
    """Raised when a data writer is constructed with invalid parameters."""


class AlreadyStartedError(DataWriterError):
    """Raised when start() is called on a data writer that already started."""


class AlreadyStoppedError(DataWriterError):
    """Raised when start() is called on a data writer that was stopped."""


class NoRowsAvailable(DataWriterError):
    """Raised when an UPDATE/DELETE target table has no rows to sample."""

    def __init__(self, table: str):
        super().__init__(f"No rows in {table}?")
        self.table = table


class WorkerFailedError(DataWriterError):
    """Raised after join when one or more workers terminated with an error."""

    def __init__(self, results: list[WorkerResult]):
        self.results = list(results)
        self.failures = [r for r in self.results if r.failed]
        causes = ", ".join(
            f"worker {r.worker_id}: {type(r.error).__name__}: {r.error}"
            for r in self.failures
        )
        super().__init__(
            f"{len(self.failures)}/{len(self.results)} data writer workers failed ({causes})"
        )
