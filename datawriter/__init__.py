"""Concurrent synthetic write-load generator for online migration testing."""

from datawriter.core import (
    AlreadyStartedError,
    AlreadyStoppedError,
    ConfigurationError,
    DataWriter,
    DataWriterError,
    MigrationStatus,
    NoRowsAvailable,
    WorkerFailedError,
    start_datawriter_with_migration,
    stop_datawriter_during_cutover,
)
from datawriter.models import OperationKind, WorkerResult, WorkerState, WriterConfig

__version__ = "0.1.0"

__all__ = [
    "AlreadyStartedError",
    "AlreadyStoppedError",
    "ConfigurationError",
    "DataWriter",
    "DataWriterError",
    "MigrationStatus",
    "NoRowsAvailable",
    "OperationKind",
    "WorkerFailedError",
    "WorkerResult",
    "WorkerState",
    "WriterConfig",
    "start_datawriter_with_migration",
    "stop_datawriter_during_cutover",
]
