"""
Core Package

Worker pool, write execution and the DataWriter controller.

Usage:
    from datawriter.core import DataWriter
"""

from .data_writer import DataWriter
from .errors import (
    AlreadyStartedError,
    AlreadyStoppedError,
    ConfigurationError,
    DataWriterError,
    NoRowsAvailable,
    WorkerFailedError,
)
from .operation_generator import OperationGenerator
from .phase_hooks import (
    MigrationStatus,
    start_datawriter_with_migration,
    stop_datawriter_during_cutover,
)
from .worker_pool import StartGate, WorkerPool, WriterWorker
from .write_executor import WriteExecutor, quote_table, rand_data

__all__ = [
    "DataWriter",
    "AlreadyStartedError",
    "AlreadyStoppedError",
    "ConfigurationError",
    "DataWriterError",
    "NoRowsAvailable",
    "WorkerFailedError",
    "OperationGenerator",
    "MigrationStatus",
    "start_datawriter_with_migration",
    "stop_datawriter_during_cutover",
    "StartGate",
    "WorkerPool",
    "WriterWorker",
    "WriteExecutor",
    "quote_table",
    "rand_data",
]
