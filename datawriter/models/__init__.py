"""
Data Models

Pydantic configuration and value types used by the data writer.
"""

from datawriter.models.writer_config import (
    OperationKind,
    ProbabilityRange,
    WorkerResult,
    WorkerState,
    WriteObservation,
    WriterConfig,
)

__all__ = [
    "OperationKind",
    "ProbabilityRange",
    "WorkerResult",
    "WorkerState",
    "WriteObservation",
    "WriterConfig",
]
