"""
Data Writer Models

Defines the Pydantic configuration model for a data writer and the small value
types shared by the worker pool:
- Operation kinds and their probability ranges
- Worker lifecycle states
- Per-worker results and write observations
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from datawriter.config import settings


class OperationKind(str, Enum):
    """Write operations a worker can issue."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class WorkerState(str, Enum):
    """Lifecycle of a single writer worker."""

    IDLE = "idle"
    WAITING = "waiting"
    RUNNING = "running"
    STOPPED = "stopped"


class ProbabilityRange(NamedTuple):
    """Half-open interval [low, high) of the unit draw."""

    low: float
    high: float

    def contains(self, draw: float) -> bool:
        return self.low <= draw < self.high

    @property
    def width(self) -> float:
        return self.high - self.low


class WriteObservation(NamedTuple):
    """What a completed write reported to the observation callback."""

    operation: OperationKind
    row_id: Optional[int]


@dataclass
class WorkerResult:
    """Completion status of one worker, inspected after join."""

    worker_id: int
    state: WorkerState
    writes: int = 0
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class WriterConfig(BaseModel):
    """
    Configuration for a data writer.

    Probabilities are weights laid out as contiguous ranges over [0, 1) in the
    order insert, update, delete. They do not have to sum to 1.0: a sum below
    1.0 leaves a tail of draws that perform no write.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    tables: List[str] = Field(
        default_factory=lambda: [settings.DATAWRITER_DEFAULT_TABLE],
        min_length=1,
        description="Tables to write to; one is picked at random per write",
    )
    number_of_writers: int = Field(
        settings.DATAWRITER_NUMBER_OF_WRITERS,
        ge=1,
        description="Number of worker threads, each with its own connection",
    )
    insert_probability: float = Field(
        settings.DATAWRITER_INSERT_PROBABILITY,
        ge=0.0,
        allow_inf_nan=False,
        description="INSERT weight",
    )
    update_probability: float = Field(
        settings.DATAWRITER_UPDATE_PROBABILITY,
        ge=0.0,
        allow_inf_nan=False,
        description="UPDATE weight",
    )
    delete_probability: float = Field(
        settings.DATAWRITER_DELETE_PROBABILITY,
        ge=0.0,
        allow_inf_nan=False,
        description="DELETE weight",
    )
    write_interval_seconds: float = Field(
        settings.DATAWRITER_WRITE_INTERVAL_SECONDS,
        ge=0.0,
        allow_inf_nan=False,
        description="Pause between two writes of the same worker",
    )

    @field_validator("tables")
    @classmethod
    def validate_tables(cls, v: List[str]) -> List[str]:
        """Strip names and reject blank ones."""
        out = [str(t).strip() for t in v]
        if any(not t for t in out):
            raise ValueError("table names must not be blank")
        return out

    @property
    def probability_sum(self) -> float:
        return self.insert_probability + self.update_probability + self.delete_probability

    def with_overrides(self, **overrides: Any) -> "WriterConfig":
        """Return a validated copy with the given fields replaced."""
        data = self.model_dump()
        data.update(overrides)
        return WriterConfig(**data)
