"""
Migration phase hooks.

Bind a DataWriter to the status notifications of an online migration tool:
writes begin when the tool reports READY and stop at the start of cutover,
when the source has to become read-only.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional, Protocol

from datawriter.core.data_writer import DataWriter
from datawriter.core.worker_pool import OnWrite


class MigrationStatus(str, Enum):
    """Phases reported by the migration tool, in order."""

    READY = "READY"
    BINLOG_STREAMING_STARTED = "BINLOG_STREAMING_STARTED"
    ROW_COPY_COMPLETED = "ROW_COPY_COMPLETED"
    VERIFY_DURING_CUTOVER = "VERIFY_DURING_CUTOVER"
    VERIFIED = "VERIFIED"
    DONE = "DONE"


class StatusNotifier(Protocol):
    """Anything that runs a callback when the migration reaches a status."""

    def on_status(self, status: MigrationStatus, callback: Callable[[], None]) -> None: ...


def start_datawriter_with_migration(
    writer: DataWriter,
    notifier: StatusNotifier,
    on_write: Optional[OnWrite] = None,
) -> None:
    """Start ``writer`` once the migration reports READY."""

    def _start() -> None:
        writer.start(on_write)

    notifier.on_status(MigrationStatus.READY, _start)


def stop_datawriter_during_cutover(writer: DataWriter, notifier: StatusNotifier) -> None:
    """Stop and drain ``writer`` when row copy completes.

    Cutover requires a read-only source, which is reached by stopping the
    data writer.
    """

    def _stop() -> None:
        writer.stop_and_join()

    notifier.on_status(MigrationStatus.ROW_COPY_COMPLETED, _stop)
