"""Thread-per-worker pool for the data writer.

Each worker owns one connection, parks on a one-shot start gate, then writes
until the pool's shared stop signal is set.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from typing import Callable, Optional, Sequence

from datawriter.core.operation_generator import OperationGenerator
from datawriter.core.write_executor import WriteExecutor
from datawriter.models import OperationKind, WorkerResult, WorkerState, WriteObservation

logger = logging.getLogger(__name__)

OnWrite = Callable[[OperationKind, Optional[int]], None]


class StartGate:
    """One-shot gate releasing a single worker.

    Either ``open`` (with the observation callback) or ``cancel`` wins; the
    other becomes a no-op. Whatever wins is set before the waiter wakes up.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._on_write: Optional[OnWrite] = None
        self._opened = False
        self._cancelled = False

    def open(self, on_write: Optional[OnWrite]) -> bool:
        with self._lock:
            if self._opened or self._cancelled:
                return False
            self._on_write = on_write
            self._opened = True
        self._event.set()
        return True

    def cancel(self) -> bool:
        with self._lock:
            if self._opened or self._cancelled:
                return False
            self._cancelled = True
        self._event.set()
        return True

    def wait(self) -> tuple[bool, Optional[OnWrite]]:
        """Block until opened or cancelled. Returns (opened, on_write)."""
        self._event.wait()
        return self._opened, self._on_write


class WriterWorker:
    """A single writer thread and the state it reports back to the pool."""

    def __init__(
        self,
        worker_id: int,
        *,
        connection_factory: Callable[[], object],
        tables: Sequence[str],
        generator: OperationGenerator,
        executor: WriteExecutor,
        stop_signal: threading.Event,
        write_interval_seconds: float = 0.03,
        rng: random.Random | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.worker_id = int(worker_id)
        self.gate = StartGate()
        self.state = WorkerState.IDLE
        self.writes = 0
        self.error: Optional[BaseException] = None

        self._connection_factory = connection_factory
        self._tables = list(tables)
        self._generator = generator
        self._executor = executor
        self._stop_signal = stop_signal
        self._write_interval_seconds = float(write_interval_seconds)
        self._rng = rng or random.Random()
        self._log = log or logger
        # Set once the worker is WAITING on its gate, or has already terminated.
        self._parked = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name=f"datawriter-{self.worker_id}", daemon=True
        )

    def start(self) -> None:
        self._thread.start()

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def wait_parked(self, timeout: float | None = None) -> bool:
        return self._parked.wait(timeout)

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def result(self) -> WorkerResult:
        return WorkerResult(
            worker_id=self.worker_id,
            state=self.state,
            writes=self.writes,
            error=self.error,
        )

    def _run(self) -> None:
        connection = None
        try:
            connection = self._connection_factory()
            self.state = WorkerState.WAITING
            self._log.info("data writer thread in wait mode %d", self.worker_id)
            self._parked.set()

            opened, on_write = self.gate.wait()
            if not opened:
                self._log.info(
                    "data writer thread %d stopped before start", self.worker_id
                )
                return

            self.state = WorkerState.RUNNING
            self._log.info("starting data writer thread %d", self.worker_id)
            while not self._stop_signal.is_set():
                self._write_once(connection, on_write)
                time.sleep(self._write_interval_seconds)

            self._log.info(
                "stopped data writer thread %d with a total of %d data writes",
                self.worker_id,
                self.writes,
            )
        except Exception as exc:
            # Kept on the worker; the controller raises WorkerFailedError after join.
            self.error = exc
            self._log.error(
                "data writer thread %d failed after %d data writes: %s: %s",
                self.worker_id,
                self.writes,
                type(exc).__name__,
                exc,
                exc_info=True,
            )
        finally:
            self.state = WorkerState.STOPPED
            self._parked.set()
            if connection is not None:
                connection.close()

    def _write_once(self, connection, on_write: Optional[OnWrite]) -> None:
        operation = self._generator.next(self._rng)
        if operation is None:
            return
        table = self._rng.choice(self._tables)
        observation = WriteObservation(*self._executor.execute(operation, connection, table))
        self.writes += 1
        if on_write is not None:
            on_write(*observation)


class WorkerPool:
    """Fixed-size set of writer workers sharing one stop signal.

    Attributes:
        size: Number of workers spawned
        stop_signal: Shared flag every worker checks between writes
    """

    def __init__(
        self,
        *,
        worker_factory: Callable[[int, threading.Event], WriterWorker],
        size: int,
    ) -> None:
        """Initialize the worker pool.

        Args:
            worker_factory: Builds a worker.
                            Signature: (worker_id: int, stop_signal: Event) -> WriterWorker
            size: Number of workers to spawn
        """
        self._worker_factory = worker_factory
        self.size = int(size)
        self.stop_signal = threading.Event()
        self._workers: dict[int, WriterWorker] = {}

    @property
    def workers(self) -> list[WriterWorker]:
        return list(self._workers.values())

    @property
    def count(self) -> int:
        """Current number of live worker threads."""
        return len(self.live_worker_ids())

    def spawn_all(self) -> None:
        """Create and start every worker thread."""
        for wid in range(self.size):
            worker = self._worker_factory(wid, self.stop_signal)
            self._workers[wid] = worker
            worker.start()

    def wait_until_parked(self, timeout: float | None = None) -> bool:
        """Wait until every worker is WAITING on its gate or has terminated."""
        deadline = None if timeout is None else time.monotonic() + timeout
        for worker in self._workers.values():
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            if not worker.wait_parked(remaining):
                return False
        return True

    def open_gates(self, on_write: Optional[OnWrite]) -> int:
        """Deliver the start signal to every worker. Returns gates opened."""
        return sum(1 for w in self._workers.values() if w.gate.open(on_write))

    def cancel_gates(self) -> int:
        """Release workers whose gate was never opened, without writing."""
        return sum(1 for w in self._workers.values() if w.gate.cancel())

    def request_stop(self) -> None:
        self.stop_signal.set()

    def join(self, timeout: float | None = None) -> None:
        for worker in self._workers.values():
            worker.join(timeout)

    def running_worker_ids(self) -> list[int]:
        """IDs of workers that are writing and not stop-signaled.

        Stop-signaled workers still finishing their last write are excluded.
        """
        if self.stop_signal.is_set():
            return []
        return [
            wid
            for wid, w in self._workers.items()
            if w.is_alive() and w.state == WorkerState.RUNNING
        ]

    def live_worker_ids(self) -> list[int]:
        """IDs of all workers whose thread has not exited yet."""
        return [wid for wid, w in self._workers.items() if w.is_alive()]

    def results(self) -> list[WorkerResult]:
        return [w.result() for w in self._workers.values()]
