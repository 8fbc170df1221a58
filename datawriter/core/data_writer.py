"""
Data Writer

A threaded data writer that hammers the database with randomized write queries
for as long as it runs. Used for random testing of online migrations: the
writer is created (workers connect and park), started once the migration is
ready, and stopped when the migration needs the source to go read-only.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Any, Callable, Optional

from pydantic import ValidationError

from datawriter.core.errors import (
    AlreadyStartedError,
    AlreadyStoppedError,
    ConfigurationError,
    WorkerFailedError,
)
from datawriter.core.operation_generator import OperationGenerator
from datawriter.core.worker_pool import OnWrite, WorkerPool, WriterWorker
from datawriter.core.write_executor import WriteExecutor
from datawriter.models import WorkerResult, WriterConfig


class DataWriter:
    """
    Controller for a pool of writer threads.

    Single-use: ``start`` may be called once, and once ``stop_and_join`` ran the
    writer cannot be restarted. Create a new instance instead.

    Usage:
        writer = DataWriter(MySQLConnectionFactory(), tables=["gftest.t1"],
                            number_of_writers=3)
        writer.start(lambda op, row_id: seen.append((op, row_id)))
        ...
        writer.stop_and_join()
    """

    def __init__(
        self,
        connection_factory: Callable[[], Any],
        config: Optional[WriterConfig] = None,
        *,
        logger: Optional[logging.Logger] = None,
        executor: Optional[WriteExecutor] = None,
        rng_factory: Optional[Callable[[int], random.Random]] = None,
        **overrides: Any,
    ) -> None:
        """
        Validate the configuration, spawn the workers and wait until each one
        has connected and parked on its start gate.

        Args:
            connection_factory: Zero-argument callable returning a new DB-API
                connection; called once on each worker thread.
            config: Writer configuration (defaults from settings)
            logger: Logger for lifecycle messages
            executor: Statement executor shared by the workers (stateless)
            rng_factory: Builds each worker's random source from its worker id
            **overrides: WriterConfig fields replacing those of ``config``

        Raises:
            ConfigurationError: Invalid tables, writer count or probabilities.
                No worker is created in that case.
        """
        try:
            if config is None:
                config = WriterConfig(**overrides)
            elif overrides:
                config = config.with_overrides(**overrides)
        except (ValidationError, TypeError) as e:
            raise ConfigurationError(f"Invalid data writer configuration: {e}") from e

        self.config = config
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._connection_factory = connection_factory
        self._executor = executor or WriteExecutor()
        self._generator = OperationGenerator.from_config(config)
        self._rng_factory = rng_factory or (lambda _wid: random.Random())

        self._lock = threading.Lock()
        self._started = False
        self._stop_requested = False
        self._failures_logged = False

        if config.probability_sum < 1.0:
            self._logger.info(
                "data writer probabilities sum to %.2f; %.0f%% of iterations will not write",
                config.probability_sum,
                (1.0 - config.probability_sum) * 100,
            )

        self._pool = WorkerPool(worker_factory=self._build_worker, size=config.number_of_writers)
        self._pool.spawn_all()
        self._pool.wait_until_parked()

    def _build_worker(self, worker_id: int, stop_signal: threading.Event) -> WriterWorker:
        return WriterWorker(
            worker_id,
            connection_factory=self._connection_factory,
            tables=self.config.tables,
            generator=self._generator,
            executor=self._executor,
            stop_signal=stop_signal,
            write_interval_seconds=self.config.write_interval_seconds,
            rng=self._rng_factory(worker_id),
            log=self._logger,
        )

    @property
    def started(self) -> bool:
        return self._started

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    @property
    def alive_count(self) -> int:
        """Number of worker threads that have not exited."""
        return self._pool.count

    @property
    def running_count(self) -> int:
        """Number of workers in their write loop with no stop requested."""
        return len(self._pool.running_worker_ids())

    @property
    def workers(self) -> list[WriterWorker]:
        return self._pool.workers

    @property
    def results(self) -> list[WorkerResult]:
        return self._pool.results()

    @property
    def total_writes(self) -> int:
        return sum(r.writes for r in self._pool.results())

    def start(self, on_write: Optional[OnWrite] = None) -> None:
        """
        Release every worker into its write loop. Does not block.

        Args:
            on_write: Called as ``on_write(operation, row_id)`` on the worker's
                thread after each write. Shared by all workers, so it must be
                thread-safe.

        Raises:
            AlreadyStartedError: start() was already called.
            AlreadyStoppedError: stop_and_join() ran before start().
        """
        with self._lock:
            if self._started:
                raise AlreadyStartedError(
                    "Cannot start DataWriter multiple times. Use a new instance instead"
                )
            if self._stop_requested:
                raise AlreadyStoppedError(
                    "Cannot start a stopped DataWriter. Use a new instance instead"
                )
            self._started = True
            opened = self._pool.open_gates(on_write)
        self._logger.debug("data writer started %d/%d workers", opened, self._pool.size)

    def stop_and_join(self, raise_on_error: bool = True) -> list[WorkerResult]:
        """
        Stop every worker and wait until all of them exited and closed their
        connection. Workers finish their in-flight write first.

        If called before start(), parked workers are released without writing.

        Returns:
            Per-worker results

        Raises:
            WorkerFailedError: A worker terminated with an error (only when
                ``raise_on_error``). Raised after every worker was joined.
        """
        with self._lock:
            self._stop_requested = True
            self._pool.request_stop()
            cancelled = self._pool.cancel_gates()
        if cancelled:
            self._logger.info(
                "data writer stopped before start; released %d parked workers", cancelled
            )
        return self._join_and_check(raise_on_error=raise_on_error)

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for worker threads to exit without requesting a stop."""
        self._pool.join(timeout)

    def _join_and_check(self, *, raise_on_error: bool) -> list[WorkerResult]:
        self._pool.join()
        results = self._pool.results()
        failures = [r for r in results if r.failed]
        if failures and not self._failures_logged:
            self._failures_logged = True
            for r in failures:
                self._logger.error(
                    "data writer thread %d crashed after %d writes: %s: %s",
                    r.worker_id,
                    r.writes,
                    type(r.error).__name__,
                    r.error,
                )
        if failures and raise_on_error:
            raise WorkerFailedError(results)
        return results

    def __enter__(self) -> "DataWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # Don't mask an exception already propagating out of the with block.
        self.stop_and_join(raise_on_error=exc_type is None)
