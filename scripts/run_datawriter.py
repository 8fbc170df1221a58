#!/usr/bin/env python3
"""Run a data writer against a MySQL server for a fixed duration."""

from __future__ import annotations

import argparse
import logging
import sys
import threading
import time
from collections import Counter

from datawriter.config import configure_logging, settings
from datawriter.connectors import MySQLConfig, MySQLConnectionFactory
from datawriter.core import ConfigurationError, DataWriter, WorkerFailedError

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Hammer MySQL tables with random INSERT/UPDATE/DELETE statements."
    )
    parser.add_argument(
        "--table",
        dest="tables",
        action="append",
        help="Table to write to (repeatable). Defaults to DATAWRITER_DEFAULT_TABLE.",
    )
    parser.add_argument(
        "--writers",
        type=int,
        default=settings.DATAWRITER_NUMBER_OF_WRITERS,
        help="Number of writer threads.",
    )
    parser.add_argument(
        "--insert", type=float, default=settings.DATAWRITER_INSERT_PROBABILITY
    )
    parser.add_argument(
        "--update", type=float, default=settings.DATAWRITER_UPDATE_PROBABILITY
    )
    parser.add_argument(
        "--delete", type=float, default=settings.DATAWRITER_DELETE_PROBABILITY
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=10.0,
        help="Seconds to write before stopping.",
    )
    parser.add_argument("--log-level", default=settings.LOG_LEVEL)
    return parser


def _run(args: argparse.Namespace) -> int:
    factory = MySQLConnectionFactory(MySQLConfig.from_settings())
    counts: Counter[str] = Counter()
    counts_lock = threading.Lock()

    def _on_write(operation, _row_id) -> None:
        with counts_lock:
            counts[operation.value] += 1

    try:
        writer = DataWriter(
            factory,
            tables=args.tables or [settings.DATAWRITER_DEFAULT_TABLE],
            number_of_writers=args.writers,
            insert_probability=args.insert,
            update_probability=args.update,
            delete_probability=args.delete,
        )
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 2

    writer.start(_on_write)
    failed: WorkerFailedError | None = None
    try:
        time.sleep(max(0.0, args.duration))
    finally:
        # An interrupt still propagates to main() after the workers drain.
        try:
            writer.stop_and_join()
        except WorkerFailedError as exc:
            failed = exc

    if failed is not None:
        logger.error("%s", failed)
        return 1

    logger.info(
        "data writer finished: %d writes (%s)",
        writer.total_writes,
        ", ".join(f"{k}={v}" for k, v in sorted(counts.items())) or "none",
    )
    return 0


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()
    configure_logging(args.log_level)
    try:
        return _run(args)
    except KeyboardInterrupt:
        print("[datawriter] interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
