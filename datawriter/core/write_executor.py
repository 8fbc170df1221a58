"""
Write Executor

Issues the INSERT/UPDATE/DELETE statements a data writer worker performs, plus
the random row sampling UPDATE and DELETE need.

Every statement runs on a cursor scoped with ``with connection.cursor()``, so
the cursor is released on success and on error.
"""

from __future__ import annotations

import logging
import secrets
from typing import Any, Optional

from datawriter.core.errors import NoRowsAvailable
from datawriter.models import OperationKind

logger = logging.getLogger(__name__)


def quote_table(table: str) -> str:
    """Backtick-quote each dotted part of a (possibly db-qualified) table name."""
    parts = [p.strip().strip("`") for p in str(table).split(".")]
    if not parts or any(not p for p in parts):
        raise ValueError(f"Invalid table name: {table!r}")
    return ".".join("`" + p.replace("`", "``") + "`" for p in parts)


def rand_data(length: int = 32) -> str:
    """Random hex payload for the data column."""
    return secrets.token_hex(length)


def _first_value(row: Any) -> Any:
    # pymysql returns tuples by default and dicts with DictCursor.
    if isinstance(row, dict):
        if "id" in row:
            return row["id"]
        return next(iter(row.values()))
    return row[0]


class WriteExecutor:
    """Executes single write operations against a table over a DB-API connection.

    Rows are assumed to have an ``id`` auto-increment key and a ``data`` payload
    column. UPDATE and DELETE target the first row with ``id >=`` a sampled id,
    so they stay valid when the sampled row was deleted concurrently.
    """

    def __init__(self, *, payload_length: int = 32) -> None:
        self.payload_length = payload_length

    def execute(
        self, operation: OperationKind, connection, table: str
    ) -> tuple[OperationKind, Optional[int]]:
        """Run ``operation`` against ``table`` and return (operation, row id)."""
        if operation == OperationKind.INSERT:
            return operation, self.insert(connection, table)
        if operation == OperationKind.UPDATE:
            return operation, self.update(connection, table)
        if operation == OperationKind.DELETE:
            return operation, self.delete(connection, table)
        raise ValueError(f"Unsupported operation: {operation!r}")

    def insert(self, connection, table: str) -> int:
        query = f"INSERT INTO {quote_table(table)} (id, data) VALUES (%s, %s)"
        with connection.cursor() as cursor:
            cursor.execute(query, (None, rand_data(self.payload_length)))
            return cursor.lastrowid

    def update(self, connection, table: str, row_id: Optional[int] = None) -> int:
        if row_id is None:
            row_id = self.sample_existing_id(connection, table)
        query = (
            f"UPDATE {quote_table(table)} SET data = %s "
            "WHERE id >= %s ORDER BY id LIMIT 1"
        )
        with connection.cursor() as cursor:
            cursor.execute(query, (rand_data(self.payload_length), row_id))
        return row_id

    def delete(self, connection, table: str, row_id: Optional[int] = None) -> int:
        if row_id is None:
            row_id = self.sample_existing_id(connection, table)
        query = f"DELETE FROM {quote_table(table)} WHERE id >= %s ORDER BY id LIMIT 1"
        with connection.cursor() as cursor:
            cursor.execute(query, (row_id,))
        return row_id

    def sample_existing_id(self, connection, table: str) -> int:
        """Pick a random existing id.

        ORDER BY RAND() scans the whole table; only suitable for the small
        datasets used in tests.
        """
        query = f"SELECT id FROM {quote_table(table)} ORDER BY RAND() LIMIT 1"
        with connection.cursor() as cursor:
            cursor.execute(query)
            row = cursor.fetchone()
        if row is None:
            raise NoRowsAvailable(table)
        return _first_value(row)
