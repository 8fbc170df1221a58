"""
Shared fixtures: an in-memory stand-in for a MySQL server.

FakeDatabase understands exactly the statements WriteExecutor issues and keeps
rows per table as {id: data}. Connections and cursors record whether they were
closed so tests can check resource release.
"""

import random
import re
import sys
import threading
import time
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


class FakeDatabaseError(Exception):
    pass


_INSERT_RE = re.compile(r"^INSERT INTO (\S+) \(id, data\) VALUES \(%s, %s\)$")
_UPDATE_RE = re.compile(
    r"^UPDATE (\S+) SET data = %s WHERE id >= %s ORDER BY id LIMIT 1$"
)
_DELETE_RE = re.compile(r"^DELETE FROM (\S+) WHERE id >= %s ORDER BY id LIMIT 1$")
_SAMPLE_RE = re.compile(r"^SELECT id FROM (\S+) ORDER BY RAND\(\) LIMIT 1$")


def _table_key(quoted: str) -> str:
    return quoted.replace("`", "")


class FakeDatabase:
    def __init__(self, tables=None):
        self._lock = threading.Lock()
        self.rows: dict[str, dict[int, str]] = {t: {} for t in (tables or [])}
        self._next_id: dict[str, int] = {}
        self.statements: list[tuple[str, tuple]] = []
        self.connections: list["FakeConnection"] = []
        self._rng = random.Random(7)

    def seed(self, table: str, ids) -> None:
        with self._lock:
            rows = self.rows.setdefault(table, {})
            for i in ids:
                rows[int(i)] = "seed"
            self._next_id[table] = max([self._next_id.get(table, 1) - 1, *rows]) + 1

    def row_count(self, table: str) -> int:
        with self._lock:
            return len(self.rows.get(table, {}))

    def connect(self) -> "FakeConnection":
        conn = FakeConnection(self)
        with self._lock:
            self.connections.append(conn)
        return conn

    @property
    def open_connections(self) -> int:
        return sum(1 for c in self.connections if not c.closed)

    def execute(self, cursor: "FakeCursor", query: str, params: tuple) -> None:
        sql = " ".join(query.split())
        with self._lock:
            self.statements.append((sql, params))

            m = _INSERT_RE.match(sql)
            if m:
                table = _table_key(m.group(1))
                rows = self.rows.setdefault(table, {})
                row_id = self._next_id.get(table, 1)
                self._next_id[table] = row_id + 1
                rows[row_id] = params[1]
                cursor.lastrowid = row_id
                cursor.rowcount = 1
                return

            m = _UPDATE_RE.match(sql)
            if m:
                rows = self.rows.setdefault(_table_key(m.group(1)), {})
                targets = sorted(i for i in rows if i >= params[1])
                if targets:
                    rows[targets[0]] = params[0]
                cursor.rowcount = 1 if targets else 0
                return

            m = _DELETE_RE.match(sql)
            if m:
                rows = self.rows.setdefault(_table_key(m.group(1)), {})
                targets = sorted(i for i in rows if i >= params[0])
                if targets:
                    del rows[targets[0]]
                cursor.rowcount = 1 if targets else 0
                return

            m = _SAMPLE_RE.match(sql)
            if m:
                rows = self.rows.setdefault(_table_key(m.group(1)), {})
                cursor.result = [(self._rng.choice(sorted(rows)),)] if rows else []
                return

        raise FakeDatabaseError(f"unsupported statement: {sql}")


class FakeCursor:
    def __init__(self, connection: "FakeConnection"):
        self.connection = connection
        self.lastrowid = None
        self.rowcount = -1
        self.result: list[tuple] = []
        self.closed = False

    def execute(self, query, params=()):
        if self.connection.fail_with is not None:
            raise self.connection.fail_with
        self.connection.db.execute(self, query, tuple(params or ()))

    def fetchone(self):
        return self.result.pop(0) if self.result else None

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FakeConnection:
    def __init__(self, db: FakeDatabase):
        self.db = db
        self.closed = False
        self.cursors: list[FakeCursor] = []
        self.fail_with: BaseException | None = None

    def cursor(self):
        if self.closed:
            raise FakeDatabaseError("connection is closed")
        cur = FakeCursor(self)
        self.cursors.append(cur)
        return cur

    def close(self):
        self.closed = True


def wait_for(predicate, timeout: float = 5.0, interval: float = 0.005) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def fake_db():
    return FakeDatabase(tables=["gftest.test_table_1"])


@pytest.fixture
def connection(fake_db):
    return fake_db.connect()
