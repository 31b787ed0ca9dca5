"""
SQLite storage shared by the attribute store and the vector index.

Both stores live in the same database so one transaction can cover a write
to each of them.
"""

import sqlite3
import threading
from contextlib import contextmanager
from typing import Generator

from .config import ensure_db_directory, get_db_path
from .schema import EntityKind

ENTITY_COLUMNS = "id, natural_key, seniority, skills, industry, body, embedding"


def entity_table(kind: EntityKind) -> str:
    return f"{kind.value}s"


def vector_table(kind: EntityKind) -> str:
    return f"vec_{kind.value}s"


class Database:
    """Owns the SQLite connection, schema and transaction scopes.

    Created once at startup and closed at shutdown. All access goes through
    ``transaction()`` (writes) or ``snapshot()`` (reads), both of which hold a
    reentrant lock so readers never observe a half-applied write.
    """

    def __init__(self, db_path: str = None):
        self.db_path = db_path or get_db_path()
        ensure_db_directory(self.db_path)
        self._lock = threading.RLock()
        self._depth = 0
        self._read_depth = 0
        # isolation_level=None: transactions are managed explicitly below
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False, isolation_level=None)
        if self.db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL")
        self.init_schema()

    def init_schema(self):
        """Create the attribute and vector tables for every kind."""
        with self.transaction() as conn:
            for kind in EntityKind:
                conn.execute(f'''
                    CREATE TABLE IF NOT EXISTS {entity_table(kind)} (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        natural_key TEXT NOT NULL UNIQUE,
                        seniority TEXT,
                        skills TEXT NOT NULL DEFAULT '[]',  -- JSON list, ordered
                        industry TEXT,
                        body TEXT NOT NULL,
                        embedding BLOB NOT NULL           -- little-endian float32
                    )
                ''')
                conn.execute(f'''
                    CREATE TABLE IF NOT EXISTS {vector_table(kind)} (
                        id INTEGER PRIMARY KEY,
                        embedding BLOB NOT NULL
                    )
                ''')

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Run a block as one atomic write; nested scopes join the outer one."""
        with self._lock:
            if self._conn is None:
                raise sqlite3.ProgrammingError("Database is closed")
            if self._depth > 0:
                self._depth += 1
                try:
                    yield self._conn
                finally:
                    self._depth -= 1
                return
            if self._read_depth > 0:
                raise sqlite3.ProgrammingError("Cannot start a write transaction inside a read snapshot")

            self._conn.execute("BEGIN IMMEDIATE")
            self._depth = 1
            try:
                yield self._conn
            except BaseException:
                self._conn.execute("ROLLBACK")
                raise
            else:
                self._conn.execute("COMMIT")
            finally:
                self._depth = 0

    @contextmanager
    def snapshot(self) -> Generator[sqlite3.Connection, None, None]:
        """Run a block of reads against one consistent view of the database.

        Outside a write transaction this opens a read transaction, so every
        SELECT in the block sees the same committed state even while another
        connection writes to the file. Inside ``transaction()`` the block
        sees that transaction's own uncommitted writes.
        """
        with self._lock:
            if self._conn is None:
                raise sqlite3.ProgrammingError("Database is closed")
            if self._depth > 0 or self._read_depth > 0:
                self._read_depth += 1
                try:
                    yield self._conn
                finally:
                    self._read_depth -= 1
                return

            self._conn.execute("BEGIN")
            self._read_depth = 1
            try:
                yield self._conn
            finally:
                self._read_depth = 0
                self._conn.execute("COMMIT")

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def close(self):
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def health_check(self) -> bool:
        """Check that every required table exists."""
        try:
            with self.snapshot() as conn:
                rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        except sqlite3.Error:
            return False

        table_names = {row[0] for row in rows}
        required_tables = [entity_table(k) for k in EntityKind] + [vector_table(k) for k in EntityKind]
        return all(table in table_names for table in required_tables)
