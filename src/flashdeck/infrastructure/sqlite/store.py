"""
SQLite Store: Infrastructure adapter for the transactional store port.

Uses a single stdlib sqlite3 connection in autocommit mode and manages
transactions explicitly, so a scoped transaction either commits as a whole
or leaves no trace.
"""

import logging
import pathlib
import sqlite3
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from flashdeck.domain.constants import DEFAULT_BUSY_TIMEOUT
from flashdeck.domain.errors import StorageError
from flashdeck.domain.ports import Row, Store

from .schema import migrate

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


class SqliteStore(Store):
    """
    Store backed by one sqlite3 connection.

    All access goes through a re-entrant lock that a transaction holds from
    BEGIN to COMMIT/ROLLBACK, so readers on other threads never observe a
    half-written transaction. Nested transaction() blocks join the outer one.
    """

    def __init__(self, db_path: pathlib.Path | str = MEMORY, timeout: float = DEFAULT_BUSY_TIMEOUT):
        self.db_path = str(db_path)
        self._lock = threading.RLock()
        self._depth = 0

        try:
            if self.db_path != MEMORY:
                pathlib.Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(
                self.db_path,
                timeout=timeout,
                check_same_thread=False,
                isolation_level=None,
            )
            self.conn.row_factory = sqlite3.Row
            if self.db_path != MEMORY:
                self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.execute("PRAGMA foreign_keys=ON")
            migrate(self.conn)
        except sqlite3.Error as e:
            raise StorageError(f"Could not open database at {self.db_path}: {e}") from e

        logger.debug(f"Opened store at {self.db_path}")

    def __enter__(self) -> "SqliteStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[Row]:
        with self._lock:
            try:
                return self.conn.execute(sql, tuple(params)).fetchall()
            except sqlite3.Error as e:
                raise StorageError(f"Query failed: {e}") from e

    def execute(self, sql: str, params: Sequence[Any] = ()) -> None:
        with self._lock:
            try:
                self.conn.execute(sql, tuple(params))
            except sqlite3.Error as e:
                raise StorageError(f"Statement failed: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator["SqliteStore"]:
        with self._lock:
            if self._depth > 0:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            try:
                self.conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                raise StorageError(f"Could not begin transaction: {e}") from e

            self._depth = 1
            try:
                yield self
            except BaseException:
                self._depth = 0
                self._rollback()
                raise
            else:
                self._depth = 0
                try:
                    self.conn.execute("COMMIT")
                except sqlite3.Error as e:
                    self._rollback()
                    raise StorageError(f"Commit failed: {e}") from e

    def _rollback(self) -> None:
        logger.warning("Rolling back transaction")
        try:
            self.conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            # No transaction is active if SQLite already aborted it.
            logger.debug(f"Rollback skipped: {e}")

    def close(self) -> None:
        with self._lock:
            self.conn.close()
