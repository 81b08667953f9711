"""SQLite-backed record store keyed by login ID."""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Optional

from .errors import DuplicateKey, NotFound, StorageFailure
from .schema import (
    SCHEMA_VERSION,
    USER_TABLE,
    USER_TABLE_DDL,
    UserRecord,
    validate_record,
)

MEMORY_PATH = ":memory:"

logger = logging.getLogger(__name__)


class Store:
    """Single-table SQLite store of ``UserRecord`` rows.

    Every operation is synchronous and may block on disk I/O, so interactive
    callers should go through ``AsyncQueryRunner`` instead of calling it
    directly. Each operation holds the store lock for its whole statement and
    commit, which keeps mutations atomic for readers on other threads.

    Args:
        db_path: Path to the SQLite file. Parent directories are created
                 automatically. ``":memory:"`` opens a private in-memory
                 database.
        timeout: Seconds SQLite waits on a locked file before failing.
    """

    def __init__(self, db_path: str = MEMORY_PATH, timeout: float = 5.0) -> None:
        self._db_path = str(db_path)
        self._lock = threading.RLock()
        try:
            if self._db_path != MEMORY_PATH:
                Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(
                self._db_path, timeout=timeout, check_same_thread=False
            )
            self._conn.row_factory = sqlite3.Row
            if self._db_path != MEMORY_PATH:
                self._conn.execute("PRAGMA journal_mode=WAL")
            self._prepare_schema()
        except sqlite3.Error as e:
            conn = getattr(self, "_conn", None)
            if conn is not None:
                conn.close()
            raise StorageFailure(f"Cannot open store at {self._db_path}: {e}") from e
        except OSError as e:
            raise StorageFailure(f"Cannot create store directory: {e}") from e
        logger.info(f"Store opened: {self._db_path} (schema v{self.schema_version})")

    def _prepare_schema(self) -> None:
        version = self._conn.execute("PRAGMA user_version").fetchone()[0]
        if version == 0:
            self._conn.executescript(USER_TABLE_DDL)
            self._conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
            self._conn.commit()
        elif version != SCHEMA_VERSION:
            self._conn.close()
            raise StorageFailure(
                f"Store schema v{version} is not supported (expected v{SCHEMA_VERSION})"
            )

    @property
    def path(self) -> str:
        return self._db_path

    @property
    def schema_version(self) -> int:
        """Version stamped in the database file; the hook for migrations."""
        with self._lock:
            try:
                return self._conn.execute("PRAGMA user_version").fetchone()[0]
            except sqlite3.Error as e:
                raise StorageFailure(str(e)) from e

    def insert(self, record: UserRecord) -> None:
        """Add a new record.

        Raises:
            DuplicateKey: A record with the same login ID already exists.
            ValidationError: The record has an empty login ID.
            StorageFailure: SQLite failed.
        """
        validate_record(record)
        with self._lock:
            try:
                self._conn.execute(
                    f"INSERT INTO {USER_TABLE} (login_id, password, full_name, contact) "
                    "VALUES (?, ?, ?, ?)",
                    record.as_row(),
                )
                self._conn.commit()
            except sqlite3.IntegrityError as e:
                self._conn.rollback()
                raise DuplicateKey(record.login_id) from e
            except sqlite3.Error as e:
                self._rollback_quietly()
                raise StorageFailure(f"Insert failed: {e}") from e
        logger.debug(f"Inserted record: {record.login_id}")

    def update(self, record: UserRecord) -> None:
        """Replace every field of an existing record.

        Raises:
            NotFound: No record has this login ID.
        """
        validate_record(record)
        with self._lock:
            try:
                cur = self._conn.execute(
                    f"UPDATE {USER_TABLE} SET password = ?, full_name = ?, contact = ? "
                    "WHERE login_id = ?",
                    (record.secret, record.full_name, record.contact, record.login_id),
                )
                self._conn.commit()
            except sqlite3.Error as e:
                self._rollback_quietly()
                raise StorageFailure(f"Update failed: {e}") from e
        if cur.rowcount == 0:
            raise NotFound(record.login_id)
        logger.debug(f"Updated record: {record.login_id}")

    def delete(self, login_id: str) -> None:
        """Remove a record.

        Raises:
            NotFound: No record has this login ID.
        """
        with self._lock:
            try:
                cur = self._conn.execute(
                    f"DELETE FROM {USER_TABLE} WHERE login_id = ?", (login_id,)
                )
                self._conn.commit()
            except sqlite3.Error as e:
                self._rollback_quietly()
                raise StorageFailure(f"Delete failed: {e}") from e
        if cur.rowcount == 0:
            raise NotFound(login_id)
        logger.debug(f"Deleted record: {login_id}")

    def get_by_login_id(self, login_id: str) -> Optional[UserRecord]:
        """Look up a record. A missing key returns ``None``."""
        with self._lock:
            try:
                row = self._conn.execute(
                    f"SELECT * FROM {USER_TABLE} WHERE login_id = ?", (login_id,)
                ).fetchone()
            except sqlite3.Error as e:
                raise StorageFailure(f"Lookup failed: {e}") from e
        return UserRecord.from_row(row) if row else None

    def get_all(self) -> list[UserRecord]:
        """Return a snapshot of every record, in no particular order."""
        with self._lock:
            try:
                rows = self._conn.execute(f"SELECT * FROM {USER_TABLE}").fetchall()
            except sqlite3.Error as e:
                raise StorageFailure(f"Listing failed: {e}") from e
        return [UserRecord.from_row(r) for r in rows]

    def count(self) -> int:
        with self._lock:
            try:
                return self._conn.execute(
                    f"SELECT COUNT(*) FROM {USER_TABLE}"
                ).fetchone()[0]
            except sqlite3.Error as e:
                raise StorageFailure(f"Count failed: {e}") from e

    def _rollback_quietly(self) -> None:
        try:
            self._conn.rollback()
        except sqlite3.Error:
            logger.warning("Rollback failed after storage error", exc_info=True)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()
        logger.info(f"Store closed: {self._db_path}")
