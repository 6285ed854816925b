"""SQLite connection for the account store."""

from __future__ import annotations

import contextlib
import os
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = structlog.get_logger()

SCHEMA_VERSION = 1

_DB_FILE_MODE = 0o600

# Uniqueness lives in the indexes so racing inserts cannot both succeed.
_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS accounts (
    id TEXT PRIMARY KEY,
    username TEXT NOT NULL,
    email TEXT NOT NULL,
    data TEXT NOT NULL
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_accounts_username
    ON accounts (username COLLATE NOCASE);

CREATE UNIQUE INDEX IF NOT EXISTS idx_accounts_email
    ON accounts (email COLLATE NOCASE);
"""


class Database:
    """Owns the single SQLite connection shared by the repositories."""

    def __init__(self, path: str | Path) -> None:
        self._path = str(path)
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database is not connected")
        return self._conn

    def connect(self) -> None:
        """Open the file, create the schema if needed and restrict file permissions."""
        Path(self._path).parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=5000")
        conn.executescript(_SCHEMA_SQL)
        conn.execute(f"PRAGMA user_version={SCHEMA_VERSION}")
        self._conn = conn

        self._restrict_permissions()
        logger.info("database connected", path=self._path, schema_version=SCHEMA_VERSION)

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @contextlib.contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Commit on success, roll back and re-raise on any exception."""
        conn = self.connection
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        conn.commit()

    def _restrict_permissions(self) -> None:
        """Make the database and its WAL/SHM siblings owner-only (POSIX, best effort).

        All three files can hold password hashes.
        """
        if os.name != "posix":  # pragma: no cover
            return
        for suffix in ("", "-wal", "-shm"):
            p = Path(self._path + suffix)
            if not p.exists():
                continue
            try:
                p.chmod(_DB_FILE_MODE)
            except OSError:
                logger.warning("could not set file permissions", permissions=oct(_DB_FILE_MODE), path=str(p))
