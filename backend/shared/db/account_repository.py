"""SQLite-backed account repository."""

from __future__ import annotations

import asyncio
import sqlite3
from typing import TYPE_CHECKING

import structlog

from shared.auth.errors import EMAIL_EXISTS_MESSAGE, USERNAME_EXISTS_MESSAGE, ConflictError, ServerError
from shared.auth.models import Account
from shared.dal.account_repository import AccountRepository

if TYPE_CHECKING:
    from shared.db.connection import Database

logger = structlog.get_logger()

_STORE_FAILURE_MESSAGE = "Server error"


class SqliteAccountRepository(AccountRepository):
    """SQLite implementation of AccountRepository.

    Uses a single INSERT under an asyncio lock to avoid race windows
    between existence checks and inserts. Relies on database uniqueness
    constraints and maps IntegrityError to ConflictError. Any other
    sqlite3 failure becomes a ServerError with a generic message.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_account(self, account: Account) -> None:
        """Insert an account. Raises ConflictError on duplicate email or username."""
        async with self._lock:
            try:
                with self._db.transaction() as conn:
                    conn.execute(
                        "INSERT INTO accounts (id, username, email, data) VALUES (?, ?, ?, ?)",
                        (
                            account.account_id,
                            account.username,
                            account.email,
                            account.model_dump_json(),
                        ),
                    )
            except sqlite3.IntegrityError as exc:
                error_msg = str(exc).lower()
                if "accounts.email" in error_msg or "idx_accounts_email" in error_msg:
                    raise ConflictError(EMAIL_EXISTS_MESSAGE) from exc
                if "accounts.username" in error_msg or "idx_accounts_username" in error_msg:
                    raise ConflictError(USERNAME_EXISTS_MESSAGE) from exc
                logger.exception("account insert rejected", account_id=account.account_id)
                raise ServerError(_STORE_FAILURE_MESSAGE) from exc
            except sqlite3.Error as exc:
                logger.exception("account insert failed", account_id=account.account_id)
                raise ServerError(_STORE_FAILURE_MESSAGE) from exc

    async def get_by_id(self, account_id: str) -> Account | None:
        return self._fetch_one("SELECT data FROM accounts WHERE id = ?", account_id)

    async def get_by_email(self, email: str) -> Account | None:
        """Look up an account by email (case-insensitive)."""
        return self._fetch_one("SELECT data FROM accounts WHERE email = ? COLLATE NOCASE", email)

    async def get_by_username(self, username: str) -> Account | None:
        """Look up an account by username (case-insensitive)."""
        return self._fetch_one("SELECT data FROM accounts WHERE username = ? COLLATE NOCASE", username)

    async def count(self) -> int:
        try:
            row = self._db.connection.execute("SELECT COUNT(*) FROM accounts").fetchone()
        except sqlite3.Error as exc:
            logger.exception("account count failed")
            raise ServerError(_STORE_FAILURE_MESSAGE) from exc
        return int(row[0])

    def _fetch_one(self, query: str, value: str) -> Account | None:
        try:
            row = self._db.connection.execute(query, (value,)).fetchone()
        except sqlite3.Error as exc:
            logger.exception("account lookup failed")
            raise ServerError(_STORE_FAILURE_MESSAGE) from exc
        if row is None:
            return None
        return Account.model_validate_json(row[0])
