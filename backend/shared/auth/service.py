"""Auth service coordinating registration, login, and token verification."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

from shared.auth.errors import (
    EMAIL_EXISTS_MESSAGE,
    USERNAME_EXISTS_MESSAGE,
    AuthError,
    ConflictError,
    InvalidTokenError,
    ServerError,
    ValidationError,
)
from shared.auth.models import Account

if TYPE_CHECKING:
    from shared.auth.password import PasswordHasher
    from shared.auth.schemas import LoginRequest, RegisterRequest
    from shared.auth.session_token import SessionToken, SessionTokenIssuer
    from shared.dal.account_repository import AccountRepository

logger = structlog.get_logger()

NAME_MAX_LENGTH = 100

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")

EMAIL_MAX_LENGTH = 254
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

PASSWORD_MAX_BYTES = 72  # bcrypt truncates at 72 bytes

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


@dataclass(frozen=True)
class LoginResult:
    token: str
    account: Account


class AuthService:
    """Coordinate account registration, login, and session token checks."""

    def __init__(
        self,
        account_repo: AccountRepository,
        token_issuer: SessionTokenIssuer,
        *,
        password_hasher: PasswordHasher,
    ) -> None:
        self._account_repo = account_repo
        self._token_issuer = token_issuer
        self._hasher = password_hasher

    async def register(self, request: RegisterRequest) -> Account:
        """Create a new account.

        Email is checked before username so a request colliding on both
        reports the email conflict. The repository enforces both constraints
        again on insert, so concurrent duplicates still produce ConflictError.
        """
        email = _normalize_email(request.email)
        _validate_name(request.name)
        _validate_username(request.username)
        _validate_email(email)
        _validate_password(request.password)

        if await self._account_repo.get_by_email(email) is not None:
            raise ConflictError(EMAIL_EXISTS_MESSAGE)
        if await self._account_repo.get_by_username(request.username) is not None:
            raise ConflictError(USERNAME_EXISTS_MESSAGE)

        try:
            password_hashed = await self._hasher.hash(request.password)
        except ValueError as exc:
            logger.exception("password hashing failed")
            raise ServerError("Server error") from exc
        account = Account(
            account_id=str(uuid4()),
            name=request.name,
            username=request.username,
            email=email,
            password_hash=password_hashed,
        )
        await self._account_repo.create_account(account)
        logger.info("account registered", account_id=account.account_id)
        return account

    async def login(self, request: LoginRequest) -> LoginResult:
        """Validate credentials and issue a session token.

        Unknown email and wrong password raise the same AuthError so the
        response does not reveal which accounts exist.
        """
        account = await self._account_repo.get_by_email(_normalize_email(request.email))
        if account is None:
            logger.info("login rejected", reason="unknown_email")
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)
        if not await self._hasher.verify(request.password, account.password_hash):
            logger.info("login rejected", reason="password_mismatch", account_id=account.account_id)
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)

        token = self._token_issuer.issue(account.account_id)
        logger.info("login succeeded", account_id=account.account_id)
        return LoginResult(token=token, account=account)

    def verify_token(self, token: str) -> SessionToken:
        """Return the decoded token. Raises InvalidTokenError."""
        return self._token_issuer.verify(token)

    async def get_account(self, account_id: str) -> Account:
        """Load the account a verified token points at."""
        account = await self._account_repo.get_by_id(account_id)
        if account is None:
            raise InvalidTokenError("Invalid token")
        return account


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _validate_name(name: str) -> None:
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"Name must not exceed {NAME_MAX_LENGTH} characters")


def _validate_username(username: str) -> None:
    """Validate username: 3-30 chars, alphanumeric + underscores."""
    if len(username) < USERNAME_MIN_LENGTH or len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters",
        )
    if not USERNAME_PATTERN.match(username):
        raise ValidationError("Username must contain only letters, numbers, and underscores")


def _validate_email(email: str) -> None:
    if len(email) > EMAIL_MAX_LENGTH or not EMAIL_PATTERN.match(email):
        raise ValidationError("Email address is not valid")


def _validate_password(password: str) -> None:
    """Reject passwords bcrypt cannot hash without truncation."""
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationError(f"Password must not exceed {PASSWORD_MAX_BYTES} bytes when encoded")
