"""Authentication core: accounts, password hashing, session tokens, and the auth service."""

from shared.auth.errors import (
    AuthError,
    AuthServiceError,
    ConflictError,
    InvalidTokenError,
    ServerError,
    ValidationError,
)
from shared.auth.models import Account, AccountView
from shared.auth.schemas import LoginRequest, RegisterRequest
from shared.auth.service import AuthService, LoginResult
from shared.auth.session_token import TOKEN_TTL_SECONDS, SessionToken, SessionTokenIssuer
from shared.auth.settings import AuthSettings

__all__ = [
    "TOKEN_TTL_SECONDS",
    "Account",
    "AccountView",
    "AuthError",
    "AuthService",
    "AuthServiceError",
    "AuthSettings",
    "ConflictError",
    "InvalidTokenError",
    "LoginRequest",
    "LoginResult",
    "RegisterRequest",
    "ServerError",
    "SessionToken",
    "SessionTokenIssuer",
    "ValidationError",
]
