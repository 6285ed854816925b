"""Starlette AuthenticationBackend that validates bearer session tokens."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from starlette.authentication import AuthCredentials, AuthenticationBackend

from hub.auth.models import AuthenticatedAccount, RejectedCredentials
from shared.auth.errors import InvalidTokenError

if TYPE_CHECKING:
    from starlette.requests import HTTPConnection

    from shared.auth.service import AuthService

logger = structlog.get_logger()

INVALID_TOKEN_MESSAGE = "Invalid token"

_BEARER_SCHEME = "bearer"


class BearerTokenBackend(AuthenticationBackend):
    """Authenticate requests via the ``Authorization: Bearer <token>`` header.

    Absent or empty header: the request stays anonymous (Starlette's default user).
    Present but unusable header: the request is anonymous and carries the
    rejection reason. Public routes ignore both; protected routes answer 401.
    """

    def __init__(self, auth_service: AuthService) -> None:
        self._auth_service = auth_service

    async def authenticate(
        self,
        conn: HTTPConnection,
    ) -> tuple[AuthCredentials, AuthenticatedAccount | RejectedCredentials] | None:
        header = conn.headers.get("authorization")
        if not header:
            return None

        scheme, _, token = header.strip().partition(" ")
        token = token.strip()
        if scheme.lower() != _BEARER_SCHEME or not token:
            return AuthCredentials(), RejectedCredentials(INVALID_TOKEN_MESSAGE)

        try:
            session_token = self._auth_service.verify_token(token)
        except InvalidTokenError:
            logger.info("bearer token rejected", path=conn.url.path)
            return AuthCredentials(), RejectedCredentials(INVALID_TOKEN_MESSAGE)

        return AuthCredentials(["authenticated"]), AuthenticatedAccount(session_token.account_id)
