from __future__ import annotations

import contextlib
from http import HTTPStatus
from typing import TYPE_CHECKING, cast

import structlog
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from hub.auth.backend import BearerTokenBackend
from hub.auth.policy import collect_protected_api_paths, protected_api, public_route, validate_route_auth_policy
from hub.server.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware, SlashNormalizationMiddleware
from hub.server.settings import HubServerSettings
from hub.views import current_account, login, register
from shared.auth import AuthService, AuthServiceError, AuthSettings, SessionTokenIssuer
from shared.auth.password import get_hasher
from shared.db import Database, SqliteAccountRepository
from shared.logging import setup_logging

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from starlette.requests import Request

NO_TOKEN_MESSAGE = "No token"
SERVER_ERROR_MESSAGE = "Server error"


def _make_auth_error_handler(
    protected_api_paths: set[str],
) -> Callable[[Request, Exception], Awaitable[Response]]:
    """Build an HTTPException handler that rewrites 401s on protected JSON endpoints."""

    async def _auth_error_handler(request: Request, exc: Exception) -> Response:
        """Rewrite 401 errors on protected JSON endpoints to JSON responses.

        The body says "Invalid token" when the caller presented a token that
        failed verification, and "No token" when it presented none. All other
        HTTP exceptions keep Starlette's default plain-text behavior.
        """
        http_exc = cast("HTTPException", exc)
        if http_exc.status_code == HTTPStatus.UNAUTHORIZED and request.url.path in protected_api_paths:
            reason = getattr(request.scope.get("user"), "reason", NO_TOKEN_MESSAGE)
            return JSONResponse({"error": reason}, status_code=HTTPStatus.UNAUTHORIZED)
        if http_exc.status_code in {HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED}:
            return Response(status_code=http_exc.status_code, headers=http_exc.headers)
        return PlainTextResponse(http_exc.detail or "", status_code=http_exc.status_code, headers=http_exc.headers)

    return _auth_error_handler


async def _auth_service_error_handler(_request: Request, exc: Exception) -> Response:
    """Render taxonomy errors as ``{"error": message}`` with the mapped status."""
    error = cast("AuthServiceError", exc)
    return JSONResponse({"error": error.message}, status_code=error.status_code)


async def _unexpected_error_handler(request: Request, exc: Exception) -> Response:
    """Log unexpected failures and answer with a generic 500 body."""
    logger.error("unhandled error", path=request.url.path, exc_info=exc)
    return JSONResponse({"error": SERVER_ERROR_MESSAGE}, status_code=HTTPStatus.INTERNAL_SERVER_ERROR)


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


def create_app(
    settings: HubServerSettings | None = None,
    auth_settings: AuthSettings | None = None,  # required in production (via get_app)
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = HubServerSettings()
    if auth_settings is None:  # pragma: no cover
        auth_settings = AuthSettings()  # type: ignore[call-arg]

    routes = [
        # Protected JSON routes (return 401 JSON when unauthenticated)
        Route("/api/user/me", protected_api(current_account), methods=["GET"], name="current_account"),
        # Public routes
        Route("/health", public_route(health), methods=["GET"], name="health"),
        Route("/api/auth/register", public_route(register), methods=["POST"], name="register"),
        Route("/api/auth/login", public_route(login), methods=["POST"], name="login"),
    ]

    validate_route_auth_policy(routes)
    protected_api_paths = collect_protected_api_paths(routes)

    # Initialize database and auth components
    db = Database(auth_settings.database_path)
    db.connect()
    account_repo = SqliteAccountRepository(db)
    token_issuer = SessionTokenIssuer(auth_settings.token_secret)
    hasher = get_hasher(auth_settings.password_hasher, rounds=auth_settings.bcrypt_rounds)
    auth_service = AuthService(account_repo, token_issuer, password_hasher=hasher)

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncGenerator[None]:
        yield
        db.close()

    app = Starlette(
        routes=routes,
        lifespan=lifespan,
        exception_handlers={
            HTTPException: _make_auth_error_handler(protected_api_paths),
            AuthServiceError: _auth_service_error_handler,
            Exception: _unexpected_error_handler,
        },
    )
    app.add_middleware(SlashNormalizationMiddleware)  # type: ignore[arg-type]
    app.add_middleware(AuthenticationMiddleware, backend=BearerTokenBackend(auth_service))  # type: ignore[arg-type]
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(SecurityHeadersMiddleware)  # type: ignore[arg-type]
    app.add_middleware(RequestLoggingMiddleware)  # type: ignore[arg-type]

    app.state.db = db
    app.state.settings = settings
    app.state.auth_settings = auth_settings
    app.state.auth_service = auth_service

    logger.info("hub server ready", cors_origins=settings.cors_origins)
    return app


def get_app() -> Starlette:  # pragma: no cover
    """Factory function for uvicorn --factory hub.server.app:get_app."""
    s = HubServerSettings()
    auth = AuthSettings()  # type: ignore[call-arg]
    setup_logging(log_dir=s.log_dir)
    return create_app(settings=s, auth_settings=auth)
