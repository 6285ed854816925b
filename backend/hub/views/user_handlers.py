"""Endpoints for the authenticated account."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.responses import JSONResponse

if TYPE_CHECKING:
    from starlette.requests import Request

    from hub.auth.models import AuthenticatedAccount
    from shared.auth.service import AuthService


async def current_account(request: Request) -> JSONResponse:
    """GET /api/user/me - the caller's account record without secret fields."""
    auth_service: AuthService = request.app.state.auth_service
    user: AuthenticatedAccount = request.user

    account = await auth_service.get_account(user.account_id)
    return JSONResponse(account.public_view().model_dump(mode="json"))
