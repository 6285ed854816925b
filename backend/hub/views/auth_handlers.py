"""Auth endpoints: registration and login."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from starlette.responses import JSONResponse

from shared.auth.errors import ValidationError
from shared.auth.schemas import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse, parse_request

if TYPE_CHECKING:
    from starlette.requests import Request

    from shared.auth.service import AuthService


async def _parse_json_body(request: Request) -> object:
    """Parse the JSON body. Raises ValidationError when it is not valid JSON."""
    try:
        return await request.json()
    except (ValueError, json.JSONDecodeError) as exc:
        raise ValidationError("Invalid JSON body") from exc


async def register(request: Request) -> JSONResponse:
    """POST /api/auth/register {name, username, email, password} - create an account."""
    auth_service: AuthService = request.app.state.auth_service
    body = parse_request(RegisterRequest, await _parse_json_body(request))

    account = await auth_service.register(body)

    response = RegisterResponse(message="Registered", user=account.public_view())
    return JSONResponse(response.model_dump(mode="json"), status_code=201)


async def login(request: Request) -> JSONResponse:
    """POST /api/auth/login {email, password} - verify credentials and issue a session token."""
    auth_service: AuthService = request.app.state.auth_service
    body = parse_request(LoginRequest, await _parse_json_body(request))

    result = await auth_service.login(body)

    response = LoginResponse(token=result.token, user=result.account.public_view())
    return JSONResponse(response.model_dump(mode="json"))
