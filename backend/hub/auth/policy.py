"""Route auth policy markers for fail-closed authorization.

Every route endpoint is wrapped by exactly one marker. ``create_app`` calls
``validate_route_auth_policy`` so an unmarked route stops the server from
starting instead of silently becoming public.
"""

from __future__ import annotations

import functools
from enum import StrEnum
from typing import TYPE_CHECKING

from starlette.authentication import requires
from starlette.routing import Route

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.routing import BaseRoute

    Endpoint = Callable[[Request], Awaitable[Response]]

AUTH_POLICY_ATTR = "__auth_policy__"


class AuthPolicy(StrEnum):
    PUBLIC = "public"
    PROTECTED_API = "protected_api"


def route_policy(route: BaseRoute) -> AuthPolicy | None:
    """Return the policy marker on a route's endpoint, if any."""
    if not isinstance(route, Route):
        return None
    return getattr(route.endpoint, AUTH_POLICY_ATTR, None)


def protected_api(endpoint: Endpoint) -> Endpoint:
    """Require a verified bearer token. Unauthenticated calls raise a 401 HTTPException."""
    wrapped = requires("authenticated", status_code=401)(endpoint)
    setattr(wrapped, AUTH_POLICY_ATTR, AuthPolicy.PROTECTED_API)
    return wrapped


def public_route(endpoint: Endpoint) -> Endpoint:
    """Mark an endpoint as reachable without a token.

    The marker is set on a fresh wrapper so reusing the bare function on
    another route does not make that route public too.
    """

    @functools.wraps(endpoint)
    async def wrapper(request: Request) -> Response:
        return await endpoint(request)

    setattr(wrapper, AUTH_POLICY_ATTR, AuthPolicy.PUBLIC)
    return wrapper


def collect_protected_api_paths(routes: list[BaseRoute]) -> set[str]:
    """Paths whose 401s are rendered as JSON by the app's error handler."""
    return {
        route.path
        for route in routes
        if isinstance(route, Route) and route_policy(route) is AuthPolicy.PROTECTED_API
    }


def validate_route_auth_policy(routes: list[BaseRoute]) -> None:
    """Raise RuntimeError naming every Route without a policy marker. Mounts are not checked."""
    unclassified = [
        f"{route.path} ({route.name or getattr(route.endpoint, '__name__', 'unknown')})"
        for route in routes
        if isinstance(route, Route) and route_policy(route) is None
    ]
    if unclassified:
        msg = f"Unclassified routes missing auth policy: {', '.join(unclassified)}"
        raise RuntimeError(msg)
