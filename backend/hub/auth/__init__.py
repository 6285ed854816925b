"""Hub authentication: Starlette backend, request user models, and route policy."""

from hub.auth.backend import BearerTokenBackend
from hub.auth.models import AuthenticatedAccount, RejectedCredentials
from hub.auth.policy import protected_api, public_route, validate_route_auth_policy

__all__ = [
    "AuthenticatedAccount",
    "BearerTokenBackend",
    "RejectedCredentials",
    "protected_api",
    "public_route",
    "validate_route_auth_policy",
]
