"""Error taxonomy for the auth core.

Each error carries the HTTP status it maps to, so handlers can translate
any ``AuthServiceError`` into a JSON response without inspecting its type.
"""

from http import HTTPStatus


class AuthServiceError(Exception):
    """Base class for errors that are safe to show to clients."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AuthServiceError):
    """Missing or malformed input."""

    status_code = HTTPStatus.BAD_REQUEST


class ConflictError(AuthServiceError):
    """A uniqueness constraint would be violated."""

    status_code = HTTPStatus.CONFLICT


class AuthError(AuthServiceError):
    """Bad credentials, or a missing or invalid token."""

    status_code = HTTPStatus.UNAUTHORIZED


class InvalidTokenError(AuthError):
    """Session token failed signature, shape, or expiry checks."""


class ServerError(AuthServiceError):
    """Unexpected store or library failure. The message is always generic."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


EMAIL_EXISTS_MESSAGE = "Email already exists"
USERNAME_EXISTS_MESSAGE = "Username already exists"
