"""Request users for Starlette AuthenticationMiddleware integration."""

from __future__ import annotations

from starlette.authentication import BaseUser, UnauthenticatedUser


class AuthenticatedAccount(BaseUser):
    """Authenticated account for Starlette's request.user.

    Created by the auth backend from a verified bearer token. Only the
    account id is known at this point; handlers load the record themselves.
    """

    def __init__(self, account_id: str) -> None:
        self._account_id = account_id

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:  # pragma: no cover
        return self._account_id

    @property
    def identity(self) -> str:
        return self._account_id

    @property
    def account_id(self) -> str:
        return self._account_id


class RejectedCredentials(UnauthenticatedUser):
    """Anonymous request that presented a token which failed verification.

    Carries the rejection reason so protected routes can answer with it
    instead of the generic "no token" message.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
