"""Account record stored by the credential store, and its public projection."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class AccountView(BaseModel, frozen=True):
    """Client-facing projection of an account. Never carries secret material."""

    id: str
    name: str
    username: str
    email: str
    created_at: datetime


class Account(BaseModel, frozen=True):
    """Account record stored in the account repository."""

    account_id: str
    name: str
    username: str
    email: str  # stored lower-cased
    password_hash: str = Field(repr=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))

    def public_view(self) -> AccountView:
        return AccountView(
            id=self.account_id,
            name=self.name,
            username=self.username,
            email=self.email,
            created_at=self.created_at,
        )
