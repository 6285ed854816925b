"""Abstract interface for account persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shared.auth.models import Account


class AccountRepository(ABC):
    """Abstract interface for account persistence.

    Implementations must enforce email and username uniqueness atomically
    on insert and raise ConflictError when either is taken.
    """

    @abstractmethod
    async def create_account(self, account: Account) -> None: ...

    @abstractmethod
    async def get_by_id(self, account_id: str) -> Account | None: ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Account | None: ...

    @abstractmethod
    async def get_by_username(self, username: str) -> Account | None: ...

    @abstractmethod
    async def count(self) -> int: ...
