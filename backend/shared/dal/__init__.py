"""Data access layer: repository interfaces."""

from shared.dal.account_repository import AccountRepository

__all__ = [
    "AccountRepository",
]
