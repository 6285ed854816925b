"""Password hashers.

``BcryptHasher`` is the production hasher. bcrypt is CPU-bound, so both
hashing and checking run in a worker thread via ``anyio.to_thread`` and
concurrent requests keep being served meanwhile.

``SimpleHasher`` stores an unsalted SHA-256 digest behind a "simple$"
prefix. It exists so test suites do not pay bcrypt's cost per account.
"""

from __future__ import annotations

import hashlib
from typing import Protocol, runtime_checkable

import bcrypt
from anyio import to_thread

DEFAULT_BCRYPT_ROUNDS = 10
MIN_BCRYPT_ROUNDS = 4
MAX_BCRYPT_ROUNDS = 31


@runtime_checkable
class PasswordHasher(Protocol):
    async def hash(self, plain: str) -> str: ...

    async def verify(self, plain: str, hashed: str) -> bool: ...


class BcryptHasher:
    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        if not MIN_BCRYPT_ROUNDS <= rounds <= MAX_BCRYPT_ROUNDS:
            raise ValueError(f"bcrypt rounds must be between {MIN_BCRYPT_ROUNDS} and {MAX_BCRYPT_ROUNDS}")
        self.rounds = rounds

    async def hash(self, plain: str) -> str:
        """Hash with a fresh salt. Raises ValueError for input bcrypt refuses."""
        secret = plain.encode("utf-8")
        salt = bcrypt.gensalt(self.rounds)
        hashed = await to_thread.run_sync(bcrypt.hashpw, secret, salt)
        return hashed.decode("utf-8")

    async def verify(self, plain: str, hashed: str) -> bool:
        """Check a password. A malformed stored hash counts as a mismatch."""
        try:
            return await to_thread.run_sync(bcrypt.checkpw, plain.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            return False


_SIMPLE_PREFIX = "simple$"


def _simple_digest(plain: str) -> str:
    return _SIMPLE_PREFIX + hashlib.sha256(plain.encode("utf-8")).hexdigest()


class SimpleHasher:
    """Fast SHA-256 hasher for tests. Not suitable for production use."""

    async def hash(self, plain: str) -> str:
        return _simple_digest(plain)

    async def verify(self, plain: str, hashed: str) -> bool:
        return hashed.startswith(_SIMPLE_PREFIX) and hashed == _simple_digest(plain)


def get_hasher(name: str = "bcrypt", *, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> PasswordHasher:
    """Return the hasher configured by AUTH_PASSWORD_HASHER ("bcrypt" or "simple")."""
    if name == "bcrypt":
        return BcryptHasher(rounds=rounds)
    if name == "simple":
        return SimpleHasher()
    raise ValueError(f"Unknown password hasher: {name!r}")
