"""Client-side session state and the server payloads it is built from."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Gender = Literal["male", "female"]


class SessionStatus(StrEnum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class AvatarConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    gender: Gender = "male"
    avatar_model: str = "cyber-punk-1"
    hair: str = "spiky"
    hair_color: str = "#00ffff"
    skin: str = "default"
    glasses: str = "none"
    emotes: tuple[str, ...] = ("wave", "dance")
    color_scheme: str = "neon-cyan"
    outfit: str = "cyber-jacket"


class LocalUser(BaseModel):
    """User profile as the UI sees it. Progression fields are local only."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str
    email: str
    avatar: AvatarConfig = Field(default_factory=AvatarConfig)
    xp: int = 0
    level: int = 1
    friends: tuple[str, ...] = ()


class PersistedSession(BaseModel):
    """Shape stored under the ``partyverse-user`` key."""

    user: LocalUser | None = None
    is_authenticated: bool = False


class RemoteAccount(BaseModel):
    """Public account view returned by the hub server."""

    id: str
    name: str
    username: str
    email: str
    created_at: str


class LoginReply(BaseModel):
    token: str
    user: RemoteAccount


class RegisterReply(BaseModel):
    message: str
    user: RemoteAccount


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a login or registration attempt.

    On failure ``error`` holds the server message (for example
    "Email already exists") or a transport-level description.
    ``registered`` is set when the account was created but the follow-up
    sign-in failed; the caller should offer a plain login, not a retry.
    """

    ok: bool
    error: str | None = None
    user: LocalUser | None = None
    registered: bool = False
