"""Client-side session store for the hub server."""

from hubclient.api import ApiError, HubApiClient
from hubclient.models import AuthResult, AvatarConfig, LocalUser, SessionStatus
from hubclient.session_store import ClientSessionStore, create_session_store
from hubclient.settings import ClientSettings
from hubclient.storage import FileStorage, KeyValueStorage, MemoryStorage

__all__ = [
    "ApiError",
    "AuthResult",
    "AvatarConfig",
    "ClientSessionStore",
    "ClientSettings",
    "FileStorage",
    "HubApiClient",
    "KeyValueStorage",
    "LocalUser",
    "MemoryStorage",
    "SessionStatus",
    "create_session_store",
]
