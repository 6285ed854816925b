"""Client session store mirroring the hub server session.

One store per UI, constructed with its API client and storage. The store
never raises for failed auth calls; callers branch on ``AuthResult``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pydantic
import structlog

from hubclient.api import ApiError, HubApiClient
from hubclient.models import AuthResult, AvatarConfig, LocalUser, PersistedSession, SessionStatus
from hubclient.settings import ClientSettings
from hubclient.storage import FileStorage

if TYPE_CHECKING:
    from collections.abc import Mapping

    from hubclient.models import Gender, RemoteAccount
    from hubclient.storage import KeyValueStorage

logger = structlog.get_logger()

USER_STORAGE_KEY = "partyverse-user"
TOKEN_STORAGE_KEY = "token"

REGISTERED_SIGN_IN_FAILED_PREFIX = "Registered, but sign-in failed: "


class ClientSessionStore:
    def __init__(self, api: HubApiClient, storage: KeyValueStorage) -> None:
        self._api = api
        self._storage = storage
        self.user: LocalUser | None = None
        self.is_loading = False
        self._rehydrate()

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def status(self) -> SessionStatus:
        if self.is_loading:
            return SessionStatus.AUTHENTICATING
        if self.user is not None:
            return SessionStatus.AUTHENTICATED
        return SessionStatus.ANONYMOUS

    @property
    def token(self) -> str | None:
        return self._storage.get(TOKEN_STORAGE_KEY)

    def set_user(self, user: LocalUser | None) -> None:
        self.user = user
        self._persist()

    def update_avatar(self, partial: Mapping[str, Any]) -> None:
        """Merge a partial avatar configuration into the current user's avatar.

        Does nothing while anonymous. Unknown avatar keys raise
        ``pydantic.ValidationError``.
        """
        if self.user is None:
            return
        avatar = AvatarConfig.model_validate({**self.user.avatar.model_dump(), **partial})
        self.set_user(self.user.model_copy(update={"avatar": avatar}))

    async def login(self, email: str, password: str) -> AuthResult:
        """Log in and become authenticated.

        A previously persisted avatar is kept when the same account logs in
        again; otherwise the default avatar is used.
        """
        self.is_loading = True
        try:
            return await self._login(email, password, avatar=None)
        finally:
            self.is_loading = False

    async def register(self, username: str, email: str, password: str, gender: Gender) -> AuthResult:
        """Register an account, then log in with the same credentials.

        The server issues tokens only on login, so a successful registration
        is followed by a login call to obtain one. If that login fails the
        account still exists, so the result carries ``registered=True``.
        """
        self.is_loading = True
        try:
            try:
                await self._api.register(name=username, username=username, email=email, password=password)
            except ApiError as exc:
                logger.info("registration failed", status_code=exc.status_code, error=exc.message)
                return AuthResult(ok=False, error=exc.message)
            result = await self._login(email, password, avatar=AvatarConfig(gender=gender))
            if not result.ok:
                return AuthResult(
                    ok=False,
                    error=f"{REGISTERED_SIGN_IN_FAILED_PREFIX}{result.error}",
                    registered=True,
                )
            return result
        finally:
            self.is_loading = False

    def logout(self) -> None:
        """Forget the user and the local token. Tokens are stateless, so the server is not told."""
        self._storage.remove(TOKEN_STORAGE_KEY)
        self.set_user(None)

    async def fetch_profile(self) -> RemoteAccount | None:
        """Return the server's view of the current account, or None on any failure."""
        token = self.token
        if token is None:
            return None
        try:
            return await self._api.me(token)
        except ApiError as exc:
            logger.info("profile fetch failed", status_code=exc.status_code, error=exc.message)
            return None

    async def _login(self, email: str, password: str, *, avatar: AvatarConfig | None) -> AuthResult:
        try:
            reply = await self._api.login(email, password)
        except ApiError as exc:
            logger.info("login failed", status_code=exc.status_code, error=exc.message)
            return AuthResult(ok=False, error=exc.message)

        if avatar is None:
            avatar = self._known_avatar(reply.user.id)
        user = LocalUser(
            id=reply.user.id,
            username=reply.user.username,
            email=reply.user.email,
            avatar=avatar,
        )
        self._storage.set(TOKEN_STORAGE_KEY, reply.token)
        self.set_user(user)
        logger.info("session established", account_id=user.id)
        return AuthResult(ok=True, user=user)

    def _known_avatar(self, account_id: str) -> AvatarConfig:
        if self.user is not None and self.user.id == account_id:
            return self.user.avatar
        return AvatarConfig()

    def _persist(self) -> None:
        session = PersistedSession(user=self.user, is_authenticated=self.is_authenticated)
        self._storage.set(USER_STORAGE_KEY, session.model_dump_json())

    def _rehydrate(self) -> None:
        raw = self._storage.get(USER_STORAGE_KEY)
        if raw is None:
            return
        try:
            session = PersistedSession.model_validate_json(raw)
        except pydantic.ValidationError:
            logger.warning("discarding unreadable persisted session")
            self._storage.remove(USER_STORAGE_KEY)
            return
        self.user = session.user


def create_session_store(settings: ClientSettings | None = None) -> ClientSessionStore:
    """Build a store backed by the configured hub URL and storage file."""
    if settings is None:
        settings = ClientSettings()
    api = HubApiClient(settings.api_base, timeout=settings.timeout_seconds)
    return ClientSessionStore(api, FileStorage(settings.storage_path))
