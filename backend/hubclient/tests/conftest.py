"""Fixtures wiring the client against an in-process hub server."""

from __future__ import annotations

import httpx
import pytest

from hub.server.app import create_app
from hub.server.settings import HubServerSettings
from hubclient.api import HubApiClient
from hubclient.session_store import ClientSessionStore
from hubclient.storage import MemoryStorage
from shared.auth.settings import AuthSettings

BASE_URL = "http://testserver"


@pytest.fixture
def hub_app(tmp_path):
    return create_app(
        settings=HubServerSettings(),
        auth_settings=AuthSettings(
            token_secret="test-token-secret",
            database_path=str(tmp_path / "hub.db"),
            password_hasher="simple",
        ),
    )


@pytest.fixture
def api(hub_app) -> HubApiClient:
    return HubApiClient(BASE_URL, transport=httpx.ASGITransport(app=hub_app))


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(api, storage) -> ClientSessionStore:
    return ClientSessionStore(api, storage)
