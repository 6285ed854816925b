"""Tests for ClientSettings configuration."""

import pytest
from pydantic import ValidationError

from hubclient.settings import ClientSettings


class TestClientSettings:
    def test_defaults(self, monkeypatch):
        for name in ("HUBCLIENT_API_BASE", "HUBCLIENT_TIMEOUT_SECONDS", "HUBCLIENT_STORAGE_PATH"):
            monkeypatch.delenv(name, raising=False)
        settings = ClientSettings()
        assert settings.api_base == "http://localhost:5002"
        assert settings.timeout_seconds == 10.0

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("HUBCLIENT_API_BASE", "https://hub.example")
        monkeypatch.setenv("HUBCLIENT_TIMEOUT_SECONDS", "2.5")
        settings = ClientSettings()
        assert settings.api_base == "https://hub.example"
        assert settings.timeout_seconds == 2.5

    def test_non_positive_timeout_rejected(self, monkeypatch):
        monkeypatch.setenv("HUBCLIENT_TIMEOUT_SECONDS", "0")
        with pytest.raises(ValidationError, match="timeout_seconds"):
            ClientSettings()
