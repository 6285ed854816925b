import json
import logging
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from unittest.mock import patch

import pytest
import structlog

from shared.logging import REDACTED, _redact_credentials, _serialize_enums, setup_logging


@pytest.fixture(autouse=True)
def _cleanup_root_logger():
    """Close and remove all handlers from the root logger after each test."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)


@pytest.fixture(autouse=True)
def _allow_file_logging():
    """Disable the _is_test guard so logging tests can create real file handlers."""
    with patch("shared.logging._is_test", return_value=False):
        yield


class TestSetupLogging:
    def test_configures_stdout_handler(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging()
        root = logging.getLogger()

        assert root.level == logging.INFO
        assert len(root.handlers) == 1

        handler = root.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)

    def test_configures_file_handler_in_log_dir(self, tmp_path):
        log_dir = tmp_path / "hub"
        setup_logging(log_dir=log_dir)
        root = logging.getLogger()

        assert len(root.handlers) == 2
        file_handler = root.handlers[1]
        assert isinstance(file_handler, logging.FileHandler)
        assert Path(file_handler.baseFilename).parent == log_dir

    def test_log_file_has_datetime_in_name(self, tmp_path):
        fixed_time = datetime(2025, 3, 15, 10, 30, 45, tzinfo=UTC)
        with patch("shared.logging.datetime") as mock_dt:
            mock_dt.now.return_value = fixed_time
            log_path = setup_logging(log_dir=tmp_path / "hub")

        assert log_path is not None
        assert log_path.name == "2025-03-15_10-30-45.log"

    def test_returns_none_without_log_dir(self):
        assert setup_logging() is None

    def test_writes_to_file(self, tmp_path):
        log_path = setup_logging(log_dir=tmp_path / "hub")

        structlog.get_logger("test.writes_to_file").info("hello from test")

        assert log_path is not None
        assert "hello from test" in log_path.read_text()

    def test_clears_existing_handlers_on_repeated_calls(self):
        setup_logging()
        setup_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_custom_log_level(self):
        setup_logging(level=logging.DEBUG)

        assert logging.getLogger().level == logging.DEBUG

    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        setup_logging()

        assert logging.getLogger().level == logging.DEBUG

    def test_invalid_log_level_raises(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "bogus")
        with pytest.raises(ValueError, match="Invalid LOG_LEVEL"):
            setup_logging()

    def test_json_mode_produces_valid_json(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        log_path = setup_logging(log_dir=tmp_path / "hub")

        structlog.contextvars.bind_contextvars(request_id="req-1")
        structlog.get_logger("test.json").info("json test event", extra_field="value")
        structlog.contextvars.clear_contextvars()

        assert log_path is not None
        parsed = json.loads(log_path.read_text().strip().splitlines()[0])
        assert parsed["event"] == "json test event"
        assert parsed["request_id"] == "req-1"
        assert parsed["extra_field"] == "value"

    def test_invalid_log_format_raises(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "invalid_value")
        with pytest.raises(ValueError, match="Invalid LOG_FORMAT"):
            setup_logging()

    def test_credentials_never_reach_the_log_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        log_path = setup_logging(log_dir=tmp_path / "hub")

        structlog.get_logger("test.redaction").info(
            "login attempt",
            email="a@x.com",
            password="secret1",
            token="abc.def",
        )

        assert log_path is not None
        content = log_path.read_text()
        assert "secret1" not in content
        assert "abc.def" not in content
        parsed = json.loads(content.strip().splitlines()[0])
        assert parsed["password"] == REDACTED
        assert parsed["token"] == REDACTED
        assert parsed["email"] == "a@x.com"


class TestSerializeEnums:
    class _Status(Enum):
        OK = "ok"
        FAILED = "failed"

    def test_replaces_enum_with_value(self):
        result = _serialize_enums(None, "", {"status": self._Status.OK, "msg": "hello"})
        assert result == {"status": "ok", "msg": "hello"}

    def test_replaces_enum_inside_dict_value(self):
        result = _serialize_enums(None, "", {"data": {"status": self._Status.FAILED, "count": 3}})
        assert result["data"] == {"status": "failed", "count": 3}


class TestRedactCredentials:
    def test_redacts_top_level_keys_case_insensitively(self):
        event_dict = {"Authorization": "Bearer abc", "password_hash": "$2b$10$x", "event": "e"}
        result = _redact_credentials(None, "", event_dict)
        assert result["Authorization"] == REDACTED
        assert result["password_hash"] == REDACTED
        assert result["event"] == "e"

    def test_redacts_keys_inside_dict_values(self):
        event_dict = {"body": {"email": "a@x.com", "password": "secret1"}}
        result = _redact_credentials(None, "", event_dict)
        assert result["body"] == {"email": "a@x.com", "password": REDACTED}

    def test_leaves_other_values_unchanged(self):
        event_dict = {"account_id": "u1", "status": 401}
        assert _redact_credentials(None, "", dict(event_dict)) == event_dict
