"""Validation helpers for settings that arrive as environment strings."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from pydantic_settings import EnvSettingsSource

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo

_ALLOWED_ORIGIN_SCHEMES = {"http", "https"}


def parse_string_list(value: str | list[str], *, allow_empty: bool = False) -> list[str]:
    """Parse a list of strings from a settings value.

    Accepts a list (returned as-is), a JSON array string such as
    '["a","b"]', or a comma-separated string such as 'a,b'.
    Empty input is rejected unless ``allow_empty`` is set.
    """
    if isinstance(value, list):
        items = value
    else:
        stripped = value.strip()
        if stripped.startswith("["):
            try:
                items = json.loads(stripped)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON array: {e}") from e
            if not isinstance(items, list) or not all(isinstance(item, str) for item in items):
                raise ValueError("JSON value must be an array of strings")
        else:
            items = [item.strip() for item in stripped.split(",") if item.strip()]

    if not items and not allow_empty:
        raise ValueError("String list value must not be empty")
    return items


def parse_cors_origins(value: str | list[str]) -> list[str]:
    """Parse and normalize browser origins allowed to call the hub.

    Each origin must be ``scheme://host[:port]`` with an http(s) scheme.
    Trailing slashes are dropped because browsers never send them. The
    wildcard is refused since the hub allows credentialed requests.
    """
    origins: list[str] = []
    for raw in parse_string_list(value, allow_empty=True):
        origin = raw.strip().rstrip("/")
        if origin == "*":
            raise ValueError("Wildcard CORS origin is not allowed with credentialed requests")
        parts = urlsplit(origin)
        if parts.scheme not in _ALLOWED_ORIGIN_SCHEMES or not parts.netloc or parts.path or parts.query:
            raise ValueError(f"Invalid CORS origin: {raw!r}")
        origins.append(origin)
    return origins


_STRING_LIST_FIELDS = {"cors_origins"}


class StringListEnvSettingsSource(EnvSettingsSource):
    """Env settings source that hands string-list fields to validators unparsed.

    pydantic-settings JSON-decodes list-typed env vars before validators run,
    which breaks comma-separated values. String-list fields skip that step.
    """

    def prepare_field_value(
        self,
        field_name: str,
        field: FieldInfo,
        value: Any,  # noqa: ANN401
        value_is_complex: bool,  # noqa: FBT001
    ) -> Any:  # noqa: ANN401
        if field_name in _STRING_LIST_FIELDS and isinstance(value, str):
            return value
        return super().prepare_field_value(field_name, field, value, value_is_complex)
