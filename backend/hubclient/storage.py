"""Key-value storage for persisted client session state.

``FileStorage`` keeps string values in a single JSON object on disk, the way
a browser keeps them in local storage. Writes go through a temp file and an
atomic rename with owner-only permissions, since the file holds a bearer token.
"""

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog

logger = structlog.get_logger()

_STORAGE_FILE_MODE = 0o600


class KeyValueStorage(Protocol):
    """Protocol for string key-value persistence."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage, for tests and short-lived sessions."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage:
    """JSON-file-backed storage. Every write rewrites the whole file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove(self, key: str) -> None:
        items = self._load()
        if items.pop(key, None) is not None:
            self._save(items)

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("client storage file is not valid JSON, starting empty", path=str(self._path))
            return {}
        if not isinstance(data, dict):
            logger.warning("client storage file has unexpected shape, starting empty", path=str(self._path))
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self, items: dict[str, str]) -> None:
        """Write the mapping atomically via temp-file-then-rename."""
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=str(directory), suffix=".tmp", prefix=".hubclient_")
        fd_owned = True
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                fd_owned = False  # os.fdopen took ownership; it will close fd
                json.dump(items, f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, _STORAGE_FILE_MODE)  # noqa: PTH101
            Path(tmp_path).replace(self._path)
        except BaseException:
            if fd_owned:
                with contextlib.suppress(OSError):
                    os.close(fd)
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise
