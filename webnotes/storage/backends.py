"""
Key-Value Backends.

Durable per-client key-value persistence for the LocalStore. Each key holds
one serialized JSON document. Backends know nothing about notes or folders.

    FileKeyValueBackend   - one <key>.json file per key in a data directory
    MemoryKeyValueBackend - dict-backed, for tests and throwaway sessions
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Protocol

from webnotes.core.exceptions import StorageError
from webnotes.core.logging import get_logger

logger = get_logger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueBackend(Protocol):
    """Minimal string key-value store."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryKeyValueBackend:
    """In-memory backend. Contents are lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class FileKeyValueBackend:
    """
    File-backed backend.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so a crash never leaves a half-written document.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error("Failed to read storage key", extra={"key": key, "error": str(e)})
            raise StorageError(f"Failed to read {key}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("Failed to write storage key", extra={"key": key, "error": str(e)})
            raise StorageError(f"Failed to write {key}") from e

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Failed to delete storage key", extra={"key": key, "error": str(e)})
            raise StorageError(f"Failed to delete {key}") from e
