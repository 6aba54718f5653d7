"""Durable string-keyed storage for cache and rate-limit state."""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class StorageError(Exception):
    """Base exception for state storage failures."""


class StorageQuotaExceededError(StorageError):
    """Raised when a value does not fit in the store's quota."""


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStore:
    """Non-durable store, used for ephemeral sessions and tests."""

    def __init__(self, max_bytes: int | None = None):
        self._items: dict[str, str] = {}
        self._max_bytes = max_bytes

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._max_bytes is not None and len(value.encode("utf-8")) > self._max_bytes:
            raise StorageQuotaExceededError(
                f"Value for {key!r} exceeds quota of {self._max_bytes} bytes"
            )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._items


class FileStore:
    """One JSON file per key inside a state directory.

    Writes go through a temp file and ``os.replace`` so a reader never sees
    a half-written value.
    """

    def __init__(self, directory: str | Path, max_bytes: int | None = None):
        self._directory = Path(directory).expanduser()
        self._max_bytes = max_bytes

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Failed to read {path}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        encoded = value.encode("utf-8")
        if self._max_bytes is not None and len(encoded) > self._max_bytes:
            raise StorageQuotaExceededError(
                f"Value for {key!r} exceeds quota of {self._max_bytes} bytes"
            )
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(encoded)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Failed to write {path}: {exc}") from exc
        logger.debug("Wrote %d bytes to %s", len(encoded), path)

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to remove {path}: {exc}") from exc
