"""Process-shared key/value store backed by a QSettings INI file.

The primary app and every widget process open the same file. QSettings
guards writers with a lock file and replaces the file atomically on
sync(), so a reader never observes a half-written value. There is no
multi-key atomicity and no change notification.
"""

import logging
from pathlib import Path
from typing import Protocol

from PySide6.QtCore import QByteArray, QSettings

logger = logging.getLogger(__name__)

# Keys shared by the app and widget processes
PINNED_KEY = "widget_pinned_servers"
RECENT_KEY = "widget_recent_servers"
RELOAD_TOKEN_KEY = "widget_reload_token"

# App-side history; only the published copy under RECENT_KEY is widget-facing
RECENT_HISTORY_KEY = "recent_servers"


class Store(Protocol):
    """Whole-value key/bytes mapping shared between processes."""

    def get(self, key: str) -> bytes | None:
        """Return the stored bytes, or None if absent or unreadable."""
        ...

    def put(self, key: str, data: bytes) -> bool:
        """Replace the value for key. Returns False if the write was dropped."""
        ...


def _to_bytes(raw: object) -> bytes | None:
    """Normalize a QSettings value to bytes."""
    if isinstance(raw, QByteArray):
        return raw.data()
    if isinstance(raw, bytes | bytearray):
        return bytes(raw)
    if isinstance(raw, str):
        return raw.encode("utf-8")
    return None


class SharedStore:
    """Store implementation over a QSettings file in INI format.

    Example:
        store = SharedStore("/path/to/shared/widget_store.ini")
        store.put("widget_pinned_servers", b"[]")
        data = store.get("widget_pinned_servers")
    """

    def __init__(self, path: str | Path) -> None:
        """Open (or lazily create) the shared store file.

        Args:
            path: Location of the INI file shared by all processes.
        """
        self._path = Path(path)
        self._settings = self._open()

    @property
    def path(self) -> Path:
        """Return the backing file path."""
        return self._path

    def _open(self) -> QSettings:
        return QSettings(str(self._path), QSettings.Format.IniFormat)

    def _healthy(self, operation: str, key: str) -> bool:
        status = self._settings.status()
        if status != QSettings.Status.NoError:
            logger.warning("Shared store %s of '%s' failed: %s", operation, key, status)
            # QSettings keeps reporting an error once set; reopen for the next call
            self._settings = self._open()
            return False
        return True

    def get(self, key: str) -> bytes | None:
        """Read the latest value for key.

        Args:
            key: Store key.

        Returns:
            Stored bytes, or None if the key is absent or the store is unreachable.
        """
        # Pick up writes made by other processes since the last read
        self._settings.sync()
        if not self._healthy("read", key):
            return None
        raw = self._settings.value(key)
        if raw is None:
            return None
        data = _to_bytes(raw)
        if data is None:
            logger.debug("Ignoring non-bytes value stored under '%s'", key)
        return data

    def put(self, key: str, data: bytes) -> bool:
        """Replace the value for key and flush it to disk.

        Args:
            key: Store key.
            data: New value.

        Returns:
            True if the value reached the shared file, False if it was dropped.
        """
        self._settings.setValue(key, QByteArray(data))
        self._settings.sync()
        return self._healthy("write", key)

    def remove(self, key: str) -> None:
        """Delete a key (no-op if absent)."""
        self._settings.remove(key)
        self._settings.sync()

    def clear(self) -> None:
        """Remove every key (useful for testing or reset)."""
        self._settings.clear()
        self._settings.sync()


class MemoryStore:
    """In-process Store used when no shared file is configured.

    Values are replaced wholesale, matching SharedStore semantics.
    """

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def put(self, key: str, data: bytes) -> bool:
        self._data[key] = bytes(data)
        return True
