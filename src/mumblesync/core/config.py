"""Configuration manager using QSettings for persistent storage."""

import logging
from pathlib import Path

from PySide6.QtCore import QSettings, QStandardPaths

logger = logging.getLogger(__name__)

# Settings keys
_KEY_STORE_PATH = "store/path"
_KEY_DEFAULT_USERNAME = "sync/default_username"
_KEY_INVALIDATION_DEBOUNCE = "sync/invalidation_debounce_ms"

# Recent history
_KEY_RECENT_CAPACITY = "recent/capacity"

# Widgets
_KEY_REFRESH_MINUTES = "widget/refresh_minutes"
_KEY_TOKEN_POLL = "widget/token_poll_ms"

# Live status
_KEY_LIVE_POLL_INTERVAL = "live/poll_interval_ms"

_STORE_FILENAME = "widget_store.ini"


def default_store_path() -> Path:
    """Return the default location of the shared store file.

    Uses the generic (not per-application) config directory so the app and
    every widget process resolve the same path.
    """
    base = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.GenericConfigLocation)
    return Path(base or Path.home() / ".config") / "mumblesync" / _STORE_FILENAME


class ConfigManager:
    """Wrapper around QSettings for type-safe config access.

    QSettings stores config in platform-specific locations:
    - Windows: HKEY_CURRENT_USER\\Software\\MumbleSync\\MumbleSync
    - macOS: ~/Library/Preferences/com.MumbleSync.MumbleSync.plist
    - Linux: ~/.config/MumbleSync/MumbleSync.conf

    The shared store is a separate file (see store_path) because widget
    processes must be able to open it without knowing the app's settings.

    Example:
        config = ConfigManager()
        store = SharedStore(config.get_store_path())
    """

    def __init__(self, organization: str = "MumbleSync", application: str = "MumbleSync") -> None:
        """Initialize the config manager.

        Args:
            organization: Organization name for QSettings.
            application: Application name for QSettings.
        """
        self._settings = QSettings(organization, application)

    @property
    def settings(self) -> QSettings:
        """Return the underlying QSettings instance."""
        return self._settings

    # -- Shared store ------------------------------------------------------------

    def get_store_path(self) -> Path:
        """Return the shared store file path.

        Returns:
            Configured path, or default_store_path() if unset.
        """
        value = self._settings.value(_KEY_STORE_PATH, "", str)
        return Path(str(value)) if value else default_store_path()

    def set_store_path(self, path: str | Path) -> None:
        """Set the shared store file path.

        Args:
            path: File path, or empty string for the default.
        """
        self._settings.setValue(_KEY_STORE_PATH, str(path) if path else "")

    # -- Sync settings -------------------------------------------------------------

    def get_default_username(self) -> str:
        """Return the user name used when a command does not give one.

        Returns:
            User name, or empty string.
        """
        value = self._settings.value(_KEY_DEFAULT_USERNAME, "", str)
        return str(value) if value else ""

    def set_default_username(self, username: str) -> None:
        """Set the default user name.

        Args:
            username: User name.
        """
        self._settings.setValue(_KEY_DEFAULT_USERNAME, username)

    def get_invalidation_debounce_ms(self) -> int:
        """Return the widget invalidation coalescing window.

        Returns:
            Milliseconds (default 250, 0 = next event loop turn).
        """
        value = self._settings.value(_KEY_INVALIDATION_DEBOUNCE, 250, int)
        return max(0, min(5000, int(value)))  # type: ignore[arg-type]

    def set_invalidation_debounce_ms(self, ms: int) -> None:
        """Set the invalidation coalescing window.

        Args:
            ms: Milliseconds (0-5000).
        """
        self._settings.setValue(_KEY_INVALIDATION_DEBOUNCE, max(0, min(5000, ms)))

    def get_recent_capacity(self) -> int:
        """Return how many recent servers are kept.

        Returns:
            Capacity (default 10).
        """
        value = self._settings.value(_KEY_RECENT_CAPACITY, 10, int)
        return max(1, min(50, int(value)))  # type: ignore[arg-type]

    def set_recent_capacity(self, capacity: int) -> None:
        """Set the recent list capacity.

        Args:
            capacity: Number of entries (1-50).
        """
        self._settings.setValue(_KEY_RECENT_CAPACITY, max(1, min(50, capacity)))

    # -- Widget settings -----------------------------------------------------------

    def get_refresh_minutes(self) -> int:
        """Return the widget fallback refresh interval.

        Returns:
            Interval in minutes (default 30).
        """
        value = self._settings.value(_KEY_REFRESH_MINUTES, 30, int)
        return max(5, min(240, int(value)))  # type: ignore[arg-type]

    def set_refresh_minutes(self, minutes: int) -> None:
        """Set the widget fallback refresh interval.

        Args:
            minutes: Interval in minutes (5-240).
        """
        self._settings.setValue(_KEY_REFRESH_MINUTES, max(5, min(240, minutes)))

    def get_token_poll_ms(self) -> int:
        """Return how often widgets check the reload token.

        Returns:
            Interval in milliseconds (default 2000).
        """
        value = self._settings.value(_KEY_TOKEN_POLL, 2000, int)
        return max(250, min(60_000, int(value)))  # type: ignore[arg-type]

    def set_token_poll_ms(self, ms: int) -> None:
        """Set the reload token polling interval.

        Args:
            ms: Interval in milliseconds (250-60000).
        """
        self._settings.setValue(_KEY_TOKEN_POLL, max(250, min(60_000, ms)))

    # -- Live status settings --------------------------------------------------------

    def get_live_poll_interval_ms(self) -> int:
        """Return the live status sampling interval.

        Returns:
            Interval in milliseconds (default 10000).
        """
        value = self._settings.value(_KEY_LIVE_POLL_INTERVAL, 10_000, int)
        return max(1000, min(60_000, int(value)))  # type: ignore[arg-type]

    def set_live_poll_interval_ms(self, ms: int) -> None:
        """Set the live status sampling interval.

        Args:
            ms: Interval in milliseconds (1000-60000).
        """
        self._settings.setValue(_KEY_LIVE_POLL_INTERVAL, max(1000, min(60_000, ms)))

    # -- General settings ------------------------------------------------------

    def clear(self) -> None:
        """Clear all settings (useful for testing or reset)."""
        self._settings.clear()

    def sync(self) -> None:
        """Force settings to be written to disk."""
        self._settings.sync()
