"""Timeline provider run inside widget processes.

Every call reads the shared store afresh and returns self-contained
entries; nothing is cached between calls, so periodic and forced
refreshes can interleave freely.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import replace

from mumblesync.core.codec import decode_targets
from mumblesync.core.store import PINNED_KEY, RECENT_KEY, Store
from mumblesync.models.target import ConnectionTarget, create_target
from mumblesync.models.timeline import (
    DisplayMode,
    RefreshPolicy,
    SurfaceSize,
    TimelineEntry,
    surface_limit,
)

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL_SEC = 30 * 60

_PLACEHOLDER_PINNED = (
    create_target("demo.mumble.info", 64738, "User", "My Server", has_credential=True),
)
_PLACEHOLDER_RECENT = (
    create_target("test.mumble.info", 64738, "Guest", "Test Server"),
)


class SnapshotProvider:
    """Builds widget timeline entries from the shared store.

    Example:
        provider = SnapshotProvider(SharedStore(path))
        entries = provider.timeline(SurfaceSize.MEDIUM)
    """

    def __init__(
        self,
        store: Store,
        refresh_interval_sec: float = DEFAULT_REFRESH_INTERVAL_SEC,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the provider.

        Args:
            store: Shared store to read lists from.
            refresh_interval_sec: Fallback cadence for timeline().
            clock: Returns the current Unix time.
        """
        self._store = store
        self._refresh_interval_sec = refresh_interval_sec
        self._clock = clock

    def placeholder(self, display_mode: DisplayMode = DisplayMode.FAVOURITES) -> TimelineEntry:
        """Return a representative entry without touching the store."""
        now = self._clock()
        return TimelineEntry(
            timestamp=now,
            pinned=tuple(replace(t, last_connected_at=now) for t in _PLACEHOLDER_PINNED),
            recent=tuple(replace(t, last_connected_at=now) for t in _PLACEHOLDER_RECENT),
            display_mode=display_mode,
            refresh_policy=RefreshPolicy.never(),
        )

    def snapshot(
        self,
        surface_size: SurfaceSize,
        display_mode: DisplayMode = DisplayMode.FAVOURITES,
    ) -> TimelineEntry:
        """Return the current state, truncated for the surface.

        Args:
            surface_size: Size of the rendering surface.
            display_mode: Column for single-column surfaces.

        Returns:
            Entry with no scheduled refresh; the caller decides the cadence.
        """
        limit = surface_limit(surface_size)
        return TimelineEntry(
            timestamp=self._clock(),
            pinned=self._load(PINNED_KEY, limit),
            recent=self._load(RECENT_KEY, limit),
            display_mode=display_mode,
            refresh_policy=RefreshPolicy.never(),
        )

    def timeline(
        self,
        surface_size: SurfaceSize,
        display_mode: DisplayMode = DisplayMode.FAVOURITES,
    ) -> list[TimelineEntry]:
        """Return a one-entry timeline that asks to be refreshed later.

        Args:
            surface_size: Size of the rendering surface.
            display_mode: Column for single-column surfaces.

        Returns:
            List with a single entry refreshing at now + refresh interval.
        """
        limit = surface_limit(surface_size)
        now = self._clock()
        entry = TimelineEntry(
            timestamp=now,
            pinned=self._load(PINNED_KEY, limit),
            recent=self._load(RECENT_KEY, limit),
            display_mode=display_mode,
            refresh_policy=RefreshPolicy.at(now + self._refresh_interval_sec),
        )
        return [entry]

    def _load(self, key: str, limit: int) -> tuple[ConnectionTarget, ...]:
        """Read and decode a list, truncating only the returned copy."""
        try:
            data = self._store.get(key)
        except Exception:  # noqa: BLE001
            logger.warning("Store read of '%s' failed, rendering empty list", key, exc_info=True)
            return ()
        return tuple(decode_targets(data)[:limit])
