"""Forced-refresh broadcast and the widget-side render scheduler.

The app has no call channel into widget processes. To ask them to
re-render early it bumps a reload token in the shared store; a widget's
TimelineScheduler polls that token and re-renders when it changes. The
timeline's own refresh time is the fallback when no token change is seen.

Both refresh sources only re-read the store, so rendering twice for the
same change is harmless.
"""

import logging
import time
from collections.abc import Callable

from PySide6.QtCore import QObject, QTimer, Signal

from mumblesync.core.provider import SnapshotProvider
from mumblesync.core.store import RELOAD_TOKEN_KEY, Store
from mumblesync.models.timeline import DisplayMode, SurfaceSize, TimelineEntry

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_POLL_MS = 2000

_MAX_TIMER_MS = 2**31 - 1


class ReloadBroadcaster:
    """Writes a fresh reload token so widget processes re-render.

    Fire-and-forget: a dropped write only delays widgets until their
    scheduled refresh.
    """

    def __init__(self, store: Store, clock_ns: Callable[[], int] = time.time_ns) -> None:
        self._store = store
        self._clock_ns = clock_ns

    def broadcast(self) -> bool:
        """Publish a new token.

        Returns:
            True if the token was written.
        """
        token = str(self._clock_ns()).encode("ascii")
        written = self._store.put(RELOAD_TOKEN_KEY, token)
        if not written:
            logger.debug("Reload token write dropped; widgets will refresh on schedule")
        return written


class TimelineScheduler(QObject):
    """Hosts a SnapshotProvider the way a widget runtime would.

    Renders once on start, again when the entry's refresh time arrives,
    and again whenever the reload token changes. Bursts of forced
    refreshes collapse into one render.

    Example:
        scheduler = TimelineScheduler(provider, store, SurfaceSize.MEDIUM)
        scheduler.entry_ready.connect(surface.render)
        scheduler.start()
    """

    entry_ready = Signal(object)  # TimelineEntry

    def __init__(
        self,
        provider: SnapshotProvider,
        store: Store,
        surface_size: SurfaceSize,
        display_mode: DisplayMode = DisplayMode.FAVOURITES,
        token_poll_ms: int = DEFAULT_TOKEN_POLL_MS,
        clock: Callable[[], float] = time.time,
        parent: QObject | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            provider: Provider invoked for each render.
            store: Store holding the reload token.
            surface_size: Size of the hosted surface.
            display_mode: Column for single-column surfaces.
            token_poll_ms: How often to check the reload token.
            clock: Returns the current Unix time.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self._provider = provider
        self._store = store
        self._surface_size = surface_size
        self._display_mode = display_mode
        self._clock = clock
        self._last_entry: TimelineEntry | None = None
        self._seen_token: bytes | None = None
        self._running = False

        self._refresh_timer = QTimer(self)
        self._refresh_timer.setSingleShot(True)
        self._refresh_timer.timeout.connect(self._render)

        # Zero-interval single shot: repeated force_refresh() calls in one
        # event loop turn render once
        self._forced_timer = QTimer(self)
        self._forced_timer.setSingleShot(True)
        self._forced_timer.setInterval(0)
        self._forced_timer.timeout.connect(self._render)

        self._token_timer = QTimer(self)
        self._token_timer.setInterval(token_poll_ms)
        self._token_timer.timeout.connect(self.check_reload_token)

    @property
    def is_running(self) -> bool:
        """Return True between start() and stop()."""
        return self._running

    @property
    def last_entry(self) -> TimelineEntry | None:
        """Return the most recently rendered entry."""
        return self._last_entry

    def start(self) -> None:
        """Render immediately and begin watching for refresh triggers."""
        if self._running:
            return
        self._running = True
        self._seen_token = self._read_token()
        self._render()
        self._token_timer.start()
        logger.debug("Timeline scheduler started for %s surface", self._surface_size.value)

    def stop(self) -> None:
        """Cancel every pending render."""
        self._running = False
        self._refresh_timer.stop()
        self._forced_timer.stop()
        self._token_timer.stop()
        logger.debug("Timeline scheduler stopped")

    def force_refresh(self) -> None:
        """Request a render on the next event loop turn."""
        if self._running:
            self._forced_timer.start()

    def check_reload_token(self) -> None:
        """Force a refresh if the app published a new reload token."""
        token = self._read_token()
        if token is not None and token != self._seen_token:
            self._seen_token = token
            logger.debug("Reload token changed, forcing refresh")
            self.force_refresh()

    def _read_token(self) -> bytes | None:
        return self._store.get(RELOAD_TOKEN_KEY)

    def _render(self) -> None:
        if not self._running:
            return
        entries = self._provider.timeline(self._surface_size, self._display_mode)
        if not entries:
            return
        entry = entries[0]
        self._last_entry = entry
        self.entry_ready.emit(entry)

        refresh_at = entry.refresh_policy.refresh_at
        if refresh_at is None:
            self._refresh_timer.stop()
            return
        delay_ms = int(max(0.0, refresh_at - self._clock()) * 1000)
        self._refresh_timer.start(min(delay_ms, _MAX_TIMER_MS))
