"""App-side owner of the pinned and recent server lists.

ProducerSync is the only writer of the list keys in the shared store.
The in-memory lists are canonical: a failed store write is logged and the
widgets simply show the previous value until the next successful write.

Mutations run on the thread that owns the ProducerSync. Other threads
(network callbacks, discovery) use the post_* methods, which hand the
immutable arguments over through queued Qt signals.
"""

import logging
import time
from collections.abc import Callable

from PySide6.QtCore import QObject, Qt, QTimer, Signal, Slot

from mumblesync.core.codec import decode_targets, encode_targets
from mumblesync.core.refresh import ReloadBroadcaster
from mumblesync.core.store import PINNED_KEY, RECENT_HISTORY_KEY, RECENT_KEY, Store
from mumblesync.models.target import DEFAULT_PORT, ConnectionTarget, create_target

logger = logging.getLogger(__name__)

DEFAULT_RECENT_CAPACITY = 10
DEFAULT_INVALIDATION_DEBOUNCE_MS = 250


class ProducerSync(QObject):
    """Maintains the canonical lists and publishes them to widgets.

    Invalidation requests are debounced: a burst of pin/unpin calls
    produces a single targets_invalidated emission and a single reload
    token write.

    Example:
        sync = ProducerSync(store, ReloadBroadcaster(store))
        sync.load()
        sync.pin(create_target("voice.example.org", username="alice"))
        sync.record_connection("voice.example.org", 64738, "alice", "Example")
    """

    # Emitted once per coalesced burst of list changes
    targets_invalidated = Signal()

    # Emitted after each canonical list change
    pinned_changed = Signal(object)  # list[ConnectionTarget]
    recent_changed = Signal(object)  # list[ConnectionTarget]

    # Cross-thread hand-off (queued to the owner thread)
    _pin_requested = Signal(object)
    _unpin_requested = Signal(str)
    _connection_reported = Signal(object)

    def __init__(
        self,
        store: Store,
        broadcaster: ReloadBroadcaster | None = None,
        recent_capacity: int = DEFAULT_RECENT_CAPACITY,
        debounce_ms: int = DEFAULT_INVALIDATION_DEBOUNCE_MS,
        clock: Callable[[], float] = time.time,
        parent: QObject | None = None,
    ) -> None:
        """Initialize with empty lists; call load() to restore from the store.

        Args:
            store: Shared store the lists are published to.
            broadcaster: Publishes reload tokens for widget processes.
            recent_capacity: Maximum number of recent entries kept.
            debounce_ms: Invalidation coalescing window (0 = next loop turn).
            clock: Returns the current Unix time.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self._store = store
        self._broadcaster = broadcaster
        self._capacity = max(1, recent_capacity)
        self._clock = clock
        self._pinned: list[ConnectionTarget] = []
        self._recent: list[ConnectionTarget] = []

        self._invalidate_timer = QTimer(self)
        self._invalidate_timer.setSingleShot(True)
        self._invalidate_timer.setInterval(max(0, debounce_ms))
        self._invalidate_timer.timeout.connect(self._emit_invalidation)

        queued = Qt.ConnectionType.QueuedConnection
        self._pin_requested.connect(self.pin, queued)
        self._unpin_requested.connect(self.unpin, queued)
        self._connection_reported.connect(self._on_connection_reported, queued)

    @property
    def pinned(self) -> list[ConnectionTarget]:
        """Return a copy of the pinned list (tail = most recently pinned)."""
        return list(self._pinned)

    @property
    def recent(self) -> list[ConnectionTarget]:
        """Return a copy of the recent list (most recent first)."""
        return list(self._recent)

    @property
    def recent_capacity(self) -> int:
        """Return the recent list capacity."""
        return self._capacity

    @property
    def invalidation_pending(self) -> bool:
        """Return True if an invalidation is waiting for the debounce window."""
        return self._invalidate_timer.isActive()

    def load(self) -> None:
        """Restore both canonical lists from the store.

        Unreadable data restores as an empty list.
        """
        self._pinned = _dedupe(decode_targets(self._store.get(PINNED_KEY)))
        self._recent = _dedupe(decode_targets(self._store.get(RECENT_HISTORY_KEY)))[
            : self._capacity
        ]
        logger.info(
            "Loaded %d pinned and %d recent servers", len(self._pinned), len(self._recent)
        )

    # -- Pinned ----------------------------------------------------------------

    @Slot(object)
    def pin(self, target: ConnectionTarget) -> None:
        """Pin a target, moving it to the tail if already pinned.

        Args:
            target: Target to pin; its metadata replaces any older entry.
        """
        self._pinned = [t for t in self._pinned if t.id != target.id]
        self._pinned.append(target)
        logger.debug("Pinned %s", target.id)
        self._persist(PINNED_KEY, self._pinned)
        self.pinned_changed.emit(self.pinned)
        self.request_invalidation()

    @Slot(str)
    def unpin(self, target_id: str) -> bool:
        """Remove a target from the pinned list.

        The list is written and an invalidation requested even when the id
        was not pinned, so a stale store copy converges.

        Args:
            target_id: ID of the target to remove.

        Returns:
            True if an entry was removed.
        """
        before = len(self._pinned)
        self._pinned = [t for t in self._pinned if t.id != target_id]
        removed = len(self._pinned) < before
        if removed:
            logger.debug("Unpinned %s", target_id)
        self._persist(PINNED_KEY, self._pinned)
        self.pinned_changed.emit(self.pinned)
        self.request_invalidation()
        return removed

    def is_pinned(self, target_id: str) -> bool:
        """Return True if the target is pinned (in-memory check)."""
        return any(t.id == target_id for t in self._pinned)

    # -- Recent ----------------------------------------------------------------

    def add_recent(self, target: ConnectionTarget) -> None:
        """Record a connection in the recent history.

        Moves an existing entry to the head with the new metadata and
        evicts the oldest entries beyond capacity. This only updates the
        app-side history; call publish_recent() to update widgets.

        Args:
            target: Target that was connected to.
        """
        if not target.display_name:
            target = target.with_display_name(target.hostname)
        self._recent = [t for t in self._recent if t.id != target.id]
        self._recent.insert(0, target)
        del self._recent[self._capacity :]
        self._persist(RECENT_HISTORY_KEY, self._recent)
        self.recent_changed.emit(self.recent)

    def publish_recent(self) -> None:
        """Publish the recent list to widgets and request invalidation."""
        self._persist(RECENT_KEY, self._recent)
        self.request_invalidation()

    def record_connection(
        self,
        hostname: str,
        port: int = DEFAULT_PORT,
        username: str = "",
        display_name: str | None = None,
        has_credential: bool = False,
    ) -> ConnectionTarget:
        """Handle a successful connection reported by the session engine.

        Args:
            hostname: Server hostname.
            port: Server port.
            username: User name used for the connection.
            display_name: Server name, or None/empty to use the hostname.
            has_credential: Whether a client certificate was used.

        Returns:
            The recorded target.
        """
        target = create_target(
            hostname,
            port,
            username,
            display_name,
            has_credential=has_credential,
            last_connected_at=self._clock(),
        )
        self.add_recent(target)
        self.publish_recent()
        return target

    def display_name_for(self, hostname: str, port: int) -> str | None:
        """Return the remembered display name for a host and port.

        Args:
            hostname: Server hostname.
            port: Server port.

        Returns:
            Display name of the most recent matching entry, or None.
        """
        for target in self._recent:
            if target.hostname == hostname and target.port == port:
                return target.display_name
        return None

    # -- Thread-safe entry points ----------------------------------------------

    def post_pin(self, target: ConnectionTarget) -> None:
        """Queue pin() onto the owner thread."""
        self._pin_requested.emit(target)

    def post_unpin(self, target_id: str) -> None:
        """Queue unpin() onto the owner thread."""
        self._unpin_requested.emit(target_id)

    def post_connection(self, target: ConnectionTarget) -> None:
        """Queue a connection record onto the owner thread.

        Args:
            target: Connected target; last_connected_at is re-stamped when the
                record is applied.
        """
        self._connection_reported.emit(target)

    @Slot(object)
    def _on_connection_reported(self, target: ConnectionTarget) -> None:
        self.record_connection(
            target.hostname,
            target.port,
            target.username,
            target.display_name,
            has_credential=target.has_credential,
        )

    # -- Invalidation ------------------------------------------------------------

    def request_invalidation(self) -> None:
        """Ask widgets to re-render soon; bursts collapse into one signal.

        The window opens with the first request and is not extended by
        later ones, so a steady stream of changes still invalidates at
        least once per window.
        """
        if not self._invalidate_timer.isActive():
            self._invalidate_timer.start()

    def flush_invalidation(self) -> None:
        """Fire a pending invalidation immediately."""
        if self._invalidate_timer.isActive():
            self._invalidate_timer.stop()
            self._emit_invalidation()

    def _emit_invalidation(self) -> None:
        if self._broadcaster is not None:
            self._broadcaster.broadcast()
        self.targets_invalidated.emit()

    def _persist(self, key: str, targets: list[ConnectionTarget]) -> None:
        """Write a list; failures leave the in-memory list authoritative."""
        try:
            data = encode_targets(targets)
        except (TypeError, ValueError) as e:
            logger.warning("Could not serialize '%s', keeping previous store value: %s", key, e)
            return
        if not self._store.put(key, data):
            logger.warning("Store write of '%s' dropped; widgets will show stale data", key)


def _dedupe(targets: list[ConnectionTarget]) -> list[ConnectionTarget]:
    """Drop repeated ids, keeping the first occurrence."""
    seen: set[str] = set()
    result: list[ConnectionTarget] = []
    for target in targets:
        if target.id not in seen:
            seen.add(target.id)
            result.append(target)
    return result
