"""Ephemeral push channel for the live session display.

Nothing here is persisted. The display surface only ever sees the latest
pushed value: updates made within one event loop turn collapse into a
single state_changed emission, and the channel never waits for the
surface to consume anything.
"""

import logging
from collections.abc import Callable
from enum import Enum

from PySide6.QtCore import QObject, QTimer, Signal

from mumblesync.models.session import DisplayState, SessionStatus

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_MS = 10_000


class ChannelState(Enum):
    """Lifecycle of a live status channel."""

    INACTIVE = "inactive"
    ACTIVE = "active"
    ENDED = "ended"


class LiveStatusChannel(QObject):
    """Carries the live session status to a display surface.

    The optional sampler is polled on a fixed interval while the session
    is active, so the surface converges even if the session engine misses
    an event.

    Example:
        channel = LiveStatusChannel()
        channel.state_changed.connect(surface.render)
        channel.start("Example Server")
        channel.update(SessionStatus(speakers=("alice",), participant_count=4))
        channel.end()
    """

    started = Signal(object)  # DisplayState
    state_changed = Signal(object)  # DisplayState (latest only)
    ended = Signal()

    def __init__(
        self,
        sampler: Callable[[], SessionStatus] | None = None,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        parent: QObject | None = None,
    ) -> None:
        """Initialize an inactive channel.

        Args:
            sampler: Optional callable returning the current session status.
            poll_interval_ms: Sampler polling interval in milliseconds.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self._state = ChannelState.INACTIVE
        self._display: DisplayState | None = None
        self._sampler = sampler

        self._deliver_timer = QTimer(self)
        self._deliver_timer.setSingleShot(True)
        self._deliver_timer.setInterval(0)
        self._deliver_timer.timeout.connect(self._deliver)

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(poll_interval_ms)
        self._poll_timer.timeout.connect(self._poll)

    @property
    def state(self) -> ChannelState:
        """Return the lifecycle state."""
        return self._state

    @property
    def is_active(self) -> bool:
        """Return True while a session is being displayed."""
        return self._state is ChannelState.ACTIVE

    @property
    def latest(self) -> DisplayState | None:
        """Return the most recently pushed display state."""
        return self._display

    def start(self, server_name: str) -> bool:
        """Begin displaying a session.

        Starting while already active restarts with a fresh state. An ended
        channel cannot be restarted; use a new channel for a new session.

        Args:
            server_name: Server name, fixed for the session.

        Returns:
            True if the session display started.
        """
        if self._state is ChannelState.ENDED:
            logger.warning("Ignoring start(%r) on an ended live status channel", server_name)
            return False
        if self._state is ChannelState.ACTIVE:
            logger.info("Restarting live status for %s", server_name)
            self._deliver_timer.stop()

        self._display = DisplayState(server_name=server_name)
        self._state = ChannelState.ACTIVE
        self.started.emit(self._display)
        if self._sampler is not None:
            self._poll_timer.start()
            self._poll()
        logger.info("Live status started for %s", server_name)
        return True

    def update(self, status: SessionStatus) -> None:
        """Replace the dynamic status wholesale.

        Delivery is best-effort: if several updates arrive before the event
        loop runs, only the last one is emitted.

        Args:
            status: New session status.
        """
        if self._state is not ChannelState.ACTIVE or self._display is None:
            logger.debug("Dropping live status update in state %s", self._state.value)
            return
        self._display = self._display.with_status(status)
        if not self._deliver_timer.isActive():
            self._deliver_timer.start()

    def end(self) -> None:
        """End the session display. Further updates are dropped."""
        if self._state is not ChannelState.ACTIVE:
            logger.debug("end() called in state %s", self._state.value)
            return
        self._deliver_timer.stop()
        self._poll_timer.stop()
        self._state = ChannelState.ENDED
        self._display = None
        self.ended.emit()
        logger.info("Live status ended")

    def _deliver(self) -> None:
        if self._state is ChannelState.ACTIVE and self._display is not None:
            self.state_changed.emit(self._display)

    def _poll(self) -> None:
        if self._sampler is None:
            return
        try:
            status = self._sampler()
        except Exception:  # noqa: BLE001
            logger.debug("Live status sampler failed", exc_info=True)
            return
        self.update(status)
