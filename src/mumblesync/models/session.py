"""Live session status models pushed to the live display surface."""

from dataclasses import dataclass, field, replace
from typing import Self


@dataclass(frozen=True, slots=True)
class SessionStatus:
    """Dynamic portion of the live session display.

    Replaced wholesale on every session event, never merged.

    Attributes:
        speakers: Names of users currently talking, in arrival order.
        participant_count: Number of users in the current channel.
        channel_name: Name of the current channel.
        is_self_muted: Whether the local user muted their microphone.
        is_self_deafened: Whether the local user deafened themselves.
    """

    speakers: tuple[str, ...] = field(default_factory=tuple)
    participant_count: int = 0
    channel_name: str = ""
    is_self_muted: bool = False
    is_self_deafened: bool = False

    @property
    def speaker_count(self) -> int:
        """Return the number of active speakers."""
        return len(self.speakers)


@dataclass(frozen=True, slots=True)
class DisplayState:
    """Full live display state: a fixed server name plus the dynamic status."""

    server_name: str
    status: SessionStatus = field(default_factory=SessionStatus)

    @property
    def speakers(self) -> tuple[str, ...]:
        return self.status.speakers

    @property
    def participant_count(self) -> int:
        return self.status.participant_count

    @property
    def channel_name(self) -> str:
        return self.status.channel_name

    @property
    def is_self_muted(self) -> bool:
        return self.status.is_self_muted

    @property
    def is_self_deafened(self) -> bool:
        return self.status.is_self_deafened

    def with_status(self, status: SessionStatus) -> Self:
        """Return a copy with the dynamic portion replaced."""
        return replace(self, status=status)
