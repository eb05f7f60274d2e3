"""Pure derivations from models to what each surface displays.

Surfaces (widgets, tray applets, lock screen views) render these values
as-is; none of the functions here touch Qt, the store or the clock.
"""

from dataclasses import dataclass
from enum import Enum

from mumblesync.models.session import DisplayState
from mumblesync.models.target import ConnectionTarget
from mumblesync.models.timeline import DisplayMode, SurfaceSize, TimelineEntry, surface_limit

# Speaker names shown before collapsing the rest into "+K others"
CONSTRAINED_SPEAKER_LIMIT = 3


class StatusIcon(Enum):
    """Self status indicator, with its color token."""

    DEAFENED = ("speaker.slash.fill", "red")
    MUTED = ("mic.slash.fill", "orange")
    NORMAL = ("mic.fill", "gray")

    @property
    def symbol(self) -> str:
        return self.value[0]

    @property
    def color(self) -> str:
        return self.value[1]


@dataclass(frozen=True, slots=True)
class SpeakerSummary:
    """What the speaker area of the live display shows.

    Attributes:
        names: Speaker names to list, in arrival order.
        overflow: Number of speakers not listed.
        participant_count: Users in the channel (shown when nobody speaks).
        channel_name: Channel name (shown when nobody speaks).
    """

    names: tuple[str, ...]
    overflow: int
    participant_count: int
    channel_name: str

    @property
    def is_idle(self) -> bool:
        """Return True when nobody is speaking."""
        return not self.names

    @property
    def overflow_label(self) -> str:
        """Return the "+K others" suffix, or empty string."""
        return f"+{self.overflow} others" if self.overflow > 0 else ""

    @property
    def lines(self) -> list[str]:
        """Return the text lines to render."""
        if self.is_idle:
            return [self.channel_name, str(self.participant_count)]
        lines = list(self.names)
        if self.overflow_label:
            lines.append(self.overflow_label)
        return lines


@dataclass(frozen=True, slots=True)
class CompactBadge:
    """Number shown in the compact live display."""

    count: int
    active: bool  # True = speaker count, False = participant count


def summarize_speakers(
    state: DisplayState, limit: int = CONSTRAINED_SPEAKER_LIMIT
) -> SpeakerSummary:
    """Derive the speaker area from a display state.

    Args:
        state: Current display state.
        limit: Maximum names listed before collapsing (at least one is shown).

    Returns:
        SpeakerSummary for the state.
    """
    speakers = state.speakers
    limit = max(1, limit)
    shown = speakers[:limit]
    return SpeakerSummary(
        names=tuple(shown),
        overflow=len(speakers) - len(shown),
        participant_count=state.participant_count,
        channel_name=state.channel_name,
    )


def status_icon(state: DisplayState) -> StatusIcon:
    """Select the self status icon; deafened wins over muted."""
    if state.is_self_deafened:
        return StatusIcon.DEAFENED
    if state.is_self_muted:
        return StatusIcon.MUTED
    return StatusIcon.NORMAL


def compact_badge(state: DisplayState) -> CompactBadge:
    """Return the speaker count while anyone talks, else the participant count."""
    if state.speakers:
        return CompactBadge(count=len(state.speakers), active=True)
    return CompactBadge(count=state.participant_count, active=False)


# -- Server list widget ---------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ServerRow:
    """One tappable server row.

    Attributes:
        target_id: ID of the target.
        title: Display name.
        subtitle: User name, empty in compact rows.
        icon: "certified" for registered users, else "server".
        link: Deep link URL, or None if the row is not interactive.
    """

    target_id: str
    title: str
    subtitle: str
    icon: str
    link: str | None

    @property
    def interactive(self) -> bool:
        """Return True if tapping the row opens the server."""
        return self.link is not None


@dataclass(frozen=True, slots=True)
class ServerColumn:
    """A titled list of rows."""

    title: str
    icon: str
    rows: tuple[ServerRow, ...]

    @property
    def empty_text(self) -> str:
        return f"No {self.title}"


_FAVOURITES = ("Favourites", "star.fill")
_RECENT = ("Recent", "clock.fill")


def server_row(target: ConnectionTarget, compact: bool = False) -> ServerRow:
    """Derive a row for a target."""
    return ServerRow(
        target_id=target.id,
        title=target.display_name,
        subtitle="" if compact else target.username,
        icon="certified" if target.has_credential else "server",
        link=target.deep_link_url,
    )


def _column(
    header: tuple[str, str], targets: tuple[ConnectionTarget, ...], limit: int, compact: bool
) -> ServerColumn:
    title, icon = header
    rows = tuple(server_row(t, compact) for t in targets[:limit])
    return ServerColumn(title=title, icon=icon, rows=rows)


def server_columns(entry: TimelineEntry, surface_size: SurfaceSize) -> list[ServerColumn]:
    """Lay out an entry's lists for a surface.

    Small surfaces show one compact column chosen by the entry's display
    mode. Medium and large surfaces show favourites and recent side by side.

    Args:
        entry: Timeline entry to render.
        surface_size: Size of the surface.

    Returns:
        Columns in display order.
    """
    limit = surface_limit(surface_size)
    if surface_size is SurfaceSize.SMALL:
        if entry.display_mode is DisplayMode.RECENT:
            return [_column(_RECENT, entry.recent, limit, compact=True)]
        return [_column(_FAVOURITES, entry.pinned, limit, compact=True)]

    compact = surface_size is SurfaceSize.MEDIUM
    return [
        _column(_FAVOURITES, entry.pinned, limit, compact),
        _column(_RECENT, entry.recent, limit, compact),
    ]
