"""Timeline entries produced for the server list widget."""

from dataclasses import dataclass, field
from enum import Enum

from mumblesync.models.target import ConnectionTarget


class SurfaceSize(Enum):
    """Widget surface sizes."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class DisplayMode(Enum):
    """Which list a single-column surface shows."""

    FAVOURITES = "favourites"
    RECENT = "recent"


_SURFACE_LIMITS = {
    SurfaceSize.SMALL: 3,
    SurfaceSize.MEDIUM: 3,
    SurfaceSize.LARGE: 6,
}


def surface_limit(size: SurfaceSize) -> int:
    """Return how many rows per list a surface of this size shows."""
    return _SURFACE_LIMITS.get(size, 3)


@dataclass(frozen=True, slots=True)
class RefreshPolicy:
    """When the hosting scheduler should render again.

    Attributes:
        refresh_at: Unix timestamp of the next scheduled render, or None for
            no further scheduled refresh (forced refreshes still apply).
    """

    refresh_at: float | None = None

    @classmethod
    def at(cls, timestamp: float) -> "RefreshPolicy":
        """Refresh at an absolute time."""
        return cls(refresh_at=timestamp)

    @classmethod
    def never(cls) -> "RefreshPolicy":
        """No further scheduled refresh."""
        return cls(refresh_at=None)

    @property
    def is_scheduled(self) -> bool:
        """Return True if a refresh time is set."""
        return self.refresh_at is not None


@dataclass(frozen=True, slots=True)
class TimelineEntry:
    """A display state for the server list widget plus its refresh policy.

    Attributes:
        timestamp: Unix timestamp the entry is valid from.
        pinned: Pinned targets, already truncated to the surface limit.
        recent: Recent targets, already truncated to the surface limit.
        display_mode: Column shown by single-column surfaces.
        refresh_policy: When to render again.
    """

    timestamp: float
    pinned: tuple[ConnectionTarget, ...] = field(default_factory=tuple)
    recent: tuple[ConnectionTarget, ...] = field(default_factory=tuple)
    display_mode: DisplayMode = DisplayMode.FAVOURITES
    refresh_policy: RefreshPolicy = field(default_factory=RefreshPolicy.never)

    @property
    def is_empty(self) -> bool:
        """Return True if both lists are empty."""
        return not self.pinned and not self.recent
