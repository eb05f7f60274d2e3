"""Data models for connection targets, live session status and widget timelines."""

from mumblesync.models.session import DisplayState, SessionStatus
from mumblesync.models.target import (
    DEFAULT_PORT,
    ConnectionTarget,
    create_target,
    make_target_id,
)
from mumblesync.models.timeline import (
    DisplayMode,
    RefreshPolicy,
    SurfaceSize,
    TimelineEntry,
    surface_limit,
)

__all__ = [
    "DEFAULT_PORT",
    "ConnectionTarget",
    "DisplayMode",
    "DisplayState",
    "RefreshPolicy",
    "SessionStatus",
    "SurfaceSize",
    "TimelineEntry",
    "create_target",
    "make_target_id",
    "surface_limit",
]
