"""Core synchronization layer.

This module contains the logic shared by the app process and the widget
processes that render its data.

Classes:
    SharedStore: QSettings-backed store shared between processes.
    ProducerSync: App-side owner of the pinned and recent lists.
    SnapshotProvider: Widget-side timeline builder.
    TimelineScheduler: Widget-side render scheduler.
    LiveStatusChannel: Push channel for the live session display.
    ConfigManager: QSettings wrapper for configuration.
"""

from mumblesync.core.config import ConfigManager
from mumblesync.core.live_status import ChannelState, LiveStatusChannel
from mumblesync.core.provider import SnapshotProvider
from mumblesync.core.refresh import ReloadBroadcaster, TimelineScheduler
from mumblesync.core.store import MemoryStore, SharedStore, Store
from mumblesync.core.sync import ProducerSync

__all__ = [
    "ChannelState",
    "ConfigManager",
    "LiveStatusChannel",
    "MemoryStore",
    "ProducerSync",
    "ReloadBroadcaster",
    "SharedStore",
    "SnapshotProvider",
    "Store",
    "TimelineScheduler",
]
