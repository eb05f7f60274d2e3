"""Command line entry point for MumbleSync.

Mutating commands act as the app process: they restore the canonical
lists from the shared store, apply the change, publish it and bump the
reload token. `show` and `watch` act as a widget process.
"""

import argparse
import logging
import signal
import sys
from collections.abc import Sequence

from PySide6.QtCore import QCoreApplication

from mumblesync import __version__
from mumblesync.core.config import ConfigManager
from mumblesync.core.discovery import ServerDiscovery
from mumblesync.core.provider import SnapshotProvider
from mumblesync.core.refresh import ReloadBroadcaster, TimelineScheduler
from mumblesync.core.store import SharedStore
from mumblesync.core.sync import ProducerSync
from mumblesync.models.target import DEFAULT_PORT, create_target, make_target_id
from mumblesync.models.timeline import DisplayMode, SurfaceSize, TimelineEntry
from mumblesync.ui.presenters import server_columns

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mumblesync",
        description="Shared server lists for Mumble widgets",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--store", default=None, help="shared store file (overrides config)")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_target_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("hostname", help="server hostname or IP")
        p.add_argument("--port", type=int, default=DEFAULT_PORT, help="server port (default: 64738)")
        p.add_argument("--user", default=None, help="user name (default: configured user)")

    pin = sub.add_parser("pin", help="pin a server to the widget")
    add_target_args(pin)
    pin.add_argument("--name", default=None, help="display name (default: hostname)")
    pin.add_argument("--credential", action="store_true", help="server uses a client certificate")

    unpin = sub.add_parser("unpin", help="remove a server from the widget")
    add_target_args(unpin)

    connected = sub.add_parser("connected", help="record a successful connection")
    add_target_args(connected)
    connected.add_argument("--name", default=None, help="server display name")
    connected.add_argument("--credential", action="store_true", help="a client certificate was used")

    for name, help_text in (("show", "print the widget contents once"), ("watch", "follow widget renders")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument(
            "--size", choices=[s.value for s in SurfaceSize], default=SurfaceSize.MEDIUM.value
        )
        p.add_argument(
            "--mode", choices=[m.value for m in DisplayMode], default=DisplayMode.FAVOURITES.value
        )
        if name == "show":
            p.add_argument("--placeholder", action="store_true", help="show placeholder data")

    discover = sub.add_parser("discover", help="find Mumble servers on the LAN")
    discover.add_argument("--timeout", type=float, default=5.0, help="seconds to browse")
    discover.add_argument("--pin", action="store_true", help="pin every server found")
    discover.add_argument("--user", default=None, help="user name for pinned servers")

    return parser


def _print_entry(entry: TimelineEntry, size: SurfaceSize) -> None:
    for column in server_columns(entry, size):
        print(f"== {column.title}")
        if not column.rows:
            print(f"   {column.empty_text}")
        for row in column.rows:
            suffix = f" ({row.subtitle})" if row.subtitle else ""
            link = row.link or "-"
            print(f"   {row.title}{suffix}  {link}")


def _make_sync(config: ConfigManager, store: SharedStore) -> ProducerSync:
    sync = ProducerSync(
        store,
        ReloadBroadcaster(store),
        recent_capacity=config.get_recent_capacity(),
        debounce_ms=config.get_invalidation_debounce_ms(),
    )
    sync.load()
    return sync


def main(argv: Sequence[str] | None = None) -> int:  # noqa: PLR0911, PLR0912
    """Run the MumbleSync command line.

    Returns:
        Exit code (0 for success).
    """
    QCoreApplication.setApplicationName("MumbleSync")
    QCoreApplication.setOrganizationName("MumbleSync")
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])

    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = ConfigManager()
    store_path = args.store or config.get_store_path()
    store = SharedStore(store_path)
    logger.debug("Using shared store %s", store.path)

    username = getattr(args, "user", None)
    if username is None:
        username = config.get_default_username()

    if args.command == "pin":
        sync = _make_sync(config, store)
        target = create_target(
            args.hostname, args.port, username, args.name, has_credential=args.credential
        )
        sync.pin(target)
        sync.flush_invalidation()
        print(f"Pinned {target.display_name} ({target.id})")
        return 0

    if args.command == "unpin":
        sync = _make_sync(config, store)
        target_id = make_target_id(args.hostname, args.port, username)
        removed = sync.unpin(target_id)
        sync.flush_invalidation()
        print(f"Unpinned {target_id}" if removed else f"{target_id} was not pinned")
        return 0 if removed else 1

    if args.command == "connected":
        sync = _make_sync(config, store)
        target = sync.record_connection(
            args.hostname, args.port, username, args.name, has_credential=args.credential
        )
        sync.flush_invalidation()
        print(f"Recorded connection to {target.display_name}")
        return 0

    if args.command == "discover":
        servers = ServerDiscovery.discover_all(timeout=args.timeout)
        if not servers:
            print("No Mumble servers found")
            return 1
        sync = _make_sync(config, store) if args.pin else None
        for server in servers:
            print(f"{server.display_name}  {server.host}:{server.port}")
            if sync is not None:
                sync.pin(server.to_target(username))
        if sync is not None:
            sync.flush_invalidation()
        return 0

    size = SurfaceSize(args.size)
    mode = DisplayMode(args.mode)
    provider = SnapshotProvider(store, refresh_interval_sec=config.get_refresh_minutes() * 60)

    if args.command == "show":
        entry = provider.placeholder(mode) if args.placeholder else provider.snapshot(size, mode)
        _print_entry(entry, size)
        return 0

    # watch
    scheduler = TimelineScheduler(
        provider, store, size, mode, token_poll_ms=config.get_token_poll_ms()
    )
    scheduler.entry_ready.connect(lambda entry: _print_entry(entry, size))
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    scheduler.start()
    try:
        return app.exec()
    finally:
        scheduler.stop()


if __name__ == "__main__":
    sys.exit(main())
