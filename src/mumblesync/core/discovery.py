"""LAN discovery of Mumble servers over mDNS/Zeroconf.

murmur/mumble-server announces itself as ``_mumble._tcp``. The service
instance name is the server's configured name; some builds also publish
it in the TXT record. Found servers are turned into ConnectionTargets so
they can be pinned like any other server.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from zeroconf import ServiceBrowser, ServiceInfo, ServiceListener, Zeroconf

from mumblesync.models.target import DEFAULT_PORT, ConnectionTarget, create_target

logger = logging.getLogger(__name__)

MUMBLE_SERVICE_TYPE = "_mumble._tcp.local."

# TXT keys checked, in order, for a server name
_TXT_NAME_KEYS = (b"name", b"registername")


def instance_name(service_name: str) -> str:
    """Return the instance part of a full mDNS service name."""
    suffix = f".{MUMBLE_SERVICE_TYPE}"
    if service_name.endswith(suffix):
        return service_name[: -len(suffix)]
    return service_name


def _txt_name(properties: dict[bytes, bytes | None] | None) -> str:
    for key in _TXT_NAME_KEYS:
        value = (properties or {}).get(key)
        if value:
            return value.decode("utf-8", errors="replace").strip()
    return ""


@dataclass(frozen=True, slots=True)
class DiscoveredServer:
    """A Mumble server announced on the LAN.

    Attributes:
        service_name: Full mDNS service name (unique per announcement).
        host: First resolved address.
        port: Voice port.
        addresses: Every resolved address, IPv4 and IPv6.
        hostname: mDNS host name without the trailing dot (e.g. "murmur.local").
        txt_name: Server name from the TXT record, if published.
    """

    service_name: str
    host: str
    port: int = DEFAULT_PORT
    addresses: tuple[str, ...] = ()
    hostname: str = ""
    txt_name: str = ""

    @classmethod
    def from_service_info(cls, service_name: str, info: ServiceInfo) -> "DiscoveredServer | None":
        """Build a server from resolved service info.

        Returns:
            DiscoveredServer, or None if no address could be resolved.
        """
        addresses = tuple(info.parsed_addresses())
        if not addresses:
            return None
        return cls(
            service_name=service_name,
            host=addresses[0],
            port=info.port or DEFAULT_PORT,
            addresses=addresses,
            hostname=info.server.rstrip(".") if info.server else "",
            txt_name=_txt_name(info.properties),
        )

    @property
    def display_name(self) -> str:
        return self.txt_name or instance_name(self.service_name) or self.hostname or self.host

    def to_target(self, username: str = "") -> ConnectionTarget:
        """Return a ConnectionTarget for this server.

        The mDNS host name is preferred over the address so the target id
        survives DHCP changes.
        """
        return create_target(self.hostname or self.host, self.port, username, self.display_name)


class ServerDiscovery(ServiceListener):
    """Browses the LAN for Mumble servers.

    Zeroconf invokes the listener methods and the callbacks on its own
    thread. Hand results to ProducerSync through its post_* methods.

    Example:
        discovery = ServerDiscovery(on_found=lambda s: sync.post_pin(s.to_target("alice")))
        discovery.start()
        # ... later ...
        discovery.stop()
    """

    def __init__(
        self,
        on_found: Callable[[DiscoveredServer], None] | None = None,
        on_removed: Callable[[DiscoveredServer], None] | None = None,
    ) -> None:
        """Initialize without browsing.

        Args:
            on_found: Called for new servers and for changed announcements.
            on_removed: Called when a server withdraws its announcement.
        """
        self._on_found = on_found
        self._on_removed = on_removed
        self._lock = threading.Lock()
        self._servers: dict[str, DiscoveredServer] = {}
        self._zeroconf: Zeroconf | None = None
        self._browser: ServiceBrowser | None = None

    @property
    def is_running(self) -> bool:
        return self._zeroconf is not None

    @property
    def servers(self) -> list[DiscoveredServer]:
        """Return the servers currently announced."""
        with self._lock:
            return list(self._servers.values())

    def start(self) -> None:
        """Begin browsing (no-op if already running)."""
        if self._zeroconf is not None:
            return
        self._zeroconf = Zeroconf()
        self._browser = ServiceBrowser(self._zeroconf, MUMBLE_SERVICE_TYPE, self)
        logger.debug("Browsing for %s", MUMBLE_SERVICE_TYPE)

    def stop(self) -> None:
        """Stop browsing and forget every server."""
        if self._browser is not None:
            self._browser.cancel()
            self._browser = None
        if self._zeroconf is not None:
            self._zeroconf.close()
            self._zeroconf = None
        with self._lock:
            self._servers.clear()

    # -- ServiceListener -----------------------------------------------------------

    def add_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        info = zc.get_service_info(type_, name)
        if info is None:
            logger.debug("No service info for %s", name)
            return
        server = DiscoveredServer.from_service_info(name, info)
        if server is None:
            logger.debug("No usable address for %s", name)
            return

        with self._lock:
            unchanged = self._servers.get(name) == server
            self._servers[name] = server
        if unchanged:
            return
        logger.info("Found Mumble server %s at %s:%d", server.display_name, server.host, server.port)
        if self._on_found is not None:
            self._on_found(server)

    def update_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        self.add_service(zc, type_, name)

    def remove_service(self, zc: Zeroconf, type_: str, name: str) -> None:  # noqa: ARG002
        with self._lock:
            server = self._servers.pop(name, None)
        if server is None:
            return
        logger.info("Mumble server %s went away", server.display_name)
        if self._on_removed is not None:
            self._on_removed(server)

    @staticmethod
    def discover_all(timeout: float = 5.0) -> list[DiscoveredServer]:
        """Browse for a fixed time and return what was found.

        Args:
            timeout: Seconds to browse.
        """
        discovery = ServerDiscovery()
        discovery.start()
        try:
            threading.Event().wait(timeout=timeout)
            return discovery.servers
        finally:
            discovery.stop()
