"""Connection target model shared between the app and its widgets."""

import logging
import re
from dataclasses import dataclass, replace
from typing import Self
from urllib.parse import quote, urlunsplit

logger = logging.getLogger(__name__)

DEFAULT_PORT = 64738
DEEP_LINK_SCHEME = "mumble"

_MAX_PORT = 65535

# Hostnames, IPv4 literals and bracket-less IPv6 literals
_LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9\-]{0,61}[A-Za-z0-9])?"
_HOST_PATTERN = re.compile(rf"^{_LABEL}(?:\.{_LABEL})*\.?$|^[0-9A-Fa-f:.]+$")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def make_target_id(hostname: str, port: int, username: str) -> str:
    """Return the deterministic identifier for a target.

    Args:
        hostname: Server hostname or IP address.
        port: Server port.
        username: User name used on that server.

    Returns:
        Identifier of the form ``hostname:port:username``.
    """
    return f"{hostname}:{port}:{username}"


def _structured_link(hostname: str, port: int, username: str) -> str | None:
    if not hostname or not _HOST_PATTERN.match(hostname):
        return None
    if not 0 < port <= _MAX_PORT:
        return None
    host = f"[{hostname}]" if ":" in hostname else hostname
    netloc = f"{host}:{port}"
    if username:
        if _CONTROL_CHARS.search(username):
            return None
        netloc = f"{quote(username, safe='')}@{netloc}"
    return urlunsplit((DEEP_LINK_SCHEME, netloc, "", "", ""))


def _fallback_link(hostname: str, port: int) -> str | None:
    stripped = hostname.strip()
    if not stripped or _CONTROL_CHARS.search(stripped):
        return None
    return f"{DEEP_LINK_SCHEME}://{quote(stripped, safe='.:-[]')}:{port}"


@dataclass(frozen=True, slots=True)
class ConnectionTarget:
    """A named, addressable server a user can connect to.

    Two targets are the same entry when their ``id`` matches; lists
    de-duplicate by ``id`` and never by comparing whole records.

    Attributes:
        id: Deterministic identifier, see make_target_id().
        display_name: Human-readable name shown on surfaces.
        hostname: Server hostname or IP address.
        port: Server port (default 64738).
        username: User name used on the server.
        has_credential: Whether a client certificate is bound (registered user).
        last_connected_at: Unix timestamp of the last connection, None if never.
    """

    id: str
    display_name: str
    hostname: str
    port: int = DEFAULT_PORT
    username: str = ""
    has_credential: bool = False
    last_connected_at: float | None = None

    @property
    def deep_link_url(self) -> str | None:
        """Return a ``mumble://`` URL that opens this server.

        Falls back to a minimally escaped URL when the structured form does
        not validate, and to None when no usable link can be produced.
        """
        try:
            link = _structured_link(self.hostname, self.port, self.username)
            if link is None:
                logger.debug("Using fallback deep link for %s", self.id)
                link = _fallback_link(self.hostname, self.port)
        except (TypeError, ValueError) as e:
            logger.debug("Deep link construction failed for %r: %s", self.id, e)
            return None
        return link

    def with_display_name(self, display_name: str) -> Self:
        """Return a copy with a different display name."""
        return replace(self, display_name=display_name or self.hostname)


def create_target(
    hostname: str,
    port: int = DEFAULT_PORT,
    username: str = "",
    display_name: str | None = None,
    has_credential: bool = False,
    last_connected_at: float | None = None,
) -> ConnectionTarget:
    """Create a ConnectionTarget with a generated ID.

    An empty or missing display name falls back to the hostname.

    Returns:
        New ConnectionTarget.
    """
    return ConnectionTarget(
        id=make_target_id(hostname, port, username),
        display_name=display_name or hostname,
        hostname=hostname,
        port=port,
        username=username,
        has_credential=has_credential,
        last_connected_at=last_connected_at,
    )
