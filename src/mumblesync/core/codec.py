"""JSON encoding of target lists stored in the shared store.

Lists are a versionless JSON array of records. Unknown keys are ignored
so newer writers can add optional fields. Any failure to decode the array
yields an empty list; callers never see a decode error.
"""

import json
import logging
from collections.abc import Iterable
from typing import cast

from mumblesync.models.target import DEFAULT_PORT, ConnectionTarget

logger = logging.getLogger(__name__)


class _RecordError(ValueError):
    """A record in the stored array is malformed."""


def _target_to_record(target: ConnectionTarget) -> dict[str, object]:
    return {
        "id": target.id,
        "display_name": target.display_name,
        "hostname": target.hostname,
        "port": target.port,
        "username": target.username,
        "has_credential": target.has_credential,
        "last_connected": target.last_connected_at,
    }


def _require_str(item: dict[str, object], key: str) -> str:
    value = item.get(key)
    if not isinstance(value, str):
        raise _RecordError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def _record_to_target(raw_item: object) -> ConnectionTarget:
    if not isinstance(raw_item, dict):
        raise _RecordError(f"record must be an object, got {type(raw_item).__name__}")
    item = cast(dict[str, object], raw_item)

    port_val = item.get("port", DEFAULT_PORT)
    # bool is an int subclass; reject it explicitly
    if not isinstance(port_val, int) or isinstance(port_val, bool):
        raise _RecordError("'port' must be an integer")

    last_val = item.get("last_connected")
    if last_val is not None and (
        not isinstance(last_val, int | float) or isinstance(last_val, bool)
    ):
        raise _RecordError("'last_connected' must be a number or null")

    hostname = _require_str(item, "hostname")
    username_val = item.get("username", "")
    display_val = item.get("display_name", "")
    return ConnectionTarget(
        id=_require_str(item, "id"),
        display_name=str(display_val) if display_val else hostname,
        hostname=hostname,
        port=port_val,
        username=str(username_val) if username_val else "",
        has_credential=bool(item.get("has_credential", False)),
        last_connected_at=float(last_val) if last_val is not None else None,
    )


def encode_targets(targets: Iterable[ConnectionTarget]) -> bytes:
    """Serialize targets to the stored JSON array.

    Args:
        targets: Targets in list order.

    Returns:
        UTF-8 encoded JSON bytes.

    Raises:
        ValueError: If a field cannot be represented as JSON.
        TypeError: If a field has an unserializable type.
    """
    records = [_target_to_record(t) for t in targets]
    return json.dumps(records, ensure_ascii=False, allow_nan=False).encode("utf-8")


def decode_targets(data: bytes | None) -> list[ConnectionTarget]:
    """Deserialize a stored JSON array.

    Args:
        data: Stored bytes, or None if the key was absent.

    Returns:
        Decoded targets, or an empty list when the data is absent or any
        part of the array fails to decode.
    """
    if not data:
        return []
    try:
        raw = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Discarding undecodable target list: %s", e)
        return []

    if not isinstance(raw, list):
        logger.warning("Discarding target list: expected array, got %s", type(raw).__name__)
        return []

    try:
        return [_record_to_target(item) for item in cast(list[object], raw)]
    except _RecordError as e:
        logger.warning("Discarding target list with invalid record: %s", e)
        return []
