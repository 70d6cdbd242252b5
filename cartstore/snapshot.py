"""
Cart snapshot encoding.

Current format (version 1):

    {"version": 1, "items": [{"id": 7, "name": "Shoe", "price": 100,
                              "imageUrl": "x", "amount": 1}]}

Snapshots written before versioning are a bare JSON list of product API
records (`title` and `image` instead of `name` and `imageUrl`) plus `amount`,
and are still accepted on read.
"""
import json

from .errors import SnapshotError
from .models import Cart

SNAPSHOT_VERSION = 1

# Unversioned snapshots stored the product API record as-is
LEGACY_FIELD_ALIASES = {"title": "name", "image": "imageUrl"}


def dump_cart(cart: Cart) -> str:
    """Serialize a cart to its snapshot string."""
    return json.dumps(
        {"version": SNAPSHOT_VERSION, "items": cart.to_list()},
        ensure_ascii=False,
        separators=(",", ":"),
    )


def _from_legacy(record: object) -> object:
    if not isinstance(record, dict):
        return record
    normalized = dict(record)
    for legacy, current in LEGACY_FIELD_ALIASES.items():
        if current not in normalized and legacy in normalized:
            normalized[current] = normalized.pop(legacy)
    return normalized


def load_cart(data: str) -> Cart:
    """
    Deserialize a snapshot string.

    Raises:
        SnapshotError: malformed JSON, unknown version, missing or invalid
            fields, non-positive amounts or duplicate ids
    """
    try:
        payload = json.loads(data)
    except (json.JSONDecodeError, TypeError) as e:
        raise SnapshotError(f"Snapshot is not valid JSON: {e}") from e

    if isinstance(payload, list):
        records = [_from_legacy(record) for record in payload]
    elif isinstance(payload, dict):
        version = payload.get("version")
        if version != SNAPSHOT_VERSION:
            raise SnapshotError(f"Unsupported snapshot version: {version!r}")
        records = payload.get("items")
        if not isinstance(records, list):
            raise SnapshotError("Snapshot items must be a list")
    else:
        raise SnapshotError(f"Unexpected snapshot type: {type(payload).__name__}")

    if not all(isinstance(record, dict) for record in records):
        raise SnapshotError("Snapshot items must be objects")

    try:
        return Cart.from_list(records)
    except KeyError as e:
        raise SnapshotError(f"Snapshot item missing field {e}") from e
    except (ValueError, TypeError) as e:
        raise SnapshotError(f"Invalid snapshot item: {e}") from e
