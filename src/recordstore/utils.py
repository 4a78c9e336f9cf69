"""Small helpers shared by the store and the pipelines."""

import time
import uuid
from typing import Any


def generate_guid() -> str:
    """Generate a temporary identity, unique for the life of the process."""
    return uuid.uuid4().hex


def now_ms() -> int:
    return int(time.time() * 1000)


def update_timestamp(previous: int | None) -> int:
    """Return a millisecond timestamp strictly greater than ``previous``.

    Two saves inside the same millisecond still produce ordered stamps.
    """
    current = now_ms()
    if previous is not None and current <= previous:
        return previous + 1
    return current


def compute_changes(
    record: dict[str, Any], original: dict[str, Any] | None
) -> dict[str, Any] | None:
    """Compute a diff of changed fields between record and original.

    Returns None if original is None (nothing to compare against).
    Returns a dict of {field: new_value} for fields that differ or were added.
    Removed fields are reported with a value of None.
    """
    if original is None:
        return None

    changes: dict[str, Any] = {}
    for key, value in record.items():
        if key in original and original[key] != value:
            changes[key] = value
        elif key not in original:
            changes[key] = value

    for key in original:
        if key not in record:
            changes[key] = None

    return changes


def is_blank(value: Any) -> bool:
    """True for the primary-key values that mean "no identity yet"."""
    return value is None or value == ""
