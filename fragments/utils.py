"""Utility helper functions for the Fragments service."""

import hashlib
import uuid
from datetime import datetime, timezone

from common.constants import OWNER_ID_HASH_ALGORITHM


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def get_current_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format with millisecond precision.

    Returns:
        Timestamp string (e.g., "2024-01-31T12:00:00.123Z")
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def hash_owner_id(identity: str) -> str:
    """
    Derive the opaque owner id from an authenticated identity (email or username).

    Returns:
        Hex digest of the identity
    """
    return hashlib.new(OWNER_ID_HASH_ALGORITHM, identity.encode("utf-8")).hexdigest()


def split_extension(value: str) -> tuple[str, str]:
    """
    Split a path segment like "<id>.html" into ("<id>", ".html").

    Returns:
        Tuple of (fragment_id, extension); extension is "" when absent
    """
    fragment_id, dot, extension = value.rpartition(".")
    if not dot or not fragment_id:
        return value, ""
    return fragment_id, f".{extension}"
