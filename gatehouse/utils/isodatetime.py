"""ISO 8601 and epoch datetime conversion utilities.

This module centralizes all transformations between Python datetime objects,
ISO 8601 strings and epoch numbers. All time operations should use these
functions to ensure consistency and make usage clear across the codebase.
"""

from datetime import datetime, UTC


def to_timestamp(dt: datetime) -> str:
    """Convert datetime to ISO 8601 UTC timestamp string."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.isoformat().replace("+00:00", "Z")


def to_datetime(timestamp: str) -> datetime:
    """Convert ISO 8601 UTC timestamp string to datetime."""
    return datetime.fromisoformat(timestamp.replace('Z', '+00:00'))


def now() -> str:
    """Get current UTC timestamp as ISO 8601 string."""
    return to_timestamp(datetime.now(UTC))


def now_unix() -> int:
    """Get current UTC time as whole seconds since the epoch."""
    return int(datetime.now(UTC).timestamp())


def from_unix(seconds: int) -> datetime:
    """Convert seconds since the epoch to an aware UTC datetime."""
    return datetime.fromtimestamp(seconds, UTC)


def to_epoch_millis(dt: datetime) -> int:
    """Convert datetime to milliseconds since the epoch (naive means UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp() * 1000)
