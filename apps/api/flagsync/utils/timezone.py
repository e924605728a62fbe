"""
Timezone Utilities.

Golden Rules:
1. Cache deadlines: Always compare timezone-aware UTC datetimes
2. Wire/persisted format: ISO 8601 with Z suffix and millisecond precision
   (the same shape JavaScript SDKs write with Date.toJSON)
"""

from datetime import datetime, timezone
from typing import Callable

# UTC constant
UTC = timezone.utc

# Injected "now" source; tests pass a controllable clock
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """
    Get current time in UTC (timezone-aware).

    Always use this instead of datetime.utcnow() which returns
    naive datetime.
    """
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC. Naive datetimes are assumed to be UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


# ============================================================
# ISO 8601 (WIRE FORMAT)
# ============================================================

def to_iso8601(dt: datetime) -> str:
    """
    Format as ISO 8601 with Z suffix.

    Usage:
        iso = to_iso8601(entry.stale_at)
        # "2024-01-15T14:30:00.000Z"
    """
    return to_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")
