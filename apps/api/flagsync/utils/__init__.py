"""Utility functions."""

from flagsync.utils.timezone import (
    UTC,
    Clock,
    utc_now,
    to_utc,
    to_iso8601,
)

__all__ = [
    "UTC",
    "Clock",
    "utc_now",
    "to_utc",
    "to_iso8601",
]
