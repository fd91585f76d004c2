"""
Timestamp conversion utilities for browser extractors.

These are PURE FUNCTIONS with no side effects.
Each browser parser calls these directly - no abstraction layers.

Formats supported:
- WebKit: Microseconds since 1601-01-01 (Chromium browsers)
- PRTime: Microseconds since 1970-01-01 (Firefox creationTime/lastAccessed)
- Firefox expiry: seconds (older schemas) or milliseconds (newer schemas)
- Unix: Seconds since 1970-01-01
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

# Constants for timestamp epoch calculations
WEBKIT_EPOCH_DIFF = 11644473600  # Seconds between 1601-01-01 and 1970-01-01
MAX_UNIX_SECONDS = 253402300799  # 9999-12-31T23:59:59Z

# Magnitude thresholds used to guess the unit of a Firefox expiry value.
# Seconds stay below 1e11 until the year 5138.
MILLISECONDS_THRESHOLD = 10**11
MICROSECONDS_THRESHOLD = 10**14


def _clamp(unix_seconds: int) -> int:
    return min(unix_seconds, MAX_UNIX_SECONDS)


def webkit_to_unix(microseconds: Optional[int]) -> Optional[int]:
    """
    Convert a WebKit timestamp to Unix seconds.

    WebKit timestamps are microseconds since 1601-01-01 00:00:00 UTC.
    Used by Chromium-based browsers (Chrome, Edge, Brave).

    Args:
        microseconds: WebKit timestamp (microseconds since 1601)

    Returns:
        Unix seconds (clamped to year 9999), or None if zero/negative/before 1970

    Example:
        >>> webkit_to_unix(13000000000000000)
        1355526400
    """
    if not microseconds or microseconds <= 0:
        return None
    unix_seconds = microseconds // 1_000_000 - WEBKIT_EPOCH_DIFF
    if unix_seconds <= 0:
        return None
    return _clamp(unix_seconds)


def prtime_to_unix(microseconds: Optional[int]) -> Optional[int]:
    """
    Convert a PRTime timestamp (microseconds since 1970) to Unix seconds.

    Returns:
        Unix seconds, or None if zero/negative
    """
    if not microseconds or microseconds <= 0:
        return None
    return _clamp(microseconds // 1_000_000)


def firefox_expiry_to_unix(value: Optional[int]) -> Optional[int]:
    """
    Convert a Firefox ``moz_cookies.expiry`` value to Unix seconds.

    Firefox stored expiry in seconds for most of its history; recent schema
    versions store milliseconds, and some exports carry PRTime microseconds.
    The unit is inferred from the magnitude.

    Returns:
        Unix seconds, or None for session cookies (zero, negative or NULL)
    """
    if value is None:
        return None
    try:
        value = int(value)
    except (TypeError, ValueError):
        return None
    if value <= 0:
        return None
    if value >= MICROSECONDS_THRESHOLD:
        return prtime_to_unix(value)
    if value >= MILLISECONDS_THRESHOLD:
        return _clamp(value // 1000)
    return _clamp(value)


def unix_to_datetime(timestamp: Optional[int | float]) -> Optional[datetime]:
    """
    Convert Unix timestamp to datetime.

    Args:
        timestamp: Unix timestamp (seconds since 1970)

    Returns:
        datetime in UTC, or None if invalid/zero
    """
    if not timestamp or timestamp <= 0:
        return None

    try:
        if timestamp > MAX_UNIX_SECONDS:
            return None
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (ValueError, OSError, OverflowError):
        return None


def unix_to_http_date(timestamp: Optional[int]) -> Optional[str]:
    """
    Render Unix seconds as an RFC 1123 date (``Mon, 01 Jan 2024 00:00:00 GMT``).

    Returns:
        Formatted string or None if invalid
    """
    dt = unix_to_datetime(timestamp)
    return dt.strftime("%a, %d %b %Y %H:%M:%S GMT") if dt else None
