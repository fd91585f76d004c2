"""
Shared utilities for browser extractors.

This package provides common functionality used across the browser families:
- timestamps: Browser timestamp format conversions (WebKit, PRTime, Unix)
- sqlite_helpers: Lock-aware read-only SQLite access
- extraction_warnings: Unknown schema / value warning collection
- platforms: OS detection and user directory resolution

Design Principle:
    Extractors never write to a browser database and never persist
    decrypted values.
"""

from .timestamps import (
    WEBKIT_EPOCH_DIFF,
    firefox_expiry_to_unix,
    prtime_to_unix,
    unix_to_datetime,
    unix_to_http_date,
    webkit_to_unix,
)

from .sqlite_helpers import (
    get_column_names,
    get_table_names,
    iter_rows,
    open_cookie_db,
    table_exists,
)

from .extraction_warnings import ExtractionWarning, ExtractionWarningCollector

__all__ = [
    "WEBKIT_EPOCH_DIFF",
    "ExtractionWarning",
    "ExtractionWarningCollector",
    "firefox_expiry_to_unix",
    "get_column_names",
    "get_table_names",
    "iter_rows",
    "open_cookie_db",
    "prtime_to_unix",
    "table_exists",
    "unix_to_datetime",
    "unix_to_http_date",
    "webkit_to_unix",
]
