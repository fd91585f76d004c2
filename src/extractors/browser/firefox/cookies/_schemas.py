"""
Firefox Cookies schema definitions.

This module defines known tables, columns, and enum values for Firefox
cookies databases (cookies.sqlite). Used by the parser to pick the cookie
table and to warn about unknown schemas.

Schema Documentation:
- moz_cookies table: Primary cookie storage (Firefox 3+)
- cookies table: Legacy name (Firefox 2 and earlier)

Column Evolution:
- Firefox 3+: host, name, value, path, expiry, isSecure, isHttpOnly
- Firefox 60+: originAttributes (container tabs, private browsing, FPI)
- Firefox 69+: sameSite, rawSameSite
- Firefox 86+: schemeMap (for SameSite cookie fixes)
- Firefox 132+: expiry stored in milliseconds instead of seconds

Values are stored in plaintext; no decryption step exists for Firefox.
"""

from __future__ import annotations

from typing import Dict, List, Set

from core.enums import SameSite


# =============================================================================
# Known Tables
# =============================================================================

# Cookie tables in preference order
COOKIES_TABLES: List[str] = [
    "moz_cookies",  # Modern Firefox (3+)
    "cookies",      # Legacy Firefox (2 and earlier)
]


# =============================================================================
# Known Columns
# =============================================================================

KNOWN_MOZ_COOKIES_COLUMNS: Set[str] = {
    # Core cookie data
    "id",
    "name",
    "value",
    "host",
    "path",

    # Timestamps
    "expiry",           # Unix seconds (milliseconds since Firefox 132)
    "creationTime",     # PRTime (microseconds since 1970)
    "lastAccessed",     # PRTime (microseconds since 1970)

    # Security flags
    "isSecure",
    "isHttpOnly",
    "sameSite",
    "rawSameSite",

    # Privacy features
    "originAttributes",
    "inBrowserElement",
    "schemeMap",
    "isPartitionedAttributeSet",

    # Legacy column names
    "baseDomain",
    "appId",
}

# Literal used in the SELECT when an optional column is missing
COLUMN_DEFAULTS: Dict[str, str] = {
    "value": "''",
    "path": "'/'",
    "expiry": "0",
    "isSecure": "0",
    "isHttpOnly": "0",
    "sameSite": "NULL",
}


# =============================================================================
# SameSite Value Mapping
# =============================================================================

# Source: https://searchfox.org/mozilla-central/source/netwerk/cookie/nsICookie.idl
SAMESITE_VALUES: Dict[int, SameSite] = {
    0: SameSite.NONE,    # SAMESITE_NONE - Cross-site allowed
    1: SameSite.LAX,     # SAMESITE_LAX - Cross-site on navigation
    2: SameSite.STRICT,  # SAMESITE_STRICT - Same-site only
}

KNOWN_SAMESITE_VALUES: Set[int] = set(SAMESITE_VALUES.keys())


def get_samesite(value) -> SameSite:
    """
    Convert a sameSite column value to the canonical enum.

    Missing, unknown or non-integer values map to ``SameSite.UNSPECIFIED``.
    """
    try:
        return SAMESITE_VALUES.get(int(value), SameSite.UNSPECIFIED)
    except (TypeError, ValueError):
        return SameSite.UNSPECIFIED
