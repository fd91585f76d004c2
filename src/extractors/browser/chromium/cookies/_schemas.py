"""
Chromium Cookie schema definitions.

This module defines known tables, columns, and enum values for the Chromium
cookie database, plus the constants of its value encryption. Used by the
parser to resolve legacy column names and to warn about unknown schemas.

Schema Evolution:
- Chromium <67: secure/httponly/persistent column names
- Chromium <76: firstpartyonly instead of samesite
- Chromium 80+: encrypted values everywhere (v10 / v11 prefixes)
- Chromium 86+: source_scheme, source_port columns added
- Chromium 100+: top_frame_site_key for partitioned cookies
- Chromium 115+: last_update_utc column added
- Chromium 130+ (meta version 24): SHA-256 of host_key prepended to plaintext
- Chromium 127+ on Windows: app-bound v20 values

References:
- Chromium source: net/extras/sqlite/sqlite_persistent_cookie_store.cc
- Chromium source: components/os_crypt/sync/os_crypt_*.cc
"""

from __future__ import annotations

from typing import Dict, List, Set

from core.enums import SameSite


# =============================================================================
# Known Tables
# =============================================================================

KNOWN_COOKIES_TABLES: Set[str] = {
    "cookies",
    "meta",  # Schema version tracking
}


# =============================================================================
# Known Columns (cookies table)
# =============================================================================
# Columns read by the parser, plus documented ones it ignores.
# Anything else is reported as an unknown column.

KNOWN_COOKIES_COLUMNS: Set[str] = {
    # Core cookie data
    "host_key",
    "name",
    "value",
    "path",
    "encrypted_value",

    # Timestamps (WebKit format)
    "creation_utc",
    "expires_utc",
    "last_access_utc",
    "last_update_utc",

    # Security flags (modern names)
    "is_secure",
    "is_httponly",
    "samesite",

    # Persistence
    "is_persistent",
    "has_expires",
    "priority",

    # Documented but not needed for an exported cookie
    "source_scheme",
    "source_port",
    "top_frame_site_key",
    "is_same_party",
    "has_cross_site_ancestor",
    "source_type",
    "browser_provenance",   # Edge
    "is_edgelegacycookie",  # Edge
}

# Legacy column name aliases.
# Key = modern name expected by the parser, Values = legacy alternatives.
LEGACY_COLUMN_ALIASES: Dict[str, List[str]] = {
    "is_secure": ["secure"],           # Chromium <67
    "is_httponly": ["httponly"],       # Chromium <67
    "is_persistent": ["persistent"],   # Chromium <67
    "samesite": ["firstpartyonly"],    # Chromium <76
}

LEGACY_COLUMN_NAMES: Set[str] = {
    alias
    for aliases in LEGACY_COLUMN_ALIASES.values()
    for alias in aliases
}


# =============================================================================
# SameSite Attribute Mapping
# =============================================================================
# Source: net/cookies/cookie_constants.h

SAMESITE_VALUES: Dict[int, SameSite] = {
    -1: SameSite.UNSPECIFIED,  # No SameSite attribute set
    0: SameSite.NONE,          # SameSite=None (no_restriction)
    1: SameSite.LAX,
    2: SameSite.STRICT,
}

KNOWN_SAMESITE_VALUES: Set[int] = set(SAMESITE_VALUES.keys())


def get_samesite(value) -> SameSite:
    """
    Convert a samesite column value to the canonical enum.

    Unknown or non-integer values map to ``SameSite.UNSPECIFIED``.
    """
    try:
        return SAMESITE_VALUES.get(int(value), SameSite.UNSPECIFIED)
    except (TypeError, ValueError):
        return SameSite.UNSPECIFIED


# =============================================================================
# Value Encryption
# =============================================================================

# Ciphertext version prefixes
PREFIX_V10 = b"v10"
PREFIX_V11 = b"v11"
PREFIX_V20 = b"v20"  # App-bound encryption
PREFIX_LENGTH = 3

# meta.version from which the plaintext starts with SHA-256(host_key)
DOMAIN_DIGEST_MIN_VERSION = 24
DOMAIN_DIGEST_LENGTH = 32

# PBKDF2 parameters of the CBC key (os_crypt_linux.cc / os_crypt_mac.mm)
PBKDF2_SALT = b"saltysalt"
PBKDF2_KEY_LENGTH = 16
LINUX_ITERATIONS = 1
MACOS_ITERATIONS = 1003
LINUX_V10_PASSWORD = "peanuts"
CBC_IV = b" " * 16

# AES-GCM layout (os_crypt_win.cc)
GCM_NONCE_LENGTH = 12
GCM_TAG_LENGTH = 16
GCM_KEY_LENGTH = 32
DPAPI_KEY_PREFIX = b"DPAPI"
