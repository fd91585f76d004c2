"""
Cookie store extractors.

Each browser family is a self-contained package with:
- Store discovery (default profile roots, profile selection)
- Schema definitions (known tables, columns, enum values)
- Row parsing into canonical CookieRecords

Folder Structure:
- browser/         Browser family extractors (chromium/, firefox/) and discovery
- _shared/         Shared utilities (timestamps, sqlite_helpers, warnings, platforms)
"""

from .exceptions import (
    AuthenticationFailedError,
    CookieStoreError,
    DecryptError,
    KeyUnavailableError,
    MalformedValueError,
    NoCookieSourceError,
    SerializeError,
    StoreCorruptError,
    StoreIoError,
    StoreLockedError,
    StoreNotFoundError,
    UnsupportedEncryptionError,
)

__all__ = [
    'AuthenticationFailedError',
    'CookieStoreError',
    'DecryptError',
    'KeyUnavailableError',
    'MalformedValueError',
    'NoCookieSourceError',
    'SerializeError',
    'StoreCorruptError',
    'StoreIoError',
    'StoreLockedError',
    'StoreNotFoundError',
    'UnsupportedEncryptionError',
]
