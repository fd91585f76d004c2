"""
Exceptions for cookie store extraction.

Source-level errors (not found, locked, corrupt, I/O) end the read of one
cookie store. Row-level errors (decryption, missing key) skip one cookie.
"""

from __future__ import annotations

from typing import Optional, Sequence


class CookieStoreError(Exception):
    """Base exception for cookie extraction errors."""

    def __init__(self, message: str, *, source: Optional[str] = None):
        self.source = source
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.source:
            return f"{self.source}: {message}"
        return message


class StoreNotFoundError(CookieStoreError):
    """Raised when no cookie database exists at the expected or given location."""


class StoreLockedError(CookieStoreError):
    """Raised when a running browser holds the database lock."""

    def __init__(self, message: str, *, source: Optional[str] = None):
        message += " (close the browser or enable lock bypass)"
        super().__init__(message, source=source)


class StoreCorruptError(CookieStoreError):
    """Raised when the database is structurally invalid or read inconsistently."""


class StoreIoError(CookieStoreError):
    """Raised for any other failure while reading the database."""


class KeyUnavailableError(CookieStoreError):
    """Raised when no decryption key can be obtained for a ciphertext version."""


class DecryptError(CookieStoreError):
    """Raised when a single cookie value cannot be decrypted."""


class AuthenticationFailedError(DecryptError):
    """Raised when an authenticated ciphertext fails its integrity check."""


class MalformedValueError(DecryptError):
    """Raised when a stored value does not have the structure its prefix implies."""


class UnsupportedEncryptionError(DecryptError):
    """Raised for ciphertext versions that cannot be decrypted outside the browser."""


class SerializeError(CookieStoreError):
    """Raised when a cookie record cannot be rendered in the selected format."""


class NoCookieSourceError(CookieStoreError):
    """Raised when every requested cookie source failed."""

    def __init__(self, errors: Sequence[CookieStoreError]):
        self.errors = list(errors)
        details = "; ".join(str(error) for error in self.errors) or "no source requested"
        super().__init__(f"No cookie source could be read: {details}")
