"""
Core Enumerations

Centralized enum definitions for consistent typing across the codebase.
Using StrEnum (Python 3.11+) for string-based enums that serialize naturally.
"""

from enum import StrEnum


class BrowserKind(StrEnum):
    """Supported browser identifiers matching the family pattern keys."""

    CHROME = "chrome"
    CHROMIUM = "chromium"
    EDGE = "edge"
    BRAVE = "brave"
    FIREFOX = "firefox"

    @classmethod
    def chromium_browsers(cls) -> tuple["BrowserKind", ...]:
        """Return browsers using the Chromium engine (shared cookie schema)."""
        return (cls.CHROME, cls.CHROMIUM, cls.EDGE, cls.BRAVE)

    @classmethod
    def parse(cls, value: str) -> "BrowserKind":
        """Parse a browser identifier, case-insensitively."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            supported = ", ".join(member.value for member in cls)
            raise ValueError(
                f"'{value}' is not one of the supported browsers ({supported})"
            ) from None

    @property
    def is_chromium(self) -> bool:
        return self in self.chromium_browsers()

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    BrowserKind.CHROME: "Google Chrome",
    BrowserKind.CHROMIUM: "Chromium",
    BrowserKind.EDGE: "Microsoft Edge",
    BrowserKind.BRAVE: "Brave",
    BrowserKind.FIREFOX: "Mozilla Firefox",
}


class SameSite(StrEnum):
    """Canonical SameSite attribute values."""

    NONE = "none"
    LAX = "lax"
    STRICT = "strict"
    UNSPECIFIED = "unspecified"


class OutputFormat(StrEnum):
    """Serialized cookie formats."""

    NETSCAPE = "netscape"
    HTTPIE_SESSION = "httpie-session"
    HUMAN = "human"

    @classmethod
    def parse(cls, value: str) -> "OutputFormat":
        """Parse an output format name (``httpie`` is accepted as an alias)."""
        normalized = value.strip().lower()
        if normalized == "httpie":
            return cls.HTTPIE_SESSION
        try:
            return cls(normalized)
        except ValueError:
            supported = ", ".join(member.value for member in cls)
            raise ValueError(
                f"'{value}' is not one of the supported output formats ({supported})"
            ) from None


class KeyStrategy(StrEnum):
    """How the Chromium cookie key is obtained on a given platform."""

    CREDENTIAL_STORE = "credential_store"        # macOS Keychain
    PASSWORD_DERIVATION = "password_derivation"  # Linux (fixed or keyring password)
    NATIVE_UNPROTECT = "native_unprotect"        # Windows DPAPI


class CipherScheme(StrEnum):
    """Symmetric constructions used for Chromium cookie values."""

    AES_128_CBC = "aes-128-cbc"
    AES_256_GCM = "aes-256-gcm"


class ExtractionStatus(StrEnum):
    """Status values for a single cookie source."""

    OK = "ok"
    PARTIAL = "partial"  # Some rows skipped
    ERROR = "error"
