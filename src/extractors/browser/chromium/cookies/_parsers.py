"""
Chromium Cookie SQLite database parser.

Parses the Cookies database from Chromium-based browsers (Chrome, Chromium,
Edge, Brave). All of them use an identical schema, so one parser works for all.

Features:
- Legacy column name resolution (Chromium <67 / <76)
- Per-row decryption of encrypted_value while the cursor is iterated
- Host-key digest handling for cookie database version 24+
- SameSite mapping with unknown value tracking
- Schema warning support for unknown columns
- WebKit timestamp conversion

Usage:
    from extractors.browser.chromium.cookies._parsers import iter_cookie_results

    with open_cookie_db(target.database_path) as conn:
        for result in iter_cookie_results(conn, target):
            if isinstance(result, CookieRecord):
                print(f"{result.domain}: {result.name}")
"""

from __future__ import annotations

import sqlite3
from typing import Dict, Iterator, List, Optional, TYPE_CHECKING

from core.logging import get_logger
from core.records import BrowserTarget, CookieRecord, CookieResult, RowError
from ...._shared.extraction_warnings import discover_unknown_columns
from ...._shared.sqlite_helpers import get_column_names, iter_rows, table_exists
from ...._shared.timestamps import webkit_to_unix
from ....exceptions import (
    DecryptError,
    KeyUnavailableError,
    StoreCorruptError,
    UnsupportedEncryptionError,
)
from ._crypto import ENCRYPTED_PREFIXES, ciphertext_version, decrypt_value
from ._keys import ChromiumKeyProvider, KeyMap
from ._schemas import (
    DOMAIN_DIGEST_MIN_VERSION,
    KNOWN_COOKIES_COLUMNS,
    KNOWN_SAMESITE_VALUES,
    LEGACY_COLUMN_ALIASES,
    LEGACY_COLUMN_NAMES,
    get_samesite,
)

LOGGER = get_logger("extractors.browser.chromium.cookies")

if TYPE_CHECKING:
    from extractors._shared.extraction_warnings import ExtractionWarningCollector

REQUIRED_COLUMNS = ("host_key", "name", "path")

# Literal used in the SELECT when an optional column is missing
_COLUMN_DEFAULTS: Dict[str, str] = {
    "value": "''",
    "encrypted_value": "NULL",
    "expires_utc": "0",
    "has_expires": "1",
    "is_persistent": "1",
    "is_secure": "0",
    "is_httponly": "0",
    "samesite": "-1",
}


# =============================================================================
# Schema Inspection
# =============================================================================

def _resolve_column_names(actual_columns: List[str]) -> Dict[str, str]:
    """
    Map modern column names to the SELECT expression for this database.

    Legacy names (``secure``, ``httponly``, ``persistent``, ``firstpartyonly``)
    are used when the modern one is absent; missing optional columns fall back
    to a literal default.
    """
    present = {column.lower() for column in actual_columns}
    result: Dict[str, str] = {}
    for modern_name, default in _COLUMN_DEFAULTS.items():
        if modern_name in present:
            result[modern_name] = modern_name
            continue
        for legacy in LEGACY_COLUMN_ALIASES.get(modern_name, []):
            if legacy in present:
                result[modern_name] = legacy
                LOGGER.debug("Legacy column detected: %s → %s", modern_name, legacy)
                break
        else:
            result[modern_name] = default
    return result


def get_meta_version(conn: sqlite3.Connection) -> Optional[int]:
    """
    Read the cookie database schema version from the ``meta`` table.

    Returns:
        Integer version, or None when absent
    """
    if not table_exists(conn, "meta"):
        return None
    row = conn.execute("SELECT value FROM meta WHERE key = 'version'").fetchone()
    if row is None:
        return None
    try:
        return int(row[0])
    except (TypeError, ValueError):
        return None


def discover_and_warn_unknown_columns(
    conn: sqlite3.Connection,
    warning_collector: Optional["ExtractionWarningCollector"],
    source_file: str,
) -> None:
    """
    Discover unknown columns in the cookies table and add warnings.

    Args:
        conn: SQLite connection to Cookies database
        warning_collector: Optional collector for schema warnings
        source_file: Source file path for warning context
    """
    if warning_collector is None:
        return
    known = KNOWN_COOKIES_COLUMNS | LEGACY_COLUMN_NAMES
    for column in discover_unknown_columns(conn, "cookies", known):
        warning_collector.add_unknown_column(
            table_name="cookies",
            column_name=column["name"],
            column_type=column["type"],
            source_file=source_file,
        )


# =============================================================================
# Parsing Functions
# =============================================================================

def _build_query(column_map: Dict[str, str]) -> str:
    # Column names are resolved dynamically to support legacy schemas
    return f"""
        SELECT
            host_key,
            name,
            path,
            {column_map["value"]} AS value,
            {column_map["encrypted_value"]} AS encrypted_value,
            {column_map["expires_utc"]} AS expires_utc,
            {column_map["has_expires"]} AS has_expires,
            {column_map["is_persistent"]} AS is_persistent,
            {column_map["is_secure"]} AS is_secure,
            {column_map["is_httponly"]} AS is_httponly,
            COALESCE({column_map["samesite"]}, -1) AS samesite
        FROM cookies
        ORDER BY rowid
    """


def _expiry(row: sqlite3.Row) -> Optional[int]:
    if not row["has_expires"] or not row["is_persistent"]:
        return None
    return webkit_to_unix(row["expires_utc"])


def iter_cookie_results(
    conn: sqlite3.Connection,
    target: BrowserTarget,
    *,
    key_provider: Optional[ChromiumKeyProvider] = None,
    keys: Optional[KeyMap] = None,
    platform: Optional[str] = None,
    warning_collector: Optional["ExtractionWarningCollector"] = None,
) -> Iterator[CookieResult]:
    """
    Parse a Chromium Cookies database into canonical records.

    Args:
        conn: Read-only connection to the Cookies database
        target: The resolved source (browser, paths, label)
        key_provider: Provider to reuse; built from ``target`` when omitted
        keys: Fixed keys per version, forwarded to a new provider
        platform: ``sys.platform``-style override for a new provider
        warning_collector: Optional collector for schema/crypto warnings

    Yields:
        CookieRecord for each decrypted row, RowError for each skipped row,
        in rowid order

    Raises:
        StoreCorruptError: No cookies table, or required columns missing
        StoreLockedError / StoreIoError: Read failed mid-iteration
    """
    label = target.label
    source_file = str(target.database_path)

    if not table_exists(conn, "cookies"):
        raise StoreCorruptError("No cookies table in database", source=label)

    actual_columns = get_column_names(conn, "cookies")
    missing = [c for c in REQUIRED_COLUMNS if c not in actual_columns]
    if missing:
        raise StoreCorruptError(
            f"cookies table lacks required columns: {', '.join(missing)}", source=label,
        )

    discover_and_warn_unknown_columns(conn, warning_collector, source_file)

    meta_version = get_meta_version(conn)
    domain_digest = meta_version is not None and meta_version >= DOMAIN_DIGEST_MIN_VERSION
    LOGGER.debug("Reading %s (meta version %s)", source_file, meta_version)

    if key_provider is None:
        key_provider = ChromiumKeyProvider(
            target.browser,
            local_state_path=target.local_state_path,
            platform=platform,
            keys=keys,
        )

    query = _build_query(_resolve_column_names(actual_columns))
    for index, row in enumerate(iter_rows(conn, query, source=label)):
        host = row["host_key"] or ""
        name = row["name"] or ""
        try:
            value = _row_value(row, key_provider, host, domain_digest)
        except (DecryptError, KeyUnavailableError) as e:
            e.source = e.source or label
            _warn_row_error(e, row["encrypted_value"], warning_collector, source_file)
            LOGGER.debug("Skipping %s row %d (%s %s): %s", label, index, host, name, type(e).__name__)
            yield RowError(source=label, row_index=index, host=host, name=name, error=e)
            continue

        samesite_raw = row["samesite"]
        if warning_collector is not None and samesite_raw not in KNOWN_SAMESITE_VALUES:
            warning_collector.add_unknown_enum_value("samesite", samesite_raw, source_file)

        yield CookieRecord(
            domain=host,
            path=row["path"] or "/",
            name=name,
            value=value,
            expires_at=_expiry(row),
            secure=bool(row["is_secure"]),
            http_only=bool(row["is_httponly"]),
            same_site=get_samesite(samesite_raw),
            source=label,
        )


def _row_value(
    row: sqlite3.Row,
    key_provider: ChromiumKeyProvider,
    host: str,
    domain_digest: bool,
) -> str:
    value = row["value"]
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if value:
        return value

    encrypted = row["encrypted_value"]
    if not encrypted:
        return ""

    version = ciphertext_version(encrypted)
    keys = key_provider.key_for(version) if version in ENCRYPTED_PREFIXES else None
    return decrypt_value(
        encrypted,
        keys,
        unprotect=key_provider.unprotect,
        host_key=host,
        domain_digest=domain_digest,
    )


def _warn_row_error(
    error: Exception,
    encrypted: Optional[bytes],
    warning_collector: Optional["ExtractionWarningCollector"],
    source_file: str,
) -> None:
    if warning_collector is None:
        return
    version = ciphertext_version(encrypted)
    version_name = version.decode() if version else "unprefixed"
    if isinstance(error, UnsupportedEncryptionError):
        warning_collector.add_unsupported_version(version_name, source_file)
    elif isinstance(error, KeyUnavailableError):
        warning_collector.add_key_unavailable(version_name, str(error), source_file)


__all__ = [
    "get_meta_version",
    "iter_cookie_results",
]
