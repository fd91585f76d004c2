"""
Firefox cookies.sqlite parser.

Handles both moz_cookies (modern) and cookies (older) table names. Values are
plaintext, so every row becomes a CookieRecord; the decryption engine is still
applied so both browser families share one value path.

Usage:
    from extractors.browser.firefox.cookies._parsers import iter_cookie_results

    with open_cookie_db(target.database_path) as conn:
        records = list(iter_cookie_results(conn, target))
"""

from __future__ import annotations

import sqlite3
from typing import Iterator, List, Optional, TYPE_CHECKING

from core.logging import get_logger
from core.records import BrowserTarget, CookieRecord, CookieResult, RowError
from ...._shared.extraction_warnings import discover_unknown_columns
from ...._shared.sqlite_helpers import get_column_names, iter_rows, table_exists
from ...._shared.timestamps import firefox_expiry_to_unix
from ....exceptions import DecryptError, StoreCorruptError
from ...chromium.cookies._crypto import decrypt_value
from ._schemas import (
    COLUMN_DEFAULTS,
    COOKIES_TABLES,
    KNOWN_MOZ_COOKIES_COLUMNS,
    KNOWN_SAMESITE_VALUES,
    get_samesite,
)

LOGGER = get_logger("extractors.browser.firefox.cookies")

if TYPE_CHECKING:
    from extractors._shared.extraction_warnings import ExtractionWarningCollector


def find_cookie_table(conn: sqlite3.Connection) -> Optional[str]:
    """Return the cookie table name (``moz_cookies`` or legacy ``cookies``)."""
    for table_name in COOKIES_TABLES:
        if table_exists(conn, table_name):
            return table_name
    return None


def _build_query(table_name: str, columns: List[str]) -> str:
    domain_col = "host" if "host" in columns else "baseDomain"
    select_cols = [f"{domain_col} AS host", "name"]
    for column, default in COLUMN_DEFAULTS.items():
        select_cols.append(column if column in columns else f"{default} AS {column}")
    return f"SELECT {', '.join(select_cols)} FROM {table_name} ORDER BY rowid"


def iter_cookie_results(
    conn: sqlite3.Connection,
    target: BrowserTarget,
    *,
    warning_collector: Optional["ExtractionWarningCollector"] = None,
) -> Iterator[CookieResult]:
    """
    Parse Firefox cookies into canonical records.

    Args:
        conn: Read-only connection to cookies.sqlite
        target: The resolved source (browser, paths, label)
        warning_collector: Optional collector for schema warnings

    Yields:
        CookieRecord per row (RowError for undecodable values), in rowid order

    Raises:
        StoreCorruptError: No cookie table, or no host/name columns
    """
    label = target.label
    source_file = str(target.database_path)

    table_name = find_cookie_table(conn)
    if table_name is None:
        raise StoreCorruptError("No moz_cookies or cookies table in database", source=label)

    columns = get_column_names(conn, table_name)
    if "name" not in columns or not ({"host", "baseDomain"} & set(columns)):
        raise StoreCorruptError(f"{table_name} table lacks host/name columns", source=label)

    if warning_collector is not None:
        for column in discover_unknown_columns(conn, table_name, KNOWN_MOZ_COOKIES_COLUMNS):
            warning_collector.add_unknown_column(
                table_name, column["name"], column["type"], source_file,
            )

    LOGGER.debug("Reading %s table %s", source_file, table_name)

    for index, row in enumerate(iter_rows(conn, _build_query(table_name, columns), source=label)):
        host = row["host"] or ""
        name = row["name"] or ""
        try:
            value = decrypt_value(row["value"], None)
        except DecryptError as e:
            e.source = e.source or label
            LOGGER.debug("Skipping %s row %d (%s %s): %s", label, index, host, name, type(e).__name__)
            yield RowError(source=label, row_index=index, host=host, name=name, error=e)
            continue

        same_site_raw = row["sameSite"]
        if (
            warning_collector is not None
            and same_site_raw is not None
            and same_site_raw not in KNOWN_SAMESITE_VALUES
        ):
            warning_collector.add_unknown_enum_value("sameSite", same_site_raw, source_file)

        yield CookieRecord(
            domain=host,
            path=row["path"] or "/",
            name=name,
            value=value,
            expires_at=firefox_expiry_to_unix(row["expiry"]),
            secure=bool(row["isSecure"]),
            http_only=bool(row["isHttpOnly"]),
            same_site=get_samesite(same_site_raw),
            source=label,
        )


__all__ = [
    "find_cookie_table",
    "iter_cookie_results",
]
