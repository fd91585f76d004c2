"""
Read-only SQLite helpers for browser cookie stores.

Provides utilities for safely reading a browser's live database:
- Read-only URI connections, never a write intent
- Fail-fast on a browser-held lock (busy timeout of zero)
- Optional lock bypass through SQLite's ``immutable`` URI parameter
- sqlite3 errors mapped onto the cookie store error taxonomy

Design Principle:
    Browser databases are NEVER modified. Lock bypass trades consistency for
    availability: while the browser writes, a bypassed read may observe a torn
    page and fail with StoreCorruptError or StoreIoError. Nothing here retries
    or checks consistency; the caller decides whether to try again.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple, Union
from urllib.parse import quote

from core.logging import get_logger
from ..exceptions import (
    CookieStoreError,
    StoreCorruptError,
    StoreIoError,
    StoreLockedError,
    StoreNotFoundError,
)

LOGGER = get_logger("extractors.shared.sqlite")

_LOCKED_MARKERS = ("locked", "busy")
_CORRUPT_MARKERS = ("not a database", "malformed", "corrupt", "disk image")


def build_readonly_uri(db_path: Union[str, Path], bypass_lock: bool = False) -> str:
    """
    Build the SQLite URI used to open ``db_path`` read-only.

    Args:
        db_path: Path to the database file
        bypass_lock: If True, add ``immutable=1`` so SQLite takes no locks
                     and ignores the journal

    Returns:
        ``file:`` URI string
    """
    path = Path(db_path).resolve().as_posix()
    uri = f"file:{quote(path, safe='/:')}?mode=ro"
    if bypass_lock:
        uri += "&immutable=1"
    return uri


def translate_sqlite_error(
    error: sqlite3.Error,
    db_path: Union[str, Path],
    *,
    source: Optional[str] = None,
) -> CookieStoreError:
    """
    Map a sqlite3 exception onto the cookie store taxonomy.

    Returns:
        StoreLockedError, StoreCorruptError or StoreIoError (not raised)
    """
    message = str(error)
    lowered = message.lower()
    if any(marker in lowered for marker in _LOCKED_MARKERS):
        return StoreLockedError(f"Database is locked: {db_path}", source=source)
    if isinstance(error, sqlite3.DatabaseError) and any(
        marker in lowered for marker in _CORRUPT_MARKERS
    ):
        return StoreCorruptError(f"Database is corrupt: {db_path}: {message}", source=source)
    return StoreIoError(f"Failed to read database {db_path}: {message}", source=source)


@contextmanager
def open_cookie_db(
    db_path: Union[str, Path],
    *,
    bypass_lock: bool = False,
    timeout: float = 0.0,
    source: Optional[str] = None,
) -> Iterator[sqlite3.Connection]:
    """
    Open a browser cookie database in read-only mode.

    Args:
        db_path: Path to the SQLite database file
        bypass_lock: Open with ``immutable=1`` (unsafe while the browser writes)
        timeout: Busy timeout in seconds; zero fails fast on a held lock
        source: Label used in raised errors

    Yields:
        sqlite3.Connection with ``sqlite3.Row`` rows

    Raises:
        StoreNotFoundError: If the database file doesn't exist
        StoreLockedError: If the browser holds the lock and bypass is off
        StoreCorruptError: If the file is not a readable SQLite database
        StoreIoError: For any other open failure

    Example:
        with open_cookie_db("/path/to/cookies.sqlite") as conn:
            for row in iter_rows(conn, "SELECT host, name FROM moz_cookies"):
                print(row["host"])
    """
    db_path = Path(db_path)

    if not db_path.is_file():
        raise StoreNotFoundError(f"Database not found: {db_path}", source=source)

    uri = build_readonly_uri(db_path, bypass_lock=bypass_lock)
    try:
        conn = sqlite3.connect(uri, uri=True, timeout=timeout)
    except sqlite3.Error as e:
        raise translate_sqlite_error(e, db_path, source=source) from e

    try:
        conn.row_factory = sqlite3.Row  # Enable column access by name
        try:
            # Locks and corruption surface on first access, not on connect
            conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
        except sqlite3.Error as e:
            raise translate_sqlite_error(e, db_path, source=source) from e

        LOGGER.debug("Opened %s (bypass_lock=%s)", db_path, bypass_lock)
        yield conn
    finally:
        conn.close()


def iter_rows(
    conn: sqlite3.Connection,
    query: str,
    params: Tuple[Any, ...] = (),
    *,
    source: Optional[str] = None,
) -> Iterator[sqlite3.Row]:
    """
    Lazily iterate the rows of a query.

    The sequence is finite and single-pass; re-iterating needs a new query.
    sqlite3 errors raised while stepping the cursor are translated like
    open errors.
    """
    try:
        cursor = conn.execute(query, params)
        for row in cursor:
            yield row
    except sqlite3.Error as e:
        raise translate_sqlite_error(e, _database_file(conn), source=source) from e


def _database_file(conn: sqlite3.Connection) -> str:
    try:
        row = conn.execute("PRAGMA database_list").fetchone()
    except sqlite3.Error:
        return "<database>"
    return row[2] if row and row[2] else "<database>"


def get_table_names(conn: sqlite3.Connection) -> List[str]:
    """
    Get list of table names in database.

    Args:
        conn: SQLite connection

    Returns:
        List of table names
    """
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
    ).fetchall()
    return [row[0] for row in rows]


def table_exists(conn: sqlite3.Connection, table_name: str) -> bool:
    """
    Check if a table exists in the database.

    Args:
        conn: SQLite connection
        table_name: Name of table to check

    Returns:
        True if table exists
    """
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (table_name,),
    ).fetchall()
    return len(rows) > 0


def get_column_names(conn: sqlite3.Connection, table_name: str) -> List[str]:
    """
    Get the column names of a table, in declaration order.

    Returns an empty list when the table doesn't exist.
    """
    if not table_exists(conn, table_name):
        return []
    # Table name was validated above; PRAGMA doesn't accept parameters
    rows = conn.execute(f"PRAGMA table_info([{table_name}])").fetchall()
    return [row[1] for row in rows]
