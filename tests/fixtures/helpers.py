"""Helpers for building browser cookie databases and ciphertexts in tests."""
from __future__ import annotations

import hashlib
import os
import sqlite3
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

CHROMIUM_SCHEMA = """
    CREATE TABLE meta (key LONGVARCHAR NOT NULL UNIQUE PRIMARY KEY, value LONGVARCHAR);
    CREATE TABLE cookies (
        creation_utc INTEGER NOT NULL,
        host_key TEXT NOT NULL,
        top_frame_site_key TEXT NOT NULL DEFAULT '',
        name TEXT NOT NULL,
        value TEXT NOT NULL,
        encrypted_value BLOB NOT NULL DEFAULT x'',
        path TEXT NOT NULL,
        expires_utc INTEGER NOT NULL,
        is_secure INTEGER NOT NULL,
        is_httponly INTEGER NOT NULL,
        last_access_utc INTEGER NOT NULL,
        has_expires INTEGER NOT NULL DEFAULT 1,
        is_persistent INTEGER NOT NULL DEFAULT 1,
        priority INTEGER NOT NULL DEFAULT 1,
        samesite INTEGER NOT NULL DEFAULT -1,
        source_scheme INTEGER NOT NULL DEFAULT 0,
        source_port INTEGER NOT NULL DEFAULT -1,
        last_update_utc INTEGER NOT NULL DEFAULT 0
    );
"""

# Chromium <67 column names
CHROMIUM_LEGACY_SCHEMA = """
    CREATE TABLE meta (key LONGVARCHAR NOT NULL UNIQUE PRIMARY KEY, value LONGVARCHAR);
    CREATE TABLE cookies (
        creation_utc INTEGER NOT NULL,
        host_key TEXT NOT NULL,
        name TEXT NOT NULL,
        value TEXT NOT NULL,
        path TEXT NOT NULL,
        expires_utc INTEGER NOT NULL,
        secure INTEGER NOT NULL,
        httponly INTEGER NOT NULL,
        last_access_utc INTEGER NOT NULL,
        has_expires INTEGER NOT NULL DEFAULT 1,
        persistent INTEGER NOT NULL DEFAULT 1,
        priority INTEGER NOT NULL DEFAULT 1,
        encrypted_value BLOB DEFAULT '',
        firstpartyonly INTEGER NOT NULL DEFAULT 0
    );
"""

FIREFOX_SCHEMA = """
    CREATE TABLE moz_cookies (
        id INTEGER PRIMARY KEY,
        originAttributes TEXT NOT NULL DEFAULT '',
        name TEXT,
        value TEXT,
        host TEXT,
        path TEXT,
        expiry INTEGER,
        lastAccessed INTEGER,
        creationTime INTEGER,
        isSecure INTEGER,
        isHttpOnly INTEGER,
        inBrowserElement INTEGER DEFAULT 0,
        sameSite INTEGER DEFAULT 0,
        rawSameSite INTEGER DEFAULT 0,
        schemeMap INTEGER DEFAULT 0
    );
"""

# 2012-12-14T23:06:40Z in each browser's storage unit
WEBKIT_2012 = 13000000000000000
UNIX_2012 = 1355526400

CBC_IV = b" " * 16


def encrypt_cbc(plaintext: bytes, key: bytes, prefix: bytes = b"v10") -> bytes:
    """Encrypt like Chromium's os_crypt on Linux/macOS."""
    padder = padding.PKCS7(128).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(CBC_IV)).encryptor()
    return prefix + encryptor.update(padded) + encryptor.finalize()


def encrypt_gcm(plaintext: bytes, key: bytes, nonce: Optional[bytes] = None, prefix: bytes = b"v10") -> bytes:
    """Encrypt like Chromium's os_crypt on Windows."""
    nonce = nonce or os.urandom(12)
    return prefix + nonce + AESGCM(key).encrypt(nonce, plaintext, None)


def with_domain_digest(host_key: str, value: str) -> bytes:
    """Plaintext layout of cookie databases version 24+."""
    return hashlib.sha256(host_key.encode("utf-8")).digest() + value.encode("utf-8")


def _chromium_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "creation_utc": WEBKIT_2012,
        "host_key": ".example.com",
        "name": "sid",
        "value": "",
        "encrypted_value": b"",
        "path": "/",
        "expires_utc": WEBKIT_2012,
        "is_secure": 0,
        "is_httponly": 0,
        "last_access_utc": WEBKIT_2012,
        "has_expires": 1,
        "is_persistent": 1,
        "samesite": -1,
        **row,
    }


def create_chromium_cookies_db(
    path: Path,
    rows: Iterable[Dict[str, Any]] = (),
    *,
    meta_version: Optional[int] = 18,
) -> Path:
    """Create a Chromium Cookies database (modern schema) with the given rows."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    try:
        conn.executescript(CHROMIUM_SCHEMA)
        if meta_version is not None:
            conn.execute("INSERT INTO meta (key, value) VALUES ('version', ?)", (str(meta_version),))
        for row in rows:
            row = _chromium_row(row)
            columns = ", ".join(row)
            placeholders = ", ".join("?" for _ in row)
            conn.execute(f"INSERT INTO cookies ({columns}) VALUES ({placeholders})", tuple(row.values()))
        conn.commit()
    finally:
        conn.close()
    return path


def create_legacy_chromium_cookies_db(path: Path, rows: Iterable[Dict[str, Any]] = ()) -> Path:
    """Create a Chromium <67 Cookies database with short column names."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    try:
        conn.executescript(CHROMIUM_LEGACY_SCHEMA)
        for row in rows:
            conn.execute(
                """INSERT INTO cookies
                   (creation_utc, host_key, name, value, path, expires_utc, secure, httponly,
                    last_access_utc, has_expires, persistent, firstpartyonly)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    WEBKIT_2012, row["host_key"], row["name"], row["value"], row.get("path", "/"),
                    row.get("expires_utc", WEBKIT_2012), row.get("secure", 0), row.get("httponly", 0),
                    WEBKIT_2012, row.get("has_expires", 1), row.get("persistent", 1),
                    row.get("firstpartyonly", 0),
                ),
            )
        conn.commit()
    finally:
        conn.close()
    return path


def create_firefox_cookies_db(
    path: Path,
    rows: Iterable[Dict[str, Any]] = (),
    *,
    table: str = "moz_cookies",
) -> Path:
    """Create a Firefox cookies.sqlite database with the given rows."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    try:
        conn.executescript(FIREFOX_SCHEMA.replace("moz_cookies", table))
        for row in rows:
            row = {
                "name": "sid",
                "value": "",
                "host": ".example.com",
                "path": "/",
                "expiry": 0,
                "isSecure": 0,
                "isHttpOnly": 0,
                "sameSite": 0,
                **row,
            }
            columns = ", ".join(row)
            placeholders = ", ".join("?" for _ in row)
            conn.execute(f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", tuple(row.values()))
        conn.commit()
    finally:
        conn.close()
    return path


def write_profiles_ini(root: Path, content: str) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    ini_path = root / "profiles.ini"
    ini_path.write_text(content, encoding="utf-8")
    return ini_path
