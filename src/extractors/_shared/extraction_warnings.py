"""
Extraction warnings utilities for extractors.

This module provides utilities for collecting and reporting unknown schemas,
unexpected values and decryption findings while cookie stores are read. These
warnings never stop a read; they are handed back to the caller on the
CookieCollection so unfamiliar browser versions get noticed.

Usage:
    from extractors._shared.extraction_warnings import (
        ExtractionWarningCollector,
        discover_unknown_columns,
    )

    collector = ExtractionWarningCollector(extractor_name="chromium_cookies")
    for column in discover_unknown_columns(conn, "cookies", KNOWN_COLUMNS):
        collector.add_unknown_column("cookies", column["name"], column["type"], source_file)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:
    import sqlite3


# =============================================================================
# Warning Type Constants
# =============================================================================

WARNING_TYPE_UNKNOWN_TABLE = "unknown_table"
WARNING_TYPE_UNKNOWN_COLUMN = "unknown_column"
WARNING_TYPE_UNKNOWN_ENUM_VALUE = "unknown_enum_value"
WARNING_TYPE_KEY_UNAVAILABLE = "key_unavailable"
WARNING_TYPE_VERSION_UNSUPPORTED = "version_unsupported"

# Category Constants
CATEGORY_DATABASE = "database"
CATEGORY_CRYPTO = "crypto"

# Severity Constants
SEVERITY_INFO = "info"
SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"


# =============================================================================
# Warning Data Class
# =============================================================================

@dataclass
class ExtractionWarning:
    """A single extraction warning record."""

    warning_type: str
    item_name: str
    severity: str = SEVERITY_WARNING
    category: Optional[str] = None
    extractor_name: Optional[str] = None
    source_file: Optional[str] = None
    item_value: Optional[str] = None
    context_json: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        detail = f"={self.item_value}" if self.item_value is not None else ""
        where = f" in {self.source_file}" if self.source_file else ""
        return f"[{self.severity}] {self.warning_type}: {self.item_name}{detail}{where}"


# =============================================================================
# Warning Collector Class
# =============================================================================

@dataclass
class ExtractionWarningCollector:
    """
    Collects extraction warnings for one run.

    Use this class to accumulate warnings during extraction and hand them to
    the caller at the end. The same unknown column or value is only recorded
    once per source file.

    Example:
        collector = ExtractionWarningCollector(extractor_name="firefox_cookies")

        # During extraction...
        collector.add_unknown_enum_value("sameSite", 7, "cookies.sqlite")

        # At the end
        collection.warnings.extend(collector.warnings)
    """

    extractor_name: Optional[str] = None
    _warnings: List[ExtractionWarning] = field(default_factory=list)
    _seen: Set[tuple] = field(default_factory=set)

    def add_warning(
        self,
        warning_type: str,
        item_name: str,
        *,
        severity: str = SEVERITY_WARNING,
        category: Optional[str] = None,
        source_file: Optional[str] = None,
        item_value: Optional[str] = None,
        context_json: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Add a warning to the collection.

        Args:
            warning_type: Type of warning (use WARNING_TYPE_* constants)
            item_name: Name of the unknown/problematic item
            severity: info/warning/error (default: warning)
            category: Category (use CATEGORY_* constants)
            source_file: Source database file path
            item_value: Value or additional details
            context_json: Additional context as dict
        """
        key = (warning_type, item_name, item_value, source_file)
        if key in self._seen:
            return
        self._seen.add(key)
        self._warnings.append(ExtractionWarning(
            warning_type=warning_type,
            item_name=item_name,
            severity=severity,
            category=category,
            extractor_name=self.extractor_name,
            source_file=source_file,
            item_value=item_value,
            context_json=context_json,
        ))

    def add_unknown_column(
        self,
        table_name: str,
        column_name: str,
        column_type: str,
        source_file: str,
    ) -> None:
        """
        Convenience method for unknown column warnings.

        Args:
            table_name: Name of the table containing the unknown column
            column_name: Name of the unknown column
            column_type: SQLite type of the column
            source_file: Source database file path
        """
        self.add_warning(
            warning_type=WARNING_TYPE_UNKNOWN_COLUMN,
            item_name=column_name,
            item_value=column_type,
            severity=SEVERITY_INFO,
            category=CATEGORY_DATABASE,
            source_file=source_file,
            context_json={"table": table_name},
        )

    def add_unknown_enum_value(
        self,
        enum_name: str,
        value: Any,
        source_file: str,
        *,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Convenience method for unknown enum/constant value warnings.

        Args:
            enum_name: Name of the enum field (e.g., "samesite")
            value: The unknown value
            source_file: Source file path
            context: Additional context
        """
        self.add_warning(
            warning_type=WARNING_TYPE_UNKNOWN_ENUM_VALUE,
            item_name=enum_name,
            item_value=str(value),
            severity=SEVERITY_INFO,
            category=CATEGORY_DATABASE,
            source_file=source_file,
            context_json=context,
        )

    def add_key_unavailable(self, version: str, error: str, source_file: str) -> None:
        """Record that no key could be obtained for a ciphertext version."""
        self.add_warning(
            warning_type=WARNING_TYPE_KEY_UNAVAILABLE,
            item_name=version,
            item_value=error,
            severity=SEVERITY_ERROR,
            category=CATEGORY_CRYPTO,
            source_file=source_file,
        )

    def add_unsupported_version(self, version: str, source_file: str) -> None:
        """Record a ciphertext version that cannot be decrypted here."""
        self.add_warning(
            warning_type=WARNING_TYPE_VERSION_UNSUPPORTED,
            item_name=version,
            severity=SEVERITY_WARNING,
            category=CATEGORY_CRYPTO,
            source_file=source_file,
        )

    @property
    def warnings(self) -> List[ExtractionWarning]:
        """Collected warnings, in the order they were added."""
        return list(self._warnings)

    @property
    def warning_count(self) -> int:
        """Number of warnings collected."""
        return len(self._warnings)

    @property
    def has_errors(self) -> bool:
        """True if any error-severity warnings collected."""
        return any(w.severity == SEVERITY_ERROR for w in self._warnings)

    def get_counts_by_severity(self) -> Dict[str, int]:
        """Get warning counts by severity level."""
        counts = {SEVERITY_INFO: 0, SEVERITY_WARNING: 0, SEVERITY_ERROR: 0}
        for w in self._warnings:
            counts[w.severity] = counts.get(w.severity, 0) + 1
        return counts

    def clear(self) -> None:
        """Clear all collected warnings."""
        self._warnings.clear()
        self._seen.clear()


# =============================================================================
# Database Discovery Utilities
# =============================================================================

def discover_unknown_columns(
    conn: "sqlite3.Connection",
    table_name: str,
    known_columns: Set[str],
) -> List[Dict[str, str]]:
    """
    Find columns in a table that the parser doesn't know about.

    Args:
        conn: SQLite connection
        table_name: Table to inspect
        known_columns: Column names the parser handles

    Returns:
        List of {"name": ..., "type": ...} dicts, in declaration order
    """
    try:
        rows = conn.execute(f"PRAGMA table_info([{table_name}])").fetchall()
    except Exception:
        return []
    return [
        {"name": row[1], "type": row[2] or ""}
        for row in rows
        if row[1] not in known_columns
    ]
