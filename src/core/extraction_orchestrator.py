from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, TextIO, Union
from urllib.parse import urlsplit

from .config import AppConfig
from .enums import BrowserKind
from .export import export_cookies
from .logging import get_logger
from .records import BrowserTarget, CookieCollection, CookieRecord, RowError, SourceResult

from extractors._shared.extraction_warnings import ExtractionWarningCollector
from extractors._shared.sqlite_helpers import open_cookie_db, translate_sqlite_error
from extractors.browser.chromium.cookies import iter_cookie_results as iter_chromium_cookies
from extractors.browser.chromium.cookies._keys import KeyMap
from extractors.browser.discovery import resolve_target
from extractors.browser.firefox.cookies import iter_cookie_results as iter_firefox_cookies
from extractors.exceptions import (
    CookieStoreError,
    NoCookieSourceError,
    StoreCorruptError,
    StoreIoError,
    StoreLockedError,
    StoreNotFoundError,
)

LOGGER = get_logger("core.extraction_orchestrator")

# Errors that end the read of one source without aborting the run
SOURCE_ERRORS = (StoreNotFoundError, StoreLockedError, StoreCorruptError, StoreIoError)


# =============================================================================
# Requests
# =============================================================================

@dataclass(frozen=True)
class CookieRequest:
    """One cookie source to read: a browser plus optional path/profile."""

    browser: Union[BrowserKind, str]
    explicit_path: Optional[Union[str, Path]] = None
    profile: Optional[str] = None

    def __post_init__(self):
        # Accept identifier strings and plain path strings
        if not isinstance(self.browser, BrowserKind):
            object.__setattr__(self, "browser", BrowserKind.parse(self.browser))
        if self.explicit_path is not None and not isinstance(self.explicit_path, Path):
            object.__setattr__(self, "explicit_path", Path(self.explicit_path))

    @property
    def label(self) -> str:
        return f"{self.browser.value}:{self.profile or self.explicit_path or 'default'}"


# =============================================================================
# Host Filter
# =============================================================================

def normalize_host(host: str) -> str:
    """
    Reduce a requested host to a bare, lowercase hostname.

    URLs (``https://www.example.com/path``) are reduced to their hostname;
    ports and trailing dots are dropped.

    Example:
        >>> normalize_host("https://WWW.Example.com:8443/login")
        'www.example.com'
    """
    host = host.strip()
    if "://" in host:
        host = urlsplit(host).hostname or ""
    elif "/" in host or ":" in host:
        host = urlsplit(f"//{host}").hostname or ""
    return host.lower().rstrip(".")


def host_matches(domain: str, host: str) -> bool:
    """
    Whether a cookie stored for ``domain`` is sent to ``host``.

    An exact match always applies. A domain with a leading dot also applies
    to every subdomain. Comparison is case-insensitive.

    Example:
        >>> host_matches(".example.com", "www.example.com")
        True
        >>> host_matches(".example.com", "notexample.com")
        False
    """
    domain = domain.lower()
    host = host.lower()
    if domain == host:
        return True
    if domain.startswith("."):
        bare = domain[1:]
        return host == bare or host.endswith(domain)
    return False


def filter_records(records: Iterable[CookieRecord], hosts: Sequence[str]) -> List[CookieRecord]:
    """
    Keep the records that match any requested host, in their original order.

    An empty host list keeps every record.
    """
    wanted = [normalize_host(host) for host in hosts]
    wanted = [host for host in wanted if host]
    if not wanted:
        return list(records)
    return [
        record for record in records
        if any(host_matches(record.domain, host) for host in wanted)
    ]


# =============================================================================
# Pipeline
# =============================================================================

def read_target(
    target: BrowserTarget,
    *,
    hosts: Sequence[str] = (),
    bypass_lock: bool = False,
    keys: Optional[KeyMap] = None,
    platform: Optional[str] = None,
    warnings: Optional[ExtractionWarningCollector] = None,
) -> SourceResult:
    """
    Read, decrypt, normalize and filter one cookie source.

    Source-level failures are recorded on the result, never raised.

    Args:
        target: Resolved cookie source
        hosts: Host filter (empty: keep everything)
        bypass_lock: Read through the browser's lock (immutable mode)
        keys: Fixed Chromium keys per version, bypassing the OS
        platform: ``sys.platform``-style override for key acquisition
        warnings: Collector for schema/crypto warnings

    Returns:
        SourceResult with records in row order and skipped-row errors
    """
    result = SourceResult(target=target, label=target.label)
    records: List[CookieRecord] = []
    try:
        with open_cookie_db(target.database_path, bypass_lock=bypass_lock, source=target.label) as conn:
            if target.browser.is_chromium:
                results = iter_chromium_cookies(
                    conn, target, keys=keys, platform=platform, warning_collector=warnings,
                )
            else:
                results = iter_firefox_cookies(conn, target, warning_collector=warnings)

            for item in results:
                if isinstance(item, RowError):
                    result.row_errors.append(item)
                else:
                    records.append(item)
    except SOURCE_ERRORS as e:
        LOGGER.error("Cannot read %s: %s", target.label, e)
        result.error = e
        return result
    except sqlite3.Error as e:
        # Schema probes outside iter_rows
        result.error = translate_sqlite_error(e, target.database_path, source=target.label)
        LOGGER.error("Cannot read %s: %s", target.label, result.error)
        return result

    result.records = filter_records(records, hosts)
    if result.row_errors:
        LOGGER.warning(
            "%s: skipped %d cookie(s) that could not be decrypted",
            target.label, len(result.row_errors),
        )
    LOGGER.info(
        "%s: %d cookie(s) read, %d after host filter",
        target.label, len(records), len(result.records),
    )
    return result


def collect_cookies(
    requests: Sequence[CookieRequest],
    hosts: Sequence[str] = (),
    *,
    bypass_lock: bool = False,
    keys: Optional[KeyMap] = None,
    platform: Optional[str] = None,
    home: Optional[Path] = None,
) -> CookieCollection:
    """
    Read every requested source and aggregate the matching cookies.

    Records keep request order, then row order; duplicates across sources
    are kept. A failing source doesn't stop the others.

    Raises:
        NoCookieSourceError: Every source failed (or nothing was requested)
    """
    collection = CookieCollection()
    collector = ExtractionWarningCollector(extractor_name="cookies")

    for request in requests:
        try:
            target = resolve_target(
                request.browser,
                request.explicit_path,
                request.profile,
                platform=platform,
                home=home,
            )
        except StoreNotFoundError as e:
            LOGGER.error("Cannot locate %s: %s", request.label, e)
            collection.sources.append(SourceResult(target=None, label=request.label, error=e))
            continue

        collection.sources.append(
            read_target(
                target,
                hosts=hosts,
                bypass_lock=bypass_lock,
                keys=keys,
                platform=platform,
                warnings=collector,
            )
        )

    collection.warnings.extend(collector.warnings)

    if not any(source.ok for source in collection.sources):
        errors: List[CookieStoreError] = [
            source.error for source in collection.sources if source.error is not None
        ]
        raise NoCookieSourceError(errors)

    LOGGER.info(
        "Collected %d cookie(s) from %d source(s)",
        len(collection), sum(1 for source in collection.sources if source.ok),
    )
    return collection


# =============================================================================
# Configured Runs
# =============================================================================

def requests_from_config(config: AppConfig) -> List[CookieRequest]:
    """One default-location request per browser in ``defaults.browsers``."""
    return [CookieRequest(browser) for browser in config.defaults.browsers]


def run_from_config(
    config: AppConfig,
    stream: TextIO,
    hosts: Sequence[str] = (),
    *,
    requests: Optional[Sequence[CookieRequest]] = None,
    keys: Optional[KeyMap] = None,
    platform: Optional[str] = None,
    home: Optional[Path] = None,
) -> CookieCollection:
    """
    Collect cookies and export them using the configured defaults.

    ``defaults.browsers`` supplies the sources when ``requests`` is not
    given; ``defaults.bypass_lock`` and ``defaults.output_format`` always
    apply. Nothing is written when every source fails.

    Raises:
        NoCookieSourceError: Every source failed (or nothing was requested)
        SerializeError: A record cannot be represented in the output format
    """
    if requests is None:
        requests = requests_from_config(config)
    collection = collect_cookies(
        requests,
        hosts,
        bypass_lock=config.defaults.bypass_lock,
        keys=keys,
        platform=platform,
        home=home,
    )
    export_cookies(collection.records, config.defaults.output_format, stream)
    return collection
