"""
Cookie export formats.

Serializes canonical cookie records for consumption by other tools:

- netscape: ``cookies.txt`` as read by curl, wget and yt-dlp
- httpie-session: HTTPie session JSON (best effort; the format is
  undocumented and modelled on HTTPie 3.2)
- human: grouped, readable listing for terminals

All writers are pure: they take records and a text stream, write, and
return nothing. Records are validated before anything is written, so a
rejected export leaves the stream untouched.
"""
from __future__ import annotations

import json
from itertools import groupby
from typing import Any, Callable, Dict, List, Sequence, TextIO, Union

from extractors._shared.timestamps import unix_to_http_date
from extractors.exceptions import SerializeError

from .enums import OutputFormat
from .logging import get_logger
from .records import CookieRecord

LOGGER = get_logger("core.export")

NETSCAPE_HEADER = "# Netscape HTTP Cookie File"
HUMAN_SEPARATOR = "-" * 20

_FORBIDDEN_CHARS = ("\t", "\n", "\r")


def _flag(value: bool) -> str:
    return "TRUE" if value else "FALSE"


def _check_fields(record: CookieRecord) -> None:
    for field_name in ("domain", "path", "name", "value"):
        if any(char in getattr(record, field_name) for char in _FORBIDDEN_CHARS):
            raise SerializeError(
                f"Cookie {field_name} contains a tab or line break "
                f"({record.domain} {record.name})",
                source=record.source or None,
            )


# =============================================================================
# Netscape cookies.txt
# =============================================================================

def export_netscape(records: Sequence[CookieRecord], stream: TextIO) -> None:
    """
    Write records as a Netscape ``cookies.txt`` file.

    One line per record, in input order:
    ``domain  include_subdomains  path  secure  expires  name  value``
    (tab separated, ``expires`` is 0 for session cookies).

    Raises:
        SerializeError: A field contains a tab or line break
    """
    lines = [NETSCAPE_HEADER]
    for record in records:
        _check_fields(record)
        lines.append("\t".join((
            record.domain,
            _flag(record.include_subdomains),
            record.path,
            _flag(record.secure),
            str(record.expires_at or 0),
            record.name,
            record.value,
        )))
    stream.write("\n".join(lines) + "\n")


# =============================================================================
# HTTPie session
# =============================================================================

def _httpie_cookie(record: CookieRecord) -> Dict[str, Any]:
    # Keyword arguments accepted by requests.cookies.create_cookie
    return {
        "name": record.name,
        "value": record.value,
        "port": None,
        "domain": record.domain,
        "path": record.path,
        "secure": record.secure,
        "expires": record.expires_at,
        "discard": False,
        "comment": None,
        "comment_url": None,
        "rest": {"HttpOnly": None} if record.http_only else {},
        "rfc2109": False,
    }


def build_httpie_session(records: Sequence[CookieRecord]) -> Dict[str, Any]:
    """Build the HTTPie session document for the records."""
    return {
        "headers": [],
        "cookies": [_httpie_cookie(record) for record in records],
        "auth": {"type": None, "username": None, "password": None},
    }


def export_httpie_session(records: Sequence[CookieRecord], stream: TextIO) -> None:
    """Write records as an HTTPie session JSON document."""
    json.dump(build_httpie_session(records), stream, indent=4)
    stream.write("\n")


# =============================================================================
# Human-readable listing
# =============================================================================

def _domain_sort_key(domain: str) -> tuple:
    return (domain[1:] if domain.startswith(".") else domain, domain)


def export_human(records: Sequence[CookieRecord], stream: TextIO) -> None:
    """
    Write records grouped by domain for reading in a terminal.

    Groups are sorted by domain ignoring a leading dot; cookies keep their
    input order within a group. Zero records produce no output.
    """
    lines: List[str] = []
    ordered = sorted(records, key=lambda record: _domain_sort_key(record.domain))
    for domain, group in groupby(ordered, key=lambda record: record.domain):
        lines.extend((domain, ""))
        for record in group:
            lines.extend((
                HUMAN_SEPARATOR,
                "",
                f"Name: {record.name}",
                f"Value: {record.value}",
                f"Path: {record.path}",
                f"Secure: {str(record.secure).lower()}",
                f"HttpOnly: {str(record.http_only).lower()}",
                f"SameSite: {record.same_site.value.capitalize()}",
                f"Expires: {unix_to_http_date(record.expires_at) or 'Session'}",
                "",
            ))
        lines.append("")
    if lines:
        stream.write("\n".join(lines) + "\n")


# =============================================================================
# Dispatch
# =============================================================================

EXPORTERS: Dict[OutputFormat, Callable[[Sequence[CookieRecord], TextIO], None]] = {
    OutputFormat.NETSCAPE: export_netscape,
    OutputFormat.HTTPIE_SESSION: export_httpie_session,
    OutputFormat.HUMAN: export_human,
}


def export_cookies(
    records: Sequence[CookieRecord],
    fmt: Union[OutputFormat, str],
    stream: TextIO,
) -> None:
    """
    Serialize records in the selected format.

    Args:
        records: Records to write (any iterable of CookieRecord)
        fmt: Output format or its name (``httpie`` accepted as alias)
        stream: Text sink

    Raises:
        SerializeError: A record cannot be represented in the format
        ValueError: Unknown format name
    """
    if not isinstance(fmt, OutputFormat):
        fmt = OutputFormat.parse(fmt)
    records = list(records)
    EXPORTERS[fmt](records, stream)
    LOGGER.debug("Exported %d cookie(s) as %s", len(records), fmt.value)
