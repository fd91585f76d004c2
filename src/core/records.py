"""
Canonical cookie records shared by the readers, the pipeline and the exporters.

``CookieRecord`` is the only shape that leaves the browser-family parsers.
Its ``value`` is always plaintext: rows that cannot be decrypted become a
``RowError`` instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, List, Optional, Union

from .enums import BrowserKind, ExtractionStatus, SameSite

if TYPE_CHECKING:
    from extractors._shared.extraction_warnings import ExtractionWarning
    from extractors.exceptions import CookieStoreError


@dataclass(frozen=True)
class BrowserTarget:
    """A resolved cookie source: browser kind plus the files to read."""

    browser: BrowserKind
    database_path: Path
    profile_dir: Optional[Path] = None
    local_state_path: Optional[Path] = None
    profile: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.browser.value}:{self.profile or self.database_path}"


@dataclass(frozen=True)
class CookieRecord:
    """A single browser cookie with a plaintext value."""

    domain: str
    path: str
    name: str
    value: str
    expires_at: Optional[int] = None  # Unix seconds, None for session cookies
    secure: bool = False
    http_only: bool = False
    same_site: SameSite = SameSite.UNSPECIFIED
    source: str = ""

    @property
    def is_session(self) -> bool:
        return self.expires_at is None

    @property
    def include_subdomains(self) -> bool:
        return self.domain.startswith(".")


@dataclass(frozen=True)
class RowError:
    """A cookie row that was skipped, with the reason."""

    source: str
    row_index: int
    host: str
    name: str
    error: "CookieStoreError"

    def __str__(self) -> str:
        return f"{self.source} row {self.row_index} ({self.host} {self.name}): {self.error}"


CookieResult = Union[CookieRecord, RowError]


@dataclass
class SourceResult:
    """Outcome of reading one cookie source."""

    target: Optional[BrowserTarget]
    label: str
    records: List[CookieRecord] = field(default_factory=list)
    row_errors: List[RowError] = field(default_factory=list)
    error: Optional["CookieStoreError"] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status(self) -> ExtractionStatus:
        if self.error is not None:
            return ExtractionStatus.ERROR
        if self.row_errors:
            return ExtractionStatus.PARTIAL
        return ExtractionStatus.OK


@dataclass
class CookieCollection:
    """Aggregate result of a run over one or more cookie sources."""

    sources: List[SourceResult] = field(default_factory=list)
    warnings: List["ExtractionWarning"] = field(default_factory=list)

    @property
    def records(self) -> List[CookieRecord]:
        """All records, in source order then row order."""
        return [record for source in self.sources for record in source.records]

    @property
    def errors(self) -> List[Union["CookieStoreError", RowError]]:
        """Every source-level and row-level error of the run."""
        collected: List[Union["CookieStoreError", RowError]] = []
        for source in self.sources:
            if source.error is not None:
                collected.append(source.error)
            collected.extend(source.row_errors)
        return collected

    def __iter__(self) -> Iterator[CookieRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return sum(len(source.records) for source in self.sources)
