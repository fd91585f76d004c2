"""Core layer: canonical records, configuration, logging, pipeline and export."""

from .config import AppConfig, load_app_config  # noqa: F401
from .records import BrowserTarget, CookieCollection, CookieRecord, RowError, SourceResult  # noqa: F401
# NOTE: extraction_orchestrator not exported from package to avoid circular import
# Import directly: from core.extraction_orchestrator import collect_cookies
