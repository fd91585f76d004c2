"""
Browser extractors organized by browser family.

Structure:
    browser/
    ├── chromium/      # Chrome, Chromium, Edge, Brave (Blink/V8 engine)
    ├── firefox/       # Firefox (Gecko engine)
    └── discovery.py   # Browser/profile/path → BrowserTarget

Each family shares similar internals (SQLite schemas, paths).

Usage:
    from extractors.browser.discovery import resolve_target

    target = resolve_target(BrowserKind.FIREFOX)
"""

from . import chromium
from . import firefox
from .discovery import resolve_target

__all__ = ['chromium', 'firefox', 'resolve_target']
