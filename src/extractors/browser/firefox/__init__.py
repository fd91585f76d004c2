"""
Firefox browser family.

Firefox uses the Gecko engine with SQLite-based artifact storage:
- profiles.ini: Profile list and per-installation default
- cookies.sqlite: Cookies (moz_cookies, plaintext values)

Exports:
    iter_cookie_results: Normalize cookies.sqlite rows into CookieRecords
    find_default_profile: Resolve the default profile from profiles.ini
"""

from ._patterns import find_default_profile, find_named_profile, get_profile_root
from .cookies import iter_cookie_results

__all__ = [
    "find_default_profile",
    "find_named_profile",
    "get_profile_root",
    "iter_cookie_results",
]
