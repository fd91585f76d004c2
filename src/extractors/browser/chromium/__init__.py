"""
Chromium browser family.

Covers: Chrome, Chromium, Edge, Brave (all use Blink/V8 engine).

All Chromium browsers share:
- Same SQLite schema for the Cookies database
- Same profile structure (User Data/Default, Profile 1, etc.)
- Same timestamp format (WebKit microseconds since 1601-01-01)
- Same os_crypt value encryption (v10/v11 prefixes)

Exports:
    iter_cookie_results: Decrypt and normalize Cookies rows into CookieRecords
    ChromiumKeyProvider: Per-source key acquisition from the OS
"""

from .cookies import ChromiumKeyProvider, KeyMaterial, decrypt_value, iter_cookie_results

__all__ = [
    "ChromiumKeyProvider",
    "KeyMaterial",
    "decrypt_value",
    "iter_cookie_results",
]
