"""
Chromium cookie reading and decryption.

- _keys: OS key acquisition (Keychain, Secret Service, DPAPI)
- _crypto: v10/v11 value decryption (AES-CBC, AES-GCM)
- _parsers: cookies table to CookieRecord normalization
"""

from ._crypto import decrypt_cbc, decrypt_gcm, decrypt_value, derive_key
from ._keys import ChromiumKeyProvider, KeyMaterial, strategy_for_platform
from ._parsers import get_meta_version, iter_cookie_results

__all__ = [
    "ChromiumKeyProvider",
    "KeyMaterial",
    "decrypt_cbc",
    "decrypt_gcm",
    "decrypt_value",
    "derive_key",
    "get_meta_version",
    "iter_cookie_results",
    "strategy_for_platform",
]
