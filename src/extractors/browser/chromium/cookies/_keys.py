"""
Chromium cookie key provider.

Obtains the symmetric key(s) protecting Chromium cookie values from the
operating system. The strategy is fixed per platform:

- macOS (credential_store): Keychain password via ``keyring``, PBKDF2 with
  1003 iterations, AES-128-CBC
- Linux (password_derivation): ``v10`` uses the built-in password
  ``peanuts``; ``v11`` uses the Secret Service password via
  ``secretstorage``, with the empty-password key as fallback candidate
- Windows (native_unprotect): ``Local State`` key unwrapped with DPAPI,
  AES-256-GCM

Keys are fetched lazily on the first ciphertext that needs them and live on
the provider instance, which the pipeline creates per cookie source. Key
bytes are never logged.

Usage:
    provider = ChromiumKeyProvider(BrowserKind.CHROME, local_state_path=target.local_state_path)
    keys = provider.key_for(b"v10")
"""

from __future__ import annotations

import base64
import json
from contextlib import closing
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Union

import keyring
from keyring.errors import KeyringError

from core.enums import BrowserKind, CipherScheme, KeyStrategy
from core.logging import get_logger
from extractors._shared.platforms import MACOS, WINDOWS, normalize_platform
from ....exceptions import KeyUnavailableError
from .._patterns import get_keychain_entry, get_secret_application
from ._crypto import derive_key
from ._dpapi import crypt_unprotect_data
from ._schemas import (
    DPAPI_KEY_PREFIX,
    GCM_KEY_LENGTH,
    LINUX_ITERATIONS,
    LINUX_V10_PASSWORD,
    MACOS_ITERATIONS,
    PREFIX_V10,
    PREFIX_V11,
)

LOGGER = get_logger("extractors.browser.chromium.cookies.keys")


@dataclass(frozen=True)
class KeyMaterial:
    """A symmetric key and the cipher it is used with."""

    key: bytes = field(repr=False)
    scheme: CipherScheme

    @classmethod
    def from_password(cls, password: Union[str, bytes], iterations: int) -> "KeyMaterial":
        return cls(derive_key(password, iterations), CipherScheme.AES_128_CBC)


KeyMap = Mapping[Union[bytes, str], Sequence[KeyMaterial]]


def strategy_for_platform(platform: Optional[str] = None) -> KeyStrategy:
    """Static mapping of OS to key acquisition strategy."""
    platform = normalize_platform(platform)
    if platform == MACOS:
        return KeyStrategy.CREDENTIAL_STORE
    if platform == WINDOWS:
        return KeyStrategy.NATIVE_UNPROTECT
    return KeyStrategy.PASSWORD_DERIVATION


def _version_key(version: Union[bytes, str]) -> bytes:
    return version.encode("ascii") if isinstance(version, str) else bytes(version)


# =============================================================================
# OS credential lookups
# =============================================================================

def read_keychain_password(browser: BrowserKind) -> str:
    """
    Read the "Safe Storage" password from the macOS Keychain.

    Raises:
        KeyUnavailableError: Entry missing or Keychain access refused
    """
    service, account = get_keychain_entry(browser.value)
    try:
        password = keyring.get_password(service, account)
    except KeyringError as e:
        raise KeyUnavailableError(f"Keychain lookup for '{service}' failed: {e}") from e
    if password is None:
        raise KeyUnavailableError(f"No Keychain entry '{service}' for account '{account}'")
    return password


def read_secret_service_password(browser: BrowserKind) -> Optional[bytes]:
    """
    Read the cookie password from the Secret Service (GNOME Keyring, KWallet 6).

    Returns:
        The password bytes, or None when no matching item exists

    Raises:
        KeyUnavailableError: Secret Service unreachable or locked
    """
    import secretstorage

    application = get_secret_application(browser.value)
    try:
        with closing(secretstorage.dbus_init()) as connection:
            collection = secretstorage.get_default_collection(connection)
            if collection.is_locked():
                collection.unlock()
            for item in collection.search_items({"application": application}):
                return item.get_secret()
    except secretstorage.exceptions.SecretStorageException as e:
        raise KeyUnavailableError(f"Secret Service lookup for '{application}' failed: {e}") from e
    return None


def read_local_state_key(
    local_state_path: Optional[Path],
    unprotect: Callable[[bytes], bytes] = crypt_unprotect_data,
) -> bytes:
    """
    Unwrap the AES-256-GCM key stored in ``Local State``.

    Raises:
        KeyUnavailableError: File missing/unreadable, key absent or malformed,
                             or DPAPI refused to unprotect it
    """
    if local_state_path is None:
        raise KeyUnavailableError("No Local State file for this profile")
    try:
        with open(local_state_path, "r", encoding="utf-8") as f:
            local_state = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise KeyUnavailableError(f"Cannot read {local_state_path}: {e}") from e

    encoded = (local_state.get("os_crypt") or {}).get("encrypted_key")
    if not encoded:
        raise KeyUnavailableError(f"No os_crypt.encrypted_key in {local_state_path}")
    try:
        wrapped = base64.b64decode(encoded)
    except ValueError as e:
        raise KeyUnavailableError(f"encrypted_key in {local_state_path} is not base64") from e
    if not wrapped.startswith(DPAPI_KEY_PREFIX):
        raise KeyUnavailableError(f"encrypted_key in {local_state_path} lacks the DPAPI prefix")

    try:
        key = unprotect(wrapped[len(DPAPI_KEY_PREFIX):])
    except OSError as e:
        raise KeyUnavailableError(f"DPAPI could not unprotect the Local State key: {e}") from e
    if len(key) != GCM_KEY_LENGTH:
        raise KeyUnavailableError(f"Local State key has {len(key)} bytes, expected {GCM_KEY_LENGTH}")
    return key


# =============================================================================
# Provider
# =============================================================================

class ChromiumKeyProvider:
    """
    Lazily resolves candidate keys per ciphertext version for one cookie source.

    Args:
        browser: Chromium-family browser the database belongs to
        local_state_path: ``Local State`` file (Windows key)
        platform: ``sys.platform``-style override
        keys: Fixed keys per version (``{b"v10": [KeyMaterial(...)]}``); when
              given, the OS is never consulted
    """

    def __init__(
        self,
        browser: BrowserKind,
        *,
        local_state_path: Optional[Path] = None,
        platform: Optional[str] = None,
        keys: Optional[KeyMap] = None,
    ):
        self.browser = browser
        self.local_state_path = local_state_path
        self.platform = normalize_platform(platform)
        self.strategy = strategy_for_platform(self.platform)
        self._injected: Optional[Dict[bytes, List[KeyMaterial]]] = None
        if keys is not None:
            self._injected = {_version_key(v): list(k) for v, k in keys.items()}
        self._cache: Dict[bytes, List[KeyMaterial]] = {}
        self._failures: Dict[bytes, str] = {}

    @property
    def unprotect(self) -> Optional[Callable[[bytes], bytes]]:
        """DPAPI callable for unprefixed values (Windows only, never with injected keys)."""
        if self._injected is None and self.strategy == KeyStrategy.NATIVE_UNPROTECT:
            return crypt_unprotect_data
        return None

    def key_for(self, version: Union[bytes, str]) -> List[KeyMaterial]:
        """
        Candidate keys for a ciphertext version, in the order to try them.

        Raises:
            KeyUnavailableError: No candidate key can be produced
        """
        version = _version_key(version)
        if self._injected is not None:
            candidates = self._injected.get(version)
            if not candidates:
                raise KeyUnavailableError(f"No key supplied for {version.decode()} values")
            return candidates

        if version in self._failures:
            raise KeyUnavailableError(self._failures[version])
        cached = self._cache.get(version)
        if cached is None:
            try:
                cached = self._fetch(version)
            except KeyUnavailableError as e:
                LOGGER.warning(
                    "No %s key for %s: %s", version.decode(), self.browser.display_name, e,
                )
                self._failures[version] = e.args[0]
                raise
            self._cache[version] = cached
        return cached

    def _fetch(self, version: bytes) -> List[KeyMaterial]:
        if version not in (PREFIX_V10, PREFIX_V11):
            raise KeyUnavailableError(f"Unknown ciphertext version {version!r}")

        if self.strategy == KeyStrategy.CREDENTIAL_STORE:
            password = read_keychain_password(self.browser)
            return [KeyMaterial.from_password(password, MACOS_ITERATIONS)]

        if self.strategy == KeyStrategy.NATIVE_UNPROTECT:
            if version != PREFIX_V10:
                raise KeyUnavailableError("v11 values are not produced on Windows")
            key = read_local_state_key(self.local_state_path)
            return [KeyMaterial(key, CipherScheme.AES_256_GCM)]

        # Linux
        if version == PREFIX_V10:
            return [KeyMaterial.from_password(LINUX_V10_PASSWORD, LINUX_ITERATIONS)]

        candidates: List[KeyMaterial] = []
        try:
            password = read_secret_service_password(self.browser)
        except KeyUnavailableError as e:
            LOGGER.warning("Secret Service unavailable, trying empty password: %s", e)
            password = None
        if password is not None:
            candidates.append(KeyMaterial.from_password(password, LINUX_ITERATIONS))
        candidates.append(KeyMaterial.from_password(b"", LINUX_ITERATIONS))
        return candidates
