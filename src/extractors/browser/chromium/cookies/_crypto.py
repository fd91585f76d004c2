"""
Chromium cookie value decryption.

Chromium stores cookie values encrypted in the ``encrypted_value`` column,
prefixed with a three-byte version tag:

- ``v10`` / ``v11`` on Linux and macOS: AES-128-CBC, key from PBKDF2-HMAC-SHA1
  (salt ``saltysalt``), IV of 16 spaces, PKCS#7 padding
- ``v10`` on Windows: AES-256-GCM, 12-byte nonce + ciphertext + 16-byte tag,
  key unwrapped with DPAPI from ``Local State``
- ``v20`` on Windows: app-bound encryption, not decryptable outside the browser
- no prefix on Windows: legacy values protected with DPAPI directly

Since cookie database version 24 the plaintext starts with the SHA-256 digest
of the cookie's host_key.

Usage:
    from extractors.browser.chromium.cookies._crypto import decrypt_value, derive_key

    key = KeyMaterial(derive_key("peanuts", 1), CipherScheme.AES_128_CBC)
    value = decrypt_value(row["encrypted_value"], [key])
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING, Callable, Optional, Sequence, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from core.enums import CipherScheme
from ....exceptions import (
    AuthenticationFailedError,
    DecryptError,
    KeyUnavailableError,
    MalformedValueError,
    UnsupportedEncryptionError,
)
from ._schemas import (
    CBC_IV,
    DOMAIN_DIGEST_LENGTH,
    GCM_NONCE_LENGTH,
    GCM_TAG_LENGTH,
    PBKDF2_KEY_LENGTH,
    PBKDF2_SALT,
    PREFIX_LENGTH,
    PREFIX_V10,
    PREFIX_V11,
    PREFIX_V20,
)

if TYPE_CHECKING:
    from ._keys import KeyMaterial

Unprotect = Callable[[bytes], bytes]

ENCRYPTED_PREFIXES = (PREFIX_V10, PREFIX_V11)


# =============================================================================
# Key Derivation
# =============================================================================

def derive_key(password: Union[str, bytes], iterations: int, length: int = PBKDF2_KEY_LENGTH) -> bytes:
    """
    Derive a CBC key the way Chromium's os_crypt does on Linux and macOS.

    Args:
        password: Keyring password (``peanuts`` for Linux v10)
        iterations: 1 on Linux, 1003 on macOS
        length: Key length in bytes

    Returns:
        Raw key bytes
    """
    if isinstance(password, str):
        password = password.encode("utf-8")
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA1(),
        length=length,
        salt=PBKDF2_SALT,
        iterations=iterations,
    )
    return kdf.derive(password)


# =============================================================================
# Ciphers
# =============================================================================

def ciphertext_version(raw_value: Union[str, bytes, None]) -> Optional[bytes]:
    """Return the version prefix (``v10``, ``v11``, ``v20``) of a stored value, if any."""
    if not isinstance(raw_value, (bytes, bytearray, memoryview)):
        return None
    prefix = bytes(raw_value[:PREFIX_LENGTH])
    if prefix in (PREFIX_V10, PREFIX_V11, PREFIX_V20):
        return prefix
    return None


def decrypt_cbc(payload: bytes, key: bytes) -> bytes:
    """
    AES-CBC decrypt and unpad a payload (version prefix already removed).

    Raises:
        MalformedValueError: Empty payload, partial block or bad padding
    """
    if not payload or len(payload) % 16:
        raise MalformedValueError(
            f"CBC payload length {len(payload)} is not a positive multiple of 16"
        )
    decryptor = Cipher(algorithms.AES(key), modes.CBC(CBC_IV)).decryptor()
    padded = decryptor.update(payload) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise MalformedValueError("Invalid padding (wrong key?)") from e


def decrypt_gcm(payload: bytes, key: bytes) -> bytes:
    """
    AES-GCM decrypt a ``nonce || ciphertext || tag`` payload.

    Raises:
        MalformedValueError: Payload shorter than nonce and tag
        AuthenticationFailedError: Tag mismatch
    """
    if len(payload) < GCM_NONCE_LENGTH + GCM_TAG_LENGTH:
        raise MalformedValueError(
            f"GCM payload length {len(payload)} is shorter than nonce and tag"
        )
    nonce, ciphertext = payload[:GCM_NONCE_LENGTH], payload[GCM_NONCE_LENGTH:]
    try:
        return AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise AuthenticationFailedError("GCM authentication tag mismatch") from e


def _strip_domain_digest(plaintext: bytes, host_key: Optional[str]) -> bytes:
    if len(plaintext) < DOMAIN_DIGEST_LENGTH:
        raise MalformedValueError("Plaintext shorter than the host_key digest")
    digest, plaintext = plaintext[:DOMAIN_DIGEST_LENGTH], plaintext[DOMAIN_DIGEST_LENGTH:]
    if host_key is not None and digest != hashlib.sha256(host_key.encode("utf-8")).digest():
        raise AuthenticationFailedError("host_key digest does not match the cookie domain")
    return plaintext


def _decode(plaintext: bytes) -> str:
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedValueError("Decrypted value is not valid UTF-8") from e


def _decrypt_with(
    payload: bytes,
    key: "KeyMaterial",
    host_key: Optional[str],
    domain_digest: bool,
) -> str:
    if key.scheme == CipherScheme.AES_256_GCM:
        plaintext = decrypt_gcm(payload, key.key)
    else:
        plaintext = decrypt_cbc(payload, key.key)
    if domain_digest:
        plaintext = _strip_domain_digest(plaintext, host_key)
    return _decode(plaintext)


# =============================================================================
# Public Entry Point
# =============================================================================

def decrypt_value(
    raw_value: Union[str, bytes, None],
    keys: Optional[Sequence["KeyMaterial"]],
    *,
    unprotect: Optional[Unprotect] = None,
    host_key: Optional[str] = None,
    domain_digest: bool = False,
) -> str:
    """
    Turn a stored cookie value into plaintext.

    Args:
        raw_value: ``str`` (Firefox, returned unchanged) or encrypted bytes
        keys: Candidate keys for the value's version, tried in order
        unprotect: DPAPI-style callable for values with no version prefix
        host_key: Cookie domain, checked against the embedded digest
        domain_digest: True when the database stores SHA-256(host_key) first

    Returns:
        Plaintext cookie value

    Raises:
        KeyUnavailableError: Encrypted value but no candidate keys
        UnsupportedEncryptionError: App-bound (v20) value
        AuthenticationFailedError: Integrity check failed with every key
        MalformedValueError: Value structure invalid or undecodable
    """
    if raw_value is None:
        return ""
    if isinstance(raw_value, str):
        return raw_value

    raw_value = bytes(raw_value)
    if not raw_value:
        return ""

    version = ciphertext_version(raw_value)
    if version == PREFIX_V20:
        raise UnsupportedEncryptionError("App-bound (v20) cookie encryption is not supported")

    if version is None:
        if unprotect is not None:
            try:
                return _decode(unprotect(raw_value))
            except DecryptError:
                raise
            except Exception as e:
                raise MalformedValueError(f"Native unprotect failed: {e}") from e
        return _decode(raw_value)

    if not keys:
        raise KeyUnavailableError(f"No key available for {version.decode()} value")

    payload = raw_value[PREFIX_LENGTH:]
    # Every candidate but the last may fail; the last one's error propagates
    for key in keys[:-1]:
        try:
            return _decrypt_with(payload, key, host_key, domain_digest)
        except DecryptError:
            continue
    return _decrypt_with(payload, keys[-1], host_key, domain_digest)
