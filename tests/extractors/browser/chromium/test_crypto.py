"""
Tests for Chromium cookie value decryption.

Tests cover:
- PBKDF2 key derivation (Linux/macOS)
- AES-128-CBC values (v10/v11)
- AES-256-GCM values (Windows v10)
- Host-key digest of cookie database version 24+
- Unsupported, malformed and unprefixed values
"""

import pytest

from core.enums import CipherScheme
from extractors.browser.chromium.cookies import KeyMaterial, decrypt_value, derive_key
from extractors.browser.chromium.cookies._crypto import (
    ciphertext_version,
    decrypt_cbc,
    decrypt_gcm,
)
from extractors.exceptions import (
    AuthenticationFailedError,
    DecryptError,
    KeyUnavailableError,
    MalformedValueError,
    UnsupportedEncryptionError,
)

from tests.fixtures.helpers import encrypt_cbc, encrypt_gcm, with_domain_digest

# v10 value written by Chromium on Linux with the built-in password
PEANUTS_VALUE = b"v10" + bytes.fromhex("e9bf20c4cfaaa2fa8df33a4260424e5b")


class TestDeriveKey:
    """Tests for derive_key."""

    def test_length(self):
        assert len(derive_key("peanuts", 1)) == 16

    def test_iterations_matter(self):
        """macOS (1003 iterations) and Linux (1) keys differ for one password."""
        assert derive_key("secret", 1) != derive_key("secret", 1003)

    def test_str_and_bytes_agree(self):
        assert derive_key("peanuts", 1) == derive_key(b"peanuts", 1)


class TestCiphertextVersion:
    """Tests for ciphertext_version."""

    def test_prefixes(self):
        assert ciphertext_version(b"v10abc") == b"v10"
        assert ciphertext_version(b"v11abc") == b"v11"
        assert ciphertext_version(b"v20abc") == b"v20"

    def test_no_prefix(self):
        assert ciphertext_version(b"\x01\x00\x00\x00") is None
        assert ciphertext_version("v10 in a text column") is None
        assert ciphertext_version(None) is None


class TestCbc:
    """Tests for AES-128-CBC values."""

    def test_known_linux_value(self, peanuts_key):
        assert decrypt_value(PEANUTS_VALUE, [peanuts_key]) == "PENDING+400"

    def test_round_trip(self, peanuts_key):
        encrypted = encrypt_cbc(b"session-token", peanuts_key.key, prefix=b"v11")
        assert decrypt_value(encrypted, [peanuts_key]) == "session-token"

    def test_wrong_key(self, peanuts_key):
        wrong = KeyMaterial.from_password("not peanuts", 1)
        encrypted = encrypt_cbc(b"session-token", wrong.key)
        with pytest.raises(DecryptError):
            decrypt_value(encrypted, [peanuts_key])

    def test_partial_block(self, peanuts_key):
        with pytest.raises(MalformedValueError):
            decrypt_cbc(b"\x00" * 15, peanuts_key.key)

    def test_empty_payload(self, peanuts_key):
        with pytest.raises(MalformedValueError):
            decrypt_value(b"v10", [peanuts_key])

    def test_candidates_tried_in_order(self, peanuts_key):
        """The first key that decrypts wins; failures before it are ignored."""
        empty_password = KeyMaterial.from_password(b"", 1)
        encrypted = encrypt_cbc(b"from-empty-password", empty_password.key, prefix=b"v11")
        assert decrypt_value(encrypted, [peanuts_key, empty_password]) == "from-empty-password"

    def test_last_candidate_error_propagates(self, peanuts_key, gcm_key):
        encrypted = bytearray(encrypt_gcm(b"x", gcm_key.key))
        encrypted[-1] ^= 0xFF
        with pytest.raises(AuthenticationFailedError):
            decrypt_value(bytes(encrypted), [peanuts_key, gcm_key])


class TestGcm:
    """Tests for AES-256-GCM values."""

    def test_round_trip(self, gcm_key):
        encrypted = encrypt_gcm(b"windows-cookie", gcm_key.key)
        assert decrypt_value(encrypted, [gcm_key]) == "windows-cookie"

    def test_layout(self, gcm_key):
        """Prefix, 12-byte nonce, ciphertext, 16-byte tag."""
        encrypted = encrypt_gcm(b"abc", gcm_key.key, nonce=b"\x01" * 12)
        assert len(encrypted) == 3 + 12 + 3 + 16
        assert decrypt_gcm(encrypted[3:], gcm_key.key) == b"abc"

    def test_tampered_tag(self, gcm_key):
        encrypted = bytearray(encrypt_gcm(b"windows-cookie", gcm_key.key))
        encrypted[-1] ^= 0x01
        with pytest.raises(AuthenticationFailedError):
            decrypt_value(bytes(encrypted), [gcm_key])

    def test_too_short(self, gcm_key):
        with pytest.raises(MalformedValueError):
            decrypt_value(b"v10" + b"\x00" * 20, [gcm_key])


class TestDomainDigest:
    """Tests for the SHA-256(host_key) plaintext prefix."""

    def test_digest_is_stripped(self, peanuts_key):
        encrypted = encrypt_cbc(with_domain_digest(".example.com", "abc"), peanuts_key.key)
        value = decrypt_value(
            encrypted, [peanuts_key], host_key=".example.com", domain_digest=True,
        )
        assert value == "abc"

    def test_digest_mismatch(self, peanuts_key):
        encrypted = encrypt_cbc(with_domain_digest(".other.org", "abc"), peanuts_key.key)
        with pytest.raises(AuthenticationFailedError):
            decrypt_value(encrypted, [peanuts_key], host_key=".example.com", domain_digest=True)

    def test_short_plaintext(self, gcm_key):
        encrypted = encrypt_gcm(b"short", gcm_key.key)
        with pytest.raises(MalformedValueError):
            decrypt_value(encrypted, [gcm_key], domain_digest=True)

    def test_digest_left_alone_for_old_databases(self, peanuts_key):
        plaintext = with_domain_digest(".example.com", "abc")
        encrypted = encrypt_cbc(plaintext, peanuts_key.key)
        with pytest.raises(MalformedValueError):
            # The digest bytes are not UTF-8 text
            decrypt_value(encrypted, [peanuts_key], host_key=".example.com")


class TestDecryptValue:
    """Tests for decrypt_value dispatch."""

    def test_text_passes_through(self):
        """Firefox values are stored as text and returned unchanged."""
        assert decrypt_value("plain", None) == "plain"

    def test_empty_values(self):
        assert decrypt_value(None, None) == ""
        assert decrypt_value(b"", None) == ""

    def test_v20_unsupported(self, gcm_key):
        with pytest.raises(UnsupportedEncryptionError):
            decrypt_value(b"v20" + b"\x00" * 40, [gcm_key])

    def test_no_keys(self):
        with pytest.raises(KeyUnavailableError):
            decrypt_value(PEANUTS_VALUE, [])

    def test_unprefixed_uses_unprotect(self):
        assert decrypt_value(b"\x01\x02", None, unprotect=lambda blob: b"legacy") == "legacy"

    def test_unprotect_failure(self):
        def failing(blob):
            raise OSError("DPAPI says no")

        with pytest.raises(MalformedValueError, match="DPAPI says no"):
            decrypt_value(b"\x01\x02", None, unprotect=failing)

    def test_unprefixed_without_unprotect_is_plaintext(self):
        assert decrypt_value(b"raw-bytes", None) == "raw-bytes"

    def test_key_repr_hides_bytes(self, gcm_key):
        assert "key=" not in repr(gcm_key)
        assert gcm_key.scheme is CipherScheme.AES_256_GCM
