"""Tests for kdf module."""

import base64
import hashlib
import pickle

import pytest
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from lockr.errors import CryptoUnavailable, InvalidSalt
from lockr.kdf import (
    DerivedKey,
    SALT_LENGTH,
    decode_salt,
    derive_key,
    generate_salt,
)

ZERO_SALT = base64.b64encode(bytes(16)).decode("ascii")


def test_generate_salt():
    """Test salt is base64 text of 16 bytes."""
    salt = generate_salt()
    assert isinstance(salt, str)
    assert len(base64.b64decode(salt)) == SALT_LENGTH


def test_generate_salt_is_random():
    """Test two salts differ."""
    assert generate_salt() != generate_salt()


def test_decode_salt_text_and_bytes():
    """Test decoding base64 text and accepting raw bytes."""
    assert decode_salt(ZERO_SALT) == bytes(16)
    assert decode_salt(bytes(16)) == bytes(16)


@pytest.mark.parametrize(
    "salt",
    [
        "not base64!!",
        base64.b64encode(bytes(15)).decode("ascii"),
        base64.b64encode(bytes(32)).decode("ascii"),
        "",
        bytes(8),
        12345,
    ],
)
def test_decode_salt_invalid(salt):
    """Test undecodable or wrong-length salts are rejected."""
    with pytest.raises(InvalidSalt):
        decode_salt(salt)


def test_derive_key_deterministic(key):
    """Test the same password and salt derive the same key."""
    again = derive_key("correct-horse", ZERO_SALT)
    assert again == key
    assert again is not key


def test_derive_key_salt_as_bytes(key):
    """Test raw salt bytes give the same key as their base64 text."""
    assert derive_key("correct-horse", bytes(16)) == key


def test_derive_key_differs_by_password(key, other_key):
    """Test different passwords give different keys."""
    assert key != other_key


def test_derive_key_differs_by_salt(key):
    """Test different salts give different keys."""
    assert derive_key("correct-horse", generate_salt()) != key


def test_derive_key_empty_password_allowed():
    """Test password strength is not enforced during derivation."""
    assert isinstance(derive_key("", ZERO_SALT), DerivedKey)


def test_derive_key_invalid_salt():
    """Test a bad salt raises InvalidSalt."""
    with pytest.raises(InvalidSalt):
        derive_key("correct-horse", "AAAA")


def test_derived_key_not_exportable(key):
    """Test the key material is not exposed."""
    assert key.algorithm == "AES-GCM"
    assert key.bits == 256
    assert repr(key) == "DerivedKey(algorithm='AES-GCM', bits=256)"
    with pytest.raises(TypeError):
        pickle.dumps(key)


def test_derived_key_immutable(key):
    """Test the key cannot be modified in place."""
    with pytest.raises(AttributeError):
        key._material = bytes(32)
    with pytest.raises(AttributeError):
        key.extra = 1


def test_derive_key_crypto_unavailable(monkeypatch):
    """Test a backend without PBKDF2 raises CryptoUnavailable."""

    def unsupported(*args, **kwargs):
        raise UnsupportedAlgorithm("no pbkdf2")

    monkeypatch.setattr("lockr.kdf.PBKDF2HMAC", unsupported)
    with pytest.raises(CryptoUnavailable):
        derive_key("correct-horse", ZERO_SALT)


def test_derive_key_matches_pbkdf2_sha256(key):
    """Test the key is PBKDF2-HMAC-SHA256, 150000 iterations, 32 bytes."""
    raw = hashlib.pbkdf2_hmac("sha256", b"correct-horse", bytes(16), 150000, 32)
    iv = bytes(12)
    assert key.seal(iv, b"known answer") == AESGCM(raw).encrypt(iv, b"known answer", None)
