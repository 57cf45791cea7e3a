"""Password-based key derivation for vault encryption."""

import base64
import binascii
import hmac
import os

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import CryptoUnavailable, InvalidSalt

SALT_LENGTH = 16
PBKDF2_ITERATIONS = 150000
KEY_LENGTH = 32  # AES-256


class DerivedKey:
    """AES-GCM key derived from a password and salt.

    The raw key material stays inside the object: there is no accessor for
    it, it cannot be pickled and it is never part of ``repr``. Instances are
    immutable and may be shared between threads.
    """

    __slots__ = ("_material", "_aead")

    def __init__(self, material: bytes):
        if len(material) != KEY_LENGTH:
            raise ValueError(f"key material must be {KEY_LENGTH} bytes")
        try:
            aead = AESGCM(material)
        except UnsupportedAlgorithm as exc:
            raise CryptoUnavailable("AES-GCM is not supported by this backend") from exc
        object.__setattr__(self, "_material", bytes(material))
        object.__setattr__(self, "_aead", aead)

    @property
    def algorithm(self) -> str:
        return "AES-GCM"

    @property
    def bits(self) -> int:
        return KEY_LENGTH * 8

    def seal(self, iv: bytes, plaintext: bytes) -> bytes:
        """Encrypt plaintext under iv, returning ciphertext with the GCM tag appended."""
        return self._aead.encrypt(iv, plaintext, None)

    def unseal(self, iv: bytes, ciphertext: bytes) -> bytes:
        """Decrypt and authenticate ciphertext produced by :meth:`seal`.

        Raises:
            cryptography.exceptions.InvalidTag: If authentication fails
        """
        return self._aead.decrypt(iv, ciphertext, None)

    def __setattr__(self, name, value):
        raise AttributeError("DerivedKey is immutable")

    def __delattr__(self, name):
        raise AttributeError("DerivedKey is immutable")

    def __eq__(self, other):
        if not isinstance(other, DerivedKey):
            return NotImplemented
        return hmac.compare_digest(self._material, other._material)

    __hash__ = None

    def __reduce__(self):
        raise TypeError("DerivedKey cannot be serialized")

    def __repr__(self) -> str:
        return f"DerivedKey(algorithm={self.algorithm!r}, bits={self.bits})"


def generate_salt() -> str:
    """Generate a new account salt.

    Returns:
        Base64 text of 16 random bytes, as stored with the account record
    """
    return base64.b64encode(os.urandom(SALT_LENGTH)).decode("ascii")


def decode_salt(salt: str | bytes) -> bytes:
    """Decode a stored salt to its raw bytes.

    Text is treated as base64; bytes are taken as the raw salt.

    Args:
        salt: The stored salt

    Returns:
        The 16 raw salt bytes

    Raises:
        InvalidSalt: If the salt is not valid base64 or has the wrong length
    """
    if isinstance(salt, str):
        try:
            raw = base64.b64decode(salt, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidSalt("salt is not valid base64") from exc
    elif isinstance(salt, (bytes, bytearray, memoryview)):
        raw = bytes(salt)
    else:
        raise InvalidSalt(f"salt must be str or bytes, not {type(salt).__name__}")

    if len(raw) != SALT_LENGTH:
        raise InvalidSalt(f"salt must be {SALT_LENGTH} bytes, got {len(raw)}")
    return raw


def derive_key(password: str, salt: str | bytes) -> DerivedKey:
    """Derive an AES-GCM key from the given password and salt using PBKDF2HMAC.

    The same password and salt always give the same key, which is what lets
    a new session read records encrypted in an earlier one.

    Args:
        password: The password to derive the key from
        salt: Base64 salt text or the raw 16 salt bytes

    Returns:
        The derived key

    Raises:
        InvalidSalt: If the salt cannot be decoded or has the wrong length
        CryptoUnavailable: If PBKDF2-HMAC-SHA256 or AES-GCM is unavailable
    """
    raw_salt = decode_salt(salt)
    if isinstance(password, str):
        password = password.encode("utf-8")

    try:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=raw_salt,
            iterations=PBKDF2_ITERATIONS,
        )
        material = kdf.derive(password)
    except UnsupportedAlgorithm as exc:
        raise CryptoUnavailable("PBKDF2-HMAC-SHA256 is not supported by this backend") from exc
    return DerivedKey(material)
