"""Authenticated encryption of JSON payloads with AES-GCM."""

import base64
import binascii
import json
import os
from dataclasses import dataclass, asdict
from typing import Any

from cryptography.exceptions import InvalidTag

from .errors import DecryptionFailed, SerializationError
from .kdf import DerivedKey

IV_LENGTH = 12
TAG_LENGTH = 16


@dataclass(frozen=True)
class EncryptedRecord:
    """Ciphertext envelope for one payload.

    Both fields are base64 text. The key that produced the record is not
    part of it; callers track which key a record belongs to.
    """

    ciphertext: str
    iv: str

    def to_dict(self) -> dict[str, str]:
        """Convert record to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EncryptedRecord":
        """Create record from dictionary, ignoring unknown fields.

        Raises:
            SerializationError: If ciphertext or iv is missing or not text
        """
        try:
            ciphertext = data["ciphertext"]
            iv = data["iv"]
        except (KeyError, TypeError) as exc:
            raise SerializationError("record needs 'ciphertext' and 'iv' fields") from exc
        if not isinstance(ciphertext, str) or not isinstance(iv, str):
            raise SerializationError("record fields must be base64 text")
        return cls(ciphertext=ciphertext, iv=iv)


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(text: str) -> bytes:
    return base64.b64decode(text, validate=True)


def serialize_payload(payload: Any) -> bytes:
    """Serialize a payload to compact UTF-8 JSON.

    Raises:
        SerializationError: If the payload has no JSON representation
    """
    try:
        text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"payload is not JSON serializable: {exc}") from exc
    return text.encode("utf-8")


def deserialize_payload(data: bytes) -> Any:
    """Parse UTF-8 JSON bytes produced by :func:`serialize_payload`.

    Raises:
        SerializationError: If the bytes are not UTF-8 JSON
    """
    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise SerializationError(f"decrypted data is not valid JSON: {exc}") from exc


def encrypt(payload: Any, key: DerivedKey) -> EncryptedRecord:
    """Encrypt a JSON-serializable payload.

    A new random IV is drawn on every call.

    Args:
        payload: Any value json can serialize
        key: The session key

    Returns:
        The encrypted record

    Raises:
        SerializationError: If the payload cannot be represented as JSON
    """
    plaintext = serialize_payload(payload)
    iv = os.urandom(IV_LENGTH)
    ciphertext = key.seal(iv, plaintext)
    return EncryptedRecord(ciphertext=_b64encode(ciphertext), iv=_b64encode(iv))


def decrypt(record: EncryptedRecord, key: DerivedKey) -> Any:
    """Decrypt a record back to its payload.

    Args:
        record: A record produced by :func:`encrypt`
        key: The key the record was encrypted with

    Returns:
        The decrypted payload

    Raises:
        DecryptionFailed: If the key is wrong or the record was altered
        SerializationError: If the plaintext is not JSON
    """
    try:
        ciphertext = _b64decode(record.ciphertext)
        iv = _b64decode(record.iv)
    except (binascii.Error, ValueError) as exc:
        raise DecryptionFailed("record is not valid base64") from exc

    if len(iv) != IV_LENGTH or len(ciphertext) < TAG_LENGTH:
        raise DecryptionFailed("record is malformed")

    try:
        plaintext = key.unseal(iv, ciphertext)
    except InvalidTag as exc:
        raise DecryptionFailed("authentication failed: wrong key or corrupted record") from exc

    return deserialize_payload(plaintext)


def reencrypt(record: EncryptedRecord, old_key: DerivedKey, new_key: DerivedKey) -> EncryptedRecord:
    """Move a record from one key to another, e.g. after a password change.

    Raises:
        DecryptionFailed: If old_key does not open the record
    """
    return encrypt(decrypt(record, old_key), new_key)
