"""Authenticated sessions holding a derived key.

A session is owned by its caller and passed explicitly to whatever needs to
encrypt or decrypt; there is no process-wide key. Locking a session drops
its key, after which it can no longer be used.
"""

import logging
from typing import Any, Optional, Protocol

from .cipher import EncryptedRecord, encrypt, decrypt, reencrypt
from .errors import AccountExists, SaltNotFound, SessionLocked
from .kdf import DerivedKey, derive_key, generate_salt

logger = logging.getLogger("lockr.session")


class SaltStore(Protocol):
    """Where account salts live, usually the account service."""

    def get_salt(self, user_id: str) -> Optional[str]: ...

    def put_salt(self, user_id: str, salt: str) -> None: ...


class Session:
    """An unlocked key for one account."""

    def __init__(self, user_id: str, key: DerivedKey):
        self.user_id = user_id
        self._key: Optional[DerivedKey] = key

    @property
    def locked(self) -> bool:
        return self._key is None

    @property
    def key(self) -> DerivedKey:
        """Return the session key or raise if locked."""
        if self._key is None:
            raise SessionLocked(f"session for {self.user_id} is locked")
        return self._key

    def encrypt(self, payload: Any) -> EncryptedRecord:
        return encrypt(payload, self.key)

    def decrypt(self, record: EncryptedRecord) -> Any:
        return decrypt(record, self.key)

    def reencrypt(self, record: EncryptedRecord, target: "Session") -> EncryptedRecord:
        """Re-encrypt one of this session's records under target's key."""
        return reencrypt(record, self.key, target.key)

    def lock(self) -> None:
        """Discard the key."""
        if self._key is not None:
            logger.debug("Locking session for %s", self.user_id)
        self._key = None

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.lock()

    def __repr__(self) -> str:
        state = "locked" if self.locked else "unlocked"
        return f"Session(user_id={self.user_id!r}, {state})"


def create_account(store: SaltStore, user_id: str, password: str) -> Session:
    """Generate and persist a salt for a new account and open its session.

    Args:
        store: The salt store
        user_id: The new account's identifier
        password: The account password

    Returns:
        An unlocked session

    Raises:
        AccountExists: If the account already has a salt
    """
    if store.get_salt(user_id) is not None:
        raise AccountExists(f"account '{user_id}' already has a salt")
    salt = generate_salt()
    key = derive_key(password, salt)
    store.put_salt(user_id, salt)
    logger.info("Created encryption salt for %s", user_id)
    return Session(user_id, key)


def unlock(store: SaltStore, user_id: str, password: str) -> Session:
    """Derive the key for an existing account and open its session.

    A wrong password is not detected here; it surfaces as
    :class:`~lockr.errors.DecryptionFailed` on the first decrypt.

    Raises:
        SaltNotFound: If the store has no salt for the account
        InvalidSalt: If the stored salt is corrupted
    """
    salt = store.get_salt(user_id)
    if salt is None:
        raise SaltNotFound(f"no encryption salt for account '{user_id}'")
    key = derive_key(password, salt)
    logger.debug("Unlocked session for %s", user_id)
    return Session(user_id, key)
