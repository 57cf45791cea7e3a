"""lockr - client-side vault encryption and password generation."""

import logging
import os
import sys

from .cipher import EncryptedRecord, encrypt, decrypt, reencrypt
from .errors import (
    LockrError,
    ConfigError,
    InvalidSalt,
    CryptoUnavailable,
    DecryptionFailed,
    SerializationError,
    SessionLocked,
    AccountExists,
    SaltNotFound,
    StoreCorrupted,
)
from .generator import PasswordPolicy, StrengthLabel, StrengthScore, generate, score, assess
from .kdf import DerivedKey, derive_key, generate_salt, decode_salt
from .session import Session, create_account, unlock

__all__ = [
    "EncryptedRecord",
    "encrypt",
    "decrypt",
    "reencrypt",
    "LockrError",
    "InvalidSalt",
    "CryptoUnavailable",
    "DecryptionFailed",
    "SerializationError",
    "SessionLocked",
    "AccountExists",
    "SaltNotFound",
    "StoreCorrupted",
    "ConfigError",
    "PasswordPolicy",
    "StrengthLabel",
    "StrengthScore",
    "generate",
    "score",
    "assess",
    "DerivedKey",
    "derive_key",
    "generate_salt",
    "decode_salt",
    "Session",
    "create_account",
    "unlock",
]


def main() -> None:
    """Main entry point for the lockr command.

    `--verbose` anywhere on the command line enables debug logging;
    otherwise LOCKR_LOG_LEVEL or the config file log_level is used.
    A broken config file stops every command with an error message.
    """
    from .cli import app, fail
    from .config import Config
    from .logging_config import configure_logging

    verbose = "--verbose" in sys.argv
    if verbose:
        sys.argv.remove("--verbose")

    try:
        config = Config.load()
        level = logging.DEBUG if verbose else os.environ.get("LOCKR_LOG_LEVEL") or config.log_level
        configure_logging(level)
    except (ConfigError, ValueError) as exc:
        fail(str(exc))
    app()
