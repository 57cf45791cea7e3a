"""Exceptions raised by lockr."""


class LockrError(Exception):
    # base class, catch this to handle any lockr failure
    pass


class InvalidSalt(LockrError):
    # salt is not base64 or does not decode to 16 bytes
    pass


class CryptoUnavailable(LockrError):
    # the cryptography backend lacks PBKDF2-HMAC-SHA256 or AES-GCM
    pass


class DecryptionFailed(LockrError):
    # authentication tag check failed: wrong key or corrupted record
    pass


class SerializationError(LockrError):
    # payload is not JSON, or decrypted bytes are not JSON
    pass


class SessionLocked(LockrError):
    # session key was discarded by lock()
    pass


class AccountExists(LockrError):
    # an account already has a salt
    pass


class SaltNotFound(LockrError):
    # no salt stored for the account
    pass


class StoreCorrupted(LockrError):
    # salt store file is not the expected JSON document
    pass


class ConfigError(LockrError):
    # config file is not valid TOML or holds invalid settings
    pass
