"""Local file store for per-account salts."""

import json
import logging
from pathlib import Path

from .errors import AccountExists, StoreCorrupted

logger = logging.getLogger("lockr.store")


class FileSaltStore:
    """Keeps one salt per account in a JSON file.

    Salts are not secret, so the file is stored as plain JSON:
    ``{"salts": {"<user_id>": "<base64 salt>"}}``.
    """

    def __init__(self, path: Path):
        """Initialize store with the given path.

        Args:
            path: Path to the JSON file, created on first write
        """
        self.path = path

    def exists(self) -> bool:
        """Check if store file exists."""
        return self.path.exists()

    def _read(self) -> dict[str, str]:
        if not self.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise StoreCorrupted(f"salt store {self.path} is not valid JSON") from exc
        salts = data.get("salts", {}) if isinstance(data, dict) else None
        if not isinstance(salts, dict):
            raise StoreCorrupted(f"salt store {self.path} has no 'salts' table")
        return dict(salts)

    def _write(self, salts: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"salts": salts}, indent=2), encoding="utf-8")

    def get_salt(self, user_id: str) -> str | None:
        """Get the salt stored for an account.

        Args:
            user_id: The account identifier

        Returns:
            The base64 salt or None if the account has none

        Raises:
            StoreCorrupted: If the store file cannot be parsed
        """
        return self._read().get(user_id)

    def put_salt(self, user_id: str, salt: str) -> None:
        """Store the salt for a new account.

        Args:
            user_id: The account identifier
            salt: Base64 salt text

        Raises:
            AccountExists: If the account already has a salt
        """
        salts = self._read()
        if user_id in salts:
            raise AccountExists(f"account '{user_id}' already has a salt")
        salts[user_id] = salt
        self._write(salts)
        logger.info("Stored salt for account %s", user_id)

    def delete_salt(self, user_id: str) -> bool:
        """Remove an account's salt.

        Anything encrypted under keys derived from it becomes unreadable.

        Returns:
            True if a salt was removed, False if not found
        """
        salts = self._read()
        if salts.pop(user_id, None) is None:
            return False
        self._write(salts)
        logger.info("Deleted salt for account %s", user_id)
        return True

    def users(self) -> list[str]:
        """List accounts that have a salt."""
        return sorted(self._read())
