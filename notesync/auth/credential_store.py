"""
Durable storage for the refresh token.

The session manages one user, so the store has exactly one slot. Only the
long-lived refresh token is persisted; access tokens stay in memory.
"""

import asyncio
import base64
import hashlib
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)

TOKEN_FILENAME = "refresh_token.enc"


class CredentialStore(ABC):
    """Abstract base class for refresh token storage."""

    @abstractmethod
    async def store(self, token: str) -> None:
        """Persist the refresh token, replacing any previous value."""
        pass

    @abstractmethod
    async def load(self) -> Optional[str]:
        """Return the stored refresh token, or None."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Delete the stored token. Idempotent."""
        pass


class EncryptedFileCredentialStore(CredentialStore):
    """
    Refresh token store backed by a Fernet-encrypted file.

    File I/O runs in a worker thread so callers on the event loop are never
    blocked.
    """

    def __init__(self, storage_path: Path, encryption_key: Optional[str] = None):
        """
        Initialize the credential store.

        Args:
            storage_path: Directory for the encrypted token file
            encryption_key: Fernet key, or any passphrase to derive one from
        """
        self.storage_path = Path(storage_path)
        self._cipher = self._get_cipher(encryption_key)

    @property
    def token_path(self) -> Path:
        return self.storage_path / TOKEN_FILENAME

    def _get_cipher(self, key: Optional[str]) -> Fernet:
        """Get or create encryption cipher."""
        if not key:
            logger.warning(
                "NOTESYNC_TOKEN_ENCRYPTION_KEY not set. "
                "Using ephemeral key - stored sessions will not survive a restart."
            )
            key = Fernet.generate_key().decode()
        elif len(key) != 44:  # Fernet keys are 44 chars base64
            key = base64.urlsafe_b64encode(hashlib.sha256(key.encode()).digest()).decode()

        return Fernet(key.encode())

    async def store(self, token: str) -> None:
        encrypted = self._cipher.encrypt(token.encode())
        await asyncio.to_thread(self._write, encrypted)
        logger.info("Stored refresh token")

    async def load(self) -> Optional[str]:
        encrypted = await asyncio.to_thread(self._read)
        if encrypted is None:
            return None

        try:
            return self._cipher.decrypt(encrypted).decode()
        except InvalidToken:
            logger.error("Failed to decrypt stored refresh token; ignoring it")
            return None

    async def clear(self) -> None:
        removed = await asyncio.to_thread(self._remove)
        if removed:
            logger.info("Cleared refresh token")

    def _write(self, data: bytes) -> None:
        """Write atomically using rename."""
        self.storage_path.mkdir(parents=True, exist_ok=True)
        tmp_path = self.token_path.with_suffix(".tmp")
        # Owner-only from creation; chmod covers a leftover tmp file from an earlier crash
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, self.token_path)

    def _read(self) -> Optional[bytes]:
        try:
            return self.token_path.read_bytes()
        except FileNotFoundError:
            return None

    def _remove(self) -> bool:
        try:
            self.token_path.unlink()
            return True
        except FileNotFoundError:
            return False
