"""
Durable vault settings using aiosqlite.

Holds the sandbox root (the vault folder in the remote store) and the
inbox subfolder chosen by the user. Both values are opaque strings.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import aiosqlite

logger = logging.getLogger(__name__)

VAULT_PATH_KEY = "vault_path"
INBOX_PATH_KEY = "inbox_path"


class SettingsStore(ABC):
    """Abstract base class for vault settings storage."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove every setting."""
        pass

    async def get_vault_path(self) -> Optional[str]:
        return await self.get(VAULT_PATH_KEY)

    async def set_vault_path(self, path: str) -> None:
        await self.set(VAULT_PATH_KEY, path)

    async def clear_vault_path(self) -> None:
        await self.delete(VAULT_PATH_KEY)

    async def get_inbox_path(self) -> Optional[str]:
        return await self.get(INBOX_PATH_KEY)

    async def set_inbox_path(self, path: str) -> None:
        await self.set(INBOX_PATH_KEY, path)

    async def clear_inbox_path(self) -> None:
        await self.delete(INBOX_PATH_KEY)


class SQLiteSettingsStore(SettingsStore):
    """Settings store backed by a single SQLite key/value table."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._lock = asyncio.Lock()
        self._initialized = False

    async def _ensure_schema(self, conn: aiosqlite.Connection) -> None:
        if self._initialized:
            return
        await conn.execute(
            "CREATE TABLE IF NOT EXISTS settings ("
            "key TEXT PRIMARY KEY, "
            "value TEXT NOT NULL)"
        )
        await conn.commit()
        self._initialized = True

    async def _connect(self) -> aiosqlite.Connection:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(self.db_path)
        await self._ensure_schema(conn)
        return conn

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            conn = await self._connect()
            try:
                async with conn.execute(
                    "SELECT value FROM settings WHERE key = ?", (key,)
                ) as cursor:
                    row = await cursor.fetchone()
            finally:
                await conn.close()
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            conn = await self._connect()
            try:
                await conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
                await conn.commit()
            finally:
                await conn.close()
        logger.info(f"Saved setting {key}")

    async def delete(self, key: str) -> None:
        async with self._lock:
            conn = await self._connect()
            try:
                await conn.execute("DELETE FROM settings WHERE key = ?", (key,))
                await conn.commit()
            finally:
                await conn.close()

    async def clear(self) -> None:
        async with self._lock:
            conn = await self._connect()
            try:
                await conn.execute("DELETE FROM settings")
                await conn.commit()
            finally:
                await conn.close()
        logger.info("Cleared vault settings")
