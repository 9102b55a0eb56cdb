"""
Durable local state for NoteSync.
"""

from .settings_store import (
    SettingsStore,
    SQLiteSettingsStore,
    VAULT_PATH_KEY,
    INBOX_PATH_KEY,
)

__all__ = [
    "SettingsStore",
    "SQLiteSettingsStore",
    "VAULT_PATH_KEY",
    "INBOX_PATH_KEY",
]
