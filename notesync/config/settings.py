"""
Configuration data classes for NoteSync.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .constants import (
    DEFAULT_API_URL,
    DEFAULT_AUTHORIZE_URL,
    DEFAULT_CONTENT_URL,
    DEFAULT_DATA_DIR,
    DEFAULT_FLOW_TTL_SECONDS,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_REDIRECT_URI,
    DEFAULT_TOKEN_URL,
)


class LogLevel(str, Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class NoteSyncConfig:
    """Top-level NoteSync configuration."""
    app_key: str
    redirect_uri: str = DEFAULT_REDIRECT_URI
    authorize_url: str = DEFAULT_AUTHORIZE_URL
    token_url: str = DEFAULT_TOKEN_URL
    api_url: str = DEFAULT_API_URL
    content_url: str = DEFAULT_CONTENT_URL
    data_dir: str = DEFAULT_DATA_DIR
    token_encryption_key: Optional[str] = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    flow_ttl_seconds: int = DEFAULT_FLOW_TTL_SECONDS
    log_level: LogLevel = LogLevel.INFO

    @property
    def revoke_url(self) -> str:
        """Token revocation endpoint, served from the API host."""
        return f"{self.api_url.rstrip('/')}/auth/token/revoke"

    @property
    def credentials_path(self) -> Path:
        """Directory holding the encrypted refresh token."""
        return Path(self.data_dir) / ".tokens"

    @property
    def settings_db_path(self) -> Path:
        """SQLite file holding vault settings."""
        return Path(self.data_dir) / "notesync.db"

    @property
    def log_path(self) -> Path:
        return Path(self.data_dir) / "notesync.log"

    def to_summary(self) -> dict:
        """Summary of the configuration without secrets."""
        return {
            "app_key": f"{self.app_key[:4]}..." if self.app_key else "NOT SET",
            "redirect_uri": self.redirect_uri or "NOT SET",
            "authorize_url": self.authorize_url,
            "token_url": self.token_url,
            "api_url": self.api_url,
            "content_url": self.content_url,
            "data_dir": self.data_dir,
            "encryption_key_set": bool(self.token_encryption_key),
            "log_level": self.log_level.value,
        }
