"""
Environment variable handling for NoteSync configuration.
"""

import os
from typing import Optional

from dotenv import load_dotenv

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
from .settings import LogLevel, NoteSyncConfig


class EnvironmentLoader:
    """Loads configuration from environment variables."""

    @staticmethod
    def load_config(env_file: Optional[str] = None) -> NoteSyncConfig:
        """Load configuration from environment variables."""
        # .env values take precedence over the shell environment
        load_dotenv(env_file, override=True)

        log_level_str = os.getenv('LOG_LEVEL', 'INFO').upper()
        log_level = LogLevel.INFO
        try:
            log_level = LogLevel(log_level_str)
        except ValueError:
            pass

        return NoteSyncConfig(
            app_key=os.getenv('NOTESYNC_APP_KEY', ''),
            redirect_uri=os.getenv('NOTESYNC_REDIRECT_URI', DEFAULT_REDIRECT_URI),
            authorize_url=os.getenv('NOTESYNC_AUTHORIZE_URL', DEFAULT_AUTHORIZE_URL),
            token_url=os.getenv('NOTESYNC_TOKEN_URL', DEFAULT_TOKEN_URL),
            api_url=os.getenv('NOTESYNC_API_URL', DEFAULT_API_URL),
            content_url=os.getenv('NOTESYNC_CONTENT_URL', DEFAULT_CONTENT_URL),
            data_dir=os.getenv('NOTESYNC_DATA_DIR', DEFAULT_DATA_DIR),
            token_encryption_key=os.getenv('NOTESYNC_TOKEN_ENCRYPTION_KEY') or None,
            http_timeout=EnvironmentLoader._parse_float(
                os.getenv('NOTESYNC_HTTP_TIMEOUT'), DEFAULT_HTTP_TIMEOUT
            ),
            flow_ttl_seconds=EnvironmentLoader._parse_int(
                os.getenv('NOTESYNC_FLOW_TTL_SECONDS'), DEFAULT_FLOW_TTL_SECONDS
            ),
            log_level=log_level,
        )

    @staticmethod
    def _parse_float(value: Optional[str], default: float) -> float:
        if not value:
            return default
        try:
            return float(value)
        except ValueError:
            return default

    @staticmethod
    def _parse_int(value: Optional[str], default: int) -> int:
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            return default
