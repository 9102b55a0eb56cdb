"""
Configuration validation for NoteSync.
"""

import re
from typing import List

from .settings import NoteSyncConfig


class ConfigValidator:
    """Validates configuration settings."""

    @staticmethod
    def validate_config(config: NoteSyncConfig) -> List[str]:
        """Validate the entire configuration."""
        errors = []

        errors.extend(ConfigValidator._validate_required_fields(config))
        errors.extend(ConfigValidator._validate_urls(config))
        errors.extend(ConfigValidator._validate_numeric_ranges(config))

        return errors

    @staticmethod
    def _validate_required_fields(config: NoteSyncConfig) -> List[str]:
        """Validate required configuration fields."""
        errors = []

        if not config.app_key:
            errors.append("NOTESYNC_APP_KEY is not set")
        elif not re.match(r'^[A-Za-z0-9._-]+$', config.app_key):
            errors.append("App key contains invalid characters")

        if not config.redirect_uri:
            errors.append("NOTESYNC_REDIRECT_URI is not set")

        return errors

    @staticmethod
    def _validate_urls(config: NoteSyncConfig) -> List[str]:
        """Validate endpoint URLs."""
        errors = []

        for name, url in (
            ("redirect_uri", config.redirect_uri),
            ("authorize_url", config.authorize_url),
            ("token_url", config.token_url),
            ("api_url", config.api_url),
            ("content_url", config.content_url),
        ):
            if url and not ConfigValidator._is_valid_url(url):
                errors.append(f"Invalid URL for {name}: {url}")

        return errors

    @staticmethod
    def _validate_numeric_ranges(config: NoteSyncConfig) -> List[str]:
        """Validate numeric configuration values."""
        errors = []

        if config.http_timeout <= 0:
            errors.append("HTTP timeout must be positive")

        if config.flow_ttl_seconds <= 0:
            errors.append("Authorization flow TTL must be positive")

        return errors

    @staticmethod
    def _is_valid_url(url: str) -> bool:
        """Check that a URL is absolute http(s)."""
        url_pattern = r'^https?://[a-zA-Z0-9.-]+(?::[0-9]+)?(?:/.*)?$'
        return bool(re.match(url_pattern, url))


class ValidationError(Exception):
    """Exception raised for configuration validation errors."""

    def __init__(self, message: str, errors: List[str]):
        super().__init__(message)
        self.errors = errors
