"""
Tests for configuration loading and validation.
"""

import tempfile
from pathlib import Path

import pytest

from notesync.config import ConfigValidator, EnvironmentLoader, LogLevel, NoteSyncConfig

ENV_KEYS = [
    "NOTESYNC_APP_KEY",
    "NOTESYNC_REDIRECT_URI",
    "NOTESYNC_AUTHORIZE_URL",
    "NOTESYNC_TOKEN_URL",
    "NOTESYNC_API_URL",
    "NOTESYNC_CONTENT_URL",
    "NOTESYNC_DATA_DIR",
    "NOTESYNC_TOKEN_ENCRYPTION_KEY",
    "NOTESYNC_HTTP_TIMEOUT",
    "NOTESYNC_FLOW_TTL_SECONDS",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so values written by load_dotenv are undone afterwards
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


class TestEnvironmentLoader:
    """Tests for EnvironmentLoader."""

    def test_defaults(self, clean_env):
        clean_env.setenv("NOTESYNC_APP_KEY", "abc123")
        config = EnvironmentLoader.load_config()

        assert config.app_key == "abc123"
        assert config.redirect_uri == "http://localhost:5173/callback"
        assert config.data_dir == "data"
        assert config.token_encryption_key is None
        assert config.http_timeout == 30.0
        assert config.flow_ttl_seconds == 600
        assert config.log_level == LogLevel.INFO

    def test_overrides(self, clean_env):
        clean_env.setenv("NOTESYNC_APP_KEY", "abc123")
        clean_env.setenv("NOTESYNC_API_URL", "https://api.example.test/2")
        clean_env.setenv("NOTESYNC_HTTP_TIMEOUT", "5.5")
        clean_env.setenv("NOTESYNC_FLOW_TTL_SECONDS", "120")
        clean_env.setenv("LOG_LEVEL", "debug")
        config = EnvironmentLoader.load_config()

        assert config.api_url == "https://api.example.test/2"
        assert config.revoke_url == "https://api.example.test/2/auth/token/revoke"
        assert config.http_timeout == 5.5
        assert config.flow_ttl_seconds == 120
        assert config.log_level == LogLevel.DEBUG

    def test_unparseable_values_fall_back(self, clean_env):
        clean_env.setenv("NOTESYNC_HTTP_TIMEOUT", "soon")
        clean_env.setenv("NOTESYNC_FLOW_TTL_SECONDS", "ten")
        clean_env.setenv("LOG_LEVEL", "verbose")
        config = EnvironmentLoader.load_config()

        assert config.http_timeout == 30.0
        assert config.flow_ttl_seconds == 600
        assert config.log_level == LogLevel.INFO

    def test_env_file(self, clean_env):
        with tempfile.TemporaryDirectory() as tmpdir:
            env_file = Path(tmpdir) / ".env"
            env_file.write_text(
                "NOTESYNC_APP_KEY=fromfile\n"
                f"NOTESYNC_DATA_DIR={tmpdir}\n"
            )
            config = EnvironmentLoader.load_config(str(env_file))

        assert config.app_key == "fromfile"
        assert config.credentials_path == Path(tmpdir) / ".tokens"
        assert config.settings_db_path == Path(tmpdir) / "notesync.db"


class TestConfigValidator:
    """Tests for ConfigValidator."""

    def test_valid_config(self):
        assert ConfigValidator.validate_config(NoteSyncConfig(app_key="abc123")) == []

    def test_missing_app_key(self):
        errors = ConfigValidator.validate_config(NoteSyncConfig(app_key=""))
        assert "NOTESYNC_APP_KEY is not set" in errors

    def test_invalid_app_key(self):
        errors = ConfigValidator.validate_config(NoteSyncConfig(app_key="abc 123"))
        assert "App key contains invalid characters" in errors

    def test_invalid_url(self):
        config = NoteSyncConfig(app_key="abc123", token_url="ftp://example.test/token")
        errors = ConfigValidator.validate_config(config)
        assert any("token_url" in e for e in errors)

    def test_numeric_ranges(self):
        config = NoteSyncConfig(app_key="abc123", http_timeout=0, flow_ttl_seconds=-1)
        errors = ConfigValidator.validate_config(config)
        assert "HTTP timeout must be positive" in errors
        assert "Authorization flow TTL must be positive" in errors

    def test_summary_hides_secrets(self):
        config = NoteSyncConfig(app_key="abcdef123456", token_encryption_key="secret")
        summary = config.to_summary()
        assert summary["app_key"] == "abcd..."
        assert summary["encryption_key_set"] is True
        assert "secret" not in str(summary)
