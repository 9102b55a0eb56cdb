"""
Application wiring for NoteSync.

Builds the stores, the session manager and the remote file client from
configuration, and restores any stored session at startup.
"""

import logging
import sys
from typing import List, Optional
from urllib.parse import parse_qs, urlparse

import httpx

from .auth import (
    EncryptedFileCredentialStore,
    InMemoryFlowStore,
    SessionManager,
    SessionState,
)
from .config import ConfigValidator, EnvironmentLoader, NoteSyncConfig, ValidationError
from .data import SQLiteSettingsStore
from .exceptions import NotAuthenticatedError
from .sync import RemoteEntry, RemoteFileClient, sanitize


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class NoteSyncApp:
    """NoteSync application."""

    def __init__(self):
        self.config: Optional[NoteSyncConfig] = None
        self.settings_store: Optional[SQLiteSettingsStore] = None
        self.session: Optional[SessionManager] = None
        self.client: Optional[RemoteFileClient] = None

        self._log_file_handler: Optional[logging.FileHandler] = None

        logging.basicConfig(
            level=logging.INFO,
            format=LOG_FORMAT,
            handlers=[logging.StreamHandler(sys.stdout)]
        )
        self.logger = logging.getLogger(__name__)

    def _attach_log_file(self) -> None:
        """Log to a file in the data directory; optional (may fail if not writable)."""
        try:
            log_path = self.config.log_path
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(str(log_path))
        except OSError:
            return

        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)
        self._log_file_handler = handler

    async def initialize(
        self,
        env_file: Optional[str] = None,
        config: Optional[NoteSyncConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Load configuration and build all components.

        Raises:
            ValidationError: The configuration is invalid
        """
        self.config = config or EnvironmentLoader.load_config(env_file)
        logging.getLogger().setLevel(self.config.log_level.value)

        errors = ConfigValidator.validate_config(self.config)
        if errors:
            for error in errors:
                self.logger.error(f"Configuration error: {error}")
            raise ValidationError("Invalid configuration", errors)

        self._attach_log_file()
        self.logger.info(f"Configuration loaded: {self.config.to_summary()}")

        self.settings_store = SQLiteSettingsStore(str(self.config.settings_db_path))
        credential_store = EncryptedFileCredentialStore(
            self.config.credentials_path,
            self.config.token_encryption_key,
        )
        self.session = SessionManager(
            self.config,
            credential_store=credential_store,
            flow_store=InMemoryFlowStore(),
            settings_store=self.settings_store,
            http_client=http_client,
        )
        self.client = RemoteFileClient(self.config, http_client=http_client)

    async def start(self) -> SessionState:
        """Restore the stored session and the vault root."""
        state = await self.session.restore_session()
        vault_path = await self.settings_store.get_vault_path()
        self.client.set_sandbox_root(vault_path)
        self.logger.info(f"Session state: {state.value}, vault: {vault_path or 'not set'}")
        return state

    async def stop(self) -> None:
        if self.client:
            await self.client.close()
        if self.session:
            await self.session.close()
        if self._log_file_handler:
            logging.getLogger().removeHandler(self._log_file_handler)
            self._log_file_handler.close()
            self._log_file_handler = None

    # =========================================================================
    # Operations used by the console
    # =========================================================================

    async def begin_connect(self) -> str:
        return await self.session.build_authorization_request()

    async def complete_connect(self, redirect_url: str) -> bool:
        """Finish the flow from the full URL the browser was redirected to."""
        params = {k: v[0] for k, v in parse_qs(urlparse(redirect_url).query).items()}
        bundle = await self.session.handle_callback(
            code=params.get("code"),
            state=params.get("state"),
            error=params.get("error"),
            error_description=params.get("error_description"),
        )
        return bundle is not None

    async def set_vault(self, path: str) -> str:
        """Persist the vault root and apply it to the client."""
        vault_path = sanitize(path)
        await self.settings_store.set_vault_path(vault_path)
        self.client.set_sandbox_root(vault_path)
        return vault_path

    async def set_inbox(self, path: str) -> None:
        await self.settings_store.set_inbox_path(path)

    async def list_entries(self, path: Optional[str] = None) -> List[RemoteEntry]:
        token = await self.session.get_access_token()
        if path is None:
            path = await self.settings_store.get_vault_path() or ""
        return await self.client.list_all_entries(token, path)

    async def status(self) -> dict:
        status = {
            "state": self.session.state.value,
            "account_id": self.session.account_id,
            "vault_path": await self.settings_store.get_vault_path(),
            "inbox_path": await self.settings_store.get_inbox_path(),
        }
        if self.session.is_authenticated:
            try:
                token = await self.session.get_access_token()
                account = await self.client.get_current_account(token)
                status["email"] = account.email
                status["display_name"] = account.display_name
            except NotAuthenticatedError:
                status["state"] = self.session.state.value
        return status

    async def logout(self) -> None:
        await self.session.logout()
        self.client.set_sandbox_root(None)
