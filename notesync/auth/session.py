"""
OAuth 2.0 Authorization Code + PKCE session management.

SessionManager drives the whole lifecycle of one user session:

    IDLE -> AUTHORIZATION_REQUESTED -> AWAITING_CALLBACK -> EXCHANGING
         -> AUTHENTICATED | FAILED

and, once at startup,

    IDLE -> REFRESHING_FROM_STORAGE -> AUTHENTICATED | UNAUTHENTICATED

The access token is only held in memory. The refresh token is the only
value written to the durable CredentialStore.
"""

import asyncio
import logging
import secrets
from dataclasses import replace
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from ..config.settings import NoteSyncConfig
from ..data.settings_store import SettingsStore
from ..exceptions import (
    AuthorizationDeniedError,
    ExchangeFailedError,
    InvalidStateError,
    MissingVerifierError,
    NoteSyncError,
    NotAuthenticatedError,
    RefreshFailedError,
    RemoteError,
)
from .credential_store import CredentialStore
from .flow_store import FlowStore
from .models import CredentialBundle, FlowState, SessionState
from .pkce import CHALLENGE_METHOD, derive_challenge, generate_state, generate_verifier

logger = logging.getLogger(__name__)


def _preview(secret: Optional[str]) -> str:
    """Shorten a secret for log output."""
    if not secret:
        return "<none>"
    return f"{secret[:8]}..."


class SessionManager:
    """Owns the OAuth flow, the in-memory access token and the durable refresh token."""

    def __init__(
        self,
        config: NoteSyncConfig,
        credential_store: CredentialStore,
        flow_store: FlowStore,
        settings_store: Optional[SettingsStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the session manager.

        Args:
            config: Application configuration (client id, endpoints, flow TTL)
            credential_store: Durable storage for the refresh token
            flow_store: Process-scoped storage for the pending flow
            settings_store: Vault settings, cleared on logout
            http_client: Optional pre-built client (tests inject a mock transport)
        """
        self.config = config
        self.credential_store = credential_store
        self.flow_store = flow_store
        self.settings_store = settings_store

        self._http_client = http_client
        self._owns_http_client = http_client is None

        self._state = SessionState.IDLE
        self._credentials: Optional[CredentialBundle] = None

        # Refresh and revoke finish before anyone reads the token they produce
        self._token_lock = asyncio.Lock()
        # The authorization code is single use; a second exchange is dropped
        self._exchange_lock = asyncio.Lock()

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state == SessionState.AUTHENTICATED and self._credentials is not None

    @property
    def account_id(self) -> Optional[str]:
        return self._credentials.account_id if self._credentials else None

    @property
    def exchange_in_progress(self) -> bool:
        return self._exchange_lock.locked()

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.config.http_timeout)
        return self._http_client

    async def close(self):
        """Close HTTP client."""
        if self._http_client and self._owns_http_client:
            await self._http_client.aclose()
            self._http_client = None

    # =========================================================================
    # Authorization flow
    # =========================================================================

    async def build_authorization_request(self) -> str:
        """
        Start a new authorization flow and return the URL to send the user to.

        Any previous pending flow is overwritten.
        """
        self._state = SessionState.AUTHORIZATION_REQUESTED

        verifier = generate_verifier()
        challenge = derive_challenge(verifier)
        state = generate_state()

        await self.flow_store.store(FlowState(state=state, code_verifier=verifier))

        params = {
            "client_id": self.config.app_key,
            "response_type": "code",
            "code_challenge": challenge,
            "code_challenge_method": CHALLENGE_METHOD,
            "redirect_uri": self.config.redirect_uri,
            "token_access_type": "offline",
            "state": state,
        }
        auth_url = f"{self.config.authorize_url}?{urlencode(params)}"

        logger.debug(
            f"Built authorization URL: redirect_uri={self.config.redirect_uri}, "
            f"state={_preview(state)}"
        )
        self._state = SessionState.AWAITING_CALLBACK
        return auth_url

    async def _load_flow(self) -> Optional[FlowState]:
        """Load the pending flow, discarding it when it has expired."""
        flow = await self.flow_store.load()
        if flow is not None and flow.is_expired(self.config.flow_ttl_seconds):
            logger.warning("Pending authorization flow expired")
            await self.flow_store.clear()
            return None
        return flow

    async def validate_callback(self, received_state: Optional[str]) -> bool:
        """
        Check the state returned on the redirect against the pending flow.

        A state value validates at most once. On mismatch the pending flow
        is discarded and the user has to start again.
        """
        flow = await self._load_flow()

        if flow is None or flow.state_consumed or not received_state:
            logger.error("Callback state check failed: no pending authorization flow")
            self._state = SessionState.FAILED
            return False

        if not secrets.compare_digest(flow.state.encode(), received_state.encode()):
            logger.error(
                f"Callback state mismatch: received={_preview(received_state)}"
            )
            await self.flow_store.clear()
            self._state = SessionState.FAILED
            return False

        # Keep the verifier for the exchange but burn the state
        await self.flow_store.store(replace(flow, state_consumed=True))
        return True

    async def exchange_code(self, code: str) -> Optional[CredentialBundle]:
        """
        Redeem an authorization code for tokens and activate the session.

        Returns None without doing anything when another exchange is already
        running.

        Raises:
            MissingVerifierError: No pending flow holds a verifier
            ExchangeFailedError: The token endpoint rejected the code (stored credentials are cleared)
            RemoteError: The token endpoint could not be reached
        """
        if self._exchange_lock.locked():
            logger.info("Token exchange already in progress, skipping")
            return None

        async with self._exchange_lock:
            flow = await self._load_flow()
            if flow is None or not flow.code_verifier:
                self._state = SessionState.FAILED
                raise MissingVerifierError()

            self._state = SessionState.EXCHANGING
            data = {
                "code": code,
                "grant_type": "authorization_code",
                "code_verifier": flow.code_verifier,
                "client_id": self.config.app_key,
                "redirect_uri": self.config.redirect_uri,
            }

            try:
                token_data = await self._post_token_request(data, ExchangeFailedError)
                bundle = CredentialBundle.from_token_response(token_data)
            except ExchangeFailedError:
                # A rejected exchange ends any earlier session as well
                await self.flow_store.clear()
                async with self._token_lock:
                    await self._clear_local_credentials()
                    self._state = SessionState.FAILED
                raise
            except NoteSyncError:
                await self.flow_store.clear()
                self._state = SessionState.FAILED
                raise

            await self.flow_store.clear()
            async with self._token_lock:
                await self._activate(bundle)

            logger.info(f"Token exchange successful for account {bundle.account_id}")
            return bundle

    async def handle_callback(
        self,
        code: Optional[str],
        state: Optional[str],
        error: Optional[str] = None,
        error_description: Optional[str] = None,
    ) -> Optional[CredentialBundle]:
        """
        Process the query parameters of the OAuth redirect.

        Returns the new credentials, or None when a duplicate callback is
        ignored because an exchange is already running.
        """
        if self.exchange_in_progress:
            logger.info("Callback ignored: token exchange already in progress")
            return None

        if error:
            await self.flow_store.clear()
            self._state = SessionState.FAILED
            raise AuthorizationDeniedError(f"OAuth error: {error} - {error_description}")

        if not code:
            await self.flow_store.clear()
            self._state = SessionState.FAILED
            raise AuthorizationDeniedError("No authorization code received")

        if not await self.validate_callback(state):
            raise InvalidStateError()

        return await self.exchange_code(code)

    # =========================================================================
    # Token lifecycle
    # =========================================================================

    async def refresh(self, stored_refresh_token: str) -> CredentialBundle:
        """
        Exchange a refresh token for a new access token.

        Failures are not retried. The caller should treat the stored
        refresh token as invalid.
        """
        data = {
            "grant_type": "refresh_token",
            "refresh_token": stored_refresh_token,
            "client_id": self.config.app_key,
        }
        token_data = await self._post_token_request(data, RefreshFailedError)
        return CredentialBundle.from_token_response(
            token_data,
            fallback_refresh_token=stored_refresh_token,
            fallback_account_id=self.account_id or "",
        )

    async def revoke(self, access_token: str) -> None:
        """Best-effort revocation of an access token. Never raises."""
        client = await self._get_http_client()
        try:
            response = await client.post(
                self.config.revoke_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            if response.is_success:
                logger.info("Access token revoked")
            else:
                logger.warning(f"Token revocation returned {response.status_code}")
        except httpx.HTTPError as e:
            logger.warning(f"Token revocation failed: {e}")

    async def restore_session(self) -> SessionState:
        """
        Restore a session from the durable refresh token at startup.

        Never raises: any failure clears the stored credential and leaves
        the session UNAUTHENTICATED.
        """
        async with self._token_lock:
            self._state = SessionState.REFRESHING_FROM_STORAGE

            try:
                refresh_token = await self.credential_store.load()
            except OSError as e:
                logger.error(f"Could not read stored credentials: {e}")
                refresh_token = None

            if not refresh_token:
                logger.info("No stored session")
                self._state = SessionState.UNAUTHENTICATED
                return self._state

            try:
                bundle = await self.refresh(refresh_token)
                await self._activate(bundle)
                logger.info(f"Restored session for account {bundle.account_id}")
            except (NoteSyncError, OSError) as e:
                logger.warning(f"Stored session is no longer valid: {e}")
                await self._clear_local_credentials()

            return self._state

    async def get_access_token(self) -> str:
        """
        Return a usable access token.

        Waits for any in-flight refresh or revoke, and refreshes first when
        the held token has expired.

        Raises:
            NotAuthenticatedError: No session, or the refresh was rejected
        """
        async with self._token_lock:
            if self._credentials is None:
                raise NotAuthenticatedError()

            if self._credentials.is_expired():
                logger.info("Access token expired, refreshing")
                try:
                    bundle = await self.refresh(self._credentials.refresh_token)
                except NoteSyncError as e:
                    logger.warning(f"Refresh failed, ending session: {e}")
                    await self._clear_local_credentials()
                    raise NotAuthenticatedError(f"Session expired: {e}") from e
                await self._activate(bundle)

            return self._credentials.access_token

    async def logout(self) -> None:
        """
        End the session.

        The remote revoke is best effort; local state is always cleared,
        including the vault settings.
        """
        async with self._token_lock:
            credentials = self._credentials
            try:
                if credentials is not None:
                    await self.revoke(credentials.access_token)
            finally:
                await self._clear_local_credentials()
                await self.flow_store.clear()
                if self.settings_store is not None:
                    await self.settings_store.clear()
        logger.info("Logged out")

    # =========================================================================
    # Internals
    # =========================================================================

    async def _activate(self, bundle: CredentialBundle) -> None:
        """Persist the refresh token and hold the access token. Caller holds _token_lock."""
        await self.credential_store.store(bundle.refresh_token)
        self._credentials = bundle
        self._state = SessionState.AUTHENTICATED

    async def _clear_local_credentials(self) -> None:
        self._credentials = None
        self._state = SessionState.UNAUTHENTICATED
        await self.credential_store.clear()

    async def _post_token_request(
        self,
        data: Dict[str, str],
        failure: type,
    ) -> Dict[str, Any]:
        """POST a form to the token endpoint and return the JSON body."""
        client = await self._get_http_client()

        try:
            response = await client.post(
                self.config.token_url,
                data=data,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.RequestError as e:
            logger.error(f"Token endpoint request failed: {e}")
            raise RemoteError("Token request failed", str(e)) from e

        if not response.is_success:
            logger.error(f"Token endpoint returned {response.status_code}: {response.text}")
            raise failure(response.text)

        try:
            token_data = response.json()
            if not isinstance(token_data, dict) or not token_data.get("access_token"):
                raise ValueError("missing access_token")
        except ValueError as e:
            raise failure(f"Invalid token response: {e}") from e

        return token_data
