"""
Authentication data models.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionState(str, Enum):
    """Lifecycle of the authenticated session."""
    IDLE = "idle"
    AUTHORIZATION_REQUESTED = "authorization_requested"
    AWAITING_CALLBACK = "awaiting_callback"
    EXCHANGING = "exchanging"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"
    REFRESHING_FROM_STORAGE = "refreshing_from_storage"
    UNAUTHENTICATED = "unauthenticated"


@dataclass
class CredentialBundle:
    """
    Tokens returned by a code exchange or refresh.

    Only refresh_token is ever persisted. The bundle describes the moment it
    was issued; use SessionManager.get_access_token() for later calls.
    """
    access_token: str
    refresh_token: str
    expires_in: int
    account_id: str
    token_type: str = "bearer"
    obtained_at: datetime = field(default_factory=_utcnow)

    @property
    def expires_at(self) -> datetime:
        return self.obtained_at + timedelta(seconds=self.expires_in)

    def is_expired(self, skew_seconds: int = 300) -> bool:
        """Check if the access token is expired, treating the last few minutes as expired."""
        if self.expires_in <= 0:
            # No lifetime reported; rely on the server rejecting the token
            return False
        return _utcnow() >= self.expires_at - timedelta(seconds=skew_seconds)

    @classmethod
    def from_token_response(
        cls,
        data: Dict[str, Any],
        fallback_refresh_token: str = "",
        fallback_account_id: str = "",
    ) -> "CredentialBundle":
        """
        Build a bundle from a token endpoint JSON body.

        Refresh responses usually omit refresh_token and account_id, so the
        caller passes the values it already holds.
        """
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or fallback_refresh_token,
            expires_in=int(data.get("expires_in", 0)),
            account_id=data.get("account_id") or fallback_account_id,
            token_type=data.get("token_type", "bearer"),
        )

    def __repr__(self) -> str:
        return (
            f"CredentialBundle(account_id={self.account_id!r}, "
            f"expires_in={self.expires_in}, token_type={self.token_type!r})"
        )


@dataclass
class FlowState:
    """In-flight authorization request: CSRF state plus PKCE verifier."""
    state: str
    code_verifier: str
    created_at: datetime = field(default_factory=_utcnow)
    state_consumed: bool = False

    def is_expired(self, ttl_seconds: int) -> bool:
        return _utcnow() > self.created_at + timedelta(seconds=ttl_seconds)
