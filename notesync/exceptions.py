"""
Error types for NoteSync.

Every failure raised by the auth and sync layers derives from
NoteSyncError so callers can render or retry them as a family.
"""

from typing import Optional


class NoteSyncError(Exception):
    """Base class for all NoteSync errors."""


# ============================================================================
# Authentication
# ============================================================================

class AuthError(NoteSyncError):
    """Base class for OAuth flow and session errors."""


class InvalidStateError(AuthError):
    """The callback state did not match the stored flow state (possible CSRF)."""

    def __init__(self, message: str = "Invalid state parameter - possible CSRF attack"):
        super().__init__(message)


class MissingVerifierError(AuthError):
    """No PKCE code verifier was stored when the code exchange started."""

    def __init__(self, message: str = "No code verifier found"):
        super().__init__(message)


class AuthorizationDeniedError(AuthError):
    """The authorization server redirected back with an error or without a code."""


class ExchangeFailedError(AuthError):
    """The token endpoint rejected an authorization code exchange."""

    def __init__(self, server_message: str):
        self.server_message = server_message
        super().__init__(f"Token exchange failed: {server_message}")


class RefreshFailedError(AuthError):
    """The token endpoint rejected a refresh token."""

    def __init__(self, server_message: str):
        self.server_message = server_message
        super().__init__(f"Token refresh failed: {server_message}")


class NotAuthenticatedError(AuthError):
    """An access token was requested while no session is active."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


# ============================================================================
# Remote file API
# ============================================================================

class RemoteError(NoteSyncError):
    """A remote call failed with a non-2xx status or a transport error."""

    def __init__(self, operation: str, body: str, status_code: Optional[int] = None):
        self.operation = operation
        self.body = body
        self.status_code = status_code
        super().__init__(f"{operation}: {body}")


class ConflictError(RemoteError):
    """An update presented a revision that is no longer current."""

    def __init__(self, path: str, body: str = ""):
        self.path = path
        super().__init__("Conflict: file was modified", body or path, status_code=409)


class PathOutsideSandboxError(NoteSyncError):
    """A write targeted a path outside the configured sandbox root."""

    def __init__(self, path: str, sandbox_root: Optional[str]):
        self.path = path
        self.sandbox_root = sandbox_root
        if sandbox_root is None:
            super().__init__(f"Cannot write {path!r}: no vault root is configured")
        else:
            super().__init__(f"Path {path!r} is outside the vault root {sandbox_root!r}")
