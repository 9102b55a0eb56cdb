"""
OAuth 2.0 PKCE authentication for NoteSync.

Provides:
- PKCE verifier, challenge and state generation
- Durable, encrypted refresh token storage
- Process-scoped storage for the pending authorization flow
- SessionManager, which runs the authorization flow and token lifecycle
"""

from .pkce import generate_verifier, derive_challenge, generate_state
from .models import CredentialBundle, FlowState, SessionState
from .credential_store import CredentialStore, EncryptedFileCredentialStore
from .flow_store import FlowStore, InMemoryFlowStore
from .session import SessionManager

__all__ = [
    # PKCE
    "generate_verifier",
    "derive_challenge",
    "generate_state",
    # Models
    "CredentialBundle",
    "FlowState",
    "SessionState",
    # Stores
    "CredentialStore",
    "EncryptedFileCredentialStore",
    "FlowStore",
    "InMemoryFlowStore",
    # Session
    "SessionManager",
]
