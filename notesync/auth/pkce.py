"""
PKCE (RFC 7636) and CSRF state generation.
"""

import base64
import hashlib
import secrets
import string

# RFC 7636 section 4.1 unreserved characters
UNRESERVED_CHARACTERS = string.ascii_letters + string.digits + "-._~"

VERIFIER_LENGTH = 64
STATE_LENGTH = 32
CHALLENGE_METHOD = "S256"


def generate_random_string(length: int) -> str:
    """Return a random string of URL-safe unreserved characters."""
    if length <= 0:
        raise ValueError("length must be positive")
    return "".join(secrets.choice(UNRESERVED_CHARACTERS) for _ in range(length))


def generate_verifier(length: int = VERIFIER_LENGTH) -> str:
    """
    Generate a PKCE code verifier.

    RFC 7636 requires 43 to 128 characters.
    """
    if not 43 <= length <= 128:
        raise ValueError("PKCE verifier length must be between 43 and 128")
    return generate_random_string(length)


def derive_challenge(verifier: str) -> str:
    """S256 code challenge: unpadded URL-safe base64 of SHA-256(verifier)."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def generate_state(length: int = STATE_LENGTH) -> str:
    """Generate an OAuth state value, independent of the verifier."""
    return generate_random_string(length)
