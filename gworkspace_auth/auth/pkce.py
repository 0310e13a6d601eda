"""PKCE and state generation for the authorization code flow.

RFC 7636 PKCE:
- Verifier: 43-128 characters from the unreserved set (32 bytes -> 43 chars)
- Challenge: SHA-256 of the verifier, base64url encoded without padding

Both values are minted fresh for every login attempt and never persisted
or logged.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
from typing import NamedTuple

VERIFIER_MIN_LENGTH = 43
VERIFIER_MAX_LENGTH = 128


class PKCEPair(NamedTuple):
    """PKCE code verifier and challenge pair"""

    verifier: str
    challenge: str


def compute_challenge(verifier: str) -> str:
    """Return the S256 code challenge for a verifier."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def generate_pkce() -> PKCEPair:
    """Generate a PKCE code verifier and challenge.

    Returns:
        PKCEPair with a 43-character verifier and its S256 challenge.
    """
    verifier = secrets.token_urlsafe(32)
    return PKCEPair(verifier=verifier, challenge=compute_challenge(verifier))


def create_state() -> str:
    """Generate a random state token for CSRF protection."""
    return secrets.token_hex(16)


__all__ = [
    "PKCEPair",
    "compute_challenge",
    "generate_pkce",
    "create_state",
    "VERIFIER_MIN_LENGTH",
    "VERIFIER_MAX_LENGTH",
]
