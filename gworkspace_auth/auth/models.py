"""Pydantic models for OAuth credentials.

The credential record is created by the code exchange and amended by token
refresh. Persisting it is the caller's job; nothing here retains it.
"""

from __future__ import annotations

import time

from pydantic import BaseModel, Field

from gworkspace_auth.auth.config import PROVIDER_NAME

# Tokens are treated as expired five minutes before Google says so
EXPIRY_SKEW_MS = 5 * 60 * 1000


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def compute_expiry(expires_in: int | float, now: int | None = None) -> int:
    """Absolute expiry in epoch ms for a token lifetime in seconds.

    Args:
        expires_in: Lifetime reported by the token endpoint, in seconds.
        now: Current epoch ms. Defaults to the wall clock.

    Returns:
        ``now + expires_in * 1000 - EXPIRY_SKEW_MS``.
    """
    base = now_ms() if now is None else now
    return int(base + float(expires_in) * 1000 - EXPIRY_SKEW_MS)


class RefreshedToken(BaseModel):
    """A new access token obtained with a refresh token.

    Google does not rotate the refresh token, so it is never part of this
    result; the caller keeps the original.
    """

    access: str = Field(..., description="New access token")
    expires: int = Field(..., description="Absolute expiry, epoch milliseconds")


class Credential(BaseModel):
    """User-delegated Google Workspace credential.

    Attributes:
        access: Short-lived access token.
        refresh: Long-lived refresh token.
        expires: Absolute expiry in epoch milliseconds (already skewed).
        email: Account email, when the userinfo lookup succeeded.

    Example:
        >>> cred = Credential(access="ya29...", refresh="1//...", expires=0)
        >>> cred.is_expired()
        True
    """

    access: str = Field(..., description="Access token")
    refresh: str = Field(..., description="Refresh token")
    expires: int = Field(..., description="Absolute expiry, epoch milliseconds")
    email: str | None = Field(default=None, description="Account email address")

    @property
    def profile_id(self) -> str:
        """Credential-store key for this account."""
        return f"{PROVIDER_NAME}:{self.email or 'default'}"

    def is_expired(self, now: int | None = None) -> bool:
        """Check whether the access token should be refreshed."""
        current = now_ms() if now is None else now
        return current >= self.expires

    def with_refresh(self, refreshed: RefreshedToken) -> Credential:
        """Return a copy with the new access token and expiry.

        ``refresh`` and ``email`` carry over unchanged.
        """
        return self.model_copy(
            update={"access": refreshed.access, "expires": refreshed.expires}
        )


__all__ = [
    "Credential",
    "RefreshedToken",
    "EXPIRY_SKEW_MS",
    "compute_expiry",
    "now_ms",
]
