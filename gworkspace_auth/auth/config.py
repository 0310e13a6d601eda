"""OAuth configuration for the Google Workspace read-only login flow.

The flow targets Google's fixed OAuth endpoints, a fixed loopback redirect
URI, and a fixed read-only scope set. Only the client credentials vary per
installation; they are read from the ``GOOGLE_CLIENT_ID`` and
``GOOGLE_CLIENT_SECRET`` environment variables.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from gworkspace_auth.utils.errors import EnvironmentMisconfigured

logger = logging.getLogger(__name__)

# Local callback server
REDIRECT_PORT = 51122
REDIRECT_PATH = "/oauth-callback"
REDIRECT_URI = f"http://localhost:{REDIRECT_PORT}{REDIRECT_PATH}"

# Google OAuth endpoints
GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URI = "https://www.googleapis.com/oauth2/v1/userinfo?alt=json"

# Read-only scopes for Gmail and Calendar plus identity
WORKSPACE_SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/calendar.readonly",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]

# Seconds before Google requests are abandoned
HTTP_TIMEOUT_SECONDS = 30

# Profile ids are keyed "<provider>:<email>"
PROVIDER_NAME = "google-workspace"


@dataclass(frozen=True)
class OAuthConfig:
    """OAuth client configuration.

    Attributes:
        client_id: Google OAuth client ID (Desktop app type).
        client_secret: Google OAuth client secret.
        redirect_uri: Loopback redirect registered for the client.
        scopes: Scopes requested during authorization.
    """

    client_id: str | None
    client_secret: str | None
    redirect_uri: str = REDIRECT_URI
    scopes: tuple[str, ...] = tuple(WORKSPACE_SCOPES)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> OAuthConfig:
        """Build configuration from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            An OAuthConfig; credentials may be None if unset.
        """
        env = os.environ if environ is None else environ
        return cls(
            client_id=env.get("GOOGLE_CLIENT_ID") or None,
            client_secret=env.get("GOOGLE_CLIENT_SECRET") or None,
        )

    @property
    def is_configured(self) -> bool:
        """True if both client ID and secret are set."""
        return bool(self.client_id and self.client_secret)

    @property
    def scope(self) -> str:
        """Space-joined scope string for the authorization request."""
        return " ".join(self.scopes)

    def require_client_id(self) -> str:
        """Return the client ID or raise EnvironmentMisconfigured."""
        if not self.client_id:
            logger.error("GOOGLE_CLIENT_ID environment variable not set")
            raise EnvironmentMisconfigured(missing=["GOOGLE_CLIENT_ID"])
        return self.client_id

    def require_credentials(self) -> tuple[str, str]:
        """Return ``(client_id, client_secret)`` or raise.

        Raises:
            EnvironmentMisconfigured: If either credential is missing. The
                message carries the Google Cloud setup instructions.
        """
        missing = [
            name
            for name, value in (
                ("GOOGLE_CLIENT_ID", self.client_id),
                ("GOOGLE_CLIENT_SECRET", self.client_secret),
            )
            if not value
        ]
        if missing:
            logger.error(
                "Missing required environment variables: %s", ", ".join(missing)
            )
            raise EnvironmentMisconfigured(missing=missing)
        assert self.client_id and self.client_secret
        return self.client_id, self.client_secret


__all__ = [
    "OAuthConfig",
    "REDIRECT_PORT",
    "REDIRECT_PATH",
    "REDIRECT_URI",
    "GOOGLE_AUTH_URI",
    "GOOGLE_TOKEN_URI",
    "GOOGLE_USERINFO_URI",
    "WORKSPACE_SCOPES",
    "HTTP_TIMEOUT_SECONDS",
    "PROVIDER_NAME",
]
