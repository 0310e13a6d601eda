"""Google authorization request URL construction."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from gworkspace_auth.auth.config import GOOGLE_AUTH_URI, OAuthConfig

logger = logging.getLogger(__name__)


def build_auth_url(challenge: str, state: str, config: OAuthConfig) -> str:
    """Build the Google OAuth consent URL for one login attempt.

    ``access_type=offline`` requests a refresh token and ``prompt=consent``
    forces Google to reissue one even for a user who consented before.

    Args:
        challenge: PKCE S256 code challenge.
        state: Anti-forgery state token for this attempt.
        config: OAuth client configuration.

    Returns:
        The full authorization URL.

    Raises:
        EnvironmentMisconfigured: If the client ID is unset.
    """
    params = {
        "client_id": config.require_client_id(),
        "response_type": "code",
        "redirect_uri": config.redirect_uri,
        "scope": config.scope,
        "code_challenge": challenge,
        "code_challenge_method": "S256",
        "state": state,
        "access_type": "offline",
        "prompt": "consent",
    }

    auth_url = f"{GOOGLE_AUTH_URI}?{urlencode(params)}"
    logger.debug("Created auth URL with state: %s", state[:8] + "...")
    return auth_url


__all__ = ["build_auth_url"]
