"""Token endpoint calls: code exchange, refresh, and userinfo lookup.

Each call is attempted exactly once. A non-success response fails with the
provider's response body so the operator can diagnose it; there is no retry
or backoff.
"""

from __future__ import annotations

import logging
import math
from typing import Any

import requests

from gworkspace_auth.auth.config import (
    GOOGLE_TOKEN_URI,
    GOOGLE_USERINFO_URI,
    HTTP_TIMEOUT_SECONDS,
    OAuthConfig,
)
from gworkspace_auth.auth.models import Credential, RefreshedToken, compute_expiry
from gworkspace_auth.utils.errors import (
    ExchangeFailure,
    MissingRefreshToken,
    RefreshFailure,
)

logger = logging.getLogger(__name__)

FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


def _post_form(data: dict[str, str]) -> requests.Response:
    return requests.post(
        GOOGLE_TOKEN_URI,
        data=data,
        headers=FORM_HEADERS,
        timeout=HTTP_TIMEOUT_SECONDS,
    )


def fetch_user_email(access_token: str) -> str | None:
    """Look up the account email for an access token.

    Best effort: any failure is logged and None is returned.
    """
    try:
        response = requests.get(
            GOOGLE_USERINFO_URI,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=HTTP_TIMEOUT_SECONDS,
        )
        if not response.ok:
            logger.debug("Userinfo lookup returned %d", response.status_code)
            return None
        email = response.json().get("email")
        return email if isinstance(email, str) and email else None
    except (requests.RequestException, ValueError, AttributeError) as e:
        # Email is optional
        logger.debug("Userinfo lookup failed: %s", e)
        return None


def exchange_code(
    code: str,
    verifier: str,
    config: OAuthConfig | None = None,
    now: int | None = None,
) -> Credential:
    """Exchange an authorization code for access and refresh tokens.

    Args:
        code: Authorization code from the callback or manual paste.
        verifier: PKCE code verifier of the same attempt.
        config: OAuth client configuration. Defaults to the environment.
        now: Current epoch ms, for the expiry computation.

    Returns:
        The new Credential, with ``email`` when the userinfo lookup works.

    Raises:
        EnvironmentMisconfigured: If client credentials are missing.
        ExchangeFailure: On a non-success response or network error.
        MissingRefreshToken: If Google did not return a refresh token.
    """
    config = config or OAuthConfig.from_env()
    client_id, client_secret = config.require_credentials()

    try:
        response = _post_form(
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": config.redirect_uri,
                "code_verifier": verifier,
            }
        )
    except requests.RequestException as e:
        logger.error("Network error during token exchange: %s", e)
        raise ExchangeFailure(
            str(e), details={"error_type": type(e).__name__}
        ) from e

    if not response.ok:
        logger.error("Token exchange failed: %d", response.status_code)
        raise ExchangeFailure(response.text, status_code=response.status_code)

    data = _parse_token_response(response, ExchangeFailure)

    if not data.get("refresh_token"):
        logger.error("Token exchange succeeded without a refresh token")
        raise MissingRefreshToken()

    email = fetch_user_email(data["access_token"])
    credential = Credential(
        access=data["access_token"],
        refresh=data["refresh_token"],
        expires=compute_expiry(data["expires_in"], now),
        email=email,
    )
    logger.info("Successfully exchanged authorization code for tokens")
    return credential


def refresh_access_token(
    refresh_token: str,
    config: OAuthConfig | None = None,
    now: int | None = None,
) -> RefreshedToken:
    """Obtain a new access token with a refresh token.

    The refresh token itself is not rotated; callers keep the original.

    Raises:
        EnvironmentMisconfigured: If client credentials are missing.
        RefreshFailure: On a non-success response or network error.
    """
    config = config or OAuthConfig.from_env()
    client_id, client_secret = config.require_credentials()

    try:
        response = _post_form(
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            }
        )
    except requests.RequestException as e:
        logger.error("Network error during token refresh: %s", e)
        raise RefreshFailure(
            str(e), details={"error_type": type(e).__name__}
        ) from e

    if not response.ok:
        logger.error("Token refresh failed: %d", response.status_code)
        raise RefreshFailure(response.text, status_code=response.status_code)

    data = _parse_token_response(response, RefreshFailure)
    logger.info("Successfully refreshed access token")
    return RefreshedToken(
        access=data["access_token"],
        expires=compute_expiry(data["expires_in"], now),
    )


def _parse_token_response(
    response: requests.Response,
    error_class: type[ExchangeFailure] | type[RefreshFailure],
) -> dict[str, Any]:
    """Decode a token endpoint body, requiring access_token and expires_in."""
    try:
        data = response.json()
    except ValueError as e:
        raise error_class(response.text, status_code=response.status_code) from e

    if not isinstance(data, dict) or not data.get("access_token"):
        raise error_class(response.text, status_code=response.status_code)
    expires_in = data.get("expires_in")
    if (
        isinstance(expires_in, bool)
        or not isinstance(expires_in, (int, float))
        or not math.isfinite(expires_in)
    ):
        logger.error("Token response has an invalid expires_in: %r", expires_in)
        raise error_class(response.text, status_code=response.status_code)
    return data


__all__ = [
    "exchange_code",
    "refresh_access_token",
    "fetch_user_email",
]
