"""Google API service factory for a resolved access token."""

from __future__ import annotations

import logging

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import Resource, build

from gworkspace_auth.auth.login import ensure_fresh
from gworkspace_auth.auth.models import Credential

logger = logging.getLogger(__name__)


def build_service(api: str, version: str, access_token: str) -> Resource:
    """Build a Google API Resource authorized with a bare access token.

    The access token is not refreshed by the library; callers resolve a
    fresh token first (see :func:`ensure_fresh`).
    """
    creds = Credentials(token=access_token)  # type: ignore[no-untyped-call]
    service = build(api, version, credentials=creds, cache_discovery=False)
    logger.debug("Created %s %s service", api, version)
    return service


def gmail_service(credential: Credential) -> tuple[Resource, Credential]:
    """Gmail v1 service for a credential, refreshing it if expired.

    Returns:
        Tuple of (service, credential) where credential may be amended; the
        caller persists it if it changed.
    """
    fresh = ensure_fresh(credential)
    return build_service("gmail", "v1", fresh.access), fresh


def calendar_service(credential: Credential) -> tuple[Resource, Credential]:
    """Calendar v3 service for a credential, refreshing it if expired."""
    fresh = ensure_fresh(credential)
    return build_service("calendar", "v3", fresh.access), fresh


__all__ = ["build_service", "gmail_service", "calendar_service"]
