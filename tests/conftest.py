"""Pytest configuration and fixtures for gworkspace-auth tests."""

import pytest

from gworkspace_auth.auth.config import OAuthConfig
from gworkspace_auth.auth.models import Credential


@pytest.fixture(autouse=True)
def quiet_audit_log(monkeypatch):
    """Keep audit JSON lines out of test output."""
    from gworkspace_auth.middleware.audit_logger import audit_logger

    monkeypatch.setattr(audit_logger, "_enabled", False)


@pytest.fixture
def oauth_config():
    """Fixture providing a configured OAuth client."""
    return OAuthConfig(
        client_id="test-client-id.apps.googleusercontent.com",
        client_secret="test-client-secret",
    )


@pytest.fixture
def mock_token():
    """Fixture providing mock token endpoint response data."""
    return {
        "access_token": "mock-access-token",
        "refresh_token": "mock-refresh-token",
        "token_type": "Bearer",
        "expires_in": 3600,
        "scope": "https://www.googleapis.com/auth/gmail.readonly",
    }


@pytest.fixture
def credential():
    """Fixture providing a non-expired credential."""
    return Credential(
        access="mock-access-token",
        refresh="mock-refresh-token",
        expires=2_000_000_000_000,
        email="user@example.com",
    )


@pytest.fixture
def sample_email():
    """Fixture providing sample email data for testing."""
    return {
        "id": "18abc123def",
        "threadId": "18abc123def",
        "labelIds": ["INBOX", "UNREAD"],
        "snippet": "This is a test email snippet...",
        "payload": {
            "headers": [
                {"name": "From", "value": "sender@example.com"},
                {"name": "To", "value": '"Doe, Jane" <jane@example.com>, bob@example.com'},
                {"name": "Subject", "value": "Test Email Subject"},
                {"name": "Date", "value": "Mon, 20 Jan 2026 10:00:00 -0500"},
            ],
            "mimeType": "text/plain",
            "body": {
                "data": "VGhpcyBpcyB0aGUgZW1haWwgYm9keSBjb250ZW50Lg==",
            },
        },
    }


@pytest.fixture
def mock_service(mocker):
    """Fixture providing a mocked Google API service."""
    return mocker.MagicMock()
