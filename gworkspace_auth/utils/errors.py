"""Custom exception hierarchy for Google Workspace authentication.

This module defines the structured exception hierarchy raised by the OAuth
login flow, token refresh, and the read-only Google API clients. Every
exception carries a human-readable message and an optional ``details``
dictionary with additional context for the invoking collaborator.

Only :class:`BindFailure` is recoverable inside the login flow (it triggers
the fallback to the manual copy/paste flow). All other errors propagate to
the caller, which owns presentation and exit-code decisions.
"""

from __future__ import annotations

from enum import Enum

# Remediation shown when Google does not reissue a refresh token
PERMISSIONS_URL = "https://myaccount.google.com/permissions"

SETUP_INSTRUCTIONS = (
    "Google OAuth credentials not configured.\n\n"
    "To use Gmail/Calendar integration:\n"
    "1. Go to https://console.cloud.google.com/\n"
    "2. Create a project and enable Gmail API + Calendar API\n"
    "3. Create OAuth 2.0 credentials (Desktop app type)\n"
    "4. Set environment variables:\n"
    "   export GOOGLE_CLIENT_ID='your-client-id'\n"
    "   export GOOGLE_CLIENT_SECRET='your-client-secret'\n"
)


class BindErrorKind(str, Enum):
    """Why the local callback listener could not bind its port.

    Attributes:
        ADDRESS_IN_USE: Another process already holds the port.
        PERMISSION_DENIED: The process may not bind the port.
        OTHER: Any other socket-level failure.
    """

    ADDRESS_IN_USE = "address_in_use"
    PERMISSION_DENIED = "permission_denied"
    OTHER = "other"


class CallbackErrorKind(str, Enum):
    """Protocol-level reasons an authorization response was rejected.

    Attributes:
        PROVIDER_ERROR: Google returned an ``error`` parameter (e.g. consent denied).
        MISSING_CODE: The response carried no ``code`` parameter.
        STATE_MISMATCH: The ``state`` did not match the attempt's state token.
        NO_INPUT: The operator submitted an empty paste in manual mode.
    """

    PROVIDER_ERROR = "provider_error"
    MISSING_CODE = "missing_code"
    STATE_MISMATCH = "state_mismatch"
    NO_INPUT = "no_input"


class WorkspaceAuthError(Exception):
    """Base exception for all gworkspace-auth errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class EnvironmentMisconfigured(WorkspaceAuthError):
    """Raised when the OAuth client credentials are not configured.

    Checked before any network activity. The message always includes the
    Google Cloud setup instructions.
    """

    def __init__(
        self,
        message: str = SETUP_INSTRUCTIONS,
        missing: list[str] | None = None,
    ) -> None:
        super().__init__(message, {"missing": missing} if missing else None)
        self.missing = missing or []


class AuthenticationError(WorkspaceAuthError):
    """Base class for failures during the OAuth login or refresh flows."""

    pass


class BindFailure(AuthenticationError):
    """Raised when the local callback listener cannot bind its port.

    This is the only recoverable login failure: the orchestrator falls back
    to the manual flow instead of surfacing it.

    Attributes:
        kind: Classified socket failure.
        port: The port the listener attempted to bind.
    """

    def __init__(
        self,
        kind: BindErrorKind,
        port: int,
        details: dict[str, object] | None = None,
    ) -> None:
        super().__init__(
            f"Could not start local callback server on port {port} ({kind.value})",
            details={"port": port, "kind": kind.value, **(details or {})},
        )
        self.kind = kind
        self.port = port


class CallbackProtocolError(AuthenticationError):
    """Raised when an authorization response is rejected.

    Covers provider errors (e.g. consent denied), a missing code, a state
    mismatch, and an empty manual paste. Fatal for the attempt; the operator
    must restart the login.

    Attributes:
        kind: Which protocol check failed.
    """

    def __init__(
        self,
        kind: CallbackErrorKind,
        message: str,
        details: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.kind = kind


class ExchangeFailure(AuthenticationError):
    """Raised when the authorization code exchange fails.

    Attributes:
        status_code: HTTP status of the token endpoint response, if any.
        response_body: Raw provider response body for diagnosis.
    """

    def __init__(
        self,
        response_body: str,
        status_code: int | None = None,
        details: dict[str, object] | None = None,
    ) -> None:
        merged = {"status_code": status_code} if status_code is not None else {}
        merged.update(details or {})
        super().__init__(f"Token exchange failed: {response_body}", merged or None)
        self.status_code = status_code
        self.response_body = response_body


class RefreshFailure(AuthenticationError):
    """Raised when refreshing an access token fails.

    Attributes:
        status_code: HTTP status of the token endpoint response, if any.
        response_body: Raw provider response body for diagnosis.
    """

    def __init__(
        self,
        response_body: str,
        status_code: int | None = None,
        details: dict[str, object] | None = None,
    ) -> None:
        merged = {"status_code": status_code} if status_code is not None else {}
        merged.update(details or {})
        super().__init__(f"Token refresh failed: {response_body}", merged or None)
        self.status_code = status_code
        self.response_body = response_body


class MissingRefreshToken(AuthenticationError):
    """Raised when a successful exchange does not include a refresh token.

    Google only reissues a refresh token under certain consent conditions;
    the operator must revoke prior access and retry.
    """

    def __init__(self) -> None:
        super().__init__(
            "No refresh token received. You may need to revoke access at "
            f"{PERMISSIONS_URL} and try again.",
            details={"hint": f"Revoke prior access at {PERMISSIONS_URL}"},
        )


class GoogleAPIError(WorkspaceAuthError):
    """Exception raised for errors from Gmail or Calendar API calls.

    Attributes:
        status_code: HTTP status code from the API response.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code


__all__ = [
    "BindErrorKind",
    "CallbackErrorKind",
    "WorkspaceAuthError",
    "EnvironmentMisconfigured",
    "AuthenticationError",
    "BindFailure",
    "CallbackProtocolError",
    "ExchangeFailure",
    "RefreshFailure",
    "MissingRefreshToken",
    "GoogleAPIError",
    "PERMISSIONS_URL",
    "SETUP_INSTRUCTIONS",
]
