"""Shared helpers for gworkspace-auth.

This module re-exports the exception hierarchy used across the package.
"""

from gworkspace_auth.utils.errors import (
    AuthenticationError,
    BindErrorKind,
    BindFailure,
    CallbackErrorKind,
    CallbackProtocolError,
    EnvironmentMisconfigured,
    ExchangeFailure,
    GoogleAPIError,
    MissingRefreshToken,
    RefreshFailure,
    WorkspaceAuthError,
)

__all__ = [
    "WorkspaceAuthError",
    "EnvironmentMisconfigured",
    "AuthenticationError",
    "BindErrorKind",
    "BindFailure",
    "CallbackErrorKind",
    "CallbackProtocolError",
    "ExchangeFailure",
    "RefreshFailure",
    "MissingRefreshToken",
    "GoogleAPIError",
]
