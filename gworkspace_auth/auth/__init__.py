"""Authentication module for gworkspace-auth.

This module provides the environment-aware OAuth 2.0 authorization code
flow with PKCE for read-only Gmail and Calendar access:

- Host detection: local loopback redirect vs. manual copy/paste
- One-shot local callback server on the fixed redirect port
- Authorization code exchange and access token refresh

Usage:
    >>> from gworkspace_auth.auth import ensure_fresh, login
    >>>
    >>> # Authenticate (prints/opens the consent URL)
    >>> credential = login(url_sink=print)
    >>>
    >>> # Later, before calling Google APIs
    >>> credential = ensure_fresh(credential)
"""

from gworkspace_auth.auth.authorization import build_auth_url
from gworkspace_auth.auth.callback import (
    CallbackListener,
    CallbackOutcome,
    CallbackResult,
)
from gworkspace_auth.auth.config import (
    GOOGLE_AUTH_URI,
    GOOGLE_TOKEN_URI,
    GOOGLE_USERINFO_URI,
    REDIRECT_PORT,
    REDIRECT_URI,
    WORKSPACE_SCOPES,
    OAuthConfig,
)
from gworkspace_auth.auth.environment import EnvironmentProbe, FlowMode
from gworkspace_auth.auth.login import (
    LoginOrchestrator,
    LoginState,
    ensure_fresh,
    login,
    refresh,
)
from gworkspace_auth.auth.manual import ManualCodeCollector, parse_callback_input
from gworkspace_auth.auth.models import Credential, RefreshedToken
from gworkspace_auth.auth.pkce import PKCEPair, create_state, generate_pkce
from gworkspace_auth.auth.tokens import (
    exchange_code,
    fetch_user_email,
    refresh_access_token,
)

__all__ = [
    # Configuration
    "OAuthConfig",
    "GOOGLE_AUTH_URI",
    "GOOGLE_TOKEN_URI",
    "GOOGLE_USERINFO_URI",
    "REDIRECT_PORT",
    "REDIRECT_URI",
    "WORKSPACE_SCOPES",
    # Flow building blocks
    "EnvironmentProbe",
    "FlowMode",
    "PKCEPair",
    "generate_pkce",
    "create_state",
    "build_auth_url",
    "CallbackListener",
    "CallbackOutcome",
    "CallbackResult",
    "ManualCodeCollector",
    "parse_callback_input",
    # Tokens
    "Credential",
    "RefreshedToken",
    "exchange_code",
    "refresh_access_token",
    "fetch_user_email",
    # Login
    "LoginOrchestrator",
    "LoginState",
    "login",
    "refresh",
    "ensure_fresh",
]
