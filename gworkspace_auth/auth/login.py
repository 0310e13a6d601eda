"""Environment-aware Google Workspace login.

The orchestrator picks a delivery mode for the authorization response,
runs the local callback server or the manual paste prompt, and exchanges
the resulting code for a credential:

    INIT -> MODE_SELECTED(local|manual) -> AWAITING_RESPONSE -> EXCHANGING
         -> DONE | FAILED

A local attempt whose callback server cannot bind falls back to the manual
mode with a brand-new PKCE pair, state token and authorization URL. Every
other failure is terminal for the invocation.

Usage:
    >>> from gworkspace_auth.auth import login
    >>> credential = login(url_sink=print)
    >>> credential.profile_id
    'google-workspace:user@example.com'
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from gworkspace_auth.auth.authorization import build_auth_url
from gworkspace_auth.auth.callback import CallbackListener
from gworkspace_auth.auth.config import OAuthConfig
from gworkspace_auth.auth.environment import EnvironmentProbe, FlowMode
from gworkspace_auth.auth.manual import ManualCodeCollector
from gworkspace_auth.auth.models import Credential, RefreshedToken, now_ms
from gworkspace_auth.auth.pkce import PKCEPair, create_state, generate_pkce
from gworkspace_auth.auth.tokens import exchange_code, refresh_access_token
from gworkspace_auth.middleware.audit_logger import audit_logger
from gworkspace_auth.utils.errors import BindFailure

logger = logging.getLogger(__name__)

UrlSink = Callable[[str], None]
ProgressSink = Callable[[str], None]
Exchanger = Callable[[str, str, OAuthConfig], Credential]
Refresher = Callable[[str], RefreshedToken]


class LoginState(str, Enum):
    """Login state machine states."""

    INIT = "init"
    MODE_SELECTED = "mode_selected"
    AWAITING_RESPONSE = "awaiting_response"
    EXCHANGING = "exchanging"
    DONE = "done"
    FAILED = "failed"


def _ignore_progress(message: str) -> None:
    logger.debug("Login progress: %s", message)


class LoginOrchestrator:
    """Runs one login invocation.

    Collaborators are injectable; by default the probe reads the real
    process environment, the listener binds the fixed redirect port, and
    the collector prompts on the terminal.

    Attributes:
        state: Current LoginState.
        mode: FlowMode of the current (or last) attempt.
    """

    def __init__(
        self,
        config: OAuthConfig | None = None,
        probe: EnvironmentProbe | None = None,
        listener: CallbackListener | None = None,
        collector: ManualCodeCollector | None = None,
        exchanger: Exchanger | None = None,
    ) -> None:
        self._config = config or OAuthConfig.from_env()
        self._probe = probe or EnvironmentProbe()
        self._listener = listener or CallbackListener()
        self._collector = collector or ManualCodeCollector()
        self._exchanger = exchanger or exchange_code
        self.state = LoginState.INIT
        self.mode: FlowMode | None = None

    def login(
        self,
        url_sink: UrlSink,
        progress_sink: ProgressSink | None = None,
        force_manual: bool = False,
    ) -> Credential:
        """Obtain a credential interactively.

        Args:
            url_sink: Called with the authorization URL once per mode
                attempt (twice if the local mode falls back to manual).
            progress_sink: Receives human-readable status messages.
            force_manual: Skip environment detection and use manual mode.

        Returns:
            The new Credential.

        Raises:
            EnvironmentMisconfigured: Client credentials are missing.
            CallbackProtocolError: Consent denied, missing code, state
                mismatch, or empty manual input.
            ExchangeFailure: The token endpoint rejected the code.
            MissingRefreshToken: Google did not return a refresh token.
        """
        progress = progress_sink or _ignore_progress
        self.state = LoginState.INIT
        self.mode = None

        try:
            # Fatal before any network activity
            self._config.require_credentials()

            mode = FlowMode.MANUAL if force_manual else self._probe.select_mode()
            if mode is FlowMode.LOCAL:
                try:
                    credential = self._login_local(url_sink, progress)
                except BindFailure as e:
                    logger.warning("Local callback server failed: %s", e)
                    audit_logger.log_auth_event(
                        "fallback",
                        mode=FlowMode.LOCAL.value,
                        success=False,
                        error_message=e.message,
                        details={"kind": e.kind.value, "port": e.port},
                    )
                    progress("Local callback server failed. Switching to manual mode...")
                    credential = self._login_manual(url_sink, progress)
            else:
                credential = self._login_manual(url_sink, progress)
        except Exception as e:
            self.state = LoginState.FAILED
            audit_logger.log_auth_event(
                "login",
                mode=self.mode.value if self.mode else None,
                success=False,
                error_message=str(e),
            )
            raise

        self.state = LoginState.DONE
        logger.info("Google Workspace login complete for %s", credential.profile_id)
        audit_logger.log_auth_event(
            "login", profile_id=credential.profile_id, mode=self.mode.value if self.mode else None
        )
        return credential

    def _begin_attempt(self, mode: FlowMode) -> tuple[PKCEPair, str, str]:
        """Enter MODE_SELECTED with fresh PKCE, state and URL."""
        self.mode = mode
        self.state = LoginState.MODE_SELECTED
        pkce = generate_pkce()
        state = create_state()
        url = build_auth_url(pkce.challenge, state, self._config)
        logger.info("Starting %s OAuth flow", mode.value)
        return pkce, state, url

    def _login_local(self, url_sink: UrlSink, progress: ProgressSink) -> Credential:
        pkce, state, url = self._begin_attempt(FlowMode.LOCAL)
        url_sink(url)
        self.state = LoginState.AWAITING_RESPONSE
        progress("Waiting for authorization in browser...")
        result = self._listener.wait_for_code(state)
        assert result.code is not None
        return self._exchange(result.code, pkce, progress)

    def _login_manual(self, url_sink: UrlSink, progress: ProgressSink) -> Credential:
        pkce, state, url = self._begin_attempt(FlowMode.MANUAL)
        url_sink(url)
        self.state = LoginState.AWAITING_RESPONSE
        progress("Waiting for you to paste the callback URL...")
        result = self._collector.collect(state)
        assert result.code is not None
        return self._exchange(result.code, pkce, progress)

    def _exchange(self, code: str, pkce: PKCEPair, progress: ProgressSink) -> Credential:
        self.state = LoginState.EXCHANGING
        progress("Exchanging authorization code for tokens...")
        return self._exchanger(code, pkce.verifier, self._config)


def login(
    url_sink: UrlSink,
    progress_sink: ProgressSink | None = None,
    force_manual: bool = False,
) -> Credential:
    """Run the environment-aware login with default collaborators."""
    return LoginOrchestrator().login(url_sink, progress_sink, force_manual=force_manual)


def refresh(refresh_token: str, config: OAuthConfig | None = None) -> RefreshedToken:
    """Refresh an access token.

    Raises:
        EnvironmentMisconfigured: Client credentials are missing.
        RefreshFailure: The token endpoint rejected the refresh.
    """
    try:
        refreshed = refresh_access_token(refresh_token, config)
    except Exception as e:
        audit_logger.log_auth_event("refresh", success=False, error_message=str(e))
        raise
    audit_logger.log_auth_event("refresh")
    return refreshed


def ensure_fresh(
    credential: Credential,
    refresher: Refresher | None = None,
    now: int | None = None,
) -> Credential:
    """Return a credential whose access token is not expired.

    Refreshes through ``refresher`` (default :func:`refresh`) when needed;
    ``refresh`` and ``email`` are carried over unchanged.
    """
    current = now_ms() if now is None else now
    if not credential.is_expired(current):
        return credential

    logger.info("Access token for %s expired, refreshing", credential.profile_id)
    refreshed = (refresher or refresh)(credential.refresh)
    return credential.with_refresh(refreshed)


__all__ = [
    "LoginOrchestrator",
    "LoginState",
    "login",
    "refresh",
    "ensure_fresh",
]
