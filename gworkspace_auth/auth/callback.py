"""One-shot local HTTP listener for the OAuth loopback redirect.

The listener binds the fixed redirect port, serves requests until one hits
the callback path, and then releases the port before handing the outcome
back. Requests to any other path (e.g. ``/favicon.ico``) get a 404 and do
not end the wait.

There is no timeout: the wait lasts until the browser redirects back or
the process is terminated.
"""

from __future__ import annotations

import errno
import logging
from dataclasses import dataclass
from enum import Enum
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlparse

from gworkspace_auth.auth.config import REDIRECT_PATH, REDIRECT_PORT
from gworkspace_auth.utils.errors import (
    BindErrorKind,
    BindFailure,
    CallbackErrorKind,
    CallbackProtocolError,
)

logger = logging.getLogger(__name__)

SUCCESS_PAGE = (
    b"<html>"
    b'<body style="font-family: system-ui; text-align: center; padding: 50px;">'
    b"<h1>Success!</h1>"
    b"<p>Google Workspace connected. You can close this window.</p>"
    b"</body></html>"
)

_ADDRESS_IN_USE = {errno.EADDRINUSE, getattr(errno, "WSAEADDRINUSE", errno.EADDRINUSE)}
_PERMISSION_DENIED = {errno.EACCES, errno.EPERM, getattr(errno, "WSAEACCES", errno.EACCES)}


class CallbackOutcome(str, Enum):
    """Classification of a single request to the callback path."""

    SUCCESS = "success"
    PROVIDER_ERROR = "provider_error"
    MISSING_CODE = "missing_code"
    STATE_MISMATCH = "state_mismatch"


@dataclass(frozen=True)
class CallbackResult:
    """Outcome of an authorization response.

    ``code`` and ``state`` are set on success; ``reason`` carries the
    provider's ``error`` value for PROVIDER_ERROR.
    """

    outcome: CallbackOutcome
    code: str | None = None
    state: str | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is CallbackOutcome.SUCCESS

    def to_error(self) -> CallbackProtocolError:
        """Build the protocol error for a failed outcome."""
        match self.outcome:
            case CallbackOutcome.PROVIDER_ERROR:
                return CallbackProtocolError(
                    CallbackErrorKind.PROVIDER_ERROR,
                    f"OAuth error: {self.reason}",
                    details={"oauth_error": self.reason},
                )
            case CallbackOutcome.MISSING_CODE:
                return CallbackProtocolError(
                    CallbackErrorKind.MISSING_CODE, "Missing authorization code"
                )
            case CallbackOutcome.STATE_MISMATCH:
                # Don't leak state values in error details
                return CallbackProtocolError(
                    CallbackErrorKind.STATE_MISMATCH,
                    "OAuth state mismatch",
                    details={"hint": "Request may have been tampered with"},
                )
            case _:
                raise ValueError("Successful callback has no error")


def classify_callback(query: str, expected_state: str) -> CallbackResult:
    """Classify the query string of a request to the callback path.

    Checks run in order: provider error, missing code, state mismatch.
    """
    params = parse_qs(query)

    error = params.get("error", [None])[0]
    if error:
        return CallbackResult(CallbackOutcome.PROVIDER_ERROR, reason=error)

    code = params.get("code", [None])[0]
    if not code:
        return CallbackResult(CallbackOutcome.MISSING_CODE)

    state = params.get("state", [None])[0]
    if state != expected_state:
        return CallbackResult(CallbackOutcome.STATE_MISMATCH)

    return CallbackResult(CallbackOutcome.SUCCESS, code=code, state=state)


def classify_bind_error(exc: OSError) -> BindErrorKind:
    """Map a socket bind error to a BindErrorKind."""
    if exc.errno in _ADDRESS_IN_USE:
        return BindErrorKind.ADDRESS_IN_USE
    if exc.errno in _PERMISSION_DENIED or isinstance(exc, PermissionError):
        return BindErrorKind.PERMISSION_DENIED
    return BindErrorKind.OTHER


class CallbackListener:
    """Ephemeral HTTP endpoint that captures exactly one authorization response.

    Example:
        >>> listener = CallbackListener()
        >>> result = listener.wait_for_code(expected_state=state)
        >>> result.code
        '4/0Ab...'
    """

    def __init__(
        self,
        port: int = REDIRECT_PORT,
        host: str = "localhost",
        path: str = REDIRECT_PATH,
    ) -> None:
        self._port = port
        self._host = host
        self._path = path

    @property
    def port(self) -> int:
        return self._port

    def _bind(self, handler_class: type[BaseHTTPRequestHandler]) -> HTTPServer:
        """Bind the callback server or raise BindFailure."""
        try:
            server = HTTPServer((self._host, self._port), handler_class)
        except OSError as e:
            kind = classify_bind_error(e)
            logger.warning(
                "Could not bind OAuth callback server to port %d: %s", self._port, e
            )
            raise BindFailure(kind, self._port, details={"errno": e.errno}) from e
        logger.debug("OAuth callback server bound to port %d", self._port)
        return server

    def wait_for_code(self, expected_state: str) -> CallbackResult:
        """Serve until one request reaches the callback path.

        The port is released before this method returns or raises.

        Args:
            expected_state: State token of the current login attempt.

        Returns:
            The successful CallbackResult with ``code`` and ``state``.

        Raises:
            BindFailure: If the port could not be bound.
            CallbackProtocolError: On provider error, missing code or
                state mismatch.
        """
        outcome: CallbackResult | None = None
        callback_path = self._path

        class CallbackHandler(BaseHTTPRequestHandler):
            """HTTP request handler for the OAuth callback."""

            def _respond(handler_self, status: int, content_type: str, body: bytes) -> None:  # noqa: N805
                handler_self.send_response(status)
                handler_self.send_header("Content-Type", content_type)
                handler_self.send_header("Content-Length", str(len(body)))
                handler_self.end_headers()
                handler_self.wfile.write(body)

            def do_GET(handler_self) -> None:  # noqa: N802, N805
                nonlocal outcome
                parsed = urlparse(handler_self.path)

                if parsed.path != callback_path:
                    handler_self._respond(404, "text/plain; charset=utf-8", b"Not found")
                    return

                result = classify_callback(parsed.query, expected_state)
                if result.ok:
                    handler_self._respond(200, "text/html; charset=utf-8", SUCCESS_PAGE)
                else:
                    handler_self._respond(
                        400,
                        "text/plain; charset=utf-8",
                        result.to_error().message.encode("utf-8"),
                    )
                outcome = result

            def log_message(handler_self, format: str, *args: object) -> None:  # noqa: N805
                logger.debug("OAuth callback server: %s", format % args)

        with self._bind(CallbackHandler) as server:
            logger.info("OAuth callback server listening on port %d", self._port)
            while outcome is None:
                server.handle_request()

        logger.debug("OAuth callback server closed (%s)", outcome.outcome.value)
        if not outcome.ok:
            error = outcome.to_error()
            logger.error("OAuth callback rejected: %s", error.message)
            raise error
        return outcome


__all__ = [
    "CallbackListener",
    "CallbackOutcome",
    "CallbackResult",
    "classify_bind_error",
    "classify_callback",
    "SUCCESS_PAGE",
]
