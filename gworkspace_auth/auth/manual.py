"""Manual copy/paste delivery of the authorization response.

Used on remote or headless hosts where the browser cannot reach the CLI's
loopback redirect. The operator opens the authorization URL on any device,
completes consent, and pastes the (unloadable) localhost URL from the
browser's address bar back into the terminal.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import TextIO
from urllib.parse import parse_qs, urlsplit

from gworkspace_auth.auth.callback import CallbackOutcome, CallbackResult
from gworkspace_auth.auth.config import REDIRECT_URI
from gworkspace_auth.utils.errors import CallbackErrorKind, CallbackProtocolError

logger = logging.getLogger(__name__)

INSTRUCTIONS = f"""
{"=" * 60}
VPS/Remote Mode - Manual OAuth
{"=" * 60}

1. Open the URL above in your LOCAL browser
2. Complete the Google sign-in
3. Your browser will redirect to a localhost URL that won't load
4. Copy the ENTIRE URL from your browser's address bar
5. Paste it below

The URL will look like:
{REDIRECT_URI}?code=xxx&state=yyy
"""

PROMPT = "Paste the redirect URL here: "


def _looks_like_url(text: str) -> bool:
    # Address bars may drop "http://", leaving "localhost:51122/...?code=..."
    return bool(urlsplit(text).scheme) or "?" in text


def parse_callback_input(text: str, expected_state: str) -> CallbackResult:
    """Parse a pasted redirect URL or bare authorization code.

    A URL (with or without ``http://``) yields its ``code`` and ``state``
    parameters; an absent ``state`` is replaced by the expected one, an
    empty one is rejected. Anything that is not a URL is taken as the code
    itself.

    Args:
        text: Operator input.
        expected_state: State token of the current attempt.

    Returns:
        A successful CallbackResult. The caller still has to compare
        ``state`` with the attempt's state token.

    Raises:
        CallbackProtocolError: On empty input, a URL without ``code``, or
            a URL with an empty ``state``.
    """
    trimmed = text.strip()
    if not trimmed:
        raise CallbackProtocolError(CallbackErrorKind.NO_INPUT, "No input provided")

    if not _looks_like_url(trimmed):
        logger.debug("Manual input is not a URL, treating it as the code")
        return CallbackResult(
            CallbackOutcome.SUCCESS, code=trimmed, state=expected_state
        )

    query = trimmed.split("?", 1)[1] if "?" in trimmed else ""
    params = parse_qs(query.split("#", 1)[0], keep_blank_values=True)
    code = params.get("code", [None])[0]
    if not code:
        raise CallbackProtocolError(
            CallbackErrorKind.MISSING_CODE, "Missing code parameter"
        )
    state = params.get("state", [expected_state])[0]
    if not state:
        raise CallbackProtocolError(
            CallbackErrorKind.STATE_MISMATCH,
            "Missing 'state' parameter. Paste the full URL.",
        )
    return CallbackResult(CallbackOutcome.SUCCESS, code=code, state=state)


class ManualCodeCollector:
    """Prompts the operator for the redirect URL and parses it."""

    def __init__(
        self,
        read_line: Callable[[], str] | None = None,
        stream: TextIO | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            read_line: Returns one line of operator input. Defaults to
                reading stdin.
            stream: Where instructions are written. Defaults to stderr.
        """
        self._read_line = read_line or sys.stdin.readline
        self._stream = stream

    def _write(self, text: str) -> None:
        stream = self._stream or sys.stderr
        stream.write(text)
        stream.flush()

    def collect(self, expected_state: str) -> CallbackResult:
        """Print instructions, read one line and validate it.

        Raises:
            CallbackProtocolError: On empty input, missing code, or a
                state that does not match ``expected_state``.
        """
        self._write(INSTRUCTIONS + "\n")
        self._write(PROMPT)
        result = parse_callback_input(self._read_line(), expected_state)

        if result.state != expected_state:
            logger.error("Pasted redirect URL has a mismatched state")
            raise CallbackProtocolError(
                CallbackErrorKind.STATE_MISMATCH,
                "OAuth state mismatch - please try again",
            )
        return result


__all__ = [
    "ManualCodeCollector",
    "parse_callback_input",
    "INSTRUCTIONS",
]
