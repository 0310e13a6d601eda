"""Command-line entry point for gworkspace-auth.

Interactive output (authorization URL, manual-mode instructions, progress,
audit lines and logs) goes to stderr so that ``--json`` output on stdout
can be piped into another tool.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import webbrowser
from datetime import UTC, datetime

import typer
from dotenv import load_dotenv

from gworkspace_auth import __version__
from gworkspace_auth.auth.environment import EnvironmentProbe
from gworkspace_auth.auth.login import LoginOrchestrator
from gworkspace_auth.auth.login import refresh as refresh_token_grant
from gworkspace_auth.utils.errors import EnvironmentMisconfigured, WorkspaceAuthError

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1

app = typer.Typer(
    name="gworkspace-auth",
    help="Sign in to Google Workspace (read-only Gmail and Calendar).",
    no_args_is_help=True,
    add_completion=False,
)


def configure_logging() -> None:
    """Configure logging to stderr.

    Respects LOG_LEVEL env var (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = logging.getLevelNamesMapping().get(log_level_str, logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    # Reduce noise from Google libraries
    logging.getLogger("googleapiclient").setLevel(logging.WARNING)
    logging.getLogger("google.auth").setLevel(logging.WARNING)


def _format_expiry(expires_ms: int) -> str:
    return datetime.fromtimestamp(expires_ms / 1000, tz=UTC).isoformat()


def _fail(e: WorkspaceAuthError, action: str) -> typer.Exit:
    if isinstance(e, EnvironmentMisconfigured):
        typer.echo(e.message, err=True)
    else:
        typer.echo(f"{action} failed: {e.message}", err=True)
    return typer.Exit(EXIT_FAILURE)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"gworkspace-auth {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Google Workspace OAuth helper."""
    configure_logging()


@app.command()
def login(
    no_open: bool = typer.Option(
        False, "--no-open", help="Print the URL without opening a browser."
    ),
    manual: bool = typer.Option(
        False, "--manual", help="Force the copy/paste flow."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show progress messages and debug output."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print the credential as JSON."
    ),
) -> None:
    """Authorize read-only Gmail and Calendar access."""
    if verbose:
        logging.getLogger("gworkspace_auth").setLevel(logging.DEBUG)

    def show_url(url: str) -> None:
        typer.echo("\nOpen this URL to authorize Google Workspace access:\n", err=True)
        typer.echo(url, err=True)
        typer.echo("", err=True)
        if no_open:
            return
        if webbrowser.open(url):
            typer.echo("Opened browser for authorization...", err=True)
        else:
            typer.echo("Could not open browser. Please open the URL manually.", err=True)

    def show_progress(message: str) -> None:
        if verbose:
            typer.echo(message, err=True)
        else:
            logger.debug("Login progress: %s", message)

    typer.echo("Starting Google Workspace OAuth flow...", err=True)
    try:
        credential = LoginOrchestrator().login(
            show_url, show_progress, force_manual=manual
        )
    except WorkspaceAuthError as e:
        raise _fail(e, "Login") from e

    if json_output:
        payload = credential.model_dump()
        payload["profileId"] = credential.profile_id
        typer.echo(json.dumps(payload, indent=2))
        return

    typer.echo(f"Signed in as {credential.email or 'unknown account'}")
    typer.echo(f"Profile: {credential.profile_id}")
    typer.echo(f"Access token expires: {_format_expiry(credential.expires)}")


@app.command()
def refresh(
    refresh_token: str = typer.Argument(..., help="Refresh token to exchange."),
    json_output: bool = typer.Option(
        False, "--json", help="Print the refreshed token as JSON."
    ),
) -> None:
    """Exchange a refresh token for a new access token."""
    try:
        refreshed = refresh_token_grant(refresh_token)
    except WorkspaceAuthError as e:
        raise _fail(e, "Refresh") from e

    if json_output:
        typer.echo(refreshed.model_dump_json(indent=2))
        return
    typer.echo(f"Access token expires: {_format_expiry(refreshed.expires)}")


@app.command()
def mode(
    json_output: bool = typer.Option(
        False, "--json", help="Print the detection signals as JSON."
    ),
) -> None:
    """Show which OAuth flow this host would use."""
    probe = EnvironmentProbe()
    selected = probe.select_mode()
    signals = probe.describe()

    if json_output:
        typer.echo(json.dumps({"mode": selected.value, **signals}, indent=2))
        return

    typer.echo(f"OAuth flow: {selected.value}")
    for name, value in signals.items():
        typer.echo(f"  {name}: {'yes' if value else 'no'}")


def main() -> None:
    """Console-script entry point."""
    # Load .env file if present
    load_dotenv()
    app()


__all__ = ["app", "main", "configure_logging"]


if __name__ == "__main__":
    main()
