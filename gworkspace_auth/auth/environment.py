"""Host environment detection for choosing the OAuth redirect delivery.

On a desktop the loopback redirect reaches a local callback server. Over
SSH, inside dev containers, on headless Linux, or under WSL2 the browser
cannot reach the CLI's localhost, so the operator pastes the redirect URL
back by hand instead.

All inputs are injectable so callers (and tests) can simulate remote,
headless or desktop hosts without touching the real process environment.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable, Mapping
from enum import Enum

logger = logging.getLogger(__name__)

KERNEL_VERSION_PATH = "/proc/version"

REMOTE_SESSION_MARKERS = ("SSH_CLIENT", "SSH_TTY", "SSH_CONNECTION")
CONTAINER_MARKERS = ("REMOTE_CONTAINERS", "CODESPACES")
DISPLAY_MARKERS = ("DISPLAY", "WAYLAND_DISPLAY")

WSL_SIGNATURES = ("microsoft", "wsl")
WSL2_SIGNATURES = ("wsl2", "microsoft-standard")


class FlowMode(str, Enum):
    """How the authorization response is delivered back to the CLI."""

    LOCAL = "local"
    MANUAL = "manual"


def read_kernel_version() -> str | None:
    """Read the kernel version string, or None if unavailable."""
    try:
        with open(KERNEL_VERSION_PATH, encoding="utf-8") as f:
            return f.read()
    except OSError:
        return None


class EnvironmentProbe:
    """Decides whether the host can support a local browser redirect.

    Example:
        >>> probe = EnvironmentProbe(environ={"SSH_CLIENT": "1.2.3.4 5 22"})
        >>> probe.should_use_manual_flow()
        True
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        kernel_reader: Callable[[], str | None] | None = None,
        platform: str | None = None,
    ) -> None:
        """Initialize the probe.

        Args:
            environ: Environment mapping. Defaults to ``os.environ``.
            kernel_reader: Returns the kernel version string or None.
                Defaults to reading ``/proc/version``.
            platform: Platform identifier. Defaults to ``sys.platform``.
        """
        self._environ = os.environ if environ is None else environ
        self._read_kernel_version = kernel_reader or read_kernel_version
        self._platform = sys.platform if platform is None else platform
        self._kernel_version: str | None = None
        self._kernel_version_read = False

    def _has_any(self, names: tuple[str, ...]) -> bool:
        return any(self._environ.get(name) for name in names)

    def _kernel(self) -> str:
        # At most one filesystem read per probe
        if not self._kernel_version_read:
            self._kernel_version = self._read_kernel_version()
            self._kernel_version_read = True
        return (self._kernel_version or "").lower()

    @property
    def is_linux(self) -> bool:
        return self._platform.startswith("linux")

    def is_containerish(self) -> bool:
        """True if an SSH session or a container/cloud-IDE marker is present."""
        return self._has_any(REMOTE_SESSION_MARKERS) or self._has_any(CONTAINER_MARKERS)

    def is_wsl(self) -> bool:
        """True when running under Windows Subsystem for Linux (any generation)."""
        if not self.is_linux:
            return False
        kernel = self._kernel()
        return any(sig in kernel for sig in WSL_SIGNATURES)

    def is_wsl2(self) -> bool:
        """True when running under WSL2 specifically."""
        if not self.is_wsl():
            return False
        kernel = self._kernel()
        return any(sig in kernel for sig in WSL2_SIGNATURES)

    def is_headless_linux(self) -> bool:
        """True on Linux with no display server, excluding WSL.

        WSL has its own browser bridge and is not treated as headless.
        """
        return (
            self.is_linux
            and not self._has_any(DISPLAY_MARKERS)
            and not self.is_wsl()
        )

    def should_use_manual_flow(self) -> bool:
        """Decide whether to skip the local callback server.

        Defaults to False when no signal is present.
        """
        return self.is_containerish() or self.is_headless_linux() or self.is_wsl2()

    def select_mode(self) -> FlowMode:
        """Return the flow mode for this host."""
        mode = FlowMode.MANUAL if self.should_use_manual_flow() else FlowMode.LOCAL
        logger.debug("Selected %s OAuth flow", mode.value)
        return mode

    def describe(self) -> dict[str, bool]:
        """Return the individual detection signals."""
        return {
            "containerish": self.is_containerish(),
            "headless_linux": self.is_headless_linux(),
            "wsl": self.is_wsl(),
            "wsl2": self.is_wsl2(),
            "manual": self.should_use_manual_flow(),
        }


__all__ = [
    "EnvironmentProbe",
    "FlowMode",
    "read_kernel_version",
]
