"""Tests for host environment detection."""

from __future__ import annotations

import pytest

from gworkspace_auth.auth.environment import EnvironmentProbe, FlowMode

GENERIC_KERNEL = "Linux version 6.5.0-41-generic (buildd@lcy02-amd64-025)"
WSL1_KERNEL = "Linux version 4.4.0-19041-Microsoft (Microsoft@Microsoft.com)"
WSL2_KERNEL = "Linux version 5.15.153.1-microsoft-standard-WSL2 (root@941d701f84f1)"


def make_probe(environ=None, kernel=GENERIC_KERNEL, platform="linux"):
    return EnvironmentProbe(
        environ=environ or {}, kernel_reader=lambda: kernel, platform=platform
    )


class TestRemoteSessionDetection:
    """SSH and container markers force the manual flow."""

    @pytest.mark.parametrize(
        "marker",
        ["SSH_CLIENT", "SSH_TTY", "SSH_CONNECTION", "REMOTE_CONTAINERS", "CODESPACES"],
    )
    def test_marker_forces_manual(self, marker):
        probe = make_probe({marker: "1", "DISPLAY": ":0"})
        assert probe.is_containerish()
        assert probe.should_use_manual_flow()
        assert probe.select_mode() is FlowMode.MANUAL

    def test_marker_forces_manual_on_macos(self):
        probe = make_probe({"SSH_CONNECTION": "10.0.0.1 5555 10.0.0.2 22"}, platform="darwin")
        assert probe.should_use_manual_flow()

    def test_empty_marker_is_ignored(self):
        probe = make_probe({"SSH_CLIENT": "", "DISPLAY": ":0"})
        assert not probe.is_containerish()
        assert probe.select_mode() is FlowMode.LOCAL


class TestHeadlessLinux:
    """Linux without a display server cannot host a browser."""

    def test_no_display_is_headless(self):
        probe = make_probe({})
        assert probe.is_headless_linux()
        assert probe.select_mode() is FlowMode.MANUAL

    @pytest.mark.parametrize("marker", ["DISPLAY", "WAYLAND_DISPLAY"])
    def test_display_means_local(self, marker):
        probe = make_probe({marker: ":0"})
        assert not probe.is_headless_linux()
        assert probe.select_mode() is FlowMode.LOCAL

    def test_macos_without_display_is_local(self):
        probe = make_probe({}, platform="darwin")
        assert not probe.is_headless_linux()
        assert probe.select_mode() is FlowMode.LOCAL

    def test_windows_is_local(self):
        assert make_probe({}, platform="win32").select_mode() is FlowMode.LOCAL


class TestWSLDetection:
    """WSL1 keeps the local flow, WSL2 switches to manual."""

    def test_wsl1_is_not_headless(self):
        probe = make_probe({}, kernel=WSL1_KERNEL)
        assert probe.is_wsl()
        assert not probe.is_wsl2()
        assert not probe.is_headless_linux()
        assert probe.select_mode() is FlowMode.LOCAL

    def test_wsl2_uses_manual(self):
        probe = make_probe({}, kernel=WSL2_KERNEL)
        assert probe.is_wsl()
        assert probe.is_wsl2()
        assert not probe.is_headless_linux()
        assert probe.select_mode() is FlowMode.MANUAL

    def test_wsl2_with_display_still_manual(self):
        probe = make_probe({"DISPLAY": ":0"}, kernel=WSL2_KERNEL)
        assert probe.select_mode() is FlowMode.MANUAL

    def test_unreadable_kernel_is_not_wsl(self):
        probe = make_probe({"DISPLAY": ":0"}, kernel=None)
        assert not probe.is_wsl()
        assert probe.select_mode() is FlowMode.LOCAL

    def test_kernel_not_read_off_linux(self):
        calls = []

        def reader():
            calls.append(1)
            return WSL2_KERNEL

        probe = EnvironmentProbe(environ={}, kernel_reader=reader, platform="darwin")
        assert not probe.is_wsl()
        assert calls == []

    def test_kernel_read_once(self):
        calls = []

        def reader():
            calls.append(1)
            return WSL2_KERNEL

        probe = EnvironmentProbe(environ={}, kernel_reader=reader, platform="linux")
        probe.describe()
        probe.select_mode()
        assert len(calls) == 1


class TestDescribe:
    def test_signals(self):
        probe = make_probe({"SSH_TTY": "/dev/pts/0"}, kernel=WSL2_KERNEL)
        assert probe.describe() == {
            "containerish": True,
            "headless_linux": False,
            "wsl": True,
            "wsl2": True,
            "manual": True,
        }
