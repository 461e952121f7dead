"""
Unit tests for installer outcome parsing — one case per OS text pattern.

Pure functions: no subprocess, no filesystem.
"""

from __future__ import annotations

import pytest

from src.core.models import InstallState, Provider
from src.core.services.virtual_audio.outcome import (
    ERROR_CANCELLED,
    RawOutcome,
    map_exit_code,
    parse_exit_code,
    parse_mac_run,
    parse_windows_run,
    to_install_result,
)


class TestMapExitCode:
    @pytest.mark.parametrize("code,state", [
        (0, InstallState.INSTALLED),
        (1638, InstallState.ALREADY_INSTALLED),
        (3010, InstallState.REBOOT_REQUIRED),
        (1641, InstallState.REBOOT_REQUIRED),
        (1223, InstallState.USER_CANCELLED),
        (55, InstallState.FAILED),
        (1, InstallState.FAILED),
        (-60007, InstallState.FAILED),
    ])
    def test_mapping(self, code, state):
        assert map_exit_code(code) == state


class TestParseExitCode:
    def test_plain(self):
        assert parse_exit_code("3010") == 3010

    def test_surrounding_whitespace(self):
        assert parse_exit_code("  0\r\n") == 0

    def test_negative(self):
        assert parse_exit_code("-128") == -128

    def test_leading_integer_only(self):
        assert parse_exit_code("0\nextra text") == 0

    @pytest.mark.parametrize("text", ["", "abc", "exit: 0", None])
    def test_non_numeric(self, text):
        assert parse_exit_code(text) is None


class TestParseWindowsRun:
    def test_exit_code(self):
        assert parse_windows_run("0") == RawOutcome(code=0)

    def test_unexpected_output(self):
        raw = parse_windows_run("Installing...")
        assert raw.code is None
        assert raw.error == "Unexpected installer output: Installing..."

    def test_empty_output(self):
        raw = parse_windows_run("")
        assert raw.code is None
        assert raw.error.startswith("Unexpected installer output")

    @pytest.mark.parametrize("text", [
        "Start-Process : This command cannot be run due to the error: "
        "The operation was canceled by the user.",
        "THE OPERATION WAS CANCELED BY THE USER",
        "The operation was cancelled by the user.",
    ])
    def test_uac_cancelled(self, text):
        assert parse_windows_run(error=text) == RawOutcome(code=ERROR_CANCELLED)

    def test_other_error_passed_through(self):
        text = "Start-Process : This command cannot be run because the file is missing."
        assert parse_windows_run(error=text) == RawOutcome(error=text)

    def test_error_wins_over_stdout(self):
        raw = parse_windows_run("0", error="Command timed out (180.0s)")
        assert raw == RawOutcome(error="Command timed out (180.0s)")


class TestParseMacRun:
    def test_success(self):
        assert parse_mac_run("0") == RawOutcome(code=0)

    def test_applescript_cancel_code_returned(self):
        assert parse_mac_run("1223") == RawOutcome(code=ERROR_CANCELLED)

    def test_error_number_returned_as_output(self):
        assert parse_mac_run("1") == RawOutcome(code=1)

    @pytest.mark.parametrize("text", [
        "0:54: execution error: User canceled authorization prompt. (-60006)",
        "execution error: User cancelled.",
        "execution error: User canceled. (-128)",
        "execution error: error number -128",
        "execution error: error number - 128",
    ])
    def test_cancelled(self, text):
        assert parse_mac_run(error=text) == RawOutcome(code=ERROR_CANCELLED)

    def test_embedded_error_number(self):
        raw = parse_mac_run(error="execution error: installer: failed (error number 1)")
        assert raw == RawOutcome(code=1)

    def test_bare_number_pattern(self):
        raw = parse_mac_run(error="osascript failed with number 256")
        assert raw == RawOutcome(code=256)

    def test_error_number_not_confused_with_cancel(self):
        raw = parse_mac_run(error="execution error: denied (error number 1280)")
        assert raw == RawOutcome(code=1280)

    def test_unexpected_output(self):
        raw = parse_mac_run("installer: The upgrade was successful.")
        assert raw.code is None
        assert raw.error.startswith("Unexpected installer output")

    def test_other_error_passed_through(self):
        text = "osascript: no such file"
        assert parse_mac_run(error=text) == RawOutcome(error=text)


class TestToInstallResult:
    def test_installed(self):
        r = to_install_result(Provider.VB_CABLE, RawOutcome(code=0), "cid-1")
        assert r.to_dict() == {
            "provider": "vb-cable",
            "state": "installed",
            "code": 0,
            "requiresRestart": False,
            "correlationId": "cid-1",
        }

    def test_reboot_required(self):
        r = to_install_result(Provider.VB_CABLE, RawOutcome(code=3010))
        assert r.state == InstallState.REBOOT_REQUIRED
        assert r.requires_restart is True
        assert r.message is None

    def test_already_installed(self):
        r = to_install_result(Provider.VB_CABLE, RawOutcome(code=1638))
        assert r.state == InstallState.ALREADY_INSTALLED
        assert r.requires_restart is False

    def test_cancelled(self):
        r = to_install_result(Provider.BLACKHOLE, RawOutcome(code=ERROR_CANCELLED))
        assert r.state == InstallState.USER_CANCELLED
        assert r.code == 1223

    def test_failed_code(self):
        r = to_install_result(Provider.VB_CABLE, RawOutcome(code=55))
        assert r.state == InstallState.FAILED
        assert r.message == "Installer exited with code 55"

    def test_error_text(self):
        r = to_install_result(Provider.BLACKHOLE, RawOutcome(error="boom"))
        assert r.state == InstallState.FAILED
        assert r.code is None
        assert r.message == "boom"

    def test_no_code_no_error(self):
        r = to_install_result(Provider.BLACKHOLE, RawOutcome())
        assert r.message == "blackhole installer failed to start."
