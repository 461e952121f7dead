"""
Tests for CLI commands — provider, validate, state, install, and global options.
"""

import json
import textwrap
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from src.core import context
from src.core.services.virtual_audio import reset_coordinator
from src.main import cli
from tests.bundles import RUN, completed, write_bundle


def _make_config(tmp_path: Path, **extra: str) -> Path:
    """Create an installer.yml pointing at a bundle root under tmp_path."""
    lines = ["resources_root: resources"]
    lines += [f"{k}: {v}" for k, v in extra.items()]
    config = tmp_path / "installer.yml"
    config.write_text("\n".join(lines) + "\n")
    (tmp_path / "resources").mkdir(exist_ok=True)
    return config


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Virtual Audio Installer" in result.output
        for command in ("provider", "validate", "state", "install"):
            assert command in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_config_registers_resources_root(self, tmp_path: Path):
        config = _make_config(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "provider", "--platform", "win32"])
        assert result.exit_code == 0
        assert context.get_resources_root() == (tmp_path / "resources").resolve()

    def test_invalid_config(self, tmp_path: Path):
        config = tmp_path / "installer.yml"
        config.write_text("log_level: LOUD\n")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "state"])
        assert result.exit_code == 1
        assert "Invalid installer configuration" in result.output

    def test_missing_explicit_config(self, tmp_path: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(tmp_path / "nope.yml"), "state"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestProviderCommand:
    def test_windows(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["provider", "--platform", "win32"])
        assert result.exit_code == 0
        assert result.output.strip() == "vb-cable"

    def test_json(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["provider", "--platform", "darwin", "--json"])
        assert json.loads(result.output) == {"provider": "blackhole"}

    def test_unsupported(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["provider", "--platform", "linux"])
        assert result.exit_code == 1


class TestValidateCommand:
    def test_verified(self, tmp_path: Path):
        config = _make_config(tmp_path)
        write_bundle(tmp_path / "resources", "vb-cable")
        runner = CliRunner()
        result = runner.invoke(
            cli, ["--config", str(config), "validate", "--provider", "vb-cable", "--json"],
        )
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "ok": True,
            "message": "vb-cable installer bundle verified.",
        }

    def test_hash_mismatch_exits_nonzero(self, tmp_path: Path):
        config = _make_config(tmp_path)
        write_bundle(tmp_path / "resources", "blackhole", sha256="0" * 64)
        runner = CliRunner()
        result = runner.invoke(
            cli, ["--config", str(config), "validate", "--provider", "blackhole"],
        )
        assert result.exit_code == 1
        assert "blackhole installer bundle hash mismatch." in result.output


class TestStateCommand:
    def test_json(self, tmp_path: Path):
        config = _make_config(tmp_path)
        write_bundle(tmp_path / "resources", "vb-cable")
        reset_coordinator("win32")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "state", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "inProgress": False,
            "activeProvider": None,
            "platformSupported": True,
            "bundleReady": True,
            "bundleMessage": "vb-cable installer bundle verified.",
        }

    def test_human(self, tmp_path: Path):
        config = _make_config(tmp_path)
        reset_coordinator("linux")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "state"])
        assert result.exit_code == 0
        assert "Platform supported: no" in result.output


class TestInstallCommand:
    def test_installed_json(self, tmp_path: Path):
        config = _make_config(tmp_path)
        write_bundle(tmp_path / "resources", "vb-cable")
        reset_coordinator("win32")
        runner = CliRunner()
        with patch(RUN, return_value=completed("0")):
            result = runner.invoke(
                cli,
                ["--config", str(config), "install", "vb-cable",
                 "--correlation-id", "cid-1", "--json"],
            )
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "provider": "vb-cable",
            "state": "installed",
            "code": 0,
            "requiresRestart": False,
            "correlationId": "cid-1",
        }

    def test_default_provider_and_generated_cid(self, tmp_path: Path):
        config = _make_config(tmp_path)
        write_bundle(tmp_path / "resources", "vb-cable")
        reset_coordinator("win32")
        runner = CliRunner()
        with patch(RUN, return_value=completed("3010")):
            result = runner.invoke(cli, ["--config", str(config), "install", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["state"] == "reboot-required"
        assert data["requiresRestart"] is True
        assert len(data["correlationId"]) == 36

    def test_cancelled_exits_nonzero(self, tmp_path: Path):
        config = _make_config(tmp_path)
        write_bundle(tmp_path / "resources", "blackhole")
        reset_coordinator("darwin")
        runner = CliRunner()
        err = "execution error: User canceled authorization prompt. (-60006)"
        with patch(RUN, return_value=completed(stderr=err, rc=1)):
            result = runner.invoke(cli, ["--config", str(config), "install", "blackhole"])
        assert result.exit_code == 1
        assert "user-cancelled" in result.output

    def test_unsupported_platform(self, tmp_path: Path):
        config = _make_config(tmp_path)
        reset_coordinator("linux")
        runner = CliRunner()
        with patch(RUN) as mock_run:
            result = runner.invoke(cli, ["--config", str(config), "install", "vb-cable"])
        assert result.exit_code == 1
        assert "unsupported" in result.output
        mock_run.assert_not_called()

    def test_no_provider_for_platform(self, tmp_path: Path):
        config = _make_config(tmp_path)
        reset_coordinator("linux")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "install"])
        assert result.exit_code == 1
        assert "No virtual audio provider" in result.output
