"""
Platform strategies — how each OS verifies and runs the installer.

A closed set of variants behind one interface, selected once per
install call:

    WindowsStrategy   vb-cable    PowerShell Start-Process -Verb RunAs (UAC)
    MacStrategy       blackhole   osascript "with administrator privileges"

The coordinator never branches on the platform string itself.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from src.core.models.virtual_audio import Bundle, Provider
from src.core.services.virtual_audio.outcome import (
    RawOutcome,
    parse_mac_run,
    parse_windows_run,
)
from src.core.services.virtual_audio.providers import current_platform
from src.core.services.virtual_audio.runner import run_command
from src.core.services.virtual_audio.signature import (
    PKGUTIL,
    powershell_command,
    ps_quote,
    run_strict_verification,
)

logger = logging.getLogger(__name__)

OSASCRIPT = "/usr/bin/osascript"

# pkgutil --pkg-info answers fast; keep the probe short
_PROBE_TIMEOUT = 15


class PlatformStrategy(ABC):
    """Per-platform verification and elevated execution.

    Subclasses declare which provider they install on which platform,
    build the elevation command and interpret its output.
    """

    provider: Provider
    platform: str

    def probe_existing(self, bundle: Bundle) -> bool:
        """Whether the driver is already installed. Default: cannot tell."""
        return False

    def verify_signer(self, bundle: Bundle) -> dict[str, Any]:
        """Strict-mode signer / notarization checks."""
        return run_strict_verification(
            bundle.manifest,
            bundle.installer_path,
            timeout=bundle.manifest.timeout_seconds,
        )

    @abstractmethod
    def build_command(self, bundle: Bundle) -> list[str]:
        """The elevation command that runs the installer."""

    @abstractmethod
    def interpret_outcome(self, stdout: str | None, error: str | None) -> RawOutcome:
        """Turn the elevation tool's output into an exit code or error text."""

    def invoke_installer(self, bundle: Bundle) -> RawOutcome:
        """Run the installer elevated, bounded by the manifest timeout."""
        timeout = bundle.manifest.timeout_seconds
        logger.info("Launching elevated %s installer (timeout=%ss)", self.provider, timeout)
        r = run_command(self.build_command(bundle), timeout=timeout)
        if r["ok"]:
            return self.interpret_outcome(r["stdout"], None)
        return self.interpret_outcome(None, r["error"])

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} provider={self.provider.value!r}>"


class WindowsStrategy(PlatformStrategy):
    """VB-CABLE through a UAC prompt."""

    provider = Provider.VB_CABLE
    platform = "win32"

    def build_command(self, bundle: Bundle) -> list[str]:
        start = f"$proc = Start-Process -FilePath {ps_quote(str(bundle.installer_path))}"
        if bundle.manifest.silent_args:
            args = ", ".join(ps_quote(a) for a in bundle.manifest.silent_args)
            start += f" -ArgumentList @({args})"
        start += " -Verb RunAs -Wait -PassThru"

        script = "\n".join([
            '$ErrorActionPreference = "Stop"',
            start,
            "Write-Output $proc.ExitCode",
        ])
        return powershell_command(script)

    def interpret_outcome(self, stdout: str | None, error: str | None) -> RawOutcome:
        return parse_windows_run(stdout, error)


def applescript_quote(value: str) -> str:
    """Double-quote a value as an AppleScript string literal."""
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


class MacStrategy(PlatformStrategy):
    """BlackHole through the macOS authorization prompt."""

    provider = Provider.BLACKHOLE
    platform = "darwin"

    def probe_existing(self, bundle: Bundle) -> bool:
        package_id = bundle.manifest.package_id
        if not package_id:
            return False
        r = run_command([PKGUTIL, "--pkg-info", package_id], timeout=_PROBE_TIMEOUT)
        if r["ok"]:
            logger.info("Package %s is already registered", package_id)
        return r["ok"]

    def build_command(self, bundle: Bundle) -> list[str]:
        script = "\n".join([
            f"set pkgPath to {applescript_quote(str(bundle.installer_path))}",
            "try",
            '  do shell script "/usr/sbin/installer -pkg " & quoted form of pkgPath'
            ' & " -target /" with administrator privileges',
            '  return "0"',
            "on error errMsg number errNum",
            '  if errNum = -128 then return "1223"',
            "  return errNum as string",
            "end try",
        ])
        return [OSASCRIPT, "-e", script]

    def interpret_outcome(self, stdout: str | None, error: str | None) -> RawOutcome:
        return parse_mac_run(stdout, error)


_STRATEGIES: tuple[type[PlatformStrategy], ...] = (WindowsStrategy, MacStrategy)


def select_strategy(provider: str, platform: str | None = None) -> PlatformStrategy | None:
    """Strategy installing ``provider`` on ``platform``, or None when unmapped."""
    if platform is None:
        platform = current_platform()
    for cls in _STRATEGIES:
        if cls.provider.value == provider and cls.platform == platform:
            return cls()
    return None
