"""
Installer outcome parsing (pure).

Elevation tools report success and failure in free text: PowerShell
prints the installer's exit code or an error string, osascript prints
our "0"/error number or an AppleScript error such as
``execution error: User canceled. (-128)``.  ALL of that fragile text
matching lives here, so only this module changes when OS tooling
output does.

No I/O, no subprocess.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from src.core.models.virtual_audio import InstallResult, InstallState, Provider

# Windows error code for "The operation was canceled by the user"
ERROR_CANCELLED = 1223

_EXIT_CODE_STATES: dict[int, InstallState] = {
    0: InstallState.INSTALLED,
    1638: InstallState.ALREADY_INSTALLED,   # another version already installed
    3010: InstallState.REBOOT_REQUIRED,     # success, reboot required
    1641: InstallState.REBOOT_REQUIRED,     # success, reboot initiated
    ERROR_CANCELLED: InstallState.USER_CANCELLED,
}

_LEADING_INT_RE = re.compile(r"^\s*(-?\d+)")

_WINDOWS_CANCEL_RE = re.compile(r"cancell?ed by the user", re.IGNORECASE)

_MAC_CANCEL_RE = re.compile(r"user cancell?ed|-\s*128(?!\d)", re.IGNORECASE)
_MAC_ERROR_NUMBER_RE = re.compile(r"(?:error number|number)\s+(-?\d+)", re.IGNORECASE)


@dataclass(frozen=True)
class RawOutcome:
    """What the elevation tool told us: an exit code, or an error text."""

    code: int | None = None
    error: str | None = None


def map_exit_code(code: int) -> InstallState:
    """Map an installer exit code to a terminal state."""
    return _EXIT_CODE_STATES.get(code, InstallState.FAILED)


def parse_exit_code(output: str) -> int | None:
    """Leading integer of ``output``, or None when it does not start with one."""
    m = _LEADING_INT_RE.match(output or "")
    return int(m.group(1)) if m else None


def _from_output(output: str) -> RawOutcome:
    code = parse_exit_code(output)
    if code is None:
        return RawOutcome(error=f"Unexpected installer output: {output}")
    return RawOutcome(code=code)


def parse_windows_run(stdout: str | None = None, error: str | None = None) -> RawOutcome:
    """Interpret a PowerShell ``Start-Process -Verb RunAs`` run.

    Args:
        stdout: Output of a successful run (the installer's exit code).
        error: Error text of a failed run (dismissed UAC prompt, spawn error).
    """
    if error is not None:
        if _WINDOWS_CANCEL_RE.search(error):
            return RawOutcome(code=ERROR_CANCELLED)
        return RawOutcome(error=error)
    return _from_output(stdout or "")


def parse_mac_run(stdout: str | None = None, error: str | None = None) -> RawOutcome:
    """Interpret an ``osascript … with administrator privileges`` run.

    Args:
        stdout: Output of a successful run ("0", "1223" or an error number).
        error: Error text of a failed run.
    """
    if error is not None:
        if _MAC_CANCEL_RE.search(error):
            return RawOutcome(code=ERROR_CANCELLED)
        m = _MAC_ERROR_NUMBER_RE.search(error)
        if m:
            code = int(m.group(1))
            return RawOutcome(code=ERROR_CANCELLED if code == -128 else code)
        return RawOutcome(error=error)
    return _from_output(stdout or "")


def to_install_result(
    provider: Provider,
    raw: RawOutcome,
    correlation_id: str | None = None,
) -> InstallResult:
    """Normalise a raw outcome into an ``InstallResult``."""
    if raw.code is None:
        return InstallResult(
            provider=provider,
            state=InstallState.FAILED,
            message=raw.error or f"{provider} installer failed to start.",
            correlation_id=correlation_id,
        )

    state = map_exit_code(raw.code)
    return InstallResult(
        provider=provider,
        state=state,
        code=raw.code,
        requires_restart=state == InstallState.REBOOT_REQUIRED,
        message=f"Installer exited with code {raw.code}" if state == InstallState.FAILED else None,
        correlation_id=correlation_id,
    )
