"""
Subprocess runner for the virtual audio installer.

The SINGLE PLACE where ``subprocess.run`` is called for signature
checks, package probes and the elevated installer.  Timeouts, logging
and error capture are centralised here.

Invariants:
    - Never raises — every failure comes back as ``{"ok": False, "error": ...}``.
    - A child that outlives its timeout is killed (``subprocess.run``
      kills on ``TimeoutExpired``) and reported as an error.
    - Installer output is never logged beyond its length.
"""

from __future__ import annotations

import logging
import subprocess
import time
from typing import Any

logger = logging.getLogger(__name__)

# Output is truncated to this many characters (tail kept)
_MAX_OUTPUT = 4000

# Hide console windows spawned from a GUI process on Windows
_CREATION_FLAGS = getattr(subprocess, "CREATE_NO_WINDOW", 0)


def run_command(cmd: list[str], *, timeout: float = 120) -> dict[str, Any]:
    """Run a command and capture its outcome.

    Args:
        cmd: Command list for ``subprocess.run()``.
        timeout: Seconds before the child is killed.

    Returns:
        ``{"ok": True, "stdout": "...", "elapsed_ms": N}`` on exit 0,
        ``{"ok": False, "error": "...", "returncode": N, ...}`` otherwise.
        ``error`` is the most informative text available: stderr, then
        stdout, then a generic exit-code message.
    """
    logger.debug("Running: %s (timeout=%ss)", cmd[0], timeout)
    start = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            creationflags=_CREATION_FLAGS,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Command timed out after %ss: %s", timeout, cmd[0])
        return {"ok": False, "error": f"Command timed out ({timeout}s)", "timed_out": True}
    except OSError as e:
        logger.warning("Command failed to start: %s (%s)", cmd[0], e)
        return {"ok": False, "error": str(e)}

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = (result.stdout or "").strip()[-_MAX_OUTPUT:]
    stderr = (result.stderr or "").strip()[-_MAX_OUTPUT:]

    if result.returncode == 0:
        logger.debug("%s ok in %dms (%d chars)", cmd[0], elapsed_ms, len(stdout))
        return {"ok": True, "stdout": stdout, "elapsed_ms": elapsed_ms}

    logger.debug("%s exited %d in %dms", cmd[0], result.returncode, elapsed_ms)
    return {
        "ok": False,
        "error": stderr or stdout or f"Command failed (exit {result.returncode})",
        "returncode": result.returncode,
        "stdout": stdout,
        "stderr": stderr,
        "elapsed_ms": elapsed_ms,
    }
