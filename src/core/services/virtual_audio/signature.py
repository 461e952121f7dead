"""
Signer / notarization verifier — strict-mode provenance checks.

Only runs when the manifest's effective verification mode is
``strict``.  Each check returns ``{"ok": bool, "message": str}``;
anything ambiguous (missing signer data the manifest expected,
unparseable tool output, a tool error) fails closed.

Windows:  PowerShell ``Get-AuthenticodeSignature``
macOS:    ``pkgutil --check-signature`` + ``spctl`` notarization check

The output parsers are pure and live next to the checks that use them.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from src.core.models.virtual_audio import Manifest, Provider
from src.core.services.virtual_audio.runner import run_command

logger = logging.getLogger(__name__)

POWERSHELL = "powershell.exe"
PKGUTIL = "/usr/sbin/pkgutil"
SPCTL = "/usr/sbin/spctl"

_POWERSHELL_ARGS = ["-NoProfile", "-NonInteractive", "-ExecutionPolicy", "Bypass", "-Command"]

_TEAM_ID_RE = re.compile(r"Team Identifier:\s*(.+)", re.IGNORECASE)
_CHAIN_ENTRY_RE = re.compile(r"^\s*1\.\s+(.+)$", re.MULTILINE)


def ps_quote(value: str) -> str:
    """Single-quote a value for a PowerShell command line."""
    return "'" + value.replace("'", "''") + "'"


def powershell_command(script: str) -> list[str]:
    return [POWERSHELL, *_POWERSHELL_ARGS, script]


# ── Parsers (pure) ──────────────────────────────────────────────


def parse_authenticode_output(output: str) -> dict[str, str]:
    """Parse ``{"status": ..., "subject": ...}`` from ConvertTo-Json output.

    Raises:
        ValueError: Output is not a JSON object.
    """
    data = json.loads(output)
    if not isinstance(data, dict):
        raise ValueError(f"Unexpected signature output: {output[:200]}")
    return {
        "status": str(data.get("status") or ""),
        "subject": str(data.get("subject") or ""),
    }


def parse_pkgutil_signature(output: str) -> dict[str, str | None]:
    """Extract the signer and team id from ``pkgutil --check-signature``.

    Typical output::

        Package "BlackHole2ch.pkg":
           Status: signed by a developer certificate issued by Apple for distribution
           Notarization: trusted by the Apple notary service
           Signed with a trusted timestamp on: 2024-03-01 10:00:00 +0000
           Certificate Chain:
            1. Developer ID Installer: Existential Audio Inc. (Q5C99V536K)
               Expires: 2027-02-01 22:12:15 +0000
               ...

    The signer is the leaf certificate (``1. …``) when a chain is
    printed, otherwise the first non-empty line.
    """
    signer = ""
    m = _CHAIN_ENTRY_RE.search(output)
    if m:
        signer = m.group(1).strip()
    else:
        for line in output.splitlines():
            if line.strip():
                signer = line.strip()
                break

    team = _TEAM_ID_RE.search(output)
    team_id = team.group(1).strip() if team else None

    return {"signer": signer, "team_id": team_id or None}


# ── Windows ─────────────────────────────────────────────────────


def verify_windows_signature(
    installer_path: Path,
    expected_signer: str | None,
    *,
    timeout: float = 20,
) -> dict[str, Any]:
    """Check the installer's Authenticode signature and publisher."""
    if not expected_signer:
        return {
            "ok": False,
            "message": "Strict verification requires expected signer information.",
        }

    script = "\n".join([
        '$ErrorActionPreference = "Stop"',
        f"$sig = Get-AuthenticodeSignature -FilePath {ps_quote(str(installer_path))}",
        "$result = @{",
        "  status = $sig.Status.ToString()",
        '  subject = if ($sig.SignerCertificate) { $sig.SignerCertificate.Subject } else { "" }',
        "}",
        "$result | ConvertTo-Json -Compress",
    ])

    r = run_command(powershell_command(script), timeout=timeout)
    if not r["ok"]:
        return {"ok": False, "message": f"Failed to verify signature: {r['error']}"}

    try:
        parsed = parse_authenticode_output(r["stdout"])
    except ValueError as e:
        return {"ok": False, "message": f"Failed to verify signature: {e}"}

    status = parsed["status"]
    if status.lower() != "valid":
        return {
            "ok": False,
            "message": f"Authenticode status is {status or 'unknown'} (invalid).",
        }

    if expected_signer.lower() not in parsed["subject"].lower():
        logger.warning("Installer publisher mismatch: %s", parsed["subject"])
        return {"ok": False, "message": "Installer publisher mismatch."}

    return {"ok": True, "message": "Authenticode signature valid."}


# ── macOS ───────────────────────────────────────────────────────


def verify_mac_package_signature(
    installer_path: Path,
    expected_team_id: str | None = None,
    expected_signer_contains: str | None = None,
    *,
    timeout: float = 20,
) -> dict[str, Any]:
    """Check the package signer and team id reported by pkgutil."""
    r = run_command([PKGUTIL, "--check-signature", str(installer_path)], timeout=timeout)
    if not r["ok"]:
        return {"ok": False, "message": f"Failed to verify package signature: {r['error']}"}

    output = r["stdout"]
    if not output:
        return {"ok": False, "message": "No signature output from pkgutil."}

    parsed = parse_pkgutil_signature(output)

    if expected_signer_contains:
        if expected_signer_contains.lower() not in (parsed["signer"] or "").lower():
            logger.warning("Installer signer mismatch: %s", parsed["signer"])
            return {"ok": False, "message": "Installer signer does not match expected value."}

    if expected_team_id:
        team_id = parsed["team_id"]
        if team_id != expected_team_id:
            return {
                "ok": False,
                "message": f"Installer Team ID mismatch (found: {team_id or 'unknown'}).",
            }

    return {"ok": True, "message": "Package signature valid."}


def verify_mac_notarization(installer_path: Path, *, timeout: float = 20) -> dict[str, Any]:
    """Ask Gatekeeper whether the package is accepted for install."""
    r = run_command(
        [SPCTL, "-a", "-vv", "-t", "install", str(installer_path)],
        timeout=timeout,
    )
    if not r["ok"]:
        return {"ok": False, "message": f"Installer notarization check failed: {r['error']}"}
    return {"ok": True, "message": "Installer notarization accepted."}


# ── Dispatch ────────────────────────────────────────────────────


def run_strict_verification(
    manifest: Manifest,
    installer_path: Path,
    *,
    timeout: float = 20,
) -> dict[str, Any]:
    """Run every strict check the manifest asks for, stopping at the first failure."""
    if manifest.provider == Provider.VB_CABLE:
        expected = manifest.expected_signer_contains or manifest.expected_publisher
        return verify_windows_signature(installer_path, expected, timeout=timeout)

    if manifest.provider == Provider.BLACKHOLE:
        signature = verify_mac_package_signature(
            installer_path,
            manifest.expected_team_id,
            manifest.expected_signer_contains,
            timeout=timeout,
        )
        if not signature["ok"] or not manifest.require_notarization:
            return signature
        return verify_mac_notarization(installer_path, timeout=timeout)

    return {"ok": False, "message": "Unsupported provider for strict verification."}
