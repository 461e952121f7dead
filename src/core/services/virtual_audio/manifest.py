"""
Manifest & hash validator.

Loads ``manifest.json``, confirms it describes the requested provider,
and confirms the installer payload hashes to the manifest's SHA-256.
Everything is read fresh on every call — a bundle replaced on disk is
never judged by a stale verification.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from src.core.models.virtual_audio import Bundle, Manifest, Provider
from src.core.services.virtual_audio.bundle import resolve_manifest_path
from src.core.services.virtual_audio.errors import (
    HashMismatch,
    InstallerMissing,
    InstallerUnreadable,
    ManifestInvalid,
    ManifestMissing,
    ProviderMismatch,
    VirtualAudioError,
)
from src.core.services.virtual_audio.providers import get_preferred_provider_for_platform

logger = logging.getLogger(__name__)

NO_PROVIDER_MESSAGE = "No virtual audio installer is supported on this platform."


def compute_sha256(path: Path) -> str:
    """Lowercase hex SHA-256 of a file's bytes."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest().lower()


def load_manifest(manifest_path: Path, provider: str = "") -> Manifest:
    """Parse and validate a manifest file.

    Raises:
        ManifestInvalid: The file is unreadable, not JSON, or fails the schema.
    """
    try:
        raw = manifest_path.read_text(encoding="utf-8")
        data = json.loads(raw)
    except (OSError, ValueError) as e:
        raise ManifestInvalid(provider, f"{provider} manifest is unreadable: {e}") from e

    if not isinstance(data, dict):
        raise ManifestInvalid(
            provider,
            f"{provider} manifest must be a JSON object, got {type(data).__name__}",
        )

    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        raise ManifestInvalid(provider, f"{provider} manifest is invalid: {e}") from e


def load_bundle(provider: Provider) -> Bundle:
    """Resolve, parse and integrity-check a provider's bundle.

    The exception messages use the in-flow wording shown to the user
    when an install attempt stops at this stage.

    Raises:
        ManifestMissing, ManifestInvalid, ProviderMismatch,
        InstallerMissing, HashMismatch — in that order of checking.
    """
    provider = Provider(provider)
    name = provider.value

    manifest_path = resolve_manifest_path(provider)
    if manifest_path is None:
        raise ManifestMissing(name, f"{name} manifest not found in bundled resources.")

    manifest = load_manifest(manifest_path, name)
    if manifest.provider != name:
        raise ProviderMismatch(name, f"{name} manifest provider mismatch.")

    installer_path = manifest_path.parent / manifest.installer_file
    if not installer_path.is_file():
        raise InstallerMissing(
            name,
            f"{name} installer not found: {installer_path}",
            installer_path=str(installer_path),
        )

    expected = manifest.sha256.strip().lower()
    try:
        actual = compute_sha256(installer_path)
    except OSError as e:
        logger.warning("%s installer could not be read: %s", name, e)
        raise InstallerUnreadable(
            name,
            f"{name} installer could not be read: {e}",
            installer_path=str(installer_path),
        ) from e
    if actual != expected:
        logger.warning(
            "%s installer hash mismatch (expected %s, got %s)", name, expected, actual,
        )
        raise HashMismatch(
            name,
            f"{name} installer hash verification failed.",
            expected=expected,
            actual=actual,
        )

    return Bundle(
        provider=provider,
        directory=manifest_path.parent,
        manifest_path=manifest_path,
        installer_path=installer_path,
        manifest=manifest,
    )


# Pre-flight wording, keyed by failure class (most specific first)
_PREFLIGHT_MESSAGES: tuple[tuple[type[VirtualAudioError], str], ...] = (
    (ManifestMissing, "{provider} manifest missing."),
    (ManifestInvalid, "{provider} manifest invalid."),
    (ProviderMismatch, "{provider} manifest provider mismatch."),
    (InstallerMissing, "{provider} installer binary missing."),
    (InstallerUnreadable, "{provider} installer binary unreadable."),
    (HashMismatch, "{provider} installer bundle hash mismatch."),
)


def validate_bundled_virtual_audio_assets(
    provider: Provider | str | None = None,
    platform: str | None = None,
) -> dict[str, Any]:
    """Pre-flight check of bundle integrity, without installing anything.

    Args:
        provider: Provider to check. Defaults to the platform's preferred one.
        platform: Platform used to pick the default provider.

    Returns::

        {"ok": True, "message": "vb-cable installer bundle verified."}
        or
        {"ok": False, "message": "vb-cable installer bundle hash mismatch."}
    """
    if provider:
        try:
            resolved: Provider | None = Provider(provider)
        except ValueError:
            return {"ok": False, "message": f'Unknown virtual audio provider "{provider}".'}
    else:
        resolved = get_preferred_provider_for_platform(platform)
    if resolved is None:
        return {"ok": False, "message": NO_PROVIDER_MESSAGE}

    name = resolved.value
    try:
        load_bundle(resolved)
    except VirtualAudioError as e:
        for error_cls, template in _PREFLIGHT_MESSAGES:
            if isinstance(e, error_cls):
                return {"ok": False, "message": template.format(provider=name)}
        return {"ok": False, "message": e.message}

    return {"ok": True, "message": f"{name} installer bundle verified."}
