"""
Bundle resolver — locate a provider's installer bundle on disk.

Pure path computation plus existence checks.  Candidates are tried
in priority order:

    1. packaged-resources root (only if the runtime reports one)
    2. application installation root
    3. process working directory

each joined with ``drivers/<provider>/``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from src.core.context import get_app_root, get_resources_root
from src.core.models.virtual_audio import Provider

logger = logging.getLogger(__name__)

MANIFEST_FILE = "manifest.json"
DRIVERS_DIR = "drivers"


def bundle_segments(provider: Provider) -> tuple[str, str]:
    """Relative location of a provider's bundle under any root."""
    return (DRIVERS_DIR, Provider(provider).value)


def candidate_bundle_dirs(provider: Provider) -> list[Path]:
    """All directories that may hold the provider's bundle, best first."""
    segments = bundle_segments(provider)
    roots: list[Path] = []

    resources_root = get_resources_root()
    if resources_root is not None:
        roots.append(resources_root)
    roots.append(get_app_root())
    roots.append(Path.cwd())

    candidates: list[Path] = []
    for root in roots:
        candidate = root.joinpath(*segments)
        if candidate not in candidates:
            candidates.append(candidate)
    return candidates


def resolve_manifest_path(provider: Provider) -> Path | None:
    """Return the first candidate ``manifest.json`` that exists, or None."""
    for directory in candidate_bundle_dirs(provider):
        manifest_path = directory / MANIFEST_FILE
        if manifest_path.is_file():
            logger.debug("Resolved %s bundle at %s", provider, directory)
            return manifest_path

    logger.debug("No %s bundle found in any candidate root", provider)
    return None
