"""
Platform → provider mapping.

Exactly one provider is valid per platform; no platform supports both.
Platforms use ``sys.platform`` names (``win32``, ``darwin``).
"""

from __future__ import annotations

import sys

from src.core.models.virtual_audio import Provider

PLATFORM_PROVIDERS: dict[str, Provider] = {
    "win32": Provider.VB_CABLE,
    "darwin": Provider.BLACKHOLE,
}


def current_platform() -> str:
    """The running platform, as ``sys.platform`` reports it."""
    return sys.platform


def get_preferred_provider_for_platform(platform: str | None = None) -> Provider | None:
    """Return the provider for ``platform`` (default: current), or None."""
    if platform is None:
        platform = current_platform()
    return PLATFORM_PROVIDERS.get(platform)
