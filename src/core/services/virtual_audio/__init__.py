"""
Virtual audio driver installer — verified, elevated, single-flight.

Public API:
    from src.core.services.virtual_audio import install_virtual_audio_driver
    from src.core.services.virtual_audio import get_virtual_audio_installer_state
    from src.core.services.virtual_audio import validate_bundled_virtual_audio_assets
    from src.core.services.virtual_audio import get_preferred_provider_for_platform
"""

from src.core.services.virtual_audio.coordinator import (
    InstallCoordinator,
    get_coordinator,
    get_preferred_provider_for_platform,
    get_virtual_audio_installer_state,
    install_virtual_audio_driver,
    reset_coordinator,
    validate_bundled_virtual_audio_assets,
)

__all__ = [
    "InstallCoordinator",
    "get_coordinator",
    "get_preferred_provider_for_platform",
    "get_virtual_audio_installer_state",
    "install_virtual_audio_driver",
    "reset_coordinator",
    "validate_bundled_virtual_audio_assets",
]
