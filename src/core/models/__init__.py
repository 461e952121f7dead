"""
Domain models — Pydantic types for the virtual audio installer.

All models are re-exported here for convenient access:

    from src.core.models import Provider, Manifest, InstallResult
"""

from src.core.models.config import InstallerConfig
from src.core.models.virtual_audio import (
    DEFAULT_INSTALL_TIMEOUT_MS,
    Bundle,
    InstallerRuntimeState,
    InstallResult,
    InstallState,
    Manifest,
    Provider,
    VerificationMode,
)

__all__ = [
    "DEFAULT_INSTALL_TIMEOUT_MS",
    "Bundle",
    "InstallResult",
    "InstallState",
    "InstallerConfig",
    "InstallerRuntimeState",
    "Manifest",
    "Provider",
    "VerificationMode",
]
