"""
Virtual audio installer — error taxonomy.

These exceptions are raised inside the install flow and are ALWAYS
caught by the coordinator, which turns them into a ``failed``
``InstallResult``.  Nothing here escapes the public API.

Non-error terminal states (user-cancelled, already-installed,
reboot-required) are result states, not exceptions.
"""

from __future__ import annotations


class VirtualAudioError(Exception):
    """Base class for installer failures."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider
        self.message = message


class UnsupportedPlatform(VirtualAudioError):
    """The platform/provider combination has no installer."""


class BundleMissing(VirtualAudioError):
    """Manifest or installer payload is absent from every bundle root."""


class ManifestMissing(BundleMissing):
    """No ``manifest.json`` found for the provider."""


class InstallerMissing(BundleMissing):
    """The manifest points at an installer file that does not exist."""

    def __init__(self, provider: str, message: str, installer_path: str = "") -> None:
        super().__init__(provider, message)
        self.installer_path = installer_path


class IntegrityMismatch(VirtualAudioError):
    """The bundle does not match what the manifest claims."""


class ManifestInvalid(IntegrityMismatch):
    """The manifest cannot be parsed or fails schema validation."""


class ProviderMismatch(IntegrityMismatch):
    """The manifest describes a different provider."""


class HashMismatch(IntegrityMismatch):
    """The installer's SHA-256 differs from the manifest digest."""

    def __init__(self, provider: str, message: str, expected: str = "", actual: str = "") -> None:
        super().__init__(provider, message)
        self.expected = expected
        self.actual = actual


class InstallerUnreadable(IntegrityMismatch):
    """The installer exists but its bytes could not be read for hashing."""

    def __init__(self, provider: str, message: str, installer_path: str = "") -> None:
        super().__init__(provider, message)
        self.installer_path = installer_path


class VerificationFailure(VirtualAudioError):
    """Strict-mode signer, team-id or notarization check rejected the payload."""


class ExecutionFailure(VirtualAudioError):
    """The installer could not be run or its outcome could not be read."""
