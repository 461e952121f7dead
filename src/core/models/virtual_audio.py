"""
Virtual audio models — providers, manifests, results, runtime state.

The manifest is read from ``drivers/<provider>/manifest.json`` and keeps
its camelCase keys on disk; the Python attributes are snake_case.
Results and state render back to camelCase via ``to_dict()`` because
that is the shape the UI layer consumes.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_INSTALL_TIMEOUT_MS = 180_000


class Provider(StrEnum):
    """Virtual audio driver family — exactly one per platform."""

    VB_CABLE = "vb-cable"
    BLACKHOLE = "blackhole"


class InstallState(StrEnum):
    """Terminal state of one install attempt."""

    UNSUPPORTED = "unsupported"
    INSTALLED = "installed"
    ALREADY_INSTALLED = "already-installed"
    REBOOT_REQUIRED = "reboot-required"
    USER_CANCELLED = "user-cancelled"
    FAILED = "failed"


class VerificationMode(StrEnum):
    """How much of the installer's provenance is checked before running it."""

    HASH_ONLY = "hash-only"
    STRICT = "strict"


class Manifest(BaseModel):
    """Bundle manifest shipped next to the installer payload.

    ``provider`` stays a plain string so a manifest written for another
    provider still parses and can be reported as a mismatch.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    provider: str
    version: str = ""
    installer_file: str = Field(alias="installerFile")
    sha256: str
    verification_mode: VerificationMode | None = Field(default=None, alias="verificationMode")
    timeout_ms: int | None = Field(default=None, alias="timeoutMs")
    package_id: str | None = Field(default=None, alias="packageId")
    expected_publisher: str | None = Field(default=None, alias="expectedPublisher")
    expected_signer_contains: str | None = Field(default=None, alias="expectedSignerContains")
    expected_team_id: str | None = Field(default=None, alias="expectedTeamId")
    require_notarization: bool = Field(default=False, alias="requireNotarization")
    silent_args: list[str] = Field(default_factory=list, alias="silentArgs")

    @property
    def effective_timeout_ms(self) -> int:
        """Execution timeout, falling back to the default when absent."""
        if self.timeout_ms is None:
            return DEFAULT_INSTALL_TIMEOUT_MS
        return self.timeout_ms

    @property
    def timeout_seconds(self) -> float:
        return self.effective_timeout_ms / 1000

    def effective_verification_mode(self) -> VerificationMode:
        """Resolve the verification mode, honouring the legacy fallback.

        Older VB-CABLE manifests carry ``expectedPublisher`` without a
        ``verificationMode``; those are verified strictly.
        """
        if self.verification_mode is not None:
            return self.verification_mode
        if self.provider == Provider.VB_CABLE and self.expected_publisher:
            return VerificationMode.STRICT
        return VerificationMode.HASH_ONLY


class Bundle(BaseModel):
    """A resolved on-disk bundle for one provider."""

    provider: Provider
    directory: Path
    manifest_path: Path
    installer_path: Path
    manifest: Manifest


class InstallResult(BaseModel):
    """Immutable outcome of one install attempt.

    ``correlation_id`` is supplied by the caller and echoed verbatim;
    it never influences behaviour.  ``provider`` accepts any name so a
    request for an unknown provider can still be answered ``unsupported``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    provider: Provider | str
    state: InstallState
    code: int | None = None
    message: str | None = None
    correlation_id: str | None = Field(default=None, alias="correlationId")
    requires_restart: bool | None = Field(default=None, alias="requiresRestart")

    @property
    def ok(self) -> bool:
        """Whether the driver is usable (possibly after a restart)."""
        return self.state in (
            InstallState.INSTALLED,
            InstallState.ALREADY_INSTALLED,
            InstallState.REBOOT_REQUIRED,
        )

    def with_correlation_id(self, correlation_id: str | None) -> InstallResult:
        """Return a copy stamped with another caller's correlation id."""
        return self.model_copy(update={"correlation_id": correlation_id})

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class InstallerRuntimeState(BaseModel):
    """Read-only snapshot of the installer's progress."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    in_progress: bool = Field(default=False, alias="inProgress")
    active_provider: Provider | None = Field(default=None, alias="activeProvider")
    platform_supported: bool = Field(default=False, alias="platformSupported")
    bundle_ready: bool = Field(default=False, alias="bundleReady")
    bundle_message: str = Field(default="", alias="bundleMessage")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
