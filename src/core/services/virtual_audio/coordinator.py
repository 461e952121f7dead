"""
Single-flight install coordinator — the public entry point.

Owns the ONLY mutable shared state of the installer: the in-flight
attempt and the provider it is installing.  Concurrent callers join
the attempt already running instead of raising a second elevation
prompt; each gets the shared result stamped with its own
correlation id.

Ordering guarantee: the runtime state goes back to idle BEFORE the
shared result is released, so a caller that has its result in hand
never observes ``in_progress=True`` from the attempt that produced it.

Nothing raises past this module — every failure becomes a ``failed``
``InstallResult``.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Any

from src.core.models.virtual_audio import (
    InstallerRuntimeState,
    InstallResult,
    InstallState,
    Provider,
    VerificationMode,
)
from src.core.services.virtual_audio.errors import (
    ExecutionFailure,
    UnsupportedPlatform,
    VerificationFailure,
    VirtualAudioError,
)
from src.core.services.virtual_audio.manifest import (
    load_bundle,
    validate_bundled_virtual_audio_assets as _validate,
)
from src.core.services.virtual_audio.outcome import to_install_result
from src.core.services.virtual_audio.providers import (
    current_platform,
    get_preferred_provider_for_platform as _preferred,
)
from src.core.services.virtual_audio.strategies import PlatformStrategy, select_strategy

logger = logging.getLogger(__name__)


def require_strategy(provider: str, platform: str) -> PlatformStrategy:
    """Strategy for ``provider`` on ``platform``.

    Raises:
        UnsupportedPlatform: The combination has no installer.
    """
    strategy = select_strategy(provider, platform)
    if strategy is None:
        raise UnsupportedPlatform(
            str(provider), f'Provider "{provider}" is unsupported on this platform.',
        )
    return strategy


class InstallCoordinator:
    """Serialises install attempts and exposes their progress.

    Args:
        platform: Platform to install for.  Defaults to the running one,
            resolved on every call.
    """

    def __init__(self, platform: str | None = None) -> None:
        self._platform = platform
        self._lock = threading.Lock()
        self._flight: Future[InstallResult] | None = None
        self._active_provider: Provider | None = None

    @property
    def platform(self) -> str:
        return self._platform if self._platform is not None else current_platform()

    # ── Public API ──────────────────────────────────────────────

    def install(self, provider: str, correlation_id: str | None = None) -> InstallResult:
        """Install ``provider``'s driver, or join the attempt already running.

        Blocks until the attempt settles.  Never raises.
        """
        try:
            strategy = require_strategy(provider, self.platform)
        except UnsupportedPlatform as e:
            logger.info("Install refused: %s", e.message)
            return InstallResult(
                provider=provider,
                state=InstallState.UNSUPPORTED,
                message=e.message,
                correlation_id=correlation_id,
            )

        with self._lock:
            flight = self._flight
            owner = flight is None
            if owner:
                flight = Future()
                self._flight = flight
                self._active_provider = strategy.provider

        if not owner:
            logger.info(
                "Install of %s already in progress — joining (cid=%s)",
                self._active_provider, correlation_id,
            )
            return flight.result().with_correlation_id(correlation_id)

        logger.info("Install of %s started (cid=%s)", strategy.provider, correlation_id)
        try:
            try:
                result = self._execute(strategy)
            finally:
                with self._lock:
                    self._flight = None
                    self._active_provider = None
        except BaseException as exc:
            flight.set_exception(exc)
            raise

        flight.set_result(result)
        logger.info(
            "Install of %s finished: %s (cid=%s)",
            strategy.provider, result.state, correlation_id,
        )
        return result.with_correlation_id(correlation_id)

    def state(self) -> InstallerRuntimeState:
        """Snapshot of progress plus fresh bundle readiness."""
        platform = self.platform
        preferred = _preferred(platform)
        validation = _validate(preferred, platform)

        with self._lock:
            in_progress = self._flight is not None
            active_provider = self._active_provider

        return InstallerRuntimeState(
            in_progress=in_progress,
            active_provider=active_provider,
            platform_supported=preferred is not None,
            bundle_ready=validation["ok"],
            bundle_message=validation["message"],
        )

    # ── Flow ────────────────────────────────────────────────────

    def _execute(self, strategy: PlatformStrategy) -> InstallResult:
        provider = strategy.provider
        try:
            bundle = load_bundle(provider)

            if bundle.manifest.effective_verification_mode() == VerificationMode.STRICT:
                verification = strategy.verify_signer(bundle)
                if not verification["ok"]:
                    raise VerificationFailure(
                        provider.value,
                        verification.get("message") or "Installer strict verification failed.",
                    )

            if strategy.probe_existing(bundle):
                return InstallResult(provider=provider, state=InstallState.ALREADY_INSTALLED)

            raw = strategy.invoke_installer(bundle)
            if raw.code is None:
                raise ExecutionFailure(
                    provider.value,
                    raw.error or f"{provider.value} installer failed to start.",
                )
            return to_install_result(provider, raw)

        except VirtualAudioError as e:
            logger.warning("%s install failed: %s", provider, e.message)
            return InstallResult(provider=provider, state=InstallState.FAILED, message=e.message)
        except Exception as e:
            logger.exception("Unexpected error while installing %s", provider)
            return InstallResult(
                provider=provider,
                state=InstallState.FAILED,
                message=f"{provider.value} installer failed: {e}",
            )


# ── Process-wide coordinator ────────────────────────────────────

_coordinator = InstallCoordinator()


def get_coordinator() -> InstallCoordinator:
    return _coordinator


def reset_coordinator(platform: str | None = None) -> InstallCoordinator:
    """Replace the process-wide coordinator (tests, platform overrides)."""
    global _coordinator
    _coordinator = InstallCoordinator(platform)
    return _coordinator


def get_preferred_provider_for_platform(platform: str | None = None) -> Provider | None:
    """Provider installable on ``platform`` (default: the coordinator's), or None."""
    return _preferred(platform if platform is not None else _coordinator.platform)


def validate_bundled_virtual_audio_assets(provider: str | None = None) -> dict[str, Any]:
    """Pre-flight bundle integrity check for the UI; installs nothing."""
    return _validate(provider, _coordinator.platform)


def get_virtual_audio_installer_state() -> InstallerRuntimeState:
    return _coordinator.state()


def install_virtual_audio_driver(
    provider: str,
    correlation_id: str | None = None,
) -> InstallResult:
    """Install the virtual audio driver for ``provider``.  Never raises."""
    return _coordinator.install(provider, correlation_id)
