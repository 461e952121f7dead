"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import pytest

from src.core import context
from src.core.services.virtual_audio import reset_coordinator
from tests.bundles import DEFAULT_PAYLOAD, write_bundle


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def _isolated_runtime(monkeypatch: pytest.MonkeyPatch):
    """Fresh context roots, coordinator and root logger for every test."""
    for var in (context.RESOURCES_ENV_VAR, "VAI_LOG_LEVEL", "VAI_LOG_FILE", "VAI_LOG_FILE_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    context.set_resources_root(None)
    context.set_app_root(None)
    reset_coordinator()

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)

    context.set_resources_root(None)
    context.set_app_root(None)
    reset_coordinator()


@pytest.fixture
def resources_root(tmp_path: Path) -> Path:
    """A temporary packaged-resources root registered with the context."""
    root = tmp_path / "resources"
    root.mkdir()
    context.set_resources_root(root)
    return root


@pytest.fixture
def make_bundle(resources_root: Path) -> Callable[..., Path]:
    """Factory writing a provider bundle under the registered resources root."""

    def _make(name: str, payload: bytes = DEFAULT_PAYLOAD, **manifest: Any) -> Path:
        return write_bundle(resources_root, name, payload, **manifest)

    return _make
