"""
Configuration loader — reads installer.yml into an InstallerConfig.

The file is optional.  When present it is YAML, validated against the
Pydantic schema, and its roots are registered with the runtime context
so the bundle resolver can find drivers/ in non-standard layouts.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from src.core.context import set_app_root, set_resources_root
from src.core.models.config import InstallerConfig

logger = logging.getLogger(__name__)

# Default config filename
INSTALLER_CONFIG_FILE = "installer.yml"


class ConfigError(Exception):
    """Raised when installer configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for installer.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to installer.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / INSTALLER_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> InstallerConfig:
    """Load and validate installer configuration.

    Args:
        path: Explicit path to installer.yml. If None, searches upward;
            no file found yields the defaults.

    Returns:
        Validated InstallerConfig. Relative roots are resolved against
        the directory holding the file.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found, using defaults", INSTALLER_CONFIG_FILE)
        return InstallerConfig()

    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return InstallerConfig()

    logger.debug("Loading installer config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = InstallerConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid installer configuration: {e}") from e

    base = path.parent.resolve()
    updates = {}
    for key in ("resources_root", "app_root"):
        value = getattr(config, key)
        if value is not None and not value.is_absolute():
            updates[key] = base / value
    if updates:
        config = config.model_copy(update=updates)

    logger.info("Loaded installer config from %s", path)
    return config


def apply_config(config: InstallerConfig) -> None:
    """Register the configured roots with the runtime context."""
    if config.resources_root is not None:
        set_resources_root(config.resources_root)
    if config.app_root is not None:
        set_app_root(config.app_root)
