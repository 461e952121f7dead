"""
Installer configuration model — the schema of installer.yml.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class InstallerConfig(BaseModel):
    """Optional runtime configuration.

    Every field may be omitted; an absent file is equivalent to an
    empty one.
    """

    resources_root: Path | None = Field(
        default=None, description="Packaged-resources root holding drivers/"
    )
    app_root: Path | None = Field(
        default=None, description="Application installation root"
    )
    log_level: str | None = Field(default=None, description="Console log level")
    log_file: str | None = Field(default=None, description="Optional log file path")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str | None) -> str | None:
        if v is None:
            return v
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level
