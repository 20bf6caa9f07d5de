# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

All variables use the ``AFFECTEDFILES_`` prefix, e.g.
``AFFECTEDFILES_WORKSPACE_ROOT=/var/agent/ws``.
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from the environment and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="AFFECTEDFILES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Copy step ===
    copy_enabled: bool = True
    workspace_root: Path | None = None
    source_directories: str = ""
    permitted_source_directories: str = ""
    result_root: Path = Path("./results")
    storage_key_algorithm: Literal["blake2b", "java"] = "blake2b"
    diagnostics_max_lines: int = 20

    # === Agent channel ===
    agent_command: str = ""
    channel_timeout_s: float = 300.0

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("diagnostics_max_lines", "log_retention")
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.workspace_root is not None and not self.workspace_root.is_absolute():
            errors.append("WORKSPACE_ROOT must be an absolute path")

        if self.channel_timeout_s <= 0:
            errors.append("CHANNEL_TIMEOUT_S must be > 0")

        if self.agent_command and not self.agent_command_list:
            errors.append("AGENT_COMMAND must contain a program")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def source_directories_list(self) -> list[str]:
        """Parse comma-separated requested source directories."""
        return [d.strip() for d in self.source_directories.split(",") if d.strip()]

    @property
    def permitted_source_directories_list(self) -> list[str]:
        """Parse comma-separated directories an administrator allows."""
        return [d.strip() for d in self.permitted_source_directories.split(",") if d.strip()]

    @property
    def agent_command_list(self) -> list[str]:
        """Split the agent command like a POSIX shell would."""
        return shlex.split(self.agent_command)


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
