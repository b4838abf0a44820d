"""
Configuration module for suiterun.

Provides strongly-typed runner configuration with pydantic, supporting both
file-based and environment variable configuration.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Literal

import structlog
import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from suiterun.core import ConfigurationError

logger = structlog.get_logger(__name__)

DEFAULT_MESSAGE_BUFFER_SIZE = 4096


class RunnerConfig(BaseSettings):
    """
    Main suiterun configuration.

    Can be configured via:
    1. Configuration file (suiterun.toml, suiterun.yaml or .json)
    2. Environment variables with SUITERUN_ prefix
    3. Programmatic overrides
    """

    model_config = SettingsConfigDict(
        env_prefix="SUITERUN_",
        case_sensitive=False,
    )

    color: Literal["auto", "always", "never"] = Field(
        default="auto",
        description="Colour output: auto (only on a terminal), always or never",
    )
    color_ok: bool = Field(
        default=False,
        description="Colour the [OK] marker as well as failures and skips",
    )
    message_buffer_size: int = Field(
        default=DEFAULT_MESSAGE_BUFFER_SIZE,
        ge=64,
        le=1024 * 1024,
        description="Capacity of the per-test diagnostic buffer in bytes",
    )
    crash_report: bool = Field(
        default=False,
        description="Report fatal signals before the process terminates",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lower-case level names."""
        return v.upper() if isinstance(v, str) else v

    @classmethod
    def from_file(cls, path: Path) -> "RunnerConfig":
        """Load configuration from a TOML, YAML or JSON file."""
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()
        content = path.read_text()

        try:
            if suffix == ".toml":
                data = tomllib.loads(content)
            elif suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content)
            elif suffix == ".json":
                data = json.loads(content)
            else:
                raise ConfigurationError(f"Unsupported config format: {suffix}")
        except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Invalid configuration in {path}: {e}")

        # A [suiterun] table is accepted so the file can be shared with other tools
        data = data or {}
        if isinstance(data, dict) and isinstance(data.get("suiterun"), dict):
            data = data["suiterun"]

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {path}: {e}")


def load_config(
    config_path: Path | None = None,
    project_root: Path | None = None,
) -> RunnerConfig:
    """
    Load configuration with automatic discovery.

    Priority:
    1. Explicit config_path if provided
    2. suiterun.toml / suiterun.yaml in project_root
    3. .suiterun/config.toml / .suiterun/config.yaml in project_root
    4. Default configuration (environment variables still apply)
    """
    if config_path is not None:
        config = RunnerConfig.from_file(config_path)
        logger.debug("Configuration loaded", path=str(config_path))
        return config

    root = project_root or Path.cwd()
    candidates = [
        root / "suiterun.toml",
        root / "suiterun.yaml",
        root / ".suiterun" / "config.toml",
        root / ".suiterun" / "config.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            config = RunnerConfig.from_file(candidate)
            logger.debug("Configuration loaded", path=str(candidate))
            return config

    return RunnerConfig()
