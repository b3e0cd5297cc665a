"""Harness Configuration System.

This module provides the configuration for the regression kit, including:
- Pydantic models for all configuration sections
- YAML file loading with default fallbacks
- Partial config merging
- Validation with clear error messages

Configuration is loaded from regression-kit.yaml files. If no file exists,
sensible defaults are used. Partial configurations are merged with defaults.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# EXCEPTIONS
# =============================================================================


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


# =============================================================================
# ENUMS
# =============================================================================


class LogLevel(str, Enum):
    """Logging level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# =============================================================================
# CONFIGURATION MODELS
# =============================================================================


CONFIG_FILE_NAME = "regression-kit.yaml"


class EngineConfig(BaseModel):
    """LEAN launcher execution settings.

    The launcher is invoked once per test case with a generated config.json.
    """

    launcher: list[str] = Field(
        default_factory=lambda: ["dotnet", "QuantConnect.Lean.Launcher.dll"],
        description="Command used to start the LEAN launcher",
    )
    working_directory: str | None = Field(
        None, description="Directory the launcher runs in (default: current directory)"
    )
    timeout: int = Field(
        1800, ge=1, description="Wall-clock ceiling for a single run in seconds"
    )
    results_directory: str = Field(
        "regression-results", description="Where per-run config and result files are written"
    )

    @field_validator("launcher")
    @classmethod
    def validate_launcher(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("engine.launcher must contain at least one element")
        return v


class SettingsConfig(BaseModel):
    """Defaults for the per-case settings store."""

    defaults_file: str | None = Field(
        None, description="LEAN config.json to seed default settings from"
    )
    values: dict[str, Any] = Field(
        default_factory=dict, description="Default settings applied on every reset"
    )


class RegistryConfig(BaseModel):
    """Where regression algorithm descriptors come from."""

    catalog_paths: list[str] = Field(
        default_factory=list, description="Directories of YAML baseline files"
    )
    modules: list[str] = Field(
        default_factory=list, description="Packages whose modules register descriptors"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(use_enum_values=True)

    level: LogLevel = Field(LogLevel.INFO, description="Logging level")
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )


class ReportConfig(BaseModel):
    """Run report output."""

    output_directory: str = Field("reports", description="Directory for run reports")


class Config(BaseModel):
    """Complete configuration.

    Configuration is loaded from regression-kit.yaml with defaults for missing values.
    """

    version: str = Field("1.0", description="Configuration version")
    engine: EngineConfig = Field(
        default_factory=EngineConfig, description="LEAN launcher settings"
    )
    settings: SettingsConfig = Field(
        default_factory=SettingsConfig, description="Settings store defaults"
    )
    registry: RegistryConfig = Field(
        default_factory=RegistryConfig, description="Descriptor sources"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    report: ReportConfig = Field(
        default_factory=ReportConfig, description="Report output"
    )

    class Config:
        """Pydantic configuration."""

        use_enum_values = True


# =============================================================================
# DEFAULT CONFIGURATION
# =============================================================================


def get_default_config() -> Config:
    """Return the default configuration."""
    return Config()


# =============================================================================
# CONFIG LOADING
# =============================================================================


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Values from override take precedence. Nested dicts are merged recursively.
    Lists are replaced entirely (not merged).
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: Path | str | None = None) -> Config:
    """Load configuration from a YAML file.

    If no path is provided, looks for regression-kit.yaml in the current directory.
    If the file doesn't exist, returns default configuration.
    Partial configurations are merged with defaults.

    Args:
        path: Path to configuration file.

    Returns:
        Loaded and validated Config.

    Raises:
        ConfigurationError: If YAML is invalid or configuration values are invalid.
    """
    if path is None:
        config_path = Path.cwd() / CONFIG_FILE_NAME
    else:
        config_path = Path(path)

    if not config_path.exists():
        return get_default_config()

    try:
        with open(config_path) as f:
            user_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Error reading {config_path}: {e}") from e

    if user_config is None:
        return get_default_config()

    if not isinstance(user_config, dict):
        raise ConfigurationError(
            f"Invalid configuration in {config_path}: expected a mapping at the top level"
        )

    default_dict = get_default_config().model_dump()
    merged = _deep_merge(default_dict, user_config)

    try:
        return Config(**merged)
    except Exception as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


# =============================================================================
# CONFIG VALIDATION
# =============================================================================


def validate_config(config: Config) -> list[str]:
    """Check a configuration for settings that are valid but probably wrong.

    Returns:
        List of warning messages. Empty list if nothing looks off.
    """
    errors: list[str] = []

    if config.engine.timeout < 60:
        errors.append(
            f"engine.timeout={config.engine.timeout} is very short. "
            "Most regression algorithms need several minutes to complete."
        )

    if config.settings.defaults_file and not Path(config.settings.defaults_file).exists():
        errors.append(
            f"settings.defaults_file={config.settings.defaults_file} does not exist."
        )

    for catalog_path in config.registry.catalog_paths:
        if not Path(catalog_path).is_dir():
            errors.append(f"registry.catalog_paths entry {catalog_path} is not a directory.")

    if not config.registry.catalog_paths and not config.registry.modules:
        errors.append(
            "registry has no catalog_paths or modules. "
            "No regression algorithms will be discovered."
        )

    return errors
