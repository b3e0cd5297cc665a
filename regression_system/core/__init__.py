"""Core Module.

This package provides the shared components of the regression kit:

- Configuration loading and validation (regression-kit.yaml)
- The settings store handed to the engine for every case
- Logging configuration with daily rotation

Example usage:
    from regression_system.core import load_config, SettingsStore, setup_logging

    config = load_config()
    store = SettingsStore(config.settings.values)
    logger = setup_logging(Path.cwd(), config)
"""

from regression_system.core.config import (
    # Configuration models
    Config,
    EngineConfig,
    SettingsConfig,
    RegistryConfig,
    LoggingConfig,
    ReportConfig,
    LogLevel,
    # Loading functions
    load_config,
    get_default_config,
    validate_config,
    # Exceptions
    ConfigurationError,
)

from regression_system.core.settings import SettingsStore

from regression_system.core.logging import (
    setup_logging,
    get_logger,
    LogManager,
)

__all__ = [
    "Config",
    "EngineConfig",
    "SettingsConfig",
    "RegistryConfig",
    "LoggingConfig",
    "ReportConfig",
    "LogLevel",
    "load_config",
    "get_default_config",
    "validate_config",
    "ConfigurationError",
    "SettingsStore",
    "setup_logging",
    "get_logger",
    "LogManager",
]
