"""Harness Logging System.

Features:
- Daily rotating log files with TimedRotatingFileHandler
- Log level and format taken from Config.logging
- Console output alongside the log file

Log files are stored in the logs/ directory under the base path with the format:
    regression-kit-YYYY-MM-DD.log

Example usage:
    from regression_system.core.logging import setup_logging, get_logger

    logger = setup_logging(Path.cwd(), config)
    logger.info("Starting regression run")

    runner_logger = get_logger("regression_system.harness.runner")
"""

from __future__ import annotations

import logging
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

from regression_system.core.config import Config, get_default_config


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_LOGGER_NAME = "regression_system"

LOG_FILE_PREFIX = "regression-kit"

LOG_FILE_EXTENSION = ".log"

# Days of rotated logs to keep
DEFAULT_BACKUP_COUNT = 30


# =============================================================================
# MODULE-LEVEL FUNCTIONS
# =============================================================================


def setup_logging(
    base_path: Path,
    config: Optional[Config] = None,
    name: str = DEFAULT_LOGGER_NAME,
) -> logging.Logger:
    """Set up logging under base_path/logs.

    Args:
        base_path: Directory that holds the logs/ folder.
        config: Optional Config, defaults are used if not provided.
        name: Logger name (default: regression_system).

    Returns:
        Configured logger instance.
    """
    log_manager = LogManager(base_path, config)
    return log_manager.setup(name)


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """Get a logger instance (may not be configured yet)."""
    return logging.getLogger(name)


# =============================================================================
# LOG MANAGER CLASS
# =============================================================================


class LogManager:
    """Manages log handlers for a regression run.

    Attributes:
        base_path: Directory that holds the logs/ folder.
        config: Harness configuration.
        logs_path: Path to the logs directory.
    """

    def __init__(self, base_path: Path, config: Optional[Config] = None):
        self.base_path = Path(base_path)
        self.logs_path = self.base_path / "logs"
        self.config = config if config is not None else get_default_config()
        self._logger: Optional[logging.Logger] = None

    def setup(self, name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
        """Set up logging with file and console handlers.

        Creates the logs directory if it doesn't exist. Handlers are only
        added once per logger.
        """
        self.logs_path.mkdir(parents=True, exist_ok=True)

        logger = logging.getLogger(name)

        log_level = getattr(logging, self.config.logging.level, logging.INFO)
        logger.setLevel(log_level)

        if not logger.handlers:
            formatter = logging.Formatter(self.config.logging.format)

            file_handler = TimedRotatingFileHandler(
                filename=self.get_log_file_path(),
                when="midnight",
                interval=1,
                backupCount=DEFAULT_BACKUP_COUNT,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            file_handler.suffix = "%Y-%m-%d"
            logger.addHandler(file_handler)

            console_handler = logging.StreamHandler()
            console_handler.setLevel(log_level)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        self._logger = logger
        return logger

    def get_log_file_path(self) -> Path:
        """Get today's log file path: logs/regression-kit-YYYY-MM-DD.log"""
        today = datetime.now().strftime("%Y-%m-%d")
        filename = f"{LOG_FILE_PREFIX}-{today}{LOG_FILE_EXTENSION}"
        return self.logs_path / filename

    def list_log_files(self) -> list[Path]:
        """List all log files, oldest first."""
        if not self.logs_path.exists():
            return []

        log_files = list(self.logs_path.glob(f"{LOG_FILE_PREFIX}-*{LOG_FILE_EXTENSION}"))
        # Rotated files carry an extra date suffix
        log_files.extend(self.logs_path.glob(f"{LOG_FILE_PREFIX}-*{LOG_FILE_EXTENSION}.*"))

        return sorted(log_files)
