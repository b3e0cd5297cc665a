"""Execution engines that run regression algorithms."""

from regression_system.engine.base import (
    EngineError,
    ExecutionEngine,
    ExecutionResult,
)
from regression_system.engine.lean import LeanLauncherEngine

__all__ = [
    "EngineError",
    "ExecutionEngine",
    "ExecutionResult",
    "LeanLauncherEngine",
]
