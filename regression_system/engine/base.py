"""Execution engine contract.

The harness never runs algorithms itself. An engine receives the case's
identity and expectations plus a snapshot of the settings prepared for the
case, runs the algorithm to completion and reports what happened.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol

from regression_system.schemas import AlgorithmStatus, AlphaRuntimeStatistics, Language


class EngineError(Exception):
    """Raised when the engine can't start a run or produces no result."""

    pass


@dataclass
class ExecutionResult:
    """What the engine observed during one run."""

    final_status: AlgorithmStatus
    data_points: int = 0
    algorithm_history_data_points: int = 0
    remaining_bucket_tokens: Optional[int] = None
    statistics: dict[str, str] = field(default_factory=dict)
    alpha_statistics: dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    duration_seconds: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "final_status": self.final_status.value,
            "data_points": self.data_points,
            "algorithm_history_data_points": self.algorithm_history_data_points,
            "remaining_bucket_tokens": self.remaining_bucket_tokens,
            "statistics": self.statistics,
            "alpha_statistics": self.alpha_statistics,
            "error": self.error,
            "duration_seconds": self.duration_seconds,
        }


class ExecutionEngine(Protocol):
    """Anything that can run a regression algorithm."""

    def run(
        self,
        algorithm: str,
        language: Language,
        statistics: Mapping[str, str],
        alpha_statistics: Optional[AlphaRuntimeStatistics],
        expected_status: AlgorithmStatus,
        settings: Mapping[str, str],
    ) -> ExecutionResult:
        ...
