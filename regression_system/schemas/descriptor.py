"""Regression algorithm descriptor schemas."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from regression_system.schemas.common import UNCHECKED, Language


class AlphaRuntimeStatistics(BaseModel):
    """Expected alpha statistics for a run.

    The harness treats this record as opaque: it is handed to the engine
    untouched, so unknown keys are kept as-is.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    total_insights_generated: Optional[int] = None
    total_insights_closed: Optional[int] = None
    total_insights_analysis_completed: Optional[int] = None
    total_accumulated_estimated_alpha_value: Optional[str] = None


class AlgorithmDescriptor(BaseModel):
    """Static declaration of a regression algorithm and its baseline."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique algorithm identity")
    can_run_locally: bool = Field(
        True, description="False when the data this algorithm needs is not available locally"
    )
    languages: frozenset[Language] = Field(
        default_factory=frozenset, description="Languages the algorithm is implemented in"
    )
    expected_statistics: dict[str, str] = Field(default_factory=dict)
    expected_alpha_statistics: Optional[AlphaRuntimeStatistics] = None
    data_points: int = Field(
        0, ge=UNCHECKED, description="Expected data points, -1 to skip the check"
    )
    algorithm_history_data_points: int = Field(
        0, ge=UNCHECKED, description="Expected history data points, -1 to skip the check"
    )

    @field_validator("languages", mode="before")
    @classmethod
    def parse_languages(cls, v: Any) -> frozenset[Language]:
        if isinstance(v, str):
            v = [v]
        return frozenset(Language.parse(item) for item in v)

    @field_validator("expected_statistics", mode="before")
    @classmethod
    def stringify_statistics(cls, v: Any) -> dict[str, str]:
        # LEAN reports every statistic as a formatted string
        if v is None:
            return {}
        return {str(key): str(value) for key, value in dict(v).items()}
