"""Pydantic schemas and enums for the regression kit."""

from regression_system.schemas.common import (
    DEFAULT_LANGUAGES,
    UNCHECKED,
    AlgorithmStatus,
    Language,
)
from regression_system.schemas.descriptor import (
    AlgorithmDescriptor,
    AlphaRuntimeStatistics,
)

__all__ = [
    "AlgorithmDescriptor",
    "AlgorithmStatus",
    "AlphaRuntimeStatistics",
    "DEFAULT_LANGUAGES",
    "Language",
    "UNCHECKED",
]
