"""Case Builder - expand descriptors into (language, algorithm) test cases.

Cases are sorted by language then algorithm, so the list and the case names
("Python/BasicTemplateAlgorithm") stay stable no matter what order the
registry enumerates descriptors in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from regression_system.core.config import ConfigurationError
from regression_system.core.settings import SettingsStore
from regression_system.registry import DescriptorRegistry, RegistrySetupError
from regression_system.schemas import (
    DEFAULT_LANGUAGES,
    AlgorithmDescriptor,
    AlgorithmStatus,
    AlphaRuntimeStatistics,
    Language,
)

logger = logging.getLogger(__name__)

LANGUAGES_SETTING = "regression-test-languages"


# =============================================================================
# STATUS OVERRIDES
# =============================================================================


class StatusOverrideTable:
    """Expected final status per algorithm, Completed unless listed."""

    def __init__(
        self,
        entries: Mapping[str, AlgorithmStatus] | None = None,
        default: AlgorithmStatus = AlgorithmStatus.COMPLETED,
    ):
        self._entries = {
            name: AlgorithmStatus.parse(status) for name, status in (entries or {}).items()
        }
        self.default = default

    def expected_status(self, algorithm: str) -> AlgorithmStatus:
        return self._entries.get(algorithm, self.default)

    def with_entries(self, entries: Mapping[str, AlgorithmStatus]) -> "StatusOverrideTable":
        """Return a new table with extra entries, later entries winning."""
        return StatusOverrideTable({**self._entries, **entries}, self.default)

    def items(self):
        return self._entries.items()


# Algorithms that are expected to end in a non-default status
NON_DEFAULT_STATUSES = StatusOverrideTable({
    "TrainingInitializeRegressionAlgorithm": AlgorithmStatus.RUNTIME_ERROR,
    "OnOrderEventExceptionRegression": AlgorithmStatus.RUNTIME_ERROR,
    "WarmUpAfterInitializeRegression": AlgorithmStatus.RUNTIME_ERROR,
    "BasicTemplateIndexDailyAlgorithm": AlgorithmStatus.RUNNING,
    "BasicTemplateIndexOptionsDailyAlgorithm": AlgorithmStatus.RUNNING,
})


# =============================================================================
# TEST CASE
# =============================================================================


@dataclass(frozen=True)
class TestCase:
    """One algorithm run in one language, with everything it's checked against."""

    # Keep pytest from collecting this class
    __test__ = False

    algorithm: str
    language: Language
    expected_final_status: AlgorithmStatus
    statistics: Mapping[str, str] = field(default_factory=dict, hash=False)
    alpha_statistics: Optional[AlphaRuntimeStatistics] = field(default=None, hash=False)
    data_points: int = 0
    algorithm_history_data_points: int = 0

    def __post_init__(self):
        object.__setattr__(self, "statistics", MappingProxyType(dict(self.statistics)))

    @property
    def name(self) -> str:
        return f"{self.language.value}/{self.algorithm}"

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.language.value, self.algorithm)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "algorithm": self.algorithm,
            "language": self.language.value,
            "expected_final_status": self.expected_final_status.value,
            "data_points": self.data_points,
            "algorithm_history_data_points": self.algorithm_history_data_points,
            "statistics": dict(self.statistics),
            "alpha_statistics": (
                self.alpha_statistics.model_dump(exclude_none=True)
                if self.alpha_statistics
                else None
            ),
        }


# =============================================================================
# BUILDING
# =============================================================================


def resolve_languages(store: SettingsStore) -> frozenset[Language]:
    """Read the language allow-list from the settings store.

    Raises:
        ConfigurationError: If the setting names an unknown language.
    """
    raw = store.get_value(LANGUAGES_SETTING, [language.value for language in DEFAULT_LANGUAGES])
    if isinstance(raw, str):
        raw = [item for item in raw.split(",") if item.strip()]
    if not isinstance(raw, list):
        raise ConfigurationError(f"{LANGUAGES_SETTING} must be a list of language names")

    try:
        return frozenset(Language.parse(item) for item in raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid {LANGUAGES_SETTING}: {e}") from e


def build_cases(
    descriptors: Iterable[AlgorithmDescriptor],
    languages: Iterable[Language],
    status_table: StatusOverrideTable = NON_DEFAULT_STATUSES,
) -> list[TestCase]:
    """Build one case per runnable descriptor and allowed language.

    Descriptors that can't run locally produce no cases.

    Raises:
        RegistrySetupError: If two cases end up with the same name.
    """
    allowed = frozenset(languages)
    cases = []
    for descriptor in descriptors:
        if not descriptor.can_run_locally:
            continue
        status = status_table.expected_status(descriptor.name)
        for language in descriptor.languages & allowed:
            cases.append(TestCase(
                algorithm=descriptor.name,
                language=language,
                expected_final_status=status,
                statistics=descriptor.expected_statistics,
                alpha_statistics=descriptor.expected_alpha_statistics,
                data_points=descriptor.data_points,
                algorithm_history_data_points=descriptor.algorithm_history_data_points,
            ))

    cases.sort(key=lambda case: case.sort_key)

    seen = set()
    for case in cases:
        if case.name in seen:
            raise RegistrySetupError(f"Duplicate test case: {case.name}")
        seen.add(case.name)

    return cases


def generate_cases(
    registry: DescriptorRegistry,
    store: SettingsStore,
    status_table: StatusOverrideTable = NON_DEFAULT_STATUSES,
) -> list[TestCase]:
    """Load the registry and build the full, ordered case list."""
    languages = resolve_languages(store)
    cases = build_cases(registry.runnable(), languages, status_table)
    logger.info(
        f"Generated {len(cases)} regression cases for "
        f"{', '.join(sorted(language.value for language in languages))}"
    )
    return cases


def select_cases(
    cases: Iterable[TestCase],
    algorithms: Iterable[str] | None = None,
    languages: Iterable[Language] | None = None,
) -> list[TestCase]:
    """Narrow a case list to the given algorithms and languages, keeping order."""
    algorithm_set = set(algorithms) if algorithms else None
    language_set = set(languages) if languages else None
    return [
        case for case in cases
        if (algorithm_set is None or case.algorithm in algorithm_set)
        and (language_set is None or case.language in language_set)
    ]
