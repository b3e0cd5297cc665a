"""Override Registry - per-case settings applied before the engine runs.

Before every case the settings store is reset to defaults, the baseline
overrides are applied, then the overrides registered for the case's
algorithm are applied in order. To special-case another algorithm, add an
entry to the table; the runner never looks at algorithm names itself.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Sequence

from regression_system.core.settings import SettingsStore

logger = logging.getLogger(__name__)

Override = tuple[str, Any]

# Applied to every case
BASELINE_OVERRIDES: tuple[Override, ...] = (
    ("quandl-auth-token", "WyAazVXnq7ATy_fefTqm"),
    ("forward-console-messages", "false"),
)

# The training algorithms get a 90 second time loop and a one minute
# leaky bucket that never refills
_TRAINING_BUDGET: tuple[Override, ...] = (
    ("algorithm-manager-time-loop-maximum", "1.5"),
    ("scheduled-event-leaky-bucket-capacity", "1"),
    ("scheduled-event-leaky-bucket-refill-amount", "0"),
)

ALGORITHM_OVERRIDES: dict[str, tuple[Override, ...]] = {
    # checks that subscription limits are enforced
    "OptionChainConsistencyRegressionAlgorithm": (
        ("symbol-minute-limit", "100"),
        ("symbol-second-limit", "100"),
        ("symbol-tick-limit", "100"),
    ),
    "TrainingInitializeRegressionAlgorithm": _TRAINING_BUDGET,
    "TrainingOnDataRegressionAlgorithm": _TRAINING_BUDGET,
}


class OverrideRegistry:
    """Declarative table of settings overrides keyed by algorithm identity."""

    def __init__(
        self,
        baseline: Iterable[Override] = BASELINE_OVERRIDES,
        overrides: Mapping[str, Sequence[Override]] | None = None,
    ):
        self.baseline: tuple[Override, ...] = tuple(baseline)
        self._overrides: dict[str, tuple[Override, ...]] = {
            name: tuple(entries)
            for name, entries in (ALGORITHM_OVERRIDES if overrides is None else overrides).items()
        }

    def overrides_for(self, algorithm: str) -> tuple[Override, ...]:
        return self._overrides.get(algorithm, ())

    def with_entries(self, overrides: Mapping[str, Sequence[Override]]) -> "OverrideRegistry":
        """Return a new registry with extra entries appended per algorithm."""
        merged = dict(self._overrides)
        for name, entries in overrides.items():
            merged[name] = merged.get(name, ()) + tuple(entries)
        return OverrideRegistry(self.baseline, merged)

    def algorithms(self) -> list[str]:
        return sorted(self._overrides)

    def apply(self, store: SettingsStore, algorithm: str) -> None:
        """Reset the store and apply baseline then algorithm overrides.

        Later entries win when a key appears twice.
        """
        store.reset()
        for key, value in self.baseline:
            store.set(key, value)

        entries = self.overrides_for(algorithm)
        for key, value in entries:
            store.set(key, value)

        if entries:
            logger.debug(
                f"Applied {len(entries)} overrides for {algorithm}: "
                + ", ".join(f"{key}={value}" for key, value in entries)
            )
