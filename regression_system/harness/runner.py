"""Regression Runner - run and verify test cases one at a time.

For every case:
1. Reset the settings store to defaults
2. Apply the baseline overrides
3. Apply the overrides registered for the case's algorithm
4. Run the engine with a snapshot of those settings
5. Verify the result

The settings store is shared, so the whole cycle runs under a lock and a
case's overrides are gone before the next case starts. Failed cases are
reported once and never retried.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from regression_system.core.settings import SettingsStore
from regression_system.engine.base import EngineError, ExecutionEngine
from regression_system.harness.cases import TestCase
from regression_system.harness.overrides import OverrideRegistry
from regression_system.harness.report import CaseOutcome, RunReport
from regression_system.harness.verifier import Verifier

logger = logging.getLogger(__name__)

# Held from reset through verification
_RUN_LOCK = threading.Lock()


class Runner:
    """Orchestrates reset, overrides, engine run and verification per case."""

    def __init__(
        self,
        engine: ExecutionEngine,
        store: SettingsStore,
        overrides: Optional[OverrideRegistry] = None,
        verifier: Optional[Verifier] = None,
    ):
        self.engine = engine
        self.store = store
        self.overrides = overrides or OverrideRegistry()
        self.verifier = verifier or Verifier()

    def prepare(self, case: TestCase) -> dict[str, str]:
        """Configure the store for a case and return the settings the engine gets."""
        self.overrides.apply(self.store, case.algorithm)
        return self.store.snapshot()

    def run_case(self, case: TestCase) -> CaseOutcome:
        """Run and verify a single case.

        Any error raised by the engine fails this case only.
        """
        with _RUN_LOCK:
            settings = self.prepare(case)
            logger.info(f"Running {case.name}")

            try:
                result = self.engine.run(
                    case.algorithm,
                    case.language,
                    case.statistics,
                    case.alpha_statistics,
                    case.expected_final_status,
                    settings,
                )
            except EngineError as e:
                logger.error(f"{case.name} could not be run: {e}")
                return CaseOutcome(case=case, error=str(e))
            except Exception as e:
                logger.exception(f"{case.name} crashed the engine")
                return CaseOutcome(case=case, error=f"{type(e).__name__}: {e}")

            verdict = self.verifier.verify(case, result)

        if verdict.passed:
            logger.info(verdict.summary())
        else:
            logger.error(verdict.summary())
        return CaseOutcome(case=case, result=result, verdict=verdict)

    def run_all(self, cases: Iterable[TestCase]) -> RunReport:
        """Run cases sequentially in the given order."""
        report = RunReport()
        for case in cases:
            report.outcomes.append(self.run_case(case))
        report.finish()

        logger.info(
            f"Regression run finished: {report.passed_count}/{report.total} passed, "
            f"{report.failed_count} failed, {report.errored_count} errored"
        )
        return report
