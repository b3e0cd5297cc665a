"""Regression Verifier - compare an engine result against a case's baseline.

Checks run in a fixed order and every one of them is evaluated, so a single
run reports all mismatched fields:
1. Final status (always)
2. Data points (unless the baseline is -1)
3. Algorithm history data points (unless the baseline is -1)
4. Remaining leaky bucket tokens (only for algorithms that must drain it)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from regression_system.engine.base import ExecutionResult
from regression_system.harness.cases import TestCase
from regression_system.schemas import UNCHECKED

# Algorithms whose leaky bucket is sized to one token with zero refill and
# must have consumed it by the end of the run
TOKEN_DEPLETION_CHECKS = frozenset({
    "TrainingOnDataRegressionAlgorithm",
})


class CheckStatus(str, Enum):
    """Outcome of a single field check."""
    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"


@dataclass
class CheckResult:
    """Result of comparing one field."""
    field: str
    status: CheckStatus
    expected: Any = None
    actual: Any = None

    @property
    def diagnostic(self) -> str:
        return f"{self.field}: expected {self.expected}, got {self.actual}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "status": self.status.value,
            "expected": self.expected,
            "actual": self.actual,
        }


class VerificationFailure(AssertionError):
    """Raised by Verdict.raise_for_failures when any check failed."""

    def __init__(self, case_name: str, failures: list[CheckResult]):
        self.case_name = case_name
        self.failures = failures
        details = "; ".join(check.diagnostic for check in failures)
        super().__init__(f"{case_name} failed verification: {details}")


@dataclass
class Verdict:
    """All check results for one case."""
    case_name: str
    checks: list[CheckResult] = field(default_factory=list)

    @property
    def failures(self) -> list[CheckResult]:
        return [c for c in self.checks if c.status == CheckStatus.FAIL]

    @property
    def passed(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        if self.passed:
            checked = sum(1 for c in self.checks if c.status == CheckStatus.PASS)
            return f"{self.case_name}: passed ({checked} checks)"
        return f"{self.case_name}: " + "; ".join(c.diagnostic for c in self.failures)

    def raise_for_failures(self) -> None:
        if not self.passed:
            raise VerificationFailure(self.case_name, self.failures)

    def to_dict(self) -> dict[str, Any]:
        return {
            "case": self.case_name,
            "passed": self.passed,
            "checks": [c.to_dict() for c in self.checks],
        }


def _compare(field_name: str, expected: Any, actual: Any) -> CheckResult:
    status = CheckStatus.PASS if expected == actual else CheckStatus.FAIL
    return CheckResult(field=field_name, status=status, expected=expected, actual=actual)


class Verifier:
    """Verifier for regression runs."""

    def __init__(self, depletion_checks: Iterable[str] = TOKEN_DEPLETION_CHECKS):
        self.depletion_checks = frozenset(depletion_checks)

    def verify(self, case: TestCase, result: ExecutionResult) -> Verdict:
        """Run every applicable check on a result.

        Args:
            case: Case with the baseline
            result: What the engine reported

        Returns:
            Verdict holding one CheckResult per check
        """
        verdict = Verdict(case_name=case.name)

        verdict.checks.append(self._check_final_status(case, result))
        verdict.checks.append(self._check_count(
            "DataPoints", case.data_points, result.data_points
        ))
        verdict.checks.append(self._check_count(
            "AlgorithmHistoryDataPoints",
            case.algorithm_history_data_points,
            result.algorithm_history_data_points,
        ))
        if case.algorithm in self.depletion_checks:
            verdict.checks.append(_compare(
                "RemainingBucketTokens", 0, result.remaining_bucket_tokens
            ))

        return verdict

    def _check_final_status(self, case: TestCase, result: ExecutionResult) -> CheckResult:
        return _compare(
            "FinalStatus", case.expected_final_status.value, result.final_status.value
        )

    def _check_count(self, field_name: str, expected: int, actual: int) -> CheckResult:
        # -1 marks a non-deterministic count
        if expected == UNCHECKED:
            return CheckResult(field=field_name, status=CheckStatus.SKIP, expected=expected)
        return _compare(field_name, expected, actual)
