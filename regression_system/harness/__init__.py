"""Regression harness: case generation, overrides, running and verification."""

from regression_system.harness.cases import (
    LANGUAGES_SETTING,
    NON_DEFAULT_STATUSES,
    StatusOverrideTable,
    TestCase,
    build_cases,
    generate_cases,
    resolve_languages,
    select_cases,
)
from regression_system.harness.overrides import (
    ALGORITHM_OVERRIDES,
    BASELINE_OVERRIDES,
    OverrideRegistry,
)
from regression_system.harness.verifier import (
    TOKEN_DEPLETION_CHECKS,
    CheckResult,
    CheckStatus,
    Verdict,
    VerificationFailure,
    Verifier,
)
from regression_system.harness.report import (
    CaseOutcome,
    RunReport,
)
from regression_system.harness.runner import Runner

__all__ = [
    # Cases
    "LANGUAGES_SETTING",
    "NON_DEFAULT_STATUSES",
    "StatusOverrideTable",
    "TestCase",
    "build_cases",
    "generate_cases",
    "resolve_languages",
    "select_cases",
    # Overrides
    "ALGORITHM_OVERRIDES",
    "BASELINE_OVERRIDES",
    "OverrideRegistry",
    # Verifier
    "TOKEN_DEPLETION_CHECKS",
    "CheckResult",
    "CheckStatus",
    "Verdict",
    "VerificationFailure",
    "Verifier",
    # Runner
    "CaseOutcome",
    "RunReport",
    "Runner",
]
