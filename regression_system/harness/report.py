"""Run report - outcomes of a regression run, saved as YAML or Markdown."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import yaml
from jinja2 import Environment, FileSystemLoader

from regression_system.engine.base import ExecutionResult
from regression_system.harness.cases import TestCase
from regression_system.harness.templates import TEMPLATE_DIR
from regression_system.harness.verifier import Verdict

REPORT_TEMPLATE = "report.md.j2"


@dataclass
class CaseOutcome:
    """Everything that happened to one case."""

    case: TestCase
    result: Optional[ExecutionResult] = None
    verdict: Optional[Verdict] = None
    error: Optional[str] = None  # engine failure, no verdict

    @property
    def passed(self) -> bool:
        return self.error is None and self.verdict is not None and self.verdict.passed

    @property
    def outcome(self) -> str:
        if self.error is not None:
            return "error"
        return "pass" if self.passed else "fail"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "case": self.case.to_dict(),
            "outcome": self.outcome,
            "result": self.result.to_dict() if self.result else None,
            "verdict": self.verdict.to_dict() if self.verdict else None,
            "error": self.error,
        }


@dataclass
class RunReport:
    """Aggregated outcomes of a regression run."""

    outcomes: list[CaseOutcome] = field(default_factory=list)
    started_at: str = field(default_factory=lambda: datetime.utcnow().isoformat() + "Z")
    finished_at: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def passed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.passed)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.outcome == "fail")

    @property
    def errored_count(self) -> int:
        return sum(1 for o in self.outcomes if o.outcome == "error")

    @property
    def passed(self) -> bool:
        return all(o.passed for o in self.outcomes)

    def failures(self) -> list[CaseOutcome]:
        return [o for o in self.outcomes if not o.passed]

    def finish(self) -> None:
        self.finished_at = datetime.utcnow().isoformat() + "Z"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for YAML serialization."""
        return {
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "passed": self.passed,
            "summary": {
                "total": self.total,
                "passed": self.passed_count,
                "failed": self.failed_count,
                "errored": self.errored_count,
            },
            "outcomes": [o.to_dict() for o in self.outcomes],
        }

    def save(self, path: Path) -> Path:
        """Write the report as YAML."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
        return path

    def render_markdown(self) -> str:
        env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        context = self.to_dict()
        context["failures"] = [o.to_dict() for o in self.failures()]
        return env.get_template(REPORT_TEMPLATE).render(**context)
