"""Run regression algorithms through the LEAN launcher.

For each run the engine:
1. Writes the prepared settings to <results>/<Language>-<Algorithm>/config.json
2. Starts the launcher with --config pointing at that file
3. Reads the regression result file the launcher leaves in the same folder

The result file is a JSON object:

    {
        "FinalStatus": "Completed",
        "DataPoints": 3943,
        "AlgorithmHistoryDataPoints": 0,
        "RemainingBucketTokens": null,
        "Statistics": {"Total Trades": "1", ...},
        "AlphaRuntimeStatistics": {...}
    }
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
import time
from pathlib import Path
from typing import Any, Mapping, Optional

from regression_system.core.config import EngineConfig
from regression_system.engine.base import EngineError, ExecutionResult
from regression_system.schemas import AlgorithmStatus, AlphaRuntimeStatistics, Language

logger = logging.getLogger(__name__)

RESULT_FILE_NAME = "regression-result.json"
CONFIG_FILE_NAME = "config.json"
OUTPUT_FILE_NAME = "last_lean_output.txt"


class LeanLauncherEngine:
    """Execute one regression algorithm per launcher process."""

    def __init__(
        self,
        launcher: list[str],
        results_path: Path,
        working_directory: Path | None = None,
        timeout: int = 1800,
    ):
        """Initialize the engine.

        Args:
            launcher: Command that starts the LEAN launcher
            results_path: Directory for per-run config and result files
            working_directory: Directory the launcher runs in
            timeout: Wall-clock ceiling per run in seconds
        """
        self.launcher = list(launcher)
        self.results_path = Path(results_path)
        self.working_directory = Path(working_directory) if working_directory else None
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: EngineConfig) -> "LeanLauncherEngine":
        return cls(
            launcher=config.launcher,
            results_path=Path(config.results_directory),
            working_directory=Path(config.working_directory) if config.working_directory else None,
            timeout=config.timeout,
        )

    def run(
        self,
        algorithm: str,
        language: Language,
        statistics: Mapping[str, str],
        alpha_statistics: Optional[AlphaRuntimeStatistics],
        expected_status: AlgorithmStatus,
        settings: Mapping[str, str],
    ) -> ExecutionResult:
        run_dir = self._prepare_run_dir(algorithm, language)
        config_path = run_dir / CONFIG_FILE_NAME
        config_path.write_text(
            json.dumps(self._build_settings(algorithm, language, settings, run_dir), indent=2)
        )

        cmd = [*self.launcher, "--config", str(config_path)]
        logger.info(f"Running: {' '.join(cmd)}")

        started = time.monotonic()
        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                cwd=str(self.working_directory) if self.working_directory else None,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"{language.value}/{algorithm} exceeded {self.timeout}s")
            return ExecutionResult(
                final_status=AlgorithmStatus.RUNTIME_ERROR,
                error=f"Run timed out after {self.timeout} seconds",
                duration_seconds=time.monotonic() - started,
            )
        except OSError as e:
            raise EngineError(f"Could not start LEAN launcher {self.launcher[0]}: {e}") from e

        duration = time.monotonic() - started
        (run_dir / OUTPUT_FILE_NAME).write_text(
            f"=== RETURNCODE: {completed.returncode} ===\n\n"
            f"=== STDOUT ===\n{completed.stdout}\n\n"
            f"=== STDERR ===\n{completed.stderr}"
        )

        result_path = run_dir / RESULT_FILE_NAME
        if not result_path.exists():
            output = (completed.stdout or "") + (completed.stderr or "")
            details = output[-1000:] if len(output) > 1000 else output
            raise EngineError(
                f"LEAN exited with code {completed.returncode} without writing "
                f"{RESULT_FILE_NAME}: {details}"
            )

        result = self._parse_result(result_path)
        result.duration_seconds = duration
        self._soft_check(algorithm, language, statistics, alpha_statistics, expected_status, result)
        return result

    def _prepare_run_dir(self, algorithm: str, language: Language) -> Path:
        run_dir = self.results_path / f"{language.value}-{algorithm}"
        if run_dir.exists():
            shutil.rmtree(run_dir)
        run_dir.mkdir(parents=True)
        return run_dir

    def _build_settings(
        self,
        algorithm: str,
        language: Language,
        settings: Mapping[str, str],
        run_dir: Path,
    ) -> dict[str, str]:
        launcher_settings = dict(settings)
        launcher_settings.update({
            "algorithm-type-name": algorithm,
            "algorithm-language": language.value,
            "results-destination-folder": str(run_dir),
            "close-automatically": "true",
        })
        return launcher_settings

    def _parse_result(self, path: Path) -> ExecutionResult:
        """Parse the launcher's regression result file."""
        try:
            data = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise EngineError(f"Unreadable result file {path}: {e}") from e

        if not isinstance(data, dict) or "FinalStatus" not in data:
            raise EngineError(f"Result file {path} has no FinalStatus")

        try:
            status = AlgorithmStatus.parse(data["FinalStatus"])
        except ValueError as e:
            raise EngineError(f"Result file {path}: {e}") from e

        tokens = data.get("RemainingBucketTokens")
        try:
            return ExecutionResult(
                final_status=status,
                data_points=int(data.get("DataPoints", 0)),
                algorithm_history_data_points=int(data.get("AlgorithmHistoryDataPoints", 0)),
                remaining_bucket_tokens=int(tokens) if tokens is not None else None,
                statistics={str(k): str(v) for k, v in (data.get("Statistics") or {}).items()},
                alpha_statistics=dict(data.get("AlphaRuntimeStatistics") or {}),
                error=data.get("Error"),
            )
        except (TypeError, ValueError, AttributeError) as e:
            raise EngineError(f"Malformed result file {path}: {e}") from e

    def _soft_check(
        self,
        algorithm: str,
        language: Language,
        statistics: Mapping[str, str],
        alpha_statistics: Optional[AlphaRuntimeStatistics],
        expected_status: AlgorithmStatus,
        result: ExecutionResult,
    ) -> None:
        """Log statistics that drifted from the baseline. The verifier decides pass/fail."""
        name = f"{language.value}/{algorithm}"

        if result.final_status != expected_status:
            logger.warning(
                f"{name} ended {result.final_status.value}, expected {expected_status.value}"
            )

        for key, expected in statistics.items():
            actual = result.statistics.get(key)
            if actual != expected:
                logger.warning(f"{name} statistic '{key}': expected {expected}, got {actual}")

        if alpha_statistics is not None:
            expected_alpha: dict[str, Any] = alpha_statistics.model_dump(exclude_none=True)
            for key, expected in expected_alpha.items():
                actual = result.alpha_statistics.get(key)
                if actual is not None and str(actual) != str(expected):
                    logger.warning(
                        f"{name} alpha statistic '{key}': expected {expected}, got {actual}"
                    )
