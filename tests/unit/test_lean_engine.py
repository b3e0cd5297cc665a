"""Tests for the LEAN launcher engine.

This module tests:
1. Per-run config.json contents
2. Result file parsing, including malformed fields
3. Timeout and launcher failures
4. Statistics soft-checks
5. Malformed results during a full run
"""

import json
import logging
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from regression_system.core import EngineConfig
from regression_system.engine import EngineError, LeanLauncherEngine
from regression_system.engine.lean import OUTPUT_FILE_NAME, RESULT_FILE_NAME
from regression_system.harness import Runner, build_cases
from regression_system.schemas import (
    AlgorithmDescriptor,
    AlgorithmStatus,
    AlphaRuntimeStatistics,
    Language,
)


def launcher_writing(result):
    """Return a subprocess.run stand-in that writes result into the run folder."""

    def fake_run(cmd, **kwargs):
        config = json.loads(Path(cmd[cmd.index("--config") + 1]).read_text())
        if result is not None:
            result_path = Path(config["results-destination-folder"]) / RESULT_FILE_NAME
            result_path.write_text(json.dumps(result) if isinstance(result, dict) else result)
        return subprocess.CompletedProcess(cmd, 0, stdout="Algorithm completed", stderr="")

    return fake_run


@pytest.fixture
def engine(temp_dir):
    return LeanLauncherEngine(
        launcher=["dotnet", "QuantConnect.Lean.Launcher.dll"],
        results_path=temp_dir / "results",
        timeout=30,
    )


def run(engine, algorithm="BasicTemplateAlgorithm", statistics=None, alpha=None, settings=None):
    return engine.run(
        algorithm,
        Language.PYTHON,
        statistics or {},
        alpha,
        AlgorithmStatus.COMPLETED,
        settings or {"forward-console-messages": "false"},
    )


class TestLaunch:
    """Tests for starting the launcher."""

    def test_writes_config_and_runs_launcher(self, engine, temp_dir):
        with patch("subprocess.run", side_effect=launcher_writing({"FinalStatus": "Completed"})) as mock_run:
            run(engine)

        cmd = mock_run.call_args[0][0]
        run_dir = temp_dir / "results" / "Python-BasicTemplateAlgorithm"
        assert cmd == [
            "dotnet", "QuantConnect.Lean.Launcher.dll", "--config", str(run_dir / "config.json"),
        ]
        assert mock_run.call_args[1]["timeout"] == 30

        config = json.loads((run_dir / "config.json").read_text())
        assert config["algorithm-type-name"] == "BasicTemplateAlgorithm"
        assert config["algorithm-language"] == "Python"
        assert config["forward-console-messages"] == "false"
        assert config["results-destination-folder"] == str(run_dir)
        assert (run_dir / OUTPUT_FILE_NAME).exists()

    def test_previous_run_folder_is_cleared(self, engine, temp_dir):
        stale = temp_dir / "results" / "Python-BasicTemplateAlgorithm" / RESULT_FILE_NAME
        stale.parent.mkdir(parents=True)
        stale.write_text(json.dumps({"FinalStatus": "Completed"}))

        with patch("subprocess.run", side_effect=launcher_writing(None)):
            with pytest.raises(EngineError, match="without writing"):
                run(engine)

    def test_timeout_becomes_runtime_error(self, engine):
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(["dotnet"], 30)):
            result = run(engine)

        assert result.final_status == AlgorithmStatus.RUNTIME_ERROR
        assert "timed out after 30 seconds" in result.error

    def test_missing_launcher_raises(self, engine):
        with patch("subprocess.run", side_effect=FileNotFoundError("dotnet")):
            with pytest.raises(EngineError, match="Could not start"):
                run(engine)

    def test_from_config(self):
        engine = LeanLauncherEngine.from_config(EngineConfig(
            launcher=["lean-launcher"], timeout=60, results_directory="out",
            working_directory="/opt/lean",
        ))

        assert engine.launcher == ["lean-launcher"]
        assert engine.timeout == 60
        assert engine.results_path == Path("out")
        assert engine.working_directory == Path("/opt/lean")


class TestResultParsing:
    """Tests for reading regression-result.json."""

    def test_parses_all_fields(self, engine):
        payload = {
            "FinalStatus": "RuntimeError",
            "DataPoints": 3943,
            "AlgorithmHistoryDataPoints": 12,
            "RemainingBucketTokens": 0,
            "Statistics": {"Total Trades": 1},
            "AlphaRuntimeStatistics": {"total_insights_generated": 5},
        }
        with patch("subprocess.run", side_effect=launcher_writing(payload)):
            result = run(engine)

        assert result.final_status == AlgorithmStatus.RUNTIME_ERROR
        assert result.data_points == 3943
        assert result.algorithm_history_data_points == 12
        assert result.remaining_bucket_tokens == 0
        assert result.statistics == {"Total Trades": "1"}
        assert result.alpha_statistics == {"total_insights_generated": 5}
        assert result.duration_seconds is not None

    def test_missing_optional_fields(self, engine):
        with patch("subprocess.run", side_effect=launcher_writing({"FinalStatus": "Completed"})):
            result = run(engine)

        assert result.data_points == 0
        assert result.remaining_bucket_tokens is None
        assert result.statistics == {}

    def test_invalid_json_raises(self, engine):
        with patch("subprocess.run", side_effect=launcher_writing("{not json")):
            with pytest.raises(EngineError, match="Unreadable result file"):
                run(engine)

    def test_missing_status_raises(self, engine):
        with patch("subprocess.run", side_effect=launcher_writing({"DataPoints": 1})):
            with pytest.raises(EngineError, match="no FinalStatus"):
                run(engine)

    def test_unknown_status_raises(self, engine):
        with patch("subprocess.run", side_effect=launcher_writing({"FinalStatus": "Exploded"})):
            with pytest.raises(EngineError, match="Exploded"):
                run(engine)

    @pytest.mark.parametrize("payload", [
        {"FinalStatus": "Completed", "DataPoints": None},
        {"FinalStatus": "Completed", "AlgorithmHistoryDataPoints": "many"},
        {"FinalStatus": "Completed", "RemainingBucketTokens": "none left"},
        {"FinalStatus": "Completed", "Statistics": ["Total Trades"]},
    ])
    def test_malformed_field_raises_engine_error(self, engine, payload):
        with patch("subprocess.run", side_effect=launcher_writing(payload)):
            with pytest.raises(EngineError, match="Malformed result file"):
                run(engine)


class TestSoftCheck:
    """Tests for statistics drift warnings."""

    def test_statistic_mismatch_logged(self, engine, caplog):
        payload = {"FinalStatus": "Completed", "Statistics": {"Total Trades": "2"}}
        with patch("subprocess.run", side_effect=launcher_writing(payload)):
            with caplog.at_level(logging.WARNING, logger="regression_system.engine.lean"):
                result = run(engine, statistics={"Total Trades": "1"})

        assert result.final_status == AlgorithmStatus.COMPLETED
        assert "statistic 'Total Trades': expected 1, got 2" in caplog.text

    def test_alpha_mismatch_logged(self, engine, caplog):
        payload = {
            "FinalStatus": "Completed",
            "AlphaRuntimeStatistics": {"total_insights_generated": 3},
        }
        alpha = AlphaRuntimeStatistics(total_insights_generated=4)
        with patch("subprocess.run", side_effect=launcher_writing(payload)):
            with caplog.at_level(logging.WARNING, logger="regression_system.engine.lean"):
                run(engine, alpha=alpha)

        assert "alpha statistic 'total_insights_generated': expected 4, got 3" in caplog.text

    def test_matching_statistics_quiet(self, engine, caplog):
        payload = {"FinalStatus": "Completed", "Statistics": {"Total Trades": "1"}}
        with patch("subprocess.run", side_effect=launcher_writing(payload)):
            with caplog.at_level(logging.WARNING, logger="regression_system.engine.lean"):
                run(engine, statistics={"Total Trades": "1"})

        assert caplog.text == ""


class TestRunnerWithLauncher:
    """Tests for malformed results flowing through a full run."""

    def test_malformed_result_fails_only_that_case(self, engine, store):
        payloads = {
            "BasicTemplateAlgorithm": {"FinalStatus": "Completed", "DataPoints": None},
            "HistoryRegressionAlgorithm": {"FinalStatus": "Completed", "DataPoints": 10},
        }

        def fake_run(cmd, **kwargs):
            config = json.loads(Path(cmd[cmd.index("--config") + 1]).read_text())
            payload = payloads[config["algorithm-type-name"]]
            result_path = Path(config["results-destination-folder"]) / RESULT_FILE_NAME
            result_path.write_text(json.dumps(payload))
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        cases = build_cases(
            [
                AlgorithmDescriptor(name="BasicTemplateAlgorithm", languages=["Python"]),
                AlgorithmDescriptor(
                    name="HistoryRegressionAlgorithm", languages=["Python"], data_points=10,
                ),
            ],
            [Language.PYTHON],
        )

        with patch("subprocess.run", side_effect=fake_run):
            report = Runner(engine, store).run_all(cases)

        assert [o.outcome for o in report.outcomes] == ["error", "pass"]
        assert "Malformed result file" in report.outcomes[0].error
        assert not report.passed
