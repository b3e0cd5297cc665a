"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest

from regression_system.core import SettingsStore
from regression_system.engine import ExecutionResult
from regression_system.registry import DescriptorRegistry
from regression_system.schemas import AlgorithmDescriptor, AlgorithmStatus


class FakeEngine:
    """Engine double that records every call and returns canned results."""

    def __init__(self, results=None, errors=None):
        self.results = results or {}
        self.errors = errors or {}
        self.calls = []

    def run(self, algorithm, language, statistics, alpha_statistics, expected_status, settings):
        self.calls.append({
            "algorithm": algorithm,
            "language": language,
            "statistics": dict(statistics),
            "alpha_statistics": alpha_statistics,
            "expected_status": expected_status,
            "settings": dict(settings),
        })
        if algorithm in self.errors:
            raise self.errors[algorithm]
        if algorithm in self.results:
            return self.results[algorithm]
        return ExecutionResult(final_status=AlgorithmStatus.COMPLETED)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def store():
    """Settings store with a couple of LEAN-style defaults."""
    return SettingsStore({
        "data-folder": "../../../Data/",
        "forward-console-messages": True,
        "symbol-minute-limit": "10000",
    })


@pytest.fixture
def sample_descriptors():
    """Descriptors covering the interesting registry cases."""
    return [
        AlgorithmDescriptor(
            name="SimpleMovingAverageAlgorithm",
            languages=["CSharp", "Python"],
            expected_statistics={"Total Trades": "10", "Sharpe Ratio": "1.2"},
            data_points=1000,
            algorithm_history_data_points=50,
        ),
        AlgorithmDescriptor(
            name="OfflineDataAlgorithm",
            can_run_locally=False,
            languages=["CSharp", "Python"],
        ),
        AlgorithmDescriptor(
            name="BasicTemplateAlgorithm",
            languages=["CSharp", "Python"],
            data_points=3943,
        ),
        AlgorithmDescriptor(
            name="CSharpOnlyAlgorithm",
            languages=["CSharp"],
            data_points=-1,
            algorithm_history_data_points=-1,
        ),
        AlgorithmDescriptor(
            name="TrainingOnDataRegressionAlgorithm",
            languages=["CSharp", "Python"],
            data_points=-1,
            algorithm_history_data_points=0,
        ),
    ]


@pytest.fixture
def sample_registry(sample_descriptors):
    """Registry whose factories return the sample descriptors."""
    registry = DescriptorRegistry()
    for descriptor in sample_descriptors:
        registry.register(descriptor.name, lambda d=descriptor: d)
    return registry


@pytest.fixture
def baseline_yaml():
    """Contents of a YAML baseline file."""
    return """\
name: BasicTemplateAlgorithm
can_run_locally: true
languages: [CSharp, Python]
data_points: 3943
algorithm_history_data_points: 0
expected_statistics:
  Total Trades: 1
  Sharpe Ratio: "8.911"
"""


@pytest.fixture
def engine_factory():
    """Build FakeEngine instances with canned results or errors."""
    return FakeEngine
