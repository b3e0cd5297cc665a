"""Populate a DescriptorRegistry from YAML baselines and Python packages.

A baseline file holds either one descriptor mapping or a list of them:

    name: BasicTemplateAlgorithm
    can_run_locally: true
    languages: [CSharp, Python]
    data_points: 3943
    algorithm_history_data_points: 0
    expected_statistics:
      Total Trades: "1"
      Sharpe Ratio: "8.911"
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
from pathlib import Path
from typing import Any

import yaml

from regression_system.registry.descriptors import DescriptorRegistry, RegistrySetupError
from regression_system.schemas import AlgorithmDescriptor

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def _descriptor_factory(entry: dict[str, Any]):
    def factory() -> AlgorithmDescriptor:
        return AlgorithmDescriptor(**entry)

    return factory


def _read_entries(path: Path) -> list[dict[str, Any]]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RegistrySetupError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise RegistrySetupError(f"Error reading {path}: {e}") from e

    if data is None:
        return []
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise RegistrySetupError(f"{path} must contain a mapping or a list of mappings")

    entries = []
    for item in data:
        entry = dict(item)
        entry.setdefault("name", path.stem)
        entries.append(entry)
    return entries


def load_yaml_catalog(registry: DescriptorRegistry, path: Path | str) -> list[str]:
    """Register one factory per descriptor found in a YAML file or directory.

    Files are read in name order. Schema validation happens when the
    registry is loaded.

    Returns:
        Names registered.
    """
    path = Path(path)
    if path.is_dir():
        files = sorted(p for p in path.iterdir() if p.suffix in YAML_SUFFIXES)
    elif path.exists():
        files = [path]
    else:
        raise RegistrySetupError(f"Catalog path does not exist: {path}")

    registered = []
    for file_path in files:
        for entry in _read_entries(file_path):
            registry.register(entry["name"], _descriptor_factory(entry))
            registered.append(entry["name"])

    logger.info(f"Registered {len(registered)} descriptors from {path}")
    return registered


def discover(package_name: str) -> list[str]:
    """Import a package and all of its submodules.

    Modules register their algorithms at import time. An import failure
    aborts setup.

    Returns:
        Names of the imported modules.
    """
    try:
        package = importlib.import_module(package_name)
    except Exception as e:
        raise RegistrySetupError(f"Failed to import {package_name}: {e}") from e

    imported = [package.__name__]
    search_path = getattr(package, "__path__", None)
    if search_path is None:
        return imported

    for module_info in pkgutil.walk_packages(search_path, prefix=f"{package.__name__}."):
        try:
            importlib.import_module(module_info.name)
        except Exception as e:
            raise RegistrySetupError(f"Failed to import {module_info.name}: {e}") from e
        imported.append(module_info.name)

    return imported
