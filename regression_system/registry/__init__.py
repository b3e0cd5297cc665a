"""Registry of regression algorithm descriptors."""

from regression_system.registry.descriptors import (
    DescriptorFactory,
    DescriptorRegistry,
    RegistrySetupError,
    RegressionAlgorithmDefinition,
    default_registry,
    regression_algorithm,
)
from regression_system.registry.catalog import (
    discover,
    load_yaml_catalog,
)

__all__ = [
    "DescriptorFactory",
    "DescriptorRegistry",
    "RegistrySetupError",
    "RegressionAlgorithmDefinition",
    "default_registry",
    "regression_algorithm",
    "discover",
    "load_yaml_catalog",
]
