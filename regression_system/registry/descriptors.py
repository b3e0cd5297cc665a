"""Descriptor Registry - the table of known regression algorithms.

Every regression algorithm is registered under its identity together with a
zero-argument factory that produces its ``AlgorithmDescriptor``. Factories
run once, when the registry is loaded. A factory that fails means the build
is broken, so ``load`` raises ``RegistrySetupError`` instead of returning a
partial list.

Three ways to register:
- A factory function::

      @registry.algorithm("BasicTemplateAlgorithm")
      def basic_template():
          return AlgorithmDescriptor(name="BasicTemplateAlgorithm", ...)

- A ``RegressionAlgorithmDefinition`` subclass::

      @registry.algorithm()
      class BasicTemplateAlgorithm(RegressionAlgorithmDefinition):
          languages = ("CSharp", "Python")
          data_points = 3943

- A YAML baseline file, see ``regression_system.registry.catalog``.
"""

from __future__ import annotations

import inspect
import logging
from abc import ABC
from typing import Any, Callable, Iterable, Optional

from regression_system.schemas import AlgorithmDescriptor, AlphaRuntimeStatistics

logger = logging.getLogger(__name__)

DescriptorFactory = Callable[[], AlgorithmDescriptor]


class RegistrySetupError(Exception):
    """Raised when the set of regression algorithms can't be built."""

    pass


class RegressionAlgorithmDefinition(ABC):
    """Base class for algorithms that declare their own regression baseline.

    Subclasses override the class attributes. A subclass that still has
    abstract methods, or whose constructor needs arguments, is not
    registered.
    """

    can_run_locally: bool = True
    languages: Iterable[Any] = ()
    expected_statistics: dict[str, str] = {}
    expected_alpha_statistics: Optional[dict[str, Any]] = None
    data_points: int = 0
    algorithm_history_data_points: int = 0

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_descriptor(self) -> AlgorithmDescriptor:
        alpha = self.expected_alpha_statistics
        return AlgorithmDescriptor(
            name=self.name,
            can_run_locally=self.can_run_locally,
            languages=self.languages,
            expected_statistics=self.expected_statistics,
            expected_alpha_statistics=AlphaRuntimeStatistics(**alpha) if alpha else None,
            data_points=self.data_points,
            algorithm_history_data_points=self.algorithm_history_data_points,
        )


def _has_zero_arg_constructor(cls: type) -> bool:
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return False
    return all(
        p.default is not inspect.Parameter.empty
        or p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for p in signature.parameters.values()
    )


class DescriptorRegistry:
    """Ordered table of regression algorithm factories keyed by identity."""

    def __init__(self):
        self._factories: dict[str, DescriptorFactory] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def names(self) -> list[str]:
        return list(self._factories)

    def copy(self) -> "DescriptorRegistry":
        """Return an independent registry with the same entries."""
        registry = DescriptorRegistry()
        registry._factories = dict(self._factories)
        return registry

    def register(self, name: str, factory: DescriptorFactory) -> DescriptorFactory:
        """Register a zero-argument descriptor factory under name.

        Raises:
            RegistrySetupError: If name is already registered.
        """
        if name in self._factories:
            raise RegistrySetupError(f"Regression algorithm registered twice: {name}")
        self._factories[name] = factory
        logger.debug(f"Registered regression algorithm {name}")
        return factory

    def register_definition(self, cls: type) -> type:
        """Register a RegressionAlgorithmDefinition subclass.

        Abstract classes and classes without a zero-argument constructor
        don't qualify and are skipped.
        """
        if inspect.isabstract(cls):
            logger.debug(f"Skipping abstract definition {cls.__name__}")
            return cls
        if not _has_zero_arg_constructor(cls):
            logger.debug(f"Skipping {cls.__name__}: constructor requires arguments")
            return cls

        def factory() -> AlgorithmDescriptor:
            return cls().to_descriptor()

        self.register(cls.__name__, factory)
        return cls

    def algorithm(self, name: str | None = None):
        """Decorator registering a factory function or a definition class.

        A definition class is always registered under its own class name, the
        algorithm type name LEAN loads.

        Raises:
            RegistrySetupError: If name is given for a class.
        """

        def decorator(target):
            if inspect.isclass(target):
                if name is not None and name != target.__name__:
                    raise RegistrySetupError(
                        f"Definition class {target.__name__} can't be registered as {name}; "
                        "its class name is its identity"
                    )
                return self.register_definition(target)
            self.register(name or target.__name__, target)
            return target

        return decorator

    def load(self) -> list[AlgorithmDescriptor]:
        """Instantiate every registered descriptor.

        Returns:
            Descriptors in registration order.

        Raises:
            RegistrySetupError: If any factory fails or returns something
                other than a descriptor for its own identity.
        """
        descriptors = []
        for name, factory in self._factories.items():
            try:
                descriptor = factory()
            except Exception as e:
                raise RegistrySetupError(
                    f"Failed to instantiate regression algorithm {name}: {e}"
                ) from e

            if not isinstance(descriptor, AlgorithmDescriptor):
                raise RegistrySetupError(
                    f"Factory for {name} returned {type(descriptor).__name__}, "
                    "expected AlgorithmDescriptor"
                )
            if descriptor.name != name:
                raise RegistrySetupError(
                    f"Factory registered as {name} produced descriptor named {descriptor.name}"
                )
            descriptors.append(descriptor)

        logger.info(f"Loaded {len(descriptors)} regression algorithm descriptors")
        return descriptors

    def runnable(self) -> list[AlgorithmDescriptor]:
        """Load descriptors and drop the ones that can't run locally."""
        runnable = []
        for descriptor in self.load():
            if descriptor.can_run_locally:
                runnable.append(descriptor)
            else:
                logger.debug(f"Excluding {descriptor.name}: cannot run locally")
        return runnable


# Module-level registrations land here
default_registry = DescriptorRegistry()
regression_algorithm = default_registry.algorithm
