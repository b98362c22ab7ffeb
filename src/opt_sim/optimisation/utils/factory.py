"""
Factories producing fresh algorithm, problem and measurement-suite instances.

Every replicate must own its own objects, so a factory stores a constructor
and its keyword arguments and builds a new object on every call. Arguments
are deep-copied per call so mutable parameters are never shared between
instances.

Types can be given directly or resolved from configuration, either by a
short name from a registry or by a dotted import path:

```python
factory = ObjectFactory.from_config("PymooAlgorithm", {"max_generations": 50},
                                    registry={"PymooAlgorithm": PymooAlgorithm})
factory = ObjectFactory.from_config("my_package.algorithms.RandomSearch", {})
```
"""

import copy
import importlib
import logging
from collections.abc import Callable, Mapping
from typing import Any

logger = logging.getLogger(__name__)


class ObjectFactory:
    """
    Build a new object from ``target(**params)`` on every ``new_instance()`` call.

    Args:
        target: Class or callable returning the object.
        **params: Keyword arguments passed to ``target``. Deep-copied per call.
    """

    def __init__(self, target: Callable[..., Any], **params: Any):
        if not callable(target):
            raise TypeError(f"Factory target must be callable, got {target!r}")
        self.target = target
        self.params = params

    def new_instance(self) -> Any:
        try:
            return self.target(**copy.deepcopy(self.params))
        except Exception:
            logger.error("Factory for %s failed to create an instance",
                         getattr(self.target, "__qualname__", repr(self.target)))
            raise

    def __call__(self) -> Any:
        return self.new_instance()

    def __repr__(self) -> str:
        name = getattr(self.target, "__qualname__", repr(self.target))
        return f"ObjectFactory({name}, {self.params!r})"

    @classmethod
    def from_config(cls, type_name: str, params: Mapping[str, Any] | None = None,
                    registry: Mapping[str, Callable[..., Any]] | None = None) -> "ObjectFactory":
        """
        Create a factory from a configured type name.

        Args:
            type_name: Registry key, or dotted path "package.module.Name".
            params: Constructor keyword arguments.
            registry: Short names available without a module path.

        Raises:
            ValueError: If the type cannot be resolved.
        """
        return cls(resolve_type(type_name, registry), **dict(params or {}))


def resolve_type(type_name: str, registry: Mapping[str, Callable[..., Any]] | None = None):
    if registry and type_name in registry:
        return registry[type_name]

    module_name, _, attr = type_name.rpartition(".")
    if not module_name:
        available = sorted(registry) if registry else []
        raise ValueError(f"Unknown type '{type_name}'. Use a dotted path or one of {available}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"Cannot import module '{module_name}' for type '{type_name}'") from e

    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise ValueError(f"Module '{module_name}' has no attribute '{attr}'") from e
