"""
Base classes for problems and their capability types.

A problem capability is the classification that decides which algorithms a
problem can be bound to. Capabilities are declared explicitly on the class
with the ``capability`` keyword instead of being discovered by reflection:

```python
class OptimisationProblem(Problem, capability=True):
    ...

class SphereProblem(OptimisationProblem):   # capability: OptimisationProblem
    ...
```

Algorithms list the capabilities they accept (see
``Algorithm.accepted_problems``) and binding is an exact lookup of
``problem.capability()`` in that list.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class Problem(ABC):
    """Universal root of all problem types."""

    _declares_capability = False

    def __init_subclass__(cls, capability: bool = False, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._declares_capability = capability

    @classmethod
    def capability(cls) -> type["Problem"]:
        """
        Return the most specific capability type this problem belongs to.

        Raises:
            TypeError: If no class in the hierarchy declares a capability.
        """
        for klass in cls.__mro__:
            if klass.__dict__.get("_declares_capability", False):
                return klass
        raise TypeError(f"{cls.__qualname__} does not declare a problem capability")

    @property
    def name(self) -> str:
        return type(self).__name__


class OptimisationProblem(Problem, capability=True):
    """
    Single-objective minimisation problem over a bounded real vector.

    Subclasses present themselves to pymoo through ``to_pymoo()``, which must
    return a new pymoo problem on each call so replicates never share state.
    """

    @abstractmethod
    def to_pymoo(self):
        """Return a pymoo ``Problem`` instance describing this problem."""
        pass
