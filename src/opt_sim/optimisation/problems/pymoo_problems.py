"""
Optimisation problems backed by pymoo.

Both classes build a new pymoo problem on every ``to_pymoo()`` call, so two
replicates created from the same factory never evaluate against a shared
problem object.
"""

import logging
from collections.abc import Callable
from typing import Any

import numpy as np
from pymoo.problems import get_problem
from pymoo.problems.functional import FunctionalProblem

from ..utils.factory import resolve_type
from .base import OptimisationProblem

logger = logging.getLogger(__name__)


class PymooProblem(OptimisationProblem):
    """
    Named pymoo benchmark problem.

    Args:
        name: Name understood by ``pymoo.problems.get_problem`` (e.g. "sphere",
              "rastrigin", "ackley").
        **params: Extra keyword arguments for the benchmark, such as ``n_var``.

    Example:
        ```python
        problem = PymooProblem("rastrigin", n_var=10)
        pymoo_problem = problem.to_pymoo()
        ```
    """

    def __init__(self, name: str, **params: Any):
        self.problem_name = name
        self.params = params
        # Fail on unknown names at construction rather than inside a worker
        get_problem(name, **params)

    def to_pymoo(self):
        return get_problem(self.problem_name, **self.params)

    @property
    def name(self) -> str:
        return self.problem_name


class FunctionProblem(OptimisationProblem):
    """
    Minimise a plain Python function of a numpy vector.

    Args:
        func: Objective, called with a 1-D array of length ``n_var``. A dotted
              path such as "my_package.objectives.sphere" is imported.
        n_var: Number of decision variables.
        xl: Lower bound (scalar or array of length ``n_var``).
        xu: Upper bound (scalar or array of length ``n_var``).
    """

    def __init__(self, func: Callable[[np.ndarray], float] | str, n_var: int,
                 xl: float | np.ndarray = -5.0, xu: float | np.ndarray = 5.0):
        if n_var < 1:
            raise ValueError("n_var must be at least 1")
        self.func = resolve_type(func) if isinstance(func, str) else func
        if not callable(self.func):
            raise ValueError(f"Objective must be callable, got {self.func!r}")
        self.n_var = n_var
        self.xl = np.broadcast_to(np.asarray(xl, dtype=float), (n_var,)).copy()
        self.xu = np.broadcast_to(np.asarray(xu, dtype=float), (n_var,)).copy()
        if np.any(self.xl >= self.xu):
            raise ValueError("Lower bounds must be strictly below upper bounds")

    def to_pymoo(self):
        return FunctionalProblem(self.n_var, [self.func], xl=self.xl.copy(), xu=self.xu.copy())

    @property
    def name(self) -> str:
        return getattr(self.func, "__name__", type(self).__name__)
