"""
Base classes for iterative algorithms driven by a replicate.

An ``Algorithm`` is advanced one iteration at a time by ``run()``, which
notifies registered ``AlgorithmListener`` objects of three lifecycle events:

- ``algorithm_started``: exactly once, before the first iteration
- ``iteration_completed``: once after every iteration
- ``algorithm_finished``: exactly once, after the last iteration or after a
  cooperative termination request was honoured

Termination is cooperative. ``terminate()`` only sets a flag; the run loop
checks it between iterations, so an iteration in progress is always allowed
to complete.

Problems are attached through ``accept_problem()``. Each algorithm class lists
the problem capabilities it supports in ``accepted_problems``; anything else
raises ``BindingError``.

Example:
    ```python
    class RandomSearch(Algorithm):
        accepted_problems = (OptimisationProblem,)

        def _perform_iteration(self):
            ...

        def is_finished(self):
            return self.iterations >= 100

        def percentage_complete(self):
            return self.iterations / 100 * 100.0
    ```
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from ..errors import BindingError
from ..problems.base import Problem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlgorithmEvent:
    """Lifecycle notification sent by an algorithm to its listeners."""

    source: "Algorithm"


class AlgorithmListener:
    """Receives lifecycle events from an ``Algorithm``. All hooks default to no-ops."""

    def algorithm_started(self, event: AlgorithmEvent) -> None:
        pass

    def iteration_completed(self, event: AlgorithmEvent) -> None:
        pass

    def algorithm_finished(self, event: AlgorithmEvent) -> None:
        pass


class Algorithm(ABC):
    """
    Abstract iterative algorithm.

    Subclasses implement ``_perform_iteration``, ``is_finished`` and
    ``percentage_complete``, and may override ``_initialise`` and
    ``best_fitness``.

    Attributes:
        accepted_problems: Problem capability types this algorithm binds to.
        problem: The bound problem, or None before binding.
    """

    accepted_problems: tuple[type[Problem], ...] = ()

    def __init__(self):
        self.problem: Problem | None = None
        self._listeners: list[AlgorithmListener] = []
        self._iterations = 0
        self._termination_requested = threading.Event()

    # ------------------------------------------------------------------
    # Problem binding
    # ------------------------------------------------------------------

    def accept_problem(self, problem: Problem) -> None:
        """
        Bind ``problem`` if its capability is listed in ``accepted_problems``.

        Raises:
            BindingError: If the capability is not accepted, or the problem
                          declares no capability at all.
        """
        try:
            capability = problem.capability()
        except TypeError as e:
            raise BindingError(type(self), type(problem)) from e

        if capability not in self.accepted_problems:
            raise BindingError(type(self), type(problem))

        self.set_problem(problem)
        logger.debug("Bound %s to %s (%s)", type(self).__name__,
                     type(problem).__name__, capability.__name__)

    def set_problem(self, problem: Problem) -> None:
        self.problem = problem

    def assign_replicate(self, index: int) -> None:
        """
        Derive per-replicate state from the sample index.

        Called once by the owning replicate before the run. Algorithms with
        random state use it to give every replicate its own stream.
        """
        pass

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: AlgorithmListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: AlgorithmListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _fire(self, hook: str) -> None:
        event = AlgorithmEvent(source=self)
        for listener in list(self._listeners):
            getattr(listener, hook)(event)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialise(self) -> None:
        """Prepare for a run. A pending termination request is preserved."""
        if self.problem is None:
            raise RuntimeError(f"{type(self).__name__} has no problem; call accept_problem() first")
        self._iterations = 0
        self._initialise()

    def run(self) -> None:
        """Iterate until finished or terminated, notifying listeners."""
        self._fire("algorithm_started")

        while not self._termination_requested.is_set() and not self.is_finished():
            self._perform_iteration()
            self._iterations += 1
            self._fire("iteration_completed")

        if self._termination_requested.is_set():
            logger.debug("%s stopped after %d iterations on request",
                         type(self).__name__, self._iterations)

        self._fire("algorithm_finished")

    def terminate(self) -> None:
        """Request a stop at the next iteration boundary."""
        self._termination_requested.set()

    @property
    def termination_requested(self) -> bool:
        return self._termination_requested.is_set()

    @property
    def iterations(self) -> int:
        return self._iterations

    def _initialise(self) -> None:
        pass

    @abstractmethod
    def _perform_iteration(self) -> None:
        """Advance the algorithm by exactly one iteration."""
        pass

    @abstractmethod
    def is_finished(self) -> bool:
        """Return True once the algorithm's own stopping criteria are met."""
        pass

    @abstractmethod
    def percentage_complete(self) -> float:
        """Return progress towards the stopping criteria in [0, 100]."""
        pass

    def best_fitness(self) -> Any:
        """Return the best objective value found so far, if the algorithm tracks one."""
        raise NotImplementedError(f"{type(self).__name__} does not track a best fitness")
