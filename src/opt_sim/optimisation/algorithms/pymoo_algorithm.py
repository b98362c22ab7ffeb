"""
Adapter running a pymoo single-objective algorithm one generation at a time.

pymoo's ``minimize`` drives an algorithm to completion in one call. A
replicate needs to observe every generation and to stop between generations
on request, so this adapter uses pymoo's ask-and-advance interface instead:
``setup()`` once, then ``next()`` per iteration while ``has_next()``.

Stopping criteria are ordinary pymoo terminations. A generation limit is
always present; a wall-clock limit can be added and the two are combined
with ``TerminationCollection`` (stop when either is met). Progress is pymoo's
own ``termination.perc`` expressed as a percentage.

Example:
    ```python
    algorithm = PymooAlgorithm("PSO", max_generations=100, pop_size=25, w=0.7)
    algorithm.accept_problem(PymooProblem("sphere", n_var=5))
    algorithm.initialise()
    algorithm.run()
    print(algorithm.best_fitness())
    ```
"""

import logging
from typing import Any

import numpy as np
from pymoo.algorithms.soo.nonconvex.de import DE
from pymoo.algorithms.soo.nonconvex.ga import GA
from pymoo.algorithms.soo.nonconvex.pso import PSO
from pymoo.termination import get_termination
from pymoo.termination.collection import TerminationCollection
from pymoo.termination.max_time import TimeBasedTermination

from ..problems.base import OptimisationProblem
from .base import Algorithm

logger = logging.getLogger(__name__)

PYMOO_ALGORITHMS = {
    "PSO": PSO,
    "GA": GA,
    "DE": DE,
}


class PymooAlgorithm(Algorithm):
    """
    Single-objective pymoo algorithm exposed through the ``Algorithm`` contract.

    Args:
        algorithm: Name of the pymoo algorithm ("PSO", "GA" or "DE").
        max_generations: Generation limit, always applied.
        max_time_seconds: Optional wall-clock limit in seconds.
        seed: Base random seed. Each replicate derives its own seed from it
              (see ``assign_replicate``). None draws a fresh seed per run.
        **algorithm_params: Keyword arguments for the pymoo algorithm
                            constructor, e.g. ``pop_size``, ``w``, ``c1``, ``c2``.

    Raises:
        ValueError: For an unknown algorithm name or non-positive limits.
    """

    accepted_problems = (OptimisationProblem,)

    def __init__(self, algorithm: str = "PSO", max_generations: int = 100,
                 max_time_seconds: float | None = None, seed: int | None = None,
                 **algorithm_params: Any):
        super().__init__()
        if algorithm not in PYMOO_ALGORITHMS:
            raise ValueError(
                f"Unknown pymoo algorithm '{algorithm}'. "
                f"Expected one of {sorted(PYMOO_ALGORITHMS)}"
            )
        if max_generations < 1:
            raise ValueError("Max generations must be positive")
        if max_time_seconds is not None and max_time_seconds <= 0:
            raise ValueError("Max time must be positive")

        self.algorithm_name = algorithm
        self.max_generations = max_generations
        self.max_time_seconds = max_time_seconds
        self.seed = seed
        self.replicate_seed = seed
        self.algorithm_params = algorithm_params
        self.pymoo_algorithm = PYMOO_ALGORITHMS[algorithm](**algorithm_params)

    def assign_replicate(self, index: int) -> None:
        """
        Spawn an independent seed for replicate ``index`` from the base seed.

        Replicates built from the same configured seed get distinct streams,
        and the same index always gets the same stream. Unseeded algorithms
        are left unseeded.
        """
        if self.seed is None:
            return
        seed_sequence = np.random.SeedSequence(self.seed, spawn_key=(index,))
        self.replicate_seed = int(seed_sequence.generate_state(1)[0])
        logger.debug("Replicate %d seeded with %d (base seed %d)",
                     index, self.replicate_seed, self.seed)

    def _create_termination(self):
        termination = get_termination("n_gen", self.max_generations)
        if self.max_time_seconds is not None:
            termination = TerminationCollection(
                termination, TimeBasedTermination(self.max_time_seconds)
            )
        return termination

    def _initialise(self) -> None:
        self.pymoo_algorithm.setup(
            self.problem.to_pymoo(),
            termination=self._create_termination(),
            seed=self.replicate_seed,
            verbose=False,
        )
        logger.debug("%s set up on %s (max %d generations)",
                     self.algorithm_name, self.problem.name, self.max_generations)

    def _perform_iteration(self) -> None:
        self.pymoo_algorithm.next()

    def is_finished(self) -> bool:
        return not self.pymoo_algorithm.has_next()

    def percentage_complete(self) -> float:
        termination = getattr(self.pymoo_algorithm, "termination", None)
        if termination is None:
            return 0.0
        return float(min(max(termination.perc, 0.0), 1.0) * 100.0)

    def best_fitness(self) -> float:
        opt = self.pymoo_algorithm.opt
        if opt is None or len(opt) == 0:
            return float("nan")
        return float(opt.get("F").min())
