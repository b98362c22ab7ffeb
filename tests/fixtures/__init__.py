"""Test fixtures and stub collaborators for simulation tests."""

import threading
import time

import pytest
from pymoo.problems import get_problem

from opt_sim.optimisation.algorithms import Algorithm
from opt_sim.optimisation.measurements import Iterations, MeasurementSuite, PercentageComplete
from opt_sim.optimisation.problems import OptimisationProblem, Problem
from opt_sim.optimisation.utils import ObjectFactory


class CountingAlgorithm(Algorithm):
    """
    Deterministic algorithm that finishes after ``max_iterations`` iterations.

    Completion percentage is iterations / max_iterations * 100. An optional
    per-iteration delay makes runs long enough to observe termination.
    """

    accepted_problems = (OptimisationProblem,)

    def __init__(self, max_iterations: int = 10, iteration_delay: float = 0.0,
                 fail_at: int | None = None):
        super().__init__()
        self.max_iterations = max_iterations
        self.iteration_delay = iteration_delay
        self.fail_at = fail_at
        self.initialise_calls = 0

    def _initialise(self):
        self.initialise_calls += 1

    def _perform_iteration(self):
        if self.fail_at is not None and self.iterations + 1 == self.fail_at:
            raise RuntimeError(f"iteration {self.fail_at} exploded")
        if self.iteration_delay:
            time.sleep(self.iteration_delay)

    def is_finished(self):
        return self.iterations >= self.max_iterations

    def percentage_complete(self):
        return self.iterations / self.max_iterations * 100.0

    def best_fitness(self):
        return float(self.max_iterations - self.iterations)


class UntrackedFitnessAlgorithm(CountingAlgorithm):
    """CountingAlgorithm without a best fitness; BestFitness cannot sample it."""

    best_fitness = Algorithm.best_fitness


class StubProblem(OptimisationProblem):
    """Optimisation problem accepted by CountingAlgorithm."""

    def to_pymoo(self):
        return get_problem("sphere", n_var=2)


class DataTableProblem(Problem, capability=True):
    """Problem capability that no test algorithm accepts."""


class SubDataTableProblem(DataTableProblem):
    """Inherits the DataTableProblem capability."""


class NoCapabilityProblem(Problem):
    """Problem that never declares a capability."""


class EventRecorder:
    """Algorithm listener recording hook names in call order."""

    def __init__(self):
        self.events = []

    def algorithm_started(self, event):
        self.events.append(("started", event.source.iterations))

    def iteration_completed(self, event):
        self.events.append(("iteration", event.source.iterations))

    def algorithm_finished(self, event):
        self.events.append(("finished", event.source.iterations))


class RecordingProgressListener:
    """Thread-safe progress listener keeping every received percentage."""

    def __init__(self):
        self._lock = threading.Lock()
        self.percentages = []

    def handle_progress(self, event):
        with self._lock:
            self.percentages.append(event.percentage)


def make_suite_factory(resolution: int = 1, output_dir=None) -> ObjectFactory:
    def new_suite():
        return MeasurementSuite([Iterations(), PercentageComplete()],
                                resolution=resolution, output_dir=output_dir)
    return ObjectFactory(new_suite)


@pytest.fixture
def counting_algorithm_factory():
    """Factory for 10-iteration counting algorithms."""
    return ObjectFactory(CountingAlgorithm, max_iterations=10)


@pytest.fixture
def stub_problem_factory():
    return ObjectFactory(StubProblem)


@pytest.fixture
def suite_factory():
    """Measurement suites sampling every 5 iterations."""
    return make_suite_factory(resolution=5)
