"""
Tests for the Algorithm contract.

Covers problem binding through declared capabilities, the lifecycle event
sequence emitted by ``run()``, and cooperative termination.
"""

import pytest
from fixtures import (
    CountingAlgorithm,
    DataTableProblem,
    EventRecorder,
    NoCapabilityProblem,
    StubProblem,
    SubDataTableProblem,
)

from opt_sim.optimisation.errors import BindingError
from opt_sim.optimisation.problems import OptimisationProblem, Problem, PymooProblem


class TestProblemCapability:
    """Test capability lookup on problem classes."""

    def test_capability_is_declaring_class(self):
        assert StubProblem.capability() is OptimisationProblem
        assert PymooProblem.capability() is OptimisationProblem
        assert DataTableProblem.capability() is DataTableProblem

    def test_most_specific_capability_wins(self):
        """A subclass without its own declaration inherits its parent's capability."""
        assert SubDataTableProblem.capability() is DataTableProblem

        class NarrowerProblem(DataTableProblem, capability=True):
            pass

        class Leaf(NarrowerProblem):
            pass

        assert Leaf.capability() is NarrowerProblem

    def test_missing_capability_raises(self):
        with pytest.raises(TypeError, match="does not declare a problem capability"):
            NoCapabilityProblem.capability()

        with pytest.raises(TypeError):
            Problem.capability()


class TestProblemBinding:
    """Test Algorithm.accept_problem."""

    def test_accepts_matching_capability(self):
        algorithm = CountingAlgorithm()
        problem = StubProblem()

        algorithm.accept_problem(problem)

        assert algorithm.problem is problem
        print("✅ Matching capability binds")

    def test_rejects_other_capability(self):
        algorithm = CountingAlgorithm()

        with pytest.raises(BindingError) as exc_info:
            algorithm.accept_problem(DataTableProblem())

        error = exc_info.value
        assert error.algorithm_type is CountingAlgorithm
        assert error.problem_type is DataTableProblem
        assert "CountingAlgorithm" in str(error)
        assert "DataTableProblem" in str(error)
        assert algorithm.problem is None

    def test_rejects_problem_without_capability(self):
        with pytest.raises(BindingError) as exc_info:
            CountingAlgorithm().accept_problem(NoCapabilityProblem())

        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_binding_is_deterministic(self):
        """Identical types bind, or fail, identically on every attempt."""
        messages = set()
        for _ in range(5):
            with pytest.raises(BindingError) as exc_info:
                CountingAlgorithm().accept_problem(SubDataTableProblem())
            messages.add(str(exc_info.value))

        assert len(messages) == 1

        for _ in range(5):
            CountingAlgorithm().accept_problem(StubProblem())


class TestAlgorithmLifecycle:
    """Test the run loop and its events."""

    def _bound_algorithm(self, **kwargs):
        algorithm = CountingAlgorithm(**kwargs)
        algorithm.accept_problem(StubProblem())
        return algorithm

    def test_event_order(self):
        algorithm = self._bound_algorithm(max_iterations=3)
        recorder = EventRecorder()
        algorithm.add_listener(recorder)

        algorithm.initialise()
        algorithm.run()

        assert recorder.events == [
            ("started", 0),
            ("iteration", 1),
            ("iteration", 2),
            ("iteration", 3),
            ("finished", 3),
        ]
        assert algorithm.iterations == 3
        assert algorithm.percentage_complete() == 100.0

    def test_initialise_requires_problem(self):
        with pytest.raises(RuntimeError, match="accept_problem"):
            CountingAlgorithm().initialise()

    def test_terminate_before_run(self):
        """A pending termination request survives initialise() and stops the run at once."""
        algorithm = self._bound_algorithm(max_iterations=100)
        recorder = EventRecorder()
        algorithm.add_listener(recorder)

        algorithm.terminate()
        algorithm.initialise()
        algorithm.run()

        assert algorithm.termination_requested
        assert algorithm.iterations == 0
        assert recorder.events == [("started", 0), ("finished", 0)]

    def test_terminate_during_run(self):
        """Termination is observed at the next iteration boundary."""
        algorithm = self._bound_algorithm(max_iterations=1000)

        class StopAfterFour(EventRecorder):
            def iteration_completed(self, event):
                super().iteration_completed(event)
                if event.source.iterations == 4:
                    event.source.terminate()

        recorder = StopAfterFour()
        algorithm.add_listener(recorder)
        algorithm.initialise()
        algorithm.run()

        assert algorithm.iterations == 4
        assert recorder.events[-1] == ("finished", 4)
        assert [name for name, _ in recorder.events].count("finished") == 1

    def test_removed_listener_not_notified(self):
        algorithm = self._bound_algorithm(max_iterations=2)
        recorder = EventRecorder()
        algorithm.add_listener(recorder)
        algorithm.remove_listener(recorder)
        algorithm.remove_listener(recorder)  # unknown listener is ignored

        algorithm.initialise()
        algorithm.run()

        assert recorder.events == []

    def test_best_fitness_not_tracked_by_default(self):
        from opt_sim.optimisation.algorithms import Algorithm

        class Minimal(Algorithm):
            def _perform_iteration(self):
                pass

            def is_finished(self):
                return True

            def percentage_complete(self):
                return 100.0

        with pytest.raises(NotImplementedError):
            Minimal().best_fitness()
