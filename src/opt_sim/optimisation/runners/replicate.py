"""
A single replicate: one algorithm run against one problem, with its own
measurement suite.

The replicate owns its algorithm, problem and measurement suite exclusively
and is run exactly once. It listens to its algorithm and translates the
algorithm's lifecycle events into measurement and progress reporting:

- started: the measurement suite is initialised
- iteration completed: every ``resolution`` iterations the suite takes a
  sample and the current completion percentage is reported to the simulator
- finished: a final sample is taken, the final percentage is reported and
  the suite is closed

State transitions:
    CONSTRUCTED -> BOUND -> RUNNING -> FINISHED
    CONSTRUCTED -> BIND_FAILED
    RUNNING -> TERMINATING -> FINISHED
"""

import enum
import logging
import threading

from ..algorithms.base import Algorithm, AlgorithmEvent, AlgorithmListener
from ..errors import BindingError, MeasurementError
from ..measurements.suite import MeasurementSuite
from ..problems.base import Problem

logger = logging.getLogger(__name__)


class ReplicateState(enum.Enum):
    CONSTRUCTED = "constructed"
    BOUND = "bound"
    RUNNING = "running"
    TERMINATING = "terminating"
    FINISHED = "finished"
    BIND_FAILED = "bind_failed"


class Replicate(AlgorithmListener):
    """
    One independent trial managed by a ``Simulator``.

    Args:
        simulator: Receives progress through ``update_progress(replicate, percentage)``.
        algorithm: Algorithm instance owned by this replicate.
        problem: Problem instance owned by this replicate.
        measurement_suite: Measurement suite owned by this replicate.
        index: Sample index assigned by the simulator. Passed on to the
               algorithm and the suite through ``assign_replicate``.
    """

    def __init__(self, simulator, algorithm: Algorithm, problem: Problem,
                 measurement_suite: MeasurementSuite, index: int = 0):
        self.simulator = simulator
        self.algorithm = algorithm
        self.problem = problem
        self.measurement_suite = measurement_suite
        self.index = index
        algorithm.assign_replicate(index)
        measurement_suite.assign_replicate(index)
        self._state = ReplicateState.CONSTRUCTED
        self._state_lock = threading.Lock()
        self._started = False

    def __repr__(self) -> str:
        return (f"Replicate(index={self.index}, algorithm={type(self.algorithm).__name__}, "
                f"problem={type(self.problem).__name__}, state={self._state.name})")

    @property
    def state(self) -> ReplicateState:
        return self._state

    def _set_state(self, state: ReplicateState) -> None:
        with self._state_lock:
            self._state = state

    def run(self) -> None:
        """
        Bind the problem to the algorithm and drive the algorithm to completion.

        Raises:
            BindingError: If the algorithm does not accept the problem. The
                          algorithm is never started in that case.
            RuntimeError: If the replicate has already been run.
            MeasurementError: If the measurement suite fails.
        """
        with self._state_lock:
            if self._started:
                raise RuntimeError(f"Replicate {self.index} has already been run ({self._state.name})")
            self._started = True

        try:
            self.algorithm.accept_problem(self.problem)
        except BindingError:
            self._set_state(ReplicateState.BIND_FAILED)
            raise

        with self._state_lock:
            # terminate() may already have been requested while queued
            if self._state is not ReplicateState.TERMINATING:
                self._state = ReplicateState.BOUND

        self.algorithm.add_listener(self)
        self.algorithm.initialise()

        with self._state_lock:
            if self._state is ReplicateState.BOUND:
                self._state = ReplicateState.RUNNING

        logger.debug("Replicate %d running", self.index)
        self.algorithm.run()

    def terminate(self) -> None:
        """Ask the algorithm to stop at its next iteration boundary."""
        with self._state_lock:
            if self._state in (ReplicateState.CONSTRUCTED, ReplicateState.BOUND,
                               ReplicateState.RUNNING):
                self._state = ReplicateState.TERMINATING
        self.algorithm.terminate()

    # Algorithm events

    def algorithm_started(self, event: AlgorithmEvent) -> None:
        self.measurement_suite.initialise()

    def iteration_completed(self, event: AlgorithmEvent) -> None:
        algorithm = event.source
        if algorithm.iterations % self.measurement_suite.resolution == 0:
            self.measurement_suite.measure(algorithm)
            self.simulator.update_progress(self, algorithm.percentage_complete())

    def algorithm_finished(self, event: AlgorithmEvent) -> None:
        algorithm = event.source
        self.measurement_suite.measure(algorithm)
        self.simulator.update_progress(self, algorithm.percentage_complete())
        try:
            self.measurement_suite.close()
        except MeasurementError:
            raise
        except Exception as e:
            raise MeasurementError(
                f"Replicate {self.index} failed to close its measurement suite"
            ) from e
        self._set_state(ReplicateState.FINISHED)
        logger.debug("Replicate %d finished after %d iterations",
                     self.index, algorithm.iterations)
