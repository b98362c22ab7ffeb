"""
Parallel execution of independent replicates.

This module provides the ``Simulator``, which runs a fixed number of
independent replicates of the same experiment (fresh algorithm, problem and
measurement suite per replicate) on a bounded worker pool and reports the
aggregate progress of the whole batch.

EXECUTION MODEL:
- ``init()`` builds N replicates from the factories, in sample order
- ``execute()`` submits all of them to the pool and collects results in
  completion order (``concurrent.futures.as_completed``), never by index
- the pool is shut down once every result has been collected
- ``terminate()`` asks every replicate to stop at its next iteration
  boundary; it does not wait for them

Replicates run on threads rather than processes: they report progress into
this object while they run, and algorithms and measurement suites are
ordinary in-process objects.

PROGRESS AGGREGATION:
The simulator keeps one completion percentage per replicate (the progress
registry). Each report updates one entry, recomputes the mean over the whole
registry and notifies every listener, all under one lock, so listeners never
see a partially updated aggregate.

FAILURE HANDLING:
- ``BindingError``: the replicate never ran. It is recorded in the result,
  removed from the registry so it does not hold the mean down, and the
  remaining replicates carry on.
- ``MeasurementError``: fatal for the batch, re-raised unchanged.
- anything else: fatal for the batch, raised as ``ExecutionError``.
On a fatal failure the remaining replicates are asked to terminate and
queued ones are cancelled (``cancel_on_failure``). The same applies when the
executor refuses a submission; that error is re-raised as is.

If ``execute(timeout=...)`` runs out of time while waiting for results, the
timeout is logged, running replicates are asked to terminate and the result
is returned with ``interrupted=True``.

Usage:
```python
simulator = Simulator(
    algorithm_factory=ObjectFactory(PymooAlgorithm, algorithm="PSO", max_generations=200),
    problem_factory=ObjectFactory(PymooProblem, name="rastrigin", n_var=10),
    measurement_factory=ObjectFactory(MeasurementSuite, measurements=[BestFitness()],
                                      resolution=10),
    samples=30,
    max_workers=4,
)
simulator.add_progress_listener(LoggingProgressListener())
simulator.init()
result = simulator.execute()
print(f"{result.num_completed}/{result.samples} replicates completed")
```
"""

import concurrent.futures
import logging
import threading
import time
from concurrent.futures import Executor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

import numpy as np

from ..config.config_manager import SimulationConfigManager
from ..errors import BindingError, ExecutionError, MeasurementError
from ..utils.factory import ObjectFactory
from .progress import ConsoleProgressListener, ProgressEvent, ProgressListener
from .replicate import Replicate

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    """
    Outcome of ``Simulator.execute()``.

    Attributes:
        samples: Number of replicates constructed.
        completed_replicates: Replicates that finished, in completion order.
        binding_errors: One ``BindingError`` per replicate that could not bind.
        final_progress: Aggregate progress when execution ended.
        total_time: Wall-clock seconds spent in ``execute()``.
        interrupted: True when waiting for results timed out.
    """

    samples: int
    completed_replicates: list[Replicate] = field(default_factory=list)
    binding_errors: list[BindingError] = field(default_factory=list)
    final_progress: float = 0.0
    total_time: float = 0.0
    interrupted: bool = False

    @property
    def num_completed(self) -> int:
        return len(self.completed_replicates)


class Simulator:
    """
    Run ``samples`` independent replicates in parallel and aggregate their progress.

    Args:
        algorithm_factory: Produces a fresh ``Algorithm`` per replicate.
        problem_factory: Produces a fresh ``Problem`` per replicate.
        measurement_factory: Produces a fresh ``MeasurementSuite`` per replicate.
        samples: Number of replicates. Must be at least 1.
        executor: Worker pool to use. Defaults to a ``ThreadPoolExecutor``
                  owned by the simulator.
        max_workers: Size of the default pool. Ignored when ``executor`` is given.
        cancel_on_failure: Terminate remaining replicates and cancel queued
                           ones on the first fatal failure.
        timeout: Default for ``execute(timeout=...)``.

    Raises:
        ValueError: If samples < 1.
    """

    def __init__(self, algorithm_factory: ObjectFactory, problem_factory: ObjectFactory,
                 measurement_factory: ObjectFactory, samples: int,
                 executor: Executor | None = None, max_workers: int | None = None,
                 cancel_on_failure: bool = True, timeout: float | None = None):
        if samples < 1:
            raise ValueError("Number of samples must be at least 1")

        self.algorithm_factory = algorithm_factory
        self.problem_factory = problem_factory
        self.measurement_factory = measurement_factory
        self.samples = samples
        self.cancel_on_failure = cancel_on_failure
        self.timeout = timeout
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="replicate"
        )

        self._replicates: list[Replicate] = []
        self._progress: dict[Replicate, float] = {}
        self._listeners: list[ProgressListener] = []
        self._lock = threading.RLock()
        self._initialised = False
        self._executed = False

    @classmethod
    def from_config(cls, config_manager: SimulationConfigManager,
                    executor: Executor | None = None) -> "Simulator":
        """
        Build a simulator from a ``SimulationConfigManager``.

        A ``ConsoleProgressListener`` is registered when
        ``monitoring.console_progress`` is enabled.
        """
        sim_config = config_manager.get_simulation_config()
        algorithm_factory, problem_factory, measurement_factory = config_manager.create_factories()

        simulator = cls(
            algorithm_factory=algorithm_factory,
            problem_factory=problem_factory,
            measurement_factory=measurement_factory,
            samples=sim_config.samples,
            executor=executor,
            max_workers=sim_config.max_workers,
            cancel_on_failure=sim_config.cancel_on_failure,
            timeout=sim_config.timeout_seconds,
        )
        if config_manager.get_monitoring_config().console_progress:
            simulator.add_progress_listener(ConsoleProgressListener())
        return simulator

    @property
    def replicates(self) -> list[Replicate]:
        return list(self._replicates)

    @property
    def executor(self) -> Executor:
        return self._executor

    @property
    def progress(self) -> float:
        """Current aggregate progress: mean of the progress registry."""
        with self._lock:
            return self._aggregate()

    def init(self) -> None:
        """
        Create one replicate per sample, each with fresh collaborators.

        Raises:
            RuntimeError: If called more than once.
            Exception: Any factory failure propagates and aborts initialisation.
        """
        if self._initialised:
            raise RuntimeError("Simulator has already been initialised")

        replicates = []
        for index in range(self.samples):
            replicates.append(Replicate(
                simulator=self,
                algorithm=self.algorithm_factory.new_instance(),
                problem=self.problem_factory.new_instance(),
                measurement_suite=self.measurement_factory.new_instance(),
                index=index,
            ))

        with self._lock:
            self._replicates = replicates
            self._progress = {replicate: 0.0 for replicate in replicates}
        self._initialised = True
        logger.info("Initialised %d replicates", self.samples)

    def execute(self, timeout: float | None = None) -> SimulationResult:
        """
        Run every replicate on the worker pool and wait for all of them.

        Args:
            timeout: Maximum seconds to wait for all results. Defaults to the
                     timeout given at construction; None waits
                     indefinitely.

        Returns:
            SimulationResult: Completed replicates in completion order and any
                              binding failures.

        Raises:
            RuntimeError: If ``init()`` was not called, ``execute()`` already ran,
                          or the executor refuses a submission.
            MeasurementError: If a replicate's measurement suite fails.
            ExecutionError: If a replicate fails for any other reason.
        """
        if not self._initialised:
            raise RuntimeError("Simulator.init() must be called before execute()")
        if self._executed:
            raise RuntimeError("Simulator.execute() can only be called once")
        self._executed = True
        if timeout is None:
            timeout = self.timeout

        logger.info("🔄 Starting simulation: %d replicates", self.samples)
        start_time = time.time()
        result = SimulationResult(samples=self.samples)

        future_to_replicate = {}
        try:
            for replicate in self._replicates:
                future = self._executor.submit(self._run_replicate, replicate)
                future_to_replicate[future] = replicate
        except Exception as e:
            logger.error("Could not submit replicate %d: %s", replicate.index, e)
            self._abort()
            raise

        try:
            for future in as_completed(future_to_replicate, timeout=timeout):
                replicate = future_to_replicate[future]
                try:
                    future.result()
                except BindingError as e:
                    logger.warning("Replicate %d not run: %s", replicate.index, e)
                    result.binding_errors.append(e)
                    continue
                except MeasurementError:
                    logger.error("Replicate %d: measurement failure, aborting batch",
                                 replicate.index)
                    self._abort()
                    raise
                except Exception as e:
                    logger.error("Replicate %d failed: %s", replicate.index, e)
                    self._abort()
                    raise ExecutionError(
                        f"Replicate {replicate.index} failed: {e}", replicate=replicate
                    ) from e

                result.completed_replicates.append(replicate)
                logger.debug("[%d/%d] Replicate %d retrieved",
                             len(result.completed_replicates) + len(result.binding_errors),
                             self.samples, replicate.index)

        except concurrent.futures.TimeoutError:
            retrieved = len(result.completed_replicates) + len(result.binding_errors)
            logger.error("Timed out after %.1fs waiting for replicates (%d/%d retrieved)",
                         timeout, retrieved, self.samples)
            result.interrupted = True
            self.terminate()
            self._executor.shutdown(wait=False, cancel_futures=True)
        else:
            self._executor.shutdown(wait=True)

        result.final_progress = self.progress
        result.total_time = time.time() - start_time
        logger.info("✅ Simulation finished: %d completed, %d binding failures, %.1fs",
                    result.num_completed, len(result.binding_errors), result.total_time)
        return result

    def terminate(self) -> None:
        """Request cooperative termination of every replicate. Does not wait."""
        for replicate in list(self._replicates):
            replicate.terminate()

    def add_progress_listener(self, listener: ProgressListener) -> None:
        """Register a listener. Adding the same listener twice notifies it twice."""
        with self._lock:
            self._listeners.append(listener)

    def remove_progress_listener(self, listener: ProgressListener) -> None:
        """Remove one registration of ``listener``; unknown listeners are ignored."""
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def update_progress(self, replicate: Replicate, percentage: float) -> None:
        """
        Record the completion percentage of ``replicate`` and notify listeners.

        Raises:
            ValueError: If the replicate is not part of the registry, or the
                        percentage is outside [0, 100].
        """
        percentage = float(percentage)
        if not 0.0 <= percentage <= 100.0:
            raise ValueError(f"Percentage must be in [0, 100], got {percentage}")

        with self._lock:
            if replicate not in self._progress:
                raise ValueError(f"{replicate!r} is not registered with this simulator")
            self._progress[replicate] = percentage
            self._notify_progress()

    def _run_replicate(self, replicate: Replicate) -> Replicate:
        try:
            replicate.run()
        except BindingError:
            self._exclude(replicate)
            raise
        return replicate

    def _exclude(self, replicate: Replicate) -> None:
        with self._lock:
            self._progress.pop(replicate, None)
            self._notify_progress()

    def _aggregate(self) -> float:
        if not self._progress:
            return 0.0
        return float(np.mean(list(self._progress.values())))

    def _notify_progress(self) -> None:
        # Caller holds self._lock
        if not self._progress:
            return
        event = ProgressEvent(self._aggregate())
        for listener in list(self._listeners):
            listener.handle_progress(event)

    def _abort(self) -> None:
        if self.cancel_on_failure:
            self.terminate()
            self._executor.shutdown(wait=False, cancel_futures=True)
        else:
            self._executor.shutdown(wait=False)
