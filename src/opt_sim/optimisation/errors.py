"""
Exception taxonomy for replicate simulations.

- BindingError: a problem cannot be attached to an algorithm. Local to the
  replicate that raised it; sibling replicates keep running.
- MeasurementError: a measurement suite failed to sample or close. Fatal for
  the whole batch.
- ExecutionError: any other failure of a replicate task. Fatal for the whole
  batch.
"""


class SimulationError(Exception):
    """Base class for all simulation failures."""


class BindingError(SimulationError):
    """Raised when an algorithm does not accept the capability of a problem."""

    def __init__(self, algorithm_type: type, problem_type: type):
        self.algorithm_type = algorithm_type
        self.problem_type = problem_type
        super().__init__(
            f"{algorithm_type.__qualname__} does not support problems of type "
            f"{problem_type.__qualname__}"
        )

    def __reduce__(self):
        return (type(self), (self.algorithm_type, self.problem_type))


class MeasurementError(SimulationError):
    """Raised when a measurement suite cannot record or release its samples."""


class ExecutionError(SimulationError):
    """Raised when a replicate task fails unexpectedly."""

    def __init__(self, message: str, replicate=None):
        super().__init__(message)
        self.replicate = replicate
