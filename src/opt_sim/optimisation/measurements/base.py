import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class Measurement(ABC):
    """Base class for a single quantity sampled from a running algorithm."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def get_value(self, algorithm) -> Any:
        """Return the current value of this measurement for ``algorithm``."""
        pass


class Iterations(Measurement):
    """Number of completed iterations."""

    def get_value(self, algorithm) -> int:
        return algorithm.iterations


class PercentageComplete(Measurement):
    """Progress towards the algorithm's stopping criteria."""

    def get_value(self, algorithm) -> float:
        return float(algorithm.percentage_complete())


class BestFitness(Measurement):
    """Best objective value found so far."""

    def get_value(self, algorithm) -> float:
        return float(algorithm.best_fitness())


MEASUREMENTS = {
    "Iterations": Iterations,
    "PercentageComplete": PercentageComplete,
    "BestFitness": BestFitness,
}


def create_measurements(names: list[str]) -> list[Measurement]:
    """Instantiate built-in measurements by name."""
    unknown = [name for name in names if name not in MEASUREMENTS]
    if unknown:
        raise ValueError(f"Unknown measurement(s) {unknown}. Available: {sorted(MEASUREMENTS)}")
    return [MEASUREMENTS[name]() for name in names]
