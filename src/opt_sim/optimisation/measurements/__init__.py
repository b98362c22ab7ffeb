from .base import (
    MEASUREMENTS,
    BestFitness,
    Iterations,
    Measurement,
    PercentageComplete,
    create_measurements,
)
from .suite import MeasurementSuite

__all__ = ["Measurement",
           "Iterations",
           "PercentageComplete",
           "BestFitness",
           "MEASUREMENTS",
           "create_measurements",
           "MeasurementSuite"]
