"""
Simulation runners.

This module provides the ``Simulator``, which executes independent replicates
of an experiment on a worker pool, the ``Replicate`` that runs a single
trial, and the progress notification types used to observe a batch.
"""

from .progress import (
    ConsoleProgressListener,
    LoggingProgressListener,
    ProgressEvent,
    ProgressListener,
)
from .replicate import Replicate, ReplicateState
from .simulator import SimulationResult, Simulator

__all__ = [
    'Simulator',
    'SimulationResult',
    'Replicate',
    'ReplicateState',
    'ProgressEvent',
    'ProgressListener',
    'LoggingProgressListener',
    'ConsoleProgressListener',
]
