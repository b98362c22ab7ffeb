"""
Iterative algorithms that can be driven by a replicate.

This module provides the ``Algorithm`` contract (lifecycle events, problem
binding, cooperative termination) and an adapter for pymoo's
single-objective algorithms.
"""

from .base import Algorithm, AlgorithmEvent, AlgorithmListener
from .pymoo_algorithm import PYMOO_ALGORITHMS, PymooAlgorithm

__all__ = [
    "Algorithm",
    "AlgorithmEvent",
    "AlgorithmListener",
    "PymooAlgorithm",
    "PYMOO_ALGORITHMS",
]
