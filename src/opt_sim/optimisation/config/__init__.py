"""
Configuration management for replicate simulations.

This module provides structured, validated configuration for a simulation
batch: replicate count and worker pool, algorithm and problem selection,
measurements, and monitoring options.
"""

from .config_manager import (
    ComponentConfig,
    MeasurementConfig,
    MonitoringConfig,
    SimulationConfig,
    SimulationConfigManager,
)

__all__ = [
    "SimulationConfig",
    "ComponentConfig",
    "MeasurementConfig",
    "MonitoringConfig",
    "SimulationConfigManager",
]
