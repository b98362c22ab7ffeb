"""
Configuration data classes and management for replicate simulations.

This module defines structured configuration classes for a simulation batch
and provides validation and loading capabilities from YAML files or plain
dictionaries.

The configuration system supports:
- Batch size, worker pool size and failure policy
- Algorithm and problem selection (registry name or dotted import path)
- Measurement selection, sampling resolution and output location
- Logging and progress monitoring options

Example YAML Configuration:
```yaml
simulation:
  samples: 30
  max_workers: 4
  cancel_on_failure: true
  timeout_seconds: 600

algorithm:
  type: "PymooAlgorithm"
  params:
    algorithm: "PSO"
    max_generations: 200
    pop_size: 40

problem:
  type: "PymooProblem"
  params:
    name: "rastrigin"
    n_var: 10

measurements:
  resolution: 10
  output_dir: "results/rastrigin"
  measures: ["Iterations", "PercentageComplete", "BestFitness"]

monitoring:
  log_level: "INFO"
  log_dir: "logs"
  console_progress: true
```

Usage:
```python
config_manager = SimulationConfigManager('simulation.yaml')
simulator = Simulator.from_config(config_manager)
```
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..algorithms.pymoo_algorithm import PymooAlgorithm
from ..measurements.base import MEASUREMENTS, create_measurements
from ..measurements.suite import MeasurementSuite
from ..problems.pymoo_problems import FunctionProblem, PymooProblem
from ..utils.factory import ObjectFactory

logger = logging.getLogger(__name__)

ALGORITHM_TYPES = {
    "PymooAlgorithm": PymooAlgorithm,
}

PROBLEM_TYPES = {
    "PymooProblem": PymooProblem,
    "FunctionProblem": FunctionProblem,
}


@dataclass
class SimulationConfig:
    """
    Batch configuration.

    Attributes:
        samples: Number of independent replicates (REQUIRED, >= 1).
        max_workers: Worker pool size. None lets the executor choose.
        cancel_on_failure: Terminate the other replicates on the first fatal
            failure instead of letting them run to completion.
        timeout_seconds: Maximum time to wait for all replicates. None waits
            indefinitely.
    """

    samples: int  # REQUIRED - no default
    max_workers: int | None = None
    cancel_on_failure: bool = True
    timeout_seconds: float | None = None

    def __post_init__(self):
        """Validate simulation configuration."""
        if self.samples < 1:
            raise ValueError("Number of samples must be at least 1")

        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("Max workers must be positive")

        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError("Timeout must be positive")


@dataclass
class ComponentConfig:
    """A configurable component: a type name plus constructor parameters."""

    type: str
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.type:
            raise ValueError("Component type must be a non-empty string")
        if not isinstance(self.params, dict):
            raise ValueError(f"Component params must be a dictionary, got {type(self.params)}")


@dataclass
class MeasurementConfig:
    """
    Measurement configuration.

    Attributes:
        resolution: Sample every N iterations.
        output_dir: Directory for per-replicate CSV files. None keeps
            samples in memory only.
        measures: Names of built-in measurements to record.
    """

    resolution: int = 1
    output_dir: str | None = None
    measures: list[str] = field(
        default_factory=lambda: ["Iterations", "PercentageComplete", "BestFitness"]
    )

    def __post_init__(self):
        """Validate measurement configuration."""
        if self.resolution < 1:
            raise ValueError("Measurement resolution must be positive")

        unknown = [name for name in self.measures if name not in MEASUREMENTS]
        if unknown:
            raise ValueError(f"Unknown measurement(s) {unknown}. Available: {sorted(MEASUREMENTS)}")


@dataclass
class MonitoringConfig:
    """
    Logging and progress monitoring configuration.

    Attributes:
        log_level: Console logging verbosity.
        log_dir: Directory for the run log file. None disables file logging.
        console_progress: Print aggregate progress to the terminal.
    """

    log_level: str = "INFO"
    log_dir: str | None = None
    console_progress: bool = False

    def __post_init__(self):
        """Validate monitoring configuration."""
        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
        if self.log_level not in valid_log_levels:
            raise ValueError(f"Log level must be one of {valid_log_levels}")


class SimulationConfigManager:
    """
    Configuration manager for replicate simulations.

    Loads a configuration from a YAML file or a dictionary, validates it and
    exposes the structured sections.

    Configuration Structure:
        ```yaml
        simulation: {...}      # Batch size, workers, failure policy
        algorithm: {...}       # Algorithm type and parameters
        problem: {...}         # Problem type and parameters
        measurements: {...}    # Optional: measurement selection and output
        monitoring: {...}      # Optional: logging and progress output
        ```
    """

    def __init__(self, config_path: str | None = None, config_dict: dict | None = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to YAML configuration file
            config_dict: Configuration dictionary (alternative to file)

        Raises:
            FileNotFoundError: If config_path doesn't exist
            ValueError: If both, neither, or invalid config sources provided
            yaml.YAMLError: If YAML file is malformed
            ValueError: If configuration validation fails
        """
        if config_path and config_dict:
            raise ValueError("Provide either config_path or config_dict, not both")

        if not config_path and not config_dict:
            raise ValueError(
                "Configuration is required. Provide either:\n"
                "  - config_path: Path to YAML configuration file\n"
                "  - config_dict: Configuration dictionary\n"
                "Example: SimulationConfigManager('simulation.yaml')"
            )

        if config_path:
            self.config = self._load_yaml_config(config_path)
        else:
            self.config = config_dict
            logger.debug("Using provided configuration dictionary")

        self._validate_config()
        self._setup_structured_configs()

    def _load_yaml_config(self, config_path: str) -> dict[str, Any]:
        """Load configuration from YAML file with error handling."""
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(config, dict):
            raise ValueError(f"Configuration must be a dictionary, got {type(config)}")

        logger.info("📂 Loaded configuration from %s", config_path)
        return config

    def _validate_config(self):
        """Validate configuration structure and required fields."""
        required_sections = ["simulation", "algorithm", "problem"]
        for section in required_sections:
            if section not in self.config:
                raise ValueError(f"Missing required configuration section: '{section}'")

        for section in ["algorithm", "problem"]:
            if "type" not in self.config[section]:
                raise ValueError(f"Missing 'type' in {section} configuration")

    def _setup_structured_configs(self):
        """Setup structured configuration objects with validation."""
        sim_config = self.config["simulation"]

        if "samples" not in sim_config:
            raise ValueError(
                "Missing required parameter 'samples' in simulation configuration.\n"
                "Example:\n"
                "simulation:\n"
                "  samples: 30"
            )

        self.simulation_config = SimulationConfig(
            samples=sim_config["samples"],  # REQUIRED
            max_workers=sim_config.get("max_workers"),
            cancel_on_failure=sim_config.get("cancel_on_failure", True),
            timeout_seconds=sim_config.get("timeout_seconds"),
        )

        alg_config = self.config["algorithm"]
        self.algorithm_config = ComponentConfig(
            type=alg_config["type"],
            params=alg_config.get("params") or {},
        )

        prob_config = self.config["problem"]
        self.problem_config = ComponentConfig(
            type=prob_config["type"],
            params=prob_config.get("params") or {},
        )

        # Setup measurement configuration - all optional with defaults
        meas_config = self.config.get("measurements", {})
        self.measurement_config = MeasurementConfig(
            resolution=meas_config.get("resolution", 1),
            output_dir=meas_config.get("output_dir"),
            measures=meas_config.get(
                "measures", ["Iterations", "PercentageComplete", "BestFitness"]
            ),
        )

        # Setup monitoring configuration - all optional with defaults
        mon_config = self.config.get("monitoring", {})
        self.monitoring_config = MonitoringConfig(
            log_level=mon_config.get("log_level", "INFO"),
            log_dir=mon_config.get("log_dir"),
            console_progress=mon_config.get("console_progress", False),
        )

    def get_simulation_config(self) -> SimulationConfig:
        """Get batch configuration."""
        return self.simulation_config

    def get_algorithm_config(self) -> ComponentConfig:
        """Get algorithm type and parameters."""
        return self.algorithm_config

    def get_problem_config(self) -> ComponentConfig:
        """Get problem type and parameters."""
        return self.problem_config

    def get_measurement_config(self) -> MeasurementConfig:
        """Get measurement configuration."""
        return self.measurement_config

    def get_monitoring_config(self) -> MonitoringConfig:
        """Get logging and progress monitoring configuration."""
        return self.monitoring_config

    def get_full_config(self) -> dict[str, Any]:
        """Get complete configuration dictionary."""
        return self.config.copy()

    def create_factories(self) -> tuple[ObjectFactory, ObjectFactory, ObjectFactory]:
        """
        Build the algorithm, problem and measurement-suite factories.

        Returns:
            (algorithm_factory, problem_factory, measurement_factory)

        Raises:
            ValueError: If a configured type cannot be resolved.
        """
        algorithm_factory = ObjectFactory.from_config(
            self.algorithm_config.type, self.algorithm_config.params, registry=ALGORITHM_TYPES
        )
        problem_factory = ObjectFactory.from_config(
            self.problem_config.type, self.problem_config.params, registry=PROBLEM_TYPES
        )

        measurement_config = self.measurement_config

        def new_measurement_suite() -> MeasurementSuite:
            return MeasurementSuite(
                create_measurements(measurement_config.measures),
                resolution=measurement_config.resolution,
                output_dir=measurement_config.output_dir,
            )

        measurement_factory = ObjectFactory(new_measurement_suite)
        return algorithm_factory, problem_factory, measurement_factory

    def print_summary(self):
        """Log configuration summary for verification."""
        logger.info("📋 SIMULATION CONFIGURATION SUMMARY:")
        logger.info("   Samples: %d", self.simulation_config.samples)
        logger.info("   Max workers: %s", self.simulation_config.max_workers or "executor default")
        logger.info("   Cancel on failure: %s", self.simulation_config.cancel_on_failure)
        if self.simulation_config.timeout_seconds:
            logger.info("   Timeout: %ss", self.simulation_config.timeout_seconds)

        logger.info("   Algorithm: %s %s", self.algorithm_config.type, self.algorithm_config.params)
        logger.info("   Problem: %s %s", self.problem_config.type, self.problem_config.params)

        logger.info("   Measurements: %s every %d iteration(s)",
                    ", ".join(self.measurement_config.measures),
                    self.measurement_config.resolution)
        if self.measurement_config.output_dir:
            logger.info("   Output directory: %s", self.measurement_config.output_dir)

        logger.info("   Log level: %s", self.monitoring_config.log_level)
