"""
Basic tests for simulation configuration management.

These tests validate that the configuration system works correctly with
simple, realistic configurations. Focus on core functionality rather than
edge cases.
"""

import tempfile
from pathlib import Path

import pytest
import yaml

from opt_sim.optimisation.algorithms import PymooAlgorithm
from opt_sim.optimisation.config import (
    MeasurementConfig,
    MonitoringConfig,
    SimulationConfig,
    SimulationConfigManager,
)
from opt_sim.optimisation.measurements import MeasurementSuite
from opt_sim.optimisation.problems import PymooProblem
from opt_sim.optimisation.runners import ConsoleProgressListener, Simulator

EXAMPLE_CONFIG = Path(__file__).resolve().parent.parent / "configs" / "rastrigin_pso.yaml"


def minimal_config(**simulation):
    return {
        "simulation": {"samples": 3, **simulation},
        "algorithm": {"type": "PymooAlgorithm",
                      "params": {"algorithm": "PSO", "max_generations": 5, "pop_size": 10}},
        "problem": {"type": "PymooProblem", "params": {"name": "sphere", "n_var": 2}},
    }


class TestConfigDataClasses:
    """Test basic configuration data class creation and validation."""

    def test_simulation_config_defaults(self):
        config = SimulationConfig(samples=10)

        assert config.samples == 10
        assert config.max_workers is None
        assert config.cancel_on_failure
        assert config.timeout_seconds is None

        print(f"✅ SimulationConfig defaults: samples={config.samples}")

    def test_simulation_config_validation(self):
        with pytest.raises(ValueError, match="at least 1"):
            SimulationConfig(samples=0)

        with pytest.raises(ValueError, match="Max workers"):
            SimulationConfig(samples=2, max_workers=0)

        with pytest.raises(ValueError, match="Timeout"):
            SimulationConfig(samples=2, timeout_seconds=-1)

    def test_measurement_config(self):
        config = MeasurementConfig()
        assert config.resolution == 1
        assert config.measures == ["Iterations", "PercentageComplete", "BestFitness"]

        with pytest.raises(ValueError, match="resolution"):
            MeasurementConfig(resolution=0)

        with pytest.raises(ValueError, match="Unknown measurement"):
            MeasurementConfig(measures=["Entropy"])

    def test_monitoring_config_validation(self):
        assert MonitoringConfig().log_level == "INFO"

        with pytest.raises(ValueError, match="Log level"):
            MonitoringConfig(log_level="LOUD")


class TestConfigManager:
    """Test SimulationConfigManager core functionality."""

    def test_yaml_config_loading(self):
        """Test loading configuration from YAML file."""
        test_config = minimal_config(max_workers=2)
        test_config["measurements"] = {"resolution": 5, "measures": ["Iterations"]}

        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump(test_config, f)
            temp_path = f.name

        try:
            manager = SimulationConfigManager(temp_path)

            assert manager.get_simulation_config().samples == 3
            assert manager.get_simulation_config().max_workers == 2
            assert manager.get_algorithm_config().type == "PymooAlgorithm"
            assert manager.get_problem_config().params == {"name": "sphere", "n_var": 2}
            assert manager.get_measurement_config().resolution == 5

            print("✅ YAML config loading works")

        finally:
            Path(temp_path).unlink()

    def test_dict_config_loading(self):
        manager = SimulationConfigManager(config_dict=minimal_config())

        assert manager.get_simulation_config().samples == 3
        assert manager.get_measurement_config().output_dir is None
        assert not manager.get_monitoring_config().console_progress
        assert manager.get_full_config() == minimal_config()

    def test_example_config_loads(self):
        manager = SimulationConfigManager(str(EXAMPLE_CONFIG))

        assert manager.get_simulation_config().samples == 20
        assert manager.get_problem_config().params["name"] == "rastrigin"
        manager.print_summary()

    def test_source_validation(self):
        with pytest.raises(ValueError, match="Configuration is required"):
            SimulationConfigManager()

        with pytest.raises(ValueError, match="not both"):
            SimulationConfigManager(config_path="a.yaml", config_dict=minimal_config())

        with pytest.raises(FileNotFoundError):
            SimulationConfigManager("does/not/exist.yaml")

    def test_config_validation(self):
        bad_config = minimal_config()
        del bad_config["problem"]
        with pytest.raises(ValueError, match="Missing required configuration section"):
            SimulationConfigManager(config_dict=bad_config)

        bad_config = minimal_config()
        del bad_config["algorithm"]["type"]
        with pytest.raises(ValueError, match="Missing 'type' in algorithm"):
            SimulationConfigManager(config_dict=bad_config)

        bad_config = minimal_config()
        del bad_config["simulation"]["samples"]
        with pytest.raises(ValueError, match="Missing required parameter 'samples'"):
            SimulationConfigManager(config_dict=bad_config)

    def test_create_factories(self):
        manager = SimulationConfigManager(config_dict=minimal_config())
        algorithm_factory, problem_factory, measurement_factory = manager.create_factories()

        algorithm = algorithm_factory.new_instance()
        assert isinstance(algorithm, PymooAlgorithm)
        assert algorithm.max_generations == 5
        assert algorithm is not algorithm_factory.new_instance()

        assert isinstance(problem_factory.new_instance(), PymooProblem)

        suite = measurement_factory.new_instance()
        assert isinstance(suite, MeasurementSuite)
        assert [m.name for m in suite.measurements] == ["Iterations", "PercentageComplete",
                                                         "BestFitness"]
        assert suite is not measurement_factory.new_instance()

    def test_unknown_component_type(self):
        config = minimal_config()
        config["algorithm"]["type"] = "HillClimber"
        manager = SimulationConfigManager(config_dict=config)

        with pytest.raises(ValueError, match="Unknown type 'HillClimber'"):
            manager.create_factories()


class TestSimulatorFromConfig:
    """Test building a Simulator from configuration."""

    def test_from_config(self):
        config = minimal_config(max_workers=2, cancel_on_failure=False)
        config["monitoring"] = {"console_progress": True}
        manager = SimulationConfigManager(config_dict=config)

        simulator = Simulator.from_config(manager)

        assert simulator.samples == 3
        assert not simulator.cancel_on_failure
        assert any(isinstance(listener, ConsoleProgressListener)
                   for listener in simulator._listeners)

        simulator.init()
        result = simulator.execute()
        assert result.num_completed == 3
