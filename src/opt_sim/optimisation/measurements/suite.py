"""
Measurement suite attached to a single replicate.

A suite samples a fixed set of measurements from a running algorithm every
``resolution`` iterations and keeps the samples in memory. When an output
directory is configured, the samples are written to a CSV file (one file per
suite) when the suite is closed. A suite owned by a replicate names its file
``<prefix>_<index>_<id>.csv`` so output can be traced back to the sample.

Lifecycle:
    ``initialise()`` -> ``measure()`` * n -> ``close()``

Sampling before ``initialise()`` or after ``close()`` is an error. Closing is
idempotent.

Example:
    ```python
    suite = MeasurementSuite([Iterations(), BestFitness()], resolution=10,
                             output_dir="results/run_1")
    suite.initialise()
    suite.measure(algorithm)
    suite.close()
    frame = suite.to_frame()
    ```
"""

import logging
import uuid
from pathlib import Path
from typing import Any

import pandas as pd

from ..errors import MeasurementError
from .base import Measurement

logger = logging.getLogger(__name__)


class MeasurementSuite:
    """
    Ordered collection of measurements sampled at a fixed resolution.

    Args:
        measurements: Measurements recorded in every sample.
        resolution: Sampling period in iterations. Must be positive.
        output_dir: Directory receiving the CSV output. None keeps samples in
                    memory only.
        file_prefix: Prefix for the generated CSV file name.
    """

    def __init__(self, measurements: list[Measurement], resolution: int = 1,
                 output_dir: str | Path | None = None, file_prefix: str = "replicate"):
        if resolution < 1:
            raise ValueError("Measurement resolution must be positive")

        names = [m.name for m in measurements]
        if len(set(names)) != len(names):
            raise ValueError(f"Measurement names must be unique, got {names}")

        self.measurements = list(measurements)
        self._resolution = resolution
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.file_prefix = file_prefix
        self.replicate_index: int | None = None

        self._samples: list[dict[str, Any]] = []
        self._initialised = False
        self._closed = False
        self.output_file: Path | None = None

    @property
    def resolution(self) -> int:
        return self._resolution

    @property
    def samples(self) -> list[dict[str, Any]]:
        return list(self._samples)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def assign_replicate(self, index: int) -> None:
        """Tag the output file name with the owning replicate's sample index."""
        self.replicate_index = index

    def initialise(self) -> None:
        """Create the sample buffer and, if configured, the output file path."""
        self._samples = []
        self._closed = False
        self._initialised = True

        if self.output_dir is not None:
            try:
                self.output_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise MeasurementError(f"Cannot create output directory {self.output_dir}") from e
            stem = self.file_prefix
            if self.replicate_index is not None:
                stem = f"{stem}_{self.replicate_index:03d}"
            self.output_file = self.output_dir / f"{stem}_{uuid.uuid4().hex[:12]}.csv"

    def measure(self, algorithm) -> None:
        """Record one sample of every measurement."""
        if not self._initialised:
            raise MeasurementError("MeasurementSuite.measure() called before initialise()")
        if self._closed:
            raise MeasurementError("MeasurementSuite.measure() called after close()")

        sample = {"iteration": algorithm.iterations}
        for measurement in self.measurements:
            try:
                sample[measurement.name] = measurement.get_value(algorithm)
            except Exception as e:
                raise MeasurementError(
                    f"Measurement {measurement.name} failed at iteration {algorithm.iterations}"
                ) from e
        self._samples.append(sample)

    def close(self) -> None:
        """Flush samples to disk (if configured) and release the suite."""
        if self._closed:
            return

        if self.output_file is not None:
            try:
                self.to_frame().to_csv(self.output_file, index=False)
            except OSError as e:
                raise MeasurementError(f"Failed to write measurements to {self.output_file}") from e
            logger.debug("Wrote %d samples to %s", len(self._samples), self.output_file)

        self._closed = True

    def to_frame(self) -> pd.DataFrame:
        columns = ["iteration"] + [m.name for m in self.measurements]
        return pd.DataFrame(self._samples, columns=columns)
