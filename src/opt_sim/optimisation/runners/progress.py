"""
Progress notifications for a running simulation.

The simulator averages the completion percentage of all its replicates and
sends the result to every registered listener as a ``ProgressEvent``. Any
object with a ``handle_progress(event)`` method can be registered.
"""

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from rich.console import Console

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    """Aggregate completion percentage across replicates, in [0, 100]."""

    percentage: float


@runtime_checkable
class ProgressListener(Protocol):
    def handle_progress(self, event: ProgressEvent) -> None:
        ...


class LoggingProgressListener:
    """Log every aggregate progress update at the given level."""

    def __init__(self, level: int = logging.INFO, log: logging.Logger | None = None):
        self.level = level
        self.log = log or logger

    def handle_progress(self, event: ProgressEvent) -> None:
        self.log.log(self.level, "Simulation progress: %.1f%%", event.percentage)


class ConsoleProgressListener:
    """
    Print aggregate progress to the terminal with rich.

    Only whole-percent changes are printed, so a replicate sampling every
    iteration does not flood the console.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self._last_printed: int | None = None

    def handle_progress(self, event: ProgressEvent) -> None:
        whole = int(event.percentage)
        if whole == self._last_printed:
            return
        self._last_printed = whole
        self.console.print(f"[bold cyan]Progress[/bold cyan] {event.percentage:5.1f}%")
