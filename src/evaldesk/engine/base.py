"""EvaluationEngine ABC: the boundary to the external evaluation runner.

The engine runs prompts against providers, computes metrics and
publishes a result document for each job. evaldesk only hands it a
config document and an output directory, then reads what it publishes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class EvaluationEngine(ABC):
    """Abstract base class for evaluation engines.

    Subclasses must implement submit(), list_metrics() and
    list_providers(). submit() is invoked once per job at creation time;
    the engine is expected to publish ``<output_dir>/results/<job-id>.json``
    atomically when it finishes.
    """

    @abstractmethod
    def submit(self, config_path: Path, output_dir: Path) -> None:
        """Start evaluating the job described by ``config_path``.

        Args:
            config_path: Path to the engine config document for the job.
            output_dir: Storage root the engine publishes results under.

        Raises:
            EngineInvocationError: If the engine signals failure.
        """
        ...

    @abstractmethod
    def list_metrics(self) -> list[str]:
        """Return the metric names the engine can compute."""
        ...

    @abstractmethod
    def list_providers(self) -> list[str]:
        """Return the model providers the engine can call."""
        ...

    def engine_name(self) -> str:
        """Return the engine name.

        Default implementation returns the class name.
        """
        return type(self).__name__
