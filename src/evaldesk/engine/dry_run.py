"""Engine that accepts submissions without running anything.

Useful for validating submissions and for exercising the storage and
status layers; jobs submitted here stay running until a result is
published by other means.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from evaldesk.engine.base import EvaluationEngine

logger = logging.getLogger(__name__)

DEFAULT_METRICS = [
    "bleu",
    "rouge",
    "exact_match",
    "embedding_similarity",
    "latency",
    "cost",
    "toxicity",
    "hallucination",
]

DEFAULT_PROVIDERS = [
    "openai",
    "anthropic",
    "together",
    "huggingface",
    "local",
]


class DryRunEngine(EvaluationEngine):
    def __init__(
        self,
        metrics: Sequence[str] | None = None,
        providers: Sequence[str] | None = None,
    ) -> None:
        self.metrics = list(metrics) if metrics else list(DEFAULT_METRICS)
        self.providers = list(providers) if providers else list(DEFAULT_PROVIDERS)
        self.submitted: list[Path] = []

    def submit(self, config_path: Path, output_dir: Path) -> None:
        self.submitted.append(config_path)
        logger.info("Dry run: accepted %s (no evaluation started)", config_path.name)

    def list_metrics(self) -> list[str]:
        return list(self.metrics)

    def list_providers(self) -> list[str]:
        return list(self.providers)

    def engine_name(self) -> str:
        return "dry-run"
