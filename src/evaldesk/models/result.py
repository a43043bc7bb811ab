"""Result data models published by the evaluation engine.

These models encode the result document contract: per-model outputs,
metric scores and performance statistics, plus a job-level summary.
This package only reads these documents; the engine writes them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ModelOutput(BaseModel):
    """One generated answer for one prompt attempt."""

    prompt_id: str
    text: str = ""
    latency_ms: float = 0.0
    tokens_used: int = 0
    cost_usd: float = 0.0
    error: str | None = None


class MetricResult(BaseModel):
    """Overall and per-prompt scores for one metric."""

    metric_name: str
    score: float
    details: dict[str, Any] = Field(default_factory=dict)
    per_prompt_scores: dict[str, float] = Field(default_factory=dict)


class PerformanceMetrics(BaseModel):
    """Aggregate latency, token, cost and success statistics for a model."""

    total_latency_ms: float = 0.0
    average_latency_ms: float = 0.0
    total_tokens: int = 0
    total_cost_usd: float = 0.0
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    throughput_per_second: float = 0.0


class EvaluationError(BaseModel):
    """A single failed attempt recorded by the engine."""

    error_type: str
    message: str
    prompt_id: str | None = None
    timestamp: datetime | None = None
    context: dict[str, Any] = Field(default_factory=dict)


class ModelResult(BaseModel):
    """Everything the engine produced for one model."""

    model_config = {"protected_namespaces": ()}

    model_id: str
    outputs: list[ModelOutput] = Field(default_factory=list)
    metrics: dict[str, MetricResult] = Field(default_factory=dict)
    performance: PerformanceMetrics = Field(default_factory=PerformanceMetrics)
    errors: list[EvaluationError] = Field(default_factory=list)

    def output_for(self, prompt_id: str) -> ModelOutput | None:
        """Return the first output matching ``prompt_id`` exactly."""
        for output in self.outputs:
            if output.prompt_id == prompt_id:
                return output
        return None


class ResultSummary(BaseModel):
    """Job-level totals computed by the engine."""

    total_prompts: int = 0
    total_models: int = 0
    total_evaluations: int = 0
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    average_score: float = 0.0
    total_cost_usd: float = 0.0
    total_latency_ms: float = 0.0


class EvaluationResult(BaseModel):
    """The result document for a completed job.

    ``model_results`` preserves the key order of the published document,
    which fixes the encounter order used by comparisons and rankings.
    """

    model_config = {"protected_namespaces": ()}

    job_id: str
    completed_at: datetime | None = None
    model_results: dict[str, ModelResult] = Field(default_factory=dict)
    summary: ResultSummary = Field(default_factory=ResultSummary)
