"""Derived data models: status reports, comparisons, rankings and summaries.

None of these are persisted by the store; they are computed on demand
from job metadata and result documents.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from evaldesk.models.job import Job, JobStatus
from evaldesk.models.result import MetricResult, ModelOutput, PerformanceMetrics


class StatusRecord(BaseModel):
    """Explicit status transition written by the engine."""

    job_id: str
    status: JobStatus
    updated_at: datetime
    message: str | None = None


class Progress(BaseModel):
    """Completion estimate for a running or completed job."""

    completed_prompts: int
    total_prompts: int
    completed_models: int
    total_models: int
    completed_evaluations: int
    total_evaluations: int
    percentage: int = Field(ge=0, le=100)


class JobStatusReport(BaseModel):
    """Resolved status of a job."""

    job_id: str
    status: JobStatus
    created_at: datetime
    completed_at: datetime | None = None
    progress: Progress | None = None
    message: str | None = None


class JobPage(BaseModel):
    """A filtered, paginated slice of the job list."""

    jobs: list[Job]
    total: int
    offset: int
    limit: int
    has_more: bool


class GroupBy(str, Enum):
    """Pivot applied by a comparison."""

    model = "model"
    prompt = "prompt"
    metric = "metric"


class JobRef(BaseModel):
    id: str
    name: str


class ModelJobEntry(BaseModel):
    """One job's contribution to a model-grouped comparison."""

    job_id: str
    job_name: str
    metrics: dict[str, MetricResult]
    performance: PerformanceMetrics
    evaluations: int = 0


class PerformanceSummary(BaseModel):
    """Cross-job performance of a model.

    ``total_tokens_processed`` sums token counts across jobs;
    ``evaluations_count`` sums the number of outputs (prompt evaluations).
    """

    avg_latency_ms: float = 0.0
    avg_cost_usd: float = 0.0
    avg_success_rate: float = 0.0
    total_tokens_processed: int = 0
    evaluations_count: int = 0


class ModelComparison(BaseModel):
    model_config = {"protected_namespaces": ()}

    model_id: str
    jobs: list[ModelJobEntry] = Field(default_factory=list)
    aggregated_metrics: dict[str, float] = Field(default_factory=dict)
    performance_summary: PerformanceSummary = Field(default_factory=PerformanceSummary)


class PromptPerformance(BaseModel):
    model_config = {"protected_namespaces": ()}

    job_id: str
    model_id: str
    output: ModelOutput
    metrics: dict[str, float] = Field(default_factory=dict)


class PromptComparison(BaseModel):
    model_config = {"protected_namespaces": ()}

    prompt_id: str
    prompt_text: str
    category: str | None = None
    model_performances: list[PromptPerformance] = Field(default_factory=list)


class MetricScoreEntry(BaseModel):
    model_config = {"protected_namespaces": ()}

    job_id: str
    job_name: str
    model_id: str
    score: float
    details: dict[str, Any] = Field(default_factory=dict)


class MetricComparison(BaseModel):
    model_config = {"protected_namespaces": ()}

    metric_name: str
    model_scores: list[MetricScoreEntry] = Field(default_factory=list)


class Comparison(BaseModel):
    """Results of two or more jobs pivoted by model, prompt or metric.

    The value type of ``data`` follows ``group_by``.
    """

    jobs_compared: list[JobRef]
    group_by: GroupBy
    metrics_included: list[str]
    generated_at: datetime
    data: (
        dict[str, ModelComparison]
        | dict[str, PromptComparison]
        | dict[str, MetricComparison]
    ) = Field(default_factory=dict)


class Ranking(BaseModel):
    """One leaderboard row."""

    model_config = {"protected_namespaces": ()}

    rank: int
    model_id: str
    provider: str
    score: float
    evaluations_count: int
    score_samples: int
    avg_latency_ms: float
    avg_cost_per_1k_tokens: float
    total_tokens_processed: int


class Leaderboard(BaseModel):
    metric: str
    updated_at: datetime
    rankings: list[Ranking] = Field(default_factory=list)


class TopModel(BaseModel):
    model_config = {"protected_namespaces": ()}

    model_id: str
    avg_score: float
    evaluation_count: int


class ResultsSummary(BaseModel):
    """Totals across every stored job."""

    total_jobs: int
    completed_jobs: int
    total_evaluations: int
    total_cost_usd: float
    avg_latency_ms: float
    top_performing_models: list[TopModel] = Field(default_factory=list)
