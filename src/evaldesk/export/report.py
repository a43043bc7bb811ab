"""Report documents: presentational projections of jobs and comparisons.

A report carries content only. Layout belongs to the renderers.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from evaldesk.analysis.stats import safe_mean
from evaldesk.export.rows import require_model_grouping
from evaldesk.models.comparison import Comparison, JobRef
from evaldesk.models.job import Job


class ReportRow(BaseModel):
    """Aggregate figures for one model."""

    model_config = {"protected_namespaces": ()}

    model_id: str
    average_score: float
    success_rate: float
    evaluations: int
    tokens_processed: int
    avg_latency_ms: float
    avg_cost_usd: float


class ComparisonReport(BaseModel):
    title: str = "Evaluation Comparison Report"
    generated_at: datetime
    group_by: str
    jobs_compared: list[JobRef]
    metrics_included: list[str]
    rows: list[ReportRow] = Field(default_factory=list)


class JobReport(BaseModel):
    title: str
    generated_at: datetime
    job_id: str
    status: str
    completed_at: datetime | None = None
    rows: list[ReportRow] = Field(default_factory=list)


def build_report(comparison: Comparison) -> ComparisonReport:
    """Project a model-grouped comparison into one report row per model.

    ``average_score`` is the mean of the model's aggregated metric scores.

    Raises:
        ValidationError: If the comparison is not grouped by model.
    """
    require_model_grouping(comparison, "build_report")
    rows = []
    for model_id, model in comparison.data.items():
        summary = model.performance_summary
        rows.append(
            ReportRow(
                model_id=model_id,
                average_score=safe_mean(model.aggregated_metrics.values()),
                success_rate=summary.avg_success_rate,
                evaluations=summary.evaluations_count,
                tokens_processed=summary.total_tokens_processed,
                avg_latency_ms=summary.avg_latency_ms,
                avg_cost_usd=summary.avg_cost_usd,
            )
        )
    return ComparisonReport(
        generated_at=datetime.now(timezone.utc),
        group_by=comparison.group_by.value,
        jobs_compared=comparison.jobs_compared,
        metrics_included=comparison.metrics_included,
        rows=rows,
    )


def build_job_report(job: Job) -> JobReport:
    """Project a single job into one report row per model."""
    rows = []
    if job.results is not None:
        for model_id, model_result in job.results.model_results.items():
            perf = model_result.performance
            rows.append(
                ReportRow(
                    model_id=model_id,
                    average_score=safe_mean(m.score for m in model_result.metrics.values()),
                    success_rate=perf.success_rate,
                    evaluations=len(model_result.outputs),
                    tokens_processed=perf.total_tokens,
                    avg_latency_ms=perf.average_latency_ms,
                    avg_cost_usd=perf.total_cost_usd,
                )
            )
    return JobReport(
        title=job.name,
        generated_at=datetime.now(timezone.utc),
        job_id=job.id,
        status=job.status.value,
        completed_at=job.completed_at,
        rows=rows,
    )
