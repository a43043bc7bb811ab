"""Cross-job comparison grouped by model, prompt or metric.

Iteration order is the caller's job order, then the encounter order of
models, prompts and metrics inside each job. Downstream tie order
depends on it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from evaldesk.analysis.fanout import load_jobs
from evaldesk.analysis.stats import safe_mean
from evaldesk.errors import InsufficientJobsError, ValidationError
from evaldesk.models.comparison import (
    Comparison,
    GroupBy,
    JobRef,
    MetricComparison,
    MetricScoreEntry,
    ModelComparison,
    ModelJobEntry,
    PerformanceSummary,
    PromptComparison,
    PromptPerformance,
)

if TYPE_CHECKING:
    from evaldesk.models.job import Job
    from evaldesk.models.result import MetricResult
    from evaldesk.tracking.status import StatusResolver

logger = logging.getLogger(__name__)

PROMPT_TEXT_LIMIT = 100


class AggregationEngine:
    """Compare the results of two or more jobs."""

    def __init__(
        self,
        resolver: StatusResolver,
        max_workers: int = 8,
        max_compare_jobs: int = 10,
    ) -> None:
        self.resolver = resolver
        self.max_workers = max_workers
        self.max_compare_jobs = max_compare_jobs

    def compare(
        self,
        job_ids: Sequence[str],
        group_by: GroupBy | str = GroupBy.model,
        metric_filter: Sequence[str] | None = None,
    ) -> Comparison:
        """Load the given jobs and pivot their results.

        Args:
            job_ids: Jobs to compare, in the order they should be folded.
                Duplicates are collapsed, keeping the first occurrence.
            group_by: Pivot to apply (model, prompt or metric).
            metric_filter: Restrict metric data to these names. Empty or
                None means every metric.

        Returns:
            Comparison whose ``data`` shape follows ``group_by``.

        Raises:
            ValidationError: Fewer than 2 distinct ids, too many ids, or an
                unknown group_by.
            InsufficientJobsError: Fewer than 2 jobs could be loaded.
        """
        unique_ids = list(dict.fromkeys(job_ids))
        if len(unique_ids) < 2:
            raise ValidationError(
                "At least 2 distinct job IDs are required for comparison",
                operation="compare",
                details={"job_ids": list(job_ids)},
            )
        if len(unique_ids) > self.max_compare_jobs:
            raise ValidationError(
                f"At most {self.max_compare_jobs} jobs can be compared at once",
                operation="compare",
                details={"count": len(unique_ids)},
            )
        try:
            grouping = GroupBy(group_by)
        except ValueError:
            raise ValidationError(
                f"Unknown group_by '{group_by}'",
                operation="compare",
                details={"allowed": [g.value for g in GroupBy]},
            ) from None

        metrics = list(metric_filter) if metric_filter else None

        jobs = [job for job in load_jobs(self.resolver, unique_ids, self.max_workers) if job is not None]
        if len(jobs) < 2:
            raise InsufficientJobsError(
                "At least 2 valid jobs required for comparison",
                operation="compare",
                details={"requested": unique_ids, "loaded": [j.id for j in jobs]},
            )

        if grouping == GroupBy.model:
            data = group_by_model(jobs, metrics)
        elif grouping == GroupBy.prompt:
            data = group_by_prompt(jobs, metrics)
        else:
            data = group_by_metric(jobs, metrics)

        logger.info("Compared %d jobs by %s", len(jobs), grouping.value)
        return Comparison(
            jobs_compared=[JobRef(id=j.id, name=j.name) for j in jobs],
            group_by=grouping,
            metrics_included=metrics or ["all"],
            generated_at=datetime.now(timezone.utc),
            data=data,
        )


def _included(name: str, metrics: list[str] | None) -> bool:
    return not metrics or name in metrics


def group_by_model(jobs: list[Job], metrics: list[str] | None = None) -> dict[str, ModelComparison]:
    """Fold each job's model results into one entry list per model.

    ``performance_summary`` averages per-job latency, cost and success
    rate (unweighted), sums token counts into ``total_tokens_processed``
    and output counts into ``evaluations_count``.
    """
    grouped: dict[str, ModelComparison] = {}
    for job in jobs:
        if job.results is None:
            continue
        for model_id, model_result in job.results.model_results.items():
            entry = grouped.setdefault(model_id, ModelComparison(model_id=model_id))
            entry.jobs.append(
                ModelJobEntry(
                    job_id=job.id,
                    job_name=job.name,
                    metrics=model_result.metrics,
                    performance=model_result.performance,
                    evaluations=len(model_result.outputs),
                )
            )

    for entry in grouped.values():
        perfs = [j.performance for j in entry.jobs]
        entry.performance_summary = PerformanceSummary(
            avg_latency_ms=safe_mean(p.average_latency_ms for p in perfs),
            avg_cost_usd=safe_mean(p.total_cost_usd for p in perfs),
            avg_success_rate=safe_mean(p.success_rate for p in perfs),
            total_tokens_processed=sum(p.total_tokens for p in perfs),
            evaluations_count=sum(j.evaluations for j in entry.jobs),
        )
        scores: dict[str, list[float]] = {}
        for job_entry in entry.jobs:
            for name, metric in job_entry.metrics.items():
                if _included(name, metrics):
                    scores.setdefault(name, []).append(metric.score)
        entry.aggregated_metrics = {name: safe_mean(values) for name, values in scores.items()}
    return grouped


def group_by_prompt(jobs: list[Job], metrics: list[str] | None = None) -> dict[str, PromptComparison]:
    """Collect every model's output and per-prompt scores for each prompt.

    Models with no output for a prompt are left out of that prompt's
    entry rather than zero-filled.
    """
    grouped: dict[str, PromptComparison] = {}
    for job in jobs:
        for prompt in job.prompts:
            entry = grouped.get(prompt.id)
            if entry is None:
                entry = PromptComparison(
                    prompt_id=prompt.id,
                    prompt_text=truncate(prompt.text, PROMPT_TEXT_LIMIT),
                    category=prompt.category,
                )
                grouped[prompt.id] = entry

            if job.results is None:
                continue
            for model_id, model_result in job.results.model_results.items():
                output = model_result.output_for(prompt.id)
                if output is None:
                    continue
                entry.model_performances.append(
                    PromptPerformance(
                        job_id=job.id,
                        model_id=model_id,
                        output=output,
                        metrics=prompt_scores(model_result.metrics, prompt.id, metrics),
                    )
                )
    return grouped


def group_by_metric(jobs: list[Job], metrics: list[str] | None = None) -> dict[str, MetricComparison]:
    """List every (job, model) score for each metric passing the filter."""
    grouped: dict[str, MetricComparison] = {}
    for job in jobs:
        if job.results is None:
            continue
        for model_id, model_result in job.results.model_results.items():
            for name, metric in model_result.metrics.items():
                if not _included(name, metrics):
                    continue
                entry = grouped.setdefault(name, MetricComparison(metric_name=name))
                entry.model_scores.append(
                    MetricScoreEntry(
                        job_id=job.id,
                        job_name=job.name,
                        model_id=model_id,
                        score=metric.score,
                        details=metric.details,
                    )
                )
    return grouped


def prompt_scores(
    metrics: dict[str, MetricResult],
    prompt_id: str,
    metric_filter: list[str] | None = None,
) -> dict[str, float]:
    """Extract each metric's per-prompt score for one prompt id."""
    return {
        name: metric.per_prompt_scores[prompt_id]
        for name, metric in metrics.items()
        if _included(name, metric_filter) and prompt_id in metric.per_prompt_scores
    }


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
