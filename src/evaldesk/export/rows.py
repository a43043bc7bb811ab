"""Flat row projections of jobs and comparisons for tabular export."""

from __future__ import annotations

from typing import NamedTuple

from evaldesk.errors import ValidationError
from evaldesk.models.comparison import Comparison, GroupBy
from evaldesk.models.job import Job


class JobRow(NamedTuple):
    job_id: str
    model_id: str
    prompt_id: str
    metric_name: str
    score: float
    latency_ms: float
    cost_usd: float


class ComparisonRow(NamedTuple):
    model_id: str
    metric_name: str
    score: float
    job_id: str
    job_name: str


JOB_ROW_HEADER = list(JobRow._fields)
COMPARISON_ROW_HEADER = list(ComparisonRow._fields)


def job_rows(job: Job) -> list[JobRow]:
    """One row per per-prompt score, ordered models, then metrics, then prompts.

    Latency and cost come from the first output for the prompt, or 0 when
    the model produced none. A job without results yields no rows.
    """
    if job.results is None:
        return []
    rows: list[JobRow] = []
    for model_id, model_result in job.results.model_results.items():
        for metric_name, metric in model_result.metrics.items():
            for prompt_id, score in metric.per_prompt_scores.items():
                output = model_result.output_for(prompt_id)
                rows.append(
                    JobRow(
                        job_id=job.id,
                        model_id=model_id,
                        prompt_id=prompt_id,
                        metric_name=metric_name,
                        score=score,
                        latency_ms=output.latency_ms if output else 0,
                        cost_usd=output.cost_usd if output else 0,
                    )
                )
    return rows


def comparison_rows(comparison: Comparison) -> list[ComparisonRow]:
    """One row per (model, job, metric) of a model-grouped comparison.

    Raises:
        ValidationError: If the comparison is not grouped by model.
    """
    require_model_grouping(comparison, "comparison_rows")
    rows: list[ComparisonRow] = []
    for model_id, model in comparison.data.items():
        for entry in model.jobs:
            for metric_name, metric in entry.metrics.items():
                rows.append(
                    ComparisonRow(
                        model_id=model_id,
                        metric_name=metric_name,
                        score=metric.score,
                        job_id=entry.job_id,
                        job_name=entry.job_name,
                    )
                )
    return rows


def require_model_grouping(comparison: Comparison, operation: str) -> None:
    if comparison.group_by != GroupBy.model:
        raise ValidationError(
            f"Only model-grouped comparisons can be exported this way (got '{comparison.group_by.value}')",
            operation=operation,
            details={"group_by": comparison.group_by.value},
        )
