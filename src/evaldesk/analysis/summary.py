"""Totals across every stored job, plus the best-scoring models."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from evaldesk.analysis.fanout import load_jobs
from evaldesk.analysis.stats import safe_divide, safe_mean
from evaldesk.models.comparison import ResultsSummary, TopModel

if TYPE_CHECKING:
    from evaldesk.models.job import Job
    from evaldesk.tracking.status import StatusResolver

logger = logging.getLogger(__name__)

TOP_MODELS = 10


class SummaryEngine:
    def __init__(self, resolver: StatusResolver, max_workers: int = 8) -> None:
        self.resolver = resolver
        self.max_workers = max_workers

    def summarize(self) -> ResultsSummary:
        """Summarize every job in the store."""
        ids = [job.id for job in self.resolver.store.list()]
        jobs = [job for job in load_jobs(self.resolver, ids, self.max_workers) if job is not None]
        return summarize_jobs(jobs)


def summarize_jobs(jobs: list[Job], top: int = TOP_MODELS) -> ResultsSummary:
    """Compute ResultsSummary for already loaded jobs.

    ``avg_latency_ms`` divides the summed per-model latency by the number
    of evaluations. Top models are ranked by the mean, over the jobs they
    appear in, of their per-job average metric score.
    """
    completed = [job for job in jobs if job.results is not None]

    total_evaluations = 0
    total_cost = 0.0
    total_latency = 0.0
    per_model: dict[str, list[float]] = {}
    per_model_evals: dict[str, int] = {}

    for job in completed:
        for model_id, model_result in job.results.model_results.items():
            outputs = len(model_result.outputs)
            total_evaluations += outputs
            total_cost += model_result.performance.total_cost_usd
            total_latency += model_result.performance.total_latency_ms
            per_model_evals[model_id] = per_model_evals.get(model_id, 0) + outputs
            if model_result.metrics:
                job_score = safe_mean(m.score for m in model_result.metrics.values())
                per_model.setdefault(model_id, []).append(job_score)

    ranked = sorted(
        (
            TopModel(
                model_id=model_id,
                avg_score=safe_mean(scores),
                evaluation_count=per_model_evals.get(model_id, 0),
            )
            for model_id, scores in per_model.items()
        ),
        key=lambda m: m.avg_score,
        reverse=True,
    )

    logger.debug("Summarized %d job(s), %d completed", len(jobs), len(completed))
    return ResultsSummary(
        total_jobs=len(jobs),
        completed_jobs=len(completed),
        total_evaluations=total_evaluations,
        total_cost_usd=total_cost,
        avg_latency_ms=safe_divide(total_latency, total_evaluations),
        top_performing_models=ranked[:top],
    )
