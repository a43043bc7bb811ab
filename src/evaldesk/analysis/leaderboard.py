"""Model rankings across every completed job."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from evaldesk.analysis.fanout import load_completed_jobs
from evaldesk.analysis.stats import safe_divide, safe_mean
from evaldesk.errors import ValidationError
from evaldesk.models.comparison import Leaderboard, Ranking

if TYPE_CHECKING:
    from evaldesk.models.job import Job
    from evaldesk.tracking.status import StatusResolver

logger = logging.getLogger(__name__)

OVERALL_SCORE = "overall_score"
UNKNOWN_PROVIDER = "unknown"


@dataclass
class _ModelTally:
    model_id: str
    provider: str = UNKNOWN_PROVIDER
    scores: list[float] = field(default_factory=list)
    latencies: list[float] = field(default_factory=list)
    evaluations: int = 0
    tokens: int = 0
    cost_usd: float = 0.0


class LeaderboardEngine:
    """Rank models by their mean metric score over all completed jobs."""

    def __init__(self, resolver: StatusResolver, max_workers: int = 8) -> None:
        self.resolver = resolver
        self.max_workers = max_workers

    def leaderboard(
        self,
        metric: str | None = None,
        providers: Sequence[str] | None = None,
        limit: int = 20,
    ) -> Leaderboard:
        """Build the leaderboard.

        Args:
            metric: Score models on this metric only. None averages every
                metric score a model has.
            providers: Keep only models served by these providers. The
                filter runs before ``limit`` is applied.
            limit: Maximum number of rankings returned.

        Returns:
            Leaderboard sorted by descending score. Equal scores keep the
            order in which models were first seen (newest job first).

        Raises:
            ValidationError: If limit is not positive.
        """
        if limit < 1:
            raise ValidationError(
                "limit must be at least 1", operation="leaderboard", details={"limit": limit}
            )
        jobs = load_completed_jobs(self.resolver, self.max_workers)
        rankings = rank_models(jobs, metric=metric, providers=providers, limit=limit)
        logger.info("Ranked %d model(s) from %d completed job(s)", len(rankings), len(jobs))
        return Leaderboard(
            metric=metric or OVERALL_SCORE,
            updated_at=datetime.now(timezone.utc),
            rankings=rankings,
        )


def rank_models(
    jobs: Sequence[Job],
    metric: str | None = None,
    providers: Sequence[str] | None = None,
    limit: int = 20,
) -> list[Ranking]:
    """Tally per-model statistics across jobs and rank them by score."""
    tallies: dict[str, _ModelTally] = {}
    for job in jobs:
        if job.results is None:
            continue
        for model_id, model_result in job.results.model_results.items():
            tally = tallies.setdefault(model_id, _ModelTally(model_id=model_id))
            if tally.provider == UNKNOWN_PROVIDER:
                tally.provider = job.provider_for(model_id) or UNKNOWN_PROVIDER
            for name, result in model_result.metrics.items():
                if metric is None or name == metric:
                    tally.scores.append(result.score)
            perf = model_result.performance
            tally.latencies.append(perf.average_latency_ms)
            tally.evaluations += len(model_result.outputs)
            tally.tokens += perf.total_tokens
            tally.cost_usd += perf.total_cost_usd

    candidates = [t for t in tallies.values() if t.scores]
    if providers:
        allowed = set(providers)
        candidates = [t for t in candidates if t.provider in allowed]
    # sorted() is stable, so equal scores keep encounter order.
    candidates = sorted(candidates, key=lambda t: safe_mean(t.scores), reverse=True)[:limit]

    return [
        Ranking(
            rank=position,
            model_id=t.model_id,
            provider=t.provider,
            score=safe_mean(t.scores),
            evaluations_count=t.evaluations,
            score_samples=len(t.scores),
            avg_latency_ms=safe_mean(t.latencies),
            avg_cost_per_1k_tokens=safe_divide(t.cost_usd, t.tokens) * 1000,
            total_tokens_processed=t.tokens,
        )
        for position, t in enumerate(candidates, start=1)
    ]
