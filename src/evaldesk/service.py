"""EvalService: the caller-facing facade over store, resolver and engines.

Built once per process from explicit configuration. Every public method
returns an Outcome; component exceptions are converted at this boundary
and never propagate to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TypeVar

from pydantic import ValidationError as PydanticValidationError

from evaldesk.analysis.aggregation import AggregationEngine
from evaldesk.analysis.fanout import load_jobs
from evaldesk.analysis.leaderboard import LeaderboardEngine
from evaldesk.analysis.summary import SummaryEngine
from evaldesk.engine.base import EvaluationEngine
from evaldesk.engine.registry import engine_from_settings
from evaldesk.errors import (
    EngineInvocationError,
    EvalDeskError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from evaldesk.export.render import ExportFormat, export_comparison, export_job
from evaldesk.models.comparison import (
    Comparison,
    GroupBy,
    JobPage,
    JobStatusReport,
    Leaderboard,
    ResultsSummary,
)
from evaldesk.models.config import ProjectConfig
from evaldesk.models.job import EvaluationRequest, Job, JobStatus
from evaldesk.outcome import Outcome
from evaldesk.storage.json_store import JobStore
from evaldesk.tracking.poller import wait_for_completion
from evaldesk.tracking.status import StatusResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")

SAMPLE_REQUEST: dict[str, Any] = {
    "name": "Sample LLM Evaluation",
    "prompts": [
        {
            "id": "explain_ai",
            "text": "Explain artificial intelligence in simple terms.",
            "expected_output": (
                "AI is technology that enables machines to simulate human intelligence "
                "and perform tasks that typically require human cognition."
            ),
            "category": "explanation",
        },
        {
            "id": "solve_math",
            "text": "What is 15% of 240?",
            "expected_output": "36",
            "category": "mathematics",
        },
        {
            "id": "creative_writing",
            "text": "Write a haiku about technology.",
            "category": "creativity",
        },
    ],
    "models": [
        {
            "id": "gpt-3.5",
            "provider": "openai",
            "model_name": "gpt-3.5-turbo",
            "parameters": {"temperature": 0.7, "max_tokens": 150},
        },
        {
            "id": "claude-3",
            "provider": "anthropic",
            "model_name": "claude-3-sonnet-20240229",
            "parameters": {"temperature": 0.7, "max_tokens": 150},
        },
    ],
    "metrics": [
        {"name": "exact_match", "enabled": True, "weight": 1.0},
        {"name": "bleu", "enabled": True, "weight": 0.8},
        {"name": "latency", "enabled": True, "weight": 0.3},
        {"name": "cost", "enabled": True, "weight": 0.2},
    ],
    "config": {"parallel_requests": 5, "timeout_seconds": 120, "retry_attempts": 3},
}


class EvalService:
    """Job submission, status, comparison, ranking and export operations.

    Args:
        store: Job storage.
        engine: Evaluation engine that runs submitted jobs.
        config: Project configuration (limits, polling defaults).
    """

    def __init__(
        self,
        store: JobStore,
        engine: EvaluationEngine,
        config: ProjectConfig | None = None,
    ) -> None:
        self.config = config or ProjectConfig()
        self.store = store
        self.engine = engine
        self.resolver = StatusResolver(store)
        self.aggregation = AggregationEngine(
            self.resolver,
            max_workers=self.config.max_workers,
            max_compare_jobs=self.config.max_compare_jobs,
        )
        self.leaderboards = LeaderboardEngine(self.resolver, max_workers=self.config.max_workers)
        self.summaries = SummaryEngine(self.resolver, max_workers=self.config.max_workers)

    @classmethod
    def from_config(cls, project_root: Path, config: ProjectConfig) -> EvalService:
        """Build a service, its store and its engine from project configuration."""
        store = JobStore(project_root, config.storage_dir)
        return cls(store, engine_from_settings(config.engine), config)

    def _call(
        self,
        operation: str,
        fn: Callable[..., T],
        *args: Any,
        message: str | None = None,
        **kwargs: Any,
    ) -> Outcome[T]:
        try:
            return Outcome.ok(fn(*args, **kwargs), message)
        except EvalDeskError as exc:
            if exc.operation is None:
                exc.operation = operation
            logger.debug("%s failed: %s [%s]", operation, exc.message, exc.code)
            return Outcome.fail(exc)
        except OSError as exc:
            logger.warning("Storage error during %s: %s", operation, exc)
            return Outcome.fail(
                StorageError(str(exc), operation=operation, details={"path": str(exc.filename or "")})
            )

    # -- Submission --

    def submit_job(self, request: EvaluationRequest | dict[str, Any]) -> Outcome[str]:
        """Persist a job and hand it to the engine. Returns the job ID."""
        return self._call(
            "submit_job", self._submit, request, message="Evaluation job started successfully"
        )

    def _submit(self, request: EvaluationRequest | dict[str, Any]) -> str:
        if not isinstance(request, EvaluationRequest):
            try:
                request = EvaluationRequest.model_validate(request)
            except PydanticValidationError as exc:
                raise ValidationError(
                    f"Invalid evaluation request ({exc.error_count()} error(s))",
                    operation="submit_job",
                    details={
                        "errors": [
                            {"field": ".".join(str(p) for p in e["loc"]), "message": e["msg"]}
                            for e in exc.errors()
                        ]
                    },
                ) from exc

        job_id = self.store.create(request)
        try:
            self.engine.submit(self.store.config_path(job_id), self.store.root)
        except EngineInvocationError as exc:
            self.store.record_status(job_id, JobStatus.failed, exc.message)
            exc.job_id = job_id
            raise
        logger.info("Submitted job %s to %s", job_id, self.engine.engine_name())
        return job_id

    # -- Lookup --

    def get_job(self, job_id: str) -> Outcome[Job]:
        return self._call("get_job", self.resolver.load_job, job_id)

    def get_status(self, job_id: str) -> Outcome[JobStatusReport]:
        return self._call("get_status", self.resolver.resolve, job_id)

    def list_jobs(
        self,
        status: JobStatus | str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Outcome[JobPage]:
        """List jobs newest first, optionally filtered by resolved status."""
        return self._call("list_jobs", self._list, status, limit, offset)

    def _list(self, status: JobStatus | str | None, limit: int, offset: int) -> JobPage:
        if limit < 1 or offset < 0:
            raise ValidationError(
                "limit must be at least 1 and offset must not be negative",
                details={"limit": limit, "offset": offset},
            )
        wanted = None
        if status is not None:
            try:
                wanted = JobStatus(status)
            except ValueError:
                raise ValidationError(
                    f"Unknown status '{status}'",
                    details={"allowed": [s.value for s in JobStatus]},
                ) from None

        ids = [job.id for job in self.store.list()]
        jobs = [j for j in load_jobs(self.resolver, ids, self.config.max_workers) if j is not None]
        if wanted is not None:
            jobs = [j for j in jobs if j.status == wanted]
        page = jobs[offset : offset + limit]
        return JobPage(
            jobs=page,
            total=len(jobs),
            offset=offset,
            limit=limit,
            has_more=offset + len(page) < len(jobs),
        )

    # -- Analysis --

    def compare_jobs(
        self,
        job_ids: Sequence[str],
        group_by: GroupBy | str = GroupBy.model,
        metrics: Sequence[str] | None = None,
    ) -> Outcome[Comparison]:
        return self._call("compare_jobs", self.aggregation.compare, job_ids, group_by, metrics)

    def leaderboard(
        self,
        metric: str | None = None,
        providers: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> Outcome[Leaderboard]:
        return self._call(
            "leaderboard",
            self.leaderboards.leaderboard,
            metric=metric,
            providers=providers,
            limit=limit if limit is not None else self.config.leaderboard_limit,
        )

    def summary(self) -> Outcome[ResultsSummary]:
        return self._call("summary", self.summaries.summarize)

    # -- Export --

    def export_job(self, job_id: str, fmt: ExportFormat | str = ExportFormat.json) -> Outcome[bytes]:
        """Export a completed job's results as json, csv or html bytes."""
        return self._call("export_job", self._export_job, job_id, fmt)

    def _export_job(self, job_id: str, fmt: ExportFormat | str) -> bytes:
        job = self.resolver.load_job(job_id)
        if job.results is None:
            raise NotFoundError(
                f"Results for job '{job_id}' are not available (status: {job.status.value})",
                job_id=job_id,
                details={"status": job.status.value},
            )
        return export_job(job, fmt)

    def export_comparison(
        self,
        comparison: Comparison,
        fmt: ExportFormat | str = ExportFormat.json,
    ) -> Outcome[bytes]:
        return self._call("export_comparison", export_comparison, comparison, fmt)

    # -- Waiting --

    def wait_for_job(
        self,
        job_id: str,
        interval: float | None = None,
        timeout: float | None = None,
        on_progress: Callable[[JobStatusReport], None] | None = None,
    ) -> Outcome[JobStatusReport]:
        """Poll until the job is terminal. A timeout fails with POLL_TIMEOUT."""
        polling = self.config.polling
        return self._call(
            "wait_for_job",
            wait_for_completion,
            self.resolver,
            job_id,
            interval=interval if interval is not None else polling.interval_seconds,
            timeout=timeout if timeout is not None else polling.timeout_seconds,
            on_progress=on_progress,
        )

    # -- Engine catalog --

    def available_metrics(self) -> Outcome[list[str]]:
        return self._call("available_metrics", self.engine.list_metrics)

    def available_providers(self) -> Outcome[list[str]]:
        return self._call("available_providers", self.engine.list_providers)

    def sample_request(self) -> Outcome[EvaluationRequest]:
        return self._call("sample_request", EvaluationRequest.model_validate, SAMPLE_REQUEST)
