"""Job status and progress resolution.

Derives a job's status from the evidence in the store: a parseable
result document means completed; otherwise an explicit status record
written by the engine decides; otherwise the job is reported as
running, meaning "not yet completed, outcome unknown".
"""

from __future__ import annotations

import logging
import math

from evaldesk.analysis.stats import clamp, safe_divide
from evaldesk.models.comparison import JobStatusReport, Progress
from evaldesk.models.job import Job, JobStatus
from evaldesk.storage.json_store import JobStore

logger = logging.getLogger(__name__)

# Statuses for which a progress estimate is reported.
_PROGRESS_STATUSES: frozenset[JobStatus] = frozenset({JobStatus.running, JobStatus.completed})


def compute_progress(job: Job, completed: bool = False) -> Progress:
    """Estimate how much of a job's prompt x model grid has been evaluated.

    Counts outputs in whatever model results are present. A completed
    job reports 100% unless its grid is empty, in which case 0%.

    Args:
        job: The job, with results merged if available.
        completed: Whether the job has a parsed result document.

    Returns:
        Progress with counts and a percentage clamped to [0, 100].
    """
    prompt_count = len(job.prompts)
    model_count = len(job.models)
    total = prompt_count * model_count

    model_results = job.results.model_results if job.results is not None else {}
    completed_evaluations = sum(len(mr.outputs) for mr in model_results.values())

    if model_count == 0:
        completed_prompts = 0
    else:
        completed_prompts = min(prompt_count, completed_evaluations // model_count)

    if total == 0:
        percentage = 0
    elif completed:
        percentage = 100
    else:
        ratio = safe_divide(completed_evaluations, total)
        percentage = int(clamp(_round_half_up(ratio * 100), 0, 100))

    return Progress(
        completed_prompts=completed_prompts,
        total_prompts=prompt_count,
        completed_models=len(model_results),
        total_models=model_count,
        completed_evaluations=completed_evaluations,
        total_evaluations=total,
        percentage=percentage,
    )


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class StatusResolver:
    """Resolve job status and progress from a JobStore."""

    def __init__(self, store: JobStore) -> None:
        self.store = store

    def load_job(self, job_id: str) -> Job:
        """Load a job with its result merged and its status resolved.

        Raises:
            NotFoundError: If the job metadata document does not exist.
        """
        job = self.store.get(job_id)
        status, _ = self._resolve_status(job)
        if status != job.status:
            job = job.model_copy(update={"status": status})
        return job

    def resolve(self, job_id: str) -> JobStatusReport:
        """Resolve the current status and progress of a job.

        Raises:
            NotFoundError: If the job metadata document does not exist.
        """
        return self.report(self.store.get(job_id))

    def report(self, job: Job) -> JobStatusReport:
        """Build a status report for a job already loaded via JobStore.get."""
        status, message = self._resolve_status(job)
        progress = None
        if status in _PROGRESS_STATUSES:
            progress = compute_progress(job, completed=status == JobStatus.completed)
        return JobStatusReport(
            job_id=job.id,
            status=status,
            created_at=job.created_at,
            completed_at=job.results.completed_at if job.results is not None else None,
            progress=progress,
            message=message,
        )

    def _resolve_status(self, job: Job) -> tuple[JobStatus, str | None]:
        if job.results is not None:
            return JobStatus.completed, None

        record = self.store.load_status(job.id)
        if record is None:
            return JobStatus.running, None
        if record.status == JobStatus.completed:
            # A completion record is not authoritative without a result document.
            logger.debug("Job %s marked completed but has no readable result", job.id)
            return JobStatus.running, record.message
        return record.status, record.message
