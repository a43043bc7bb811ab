"""Concurrent job loading shared by the cross-job engines.

Each job load is an independent read, so loads fan out on a thread
pool. Results come back in input order; jobs that cannot be loaded come
back as None and are logged.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from evaldesk.errors import EvalDeskError

if TYPE_CHECKING:
    from evaldesk.models.job import Job
    from evaldesk.tracking.status import StatusResolver

logger = logging.getLogger(__name__)


def load_jobs(
    resolver: StatusResolver,
    job_ids: Sequence[str],
    max_workers: int = 8,
) -> list[Job | None]:
    """Load jobs with results merged and status resolved, preserving order.

    Args:
        resolver: StatusResolver used for every load.
        job_ids: Job IDs to load.
        max_workers: Upper bound on concurrent loads.

    Returns:
        One entry per input id: the Job, or None if it could not be loaded.
    """
    if not job_ids:
        return []

    def _load(job_id: str) -> Job | None:
        try:
            return resolver.load_job(job_id)
        except (EvalDeskError, OSError, ValueError) as exc:
            logger.warning("Dropping job %s: %s", job_id, exc)
            return None

    workers = max(1, min(max_workers, len(job_ids)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(_load, job_ids))


def load_completed_jobs(resolver: StatusResolver, max_workers: int = 8) -> list[Job]:
    """Load every stored job that has a result document, newest first."""
    ids = [job.id for job in resolver.store.list()]
    return [
        job
        for job in load_jobs(resolver, ids, max_workers)
        if job is not None and job.results is not None
    ]
