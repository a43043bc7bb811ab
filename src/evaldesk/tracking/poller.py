"""Bounded polling until a job reaches a terminal status.

A timeout leaves the job indeterminate: PollTimeoutError carries the
last observed report and the caller may poll again later.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from evaldesk.errors import PollTimeoutError
from evaldesk.models.comparison import JobStatusReport
from evaldesk.models.job import TERMINAL_STATUSES
from evaldesk.tracking.status import StatusResolver

logger = logging.getLogger(__name__)


def wait_for_completion(
    resolver: StatusResolver,
    job_id: str,
    interval: float = 5.0,
    timeout: float = 600.0,
    on_progress: Callable[[JobStatusReport], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> JobStatusReport:
    """Poll a job's status every ``interval`` seconds until it is terminal.

    Args:
        resolver: StatusResolver used for each poll.
        job_id: The job to watch.
        interval: Seconds between polls.
        timeout: Overall time budget in seconds.
        on_progress: Called with every report observed.
        sleep: Sleep function (injectable for tests).
        clock: Monotonic clock (injectable for tests).

    Returns:
        The first report with a terminal status (completed/failed/cancelled).

    Raises:
        NotFoundError: If the job does not exist.
        PollTimeoutError: If the timeout elapses first.
    """
    deadline = clock() + timeout
    polls = 0
    while True:
        report = resolver.resolve(job_id)
        polls += 1
        if on_progress is not None:
            on_progress(report)
        if report.status in TERMINAL_STATUSES:
            logger.info("Job %s reached %s after %d poll(s)", job_id, report.status.value, polls)
            return report

        remaining = deadline - clock()
        if remaining <= 0:
            raise PollTimeoutError(
                f"Job '{job_id}' did not finish within {timeout:g}s",
                last_report=report,
                job_id=job_id,
                operation="wait_for_completion",
                details={"polls": polls, "last_status": report.status.value},
            )
        sleep(min(interval, remaining))
