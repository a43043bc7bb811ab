"""Job tracking: status/progress resolution and completion polling."""

from __future__ import annotations

from evaldesk.tracking.poller import wait_for_completion
from evaldesk.tracking.status import StatusResolver, compute_progress

__all__ = [
    "StatusResolver",
    "compute_progress",
    "wait_for_completion",
]
