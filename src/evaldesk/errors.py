"""Error taxonomy for evaldesk operations.

Components raise these exceptions; EvalService turns them into
failed Outcomes so nothing escapes the service boundary. Each error
carries a stable code plus the job id and operation it concerns.
"""

from __future__ import annotations

from typing import Any


class EvalDeskError(Exception):
    """Base class for all evaldesk errors."""

    code = "EVALDESK_ERROR"

    def __init__(
        self,
        message: str,
        *,
        job_id: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.job_id = job_id
        self.operation = operation
        self.details = details or {}
        super().__init__(message)

    def context(self) -> dict[str, Any]:
        """Return the error context as a JSON-friendly dict."""
        ctx: dict[str, Any] = dict(self.details)
        if self.job_id is not None:
            ctx["job_id"] = self.job_id
        if self.operation is not None:
            ctx["operation"] = self.operation
        return ctx


class NotFoundError(EvalDeskError):
    """Raised when a job metadata document does not exist."""

    code = "JOB_NOT_FOUND"


class ValidationError(EvalDeskError):
    """Raised for malformed submissions or comparison requests."""

    code = "VALIDATION_ERROR"


class InsufficientJobsError(EvalDeskError):
    """Raised when fewer than two loadable jobs remain for a comparison."""

    code = "INSUFFICIENT_JOBS"


class EngineInvocationError(EvalDeskError):
    """Raised when the evaluation engine signals failure."""

    code = "ENGINE_INVOCATION_FAILED"


class TransientParseError(EvalDeskError):
    """Raised when a result document exists but cannot be parsed yet.

    StatusResolver absorbs this and reports the job as not completed.
    """

    code = "TRANSIENT_PARSE"


class PollTimeoutError(EvalDeskError):
    """Raised when polling gives up before the job reaches a terminal status.

    The job outcome is indeterminate, not failed; ``last_report`` holds
    the most recent status observed.
    """

    code = "POLL_TIMEOUT"

    def __init__(self, message: str, *, last_report: Any = None, **kwargs: Any) -> None:
        self.last_report = last_report
        super().__init__(message, **kwargs)


class StorageError(EvalDeskError):
    """Raised when the job store cannot be read or written."""

    code = "STORAGE_ERROR"
