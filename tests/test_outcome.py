"""Tests for evaldesk.outcome.Outcome and the error taxonomy."""

import pytest

from evaldesk.errors import EvalDeskError, NotFoundError, PollTimeoutError
from evaldesk.models.job import JobStatus
from evaldesk.outcome import Outcome


class TestOutcome:
    def test_ok_envelope(self):
        outcome = Outcome.ok("job-1", "Evaluation job started successfully")
        assert outcome.unwrap() == "job-1"
        assert outcome.to_dict() == {
            "success": True,
            "data": "job-1",
            "message": "Evaluation job started successfully",
        }

    def test_fail_envelope(self):
        outcome = Outcome.fail(NotFoundError("Job 'x' not found", job_id="x", operation="get_job"))
        assert not outcome.success
        assert outcome.to_dict() == {
            "success": False,
            "error": "Job 'x' not found",
            "code": "JOB_NOT_FOUND",
            "details": {"job_id": "x", "operation": "get_job"},
        }

    def test_unwrap_failure_raises(self):
        outcome = Outcome.fail(NotFoundError("gone"))
        with pytest.raises(EvalDeskError, match="gone"):
            outcome.unwrap()

    def test_unwrap_keeps_error_class(self):
        outcome = Outcome.fail(PollTimeoutError("late", last_report="report", job_id="j"))
        with pytest.raises(PollTimeoutError) as exc_info:
            outcome.unwrap()
        assert exc_info.value.code == "POLL_TIMEOUT"
        assert exc_info.value.last_report == "report"
        assert "exception" not in outcome.to_dict()

    def test_models_and_bytes_are_jsonable(self):
        assert Outcome.ok(b"a,b\n").to_dict()["data"] == "a,b\n"
        assert Outcome.ok([JobStatus.running]).to_dict()["data"] == [JobStatus.running]


class TestErrors:
    def test_context_merges_details(self):
        err = EvalDeskError("boom", job_id="j", details={"extra": 1})
        assert err.context() == {"extra": 1, "job_id": "j"}

    def test_poll_timeout_keeps_last_report(self):
        err = PollTimeoutError("late", last_report="report", job_id="j")
        assert err.last_report == "report"
        assert err.code == "POLL_TIMEOUT"
        assert err.job_id == "j"
