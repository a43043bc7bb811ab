"""JSON file storage layer for evaldesk jobs.

Stores the engine config, job metadata, result documents and explicit
status records as JSON files under .evaldesk/, one file per job per
collection. Every write is atomic (write to .tmp, then rename) so that
readers only ever see complete documents or no document at all.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from evaldesk.errors import NotFoundError, TransientParseError
from evaldesk.models.comparison import StatusRecord
from evaldesk.models.job import EvaluationRequest, Job, JobStatus
from evaldesk.models.result import EvaluationResult

logger = logging.getLogger(__name__)


class JobStore:
    """Persist and query evaluation jobs as JSON files in .evaldesk/.

    File layout:
        .evaldesk/
            configs/{job-id}.json   # Engine config (prompts/models/metrics keyed by id)
            jobs/{job-id}.json      # Job metadata, written once at submission
            results/{job-id}.json   # Result document, published by the engine
            status/{job-id}.json    # Optional explicit status record

    Presence of a parseable result document is the completion signal.
    """

    def __init__(self, project_root: Path, storage_dir: str | None = None) -> None:
        effective_dir = storage_dir or ".evaldesk"
        self.root = project_root / effective_dir
        self.configs_dir = self.root / "configs"
        self.jobs_dir = self.root / "jobs"
        self.results_dir = self.root / "results"
        self.status_dir = self.root / "status"

    def ensure_dirs(self) -> None:
        """Create the configs/, jobs/, results/ and status/ directories."""
        for directory in (self.configs_dir, self.jobs_dir, self.results_dir, self.status_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def config_path(self, job_id: str) -> Path:
        return self.configs_dir / f"{job_id}.json"

    def job_path(self, job_id: str) -> Path:
        return self.jobs_dir / f"{job_id}.json"

    def result_path(self, job_id: str) -> Path:
        return self.results_dir / f"{job_id}.json"

    def status_path(self, job_id: str) -> Path:
        return self.status_dir / f"{job_id}.json"

    def create(self, request: EvaluationRequest) -> str:
        """Persist a new job: engine config plus pending job metadata.

        Args:
            request: The validated submission.

        Returns:
            The freshly assigned job ID.
        """
        self.ensure_dirs()
        job_id = str(uuid4())

        config_doc = build_engine_config(request)
        self._atomic_write(self.config_path(job_id), json.dumps(config_doc, indent=2, ensure_ascii=False))

        job = Job(
            id=job_id,
            name=request.name,
            status=JobStatus.pending,
            created_at=datetime.now(timezone.utc),
            prompts=request.prompts,
            models=request.models,
            metrics=request.metrics,
            config=request.config,
        )
        self._atomic_write(
            self.job_path(job_id),
            job.model_dump_json(indent=2, exclude={"results"}),
        )
        logger.info("Created job %s (%s)", job_id, request.name)
        return job_id

    def load_job(self, job_id: str) -> Job:
        """Load the job metadata document without merging results.

        Raises:
            NotFoundError: If no metadata document exists for job_id.
        """
        job_file = self.job_path(job_id)
        try:
            content = job_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise NotFoundError(
                f"Job '{job_id}' not found", job_id=job_id, operation="get"
            ) from None
        try:
            return Job.model_validate_json(content)
        except PydanticValidationError as exc:
            raise TransientParseError(
                f"Job '{job_id}' metadata could not be parsed",
                job_id=job_id,
                operation="get",
            ) from exc

    def get(self, job_id: str) -> Job:
        """Load a job and merge its result document if one is available.

        A result document that cannot be parsed yet is ignored, leaving
        the job as persisted. Model results for models the job does not
        declare are dropped.

        Raises:
            NotFoundError: If no metadata document exists for job_id.
        """
        job = self.load_job(job_id)
        try:
            result = self.load_result(job_id)
        except TransientParseError:
            logger.debug("Result for job %s not readable yet", job_id)
            result = None
        if result is not None:
            result = _declared_models_only(job, result)
            job = job.model_copy(
                update={
                    "results": result,
                    "status": JobStatus.completed,
                    "completed_at": result.completed_at,
                }
            )
        return job

    def list(self) -> list[Job]:
        """List all jobs, newest first, without merging results.

        Metadata documents that cannot be read are skipped.
        """
        if not self.jobs_dir.exists():
            return []
        jobs = []
        for job_file in self.jobs_dir.glob("*.json"):
            try:
                jobs.append(Job.model_validate_json(job_file.read_text(encoding="utf-8")))
            except (OSError, ValueError) as exc:
                logger.warning("Skipping unreadable job document %s: %s", job_file.name, exc)
        jobs.sort(key=lambda j: (j.created_at, j.id), reverse=True)
        return jobs

    def load_result(self, job_id: str) -> EvaluationResult | None:
        """Load the result document for a job.

        Returns:
            The parsed result, or None if no result has been published.

        Raises:
            TransientParseError: If the document exists but does not parse.
        """
        result_file = self.result_path(job_id)
        try:
            content = result_file.read_bytes()
        except FileNotFoundError:
            return None
        try:
            result = EvaluationResult.model_validate_json(content)
        except PydanticValidationError as exc:
            raise TransientParseError(
                f"Result for job '{job_id}' could not be parsed",
                job_id=job_id,
                operation="load_result",
                details={"errors": exc.error_count()},
            ) from exc
        if result.job_id != job_id:
            raise TransientParseError(
                f"Result document for job '{job_id}' belongs to job '{result.job_id}'",
                job_id=job_id,
                operation="load_result",
            )
        return result

    def publish_result(self, result: EvaluationResult) -> Path:
        """Atomically publish a result document (engine side of the contract)."""
        self.results_dir.mkdir(parents=True, exist_ok=True)
        path = self.result_path(result.job_id)
        self._atomic_write(path, result.model_dump_json(indent=2))
        return path

    def record_status(
        self,
        job_id: str,
        status: JobStatus,
        message: str | None = None,
    ) -> StatusRecord:
        """Atomically write an explicit status record for a job."""
        self.status_dir.mkdir(parents=True, exist_ok=True)
        record = StatusRecord(
            job_id=job_id,
            status=status,
            updated_at=datetime.now(timezone.utc),
            message=message,
        )
        self._atomic_write(self.status_path(job_id), record.model_dump_json(indent=2))
        return record

    def load_status(self, job_id: str) -> StatusRecord | None:
        """Load the explicit status record, treating unreadable records as absent."""
        status_file = self.status_path(job_id)
        try:
            content = status_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            return StatusRecord.model_validate_json(content)
        except PydanticValidationError:
            logger.debug("Status record for job %s not readable yet", job_id)
            return None

    def load_engine_config(self, job_id: str) -> dict[str, Any]:
        """Load the engine config document written at submission."""
        content = self.config_path(job_id).read_text(encoding="utf-8")
        return json.loads(content)

    @staticmethod
    def _atomic_write(path: Path, content: str) -> None:
        tmp_file = path.with_name(f"{path.name}.tmp")
        tmp_file.write_text(content, encoding="utf-8")
        tmp_file.replace(path)


def build_engine_config(request: EvaluationRequest) -> dict[str, Any]:
    """Build the engine config document, keying prompts, models and metrics by id."""
    return {
        "name": request.name,
        "prompts": {
            p.id: {
                "text": p.text,
                "expected_output": p.expected_output,
                "category": p.category,
                "metadata": p.metadata,
            }
            for p in request.prompts
        },
        "models": {
            m.id: {
                "provider": m.provider,
                "model_name": m.model_name,
                "parameters": m.parameters.model_dump(exclude_none=True) if m.parameters else {},
                "api_key": m.api_key,
                "endpoint": m.endpoint,
            }
            for m in request.models
        },
        "metrics": {
            m.name: {
                "enabled": m.enabled,
                "weight": m.weight,
                "parameters": m.parameters,
            }
            for m in request.metrics
        },
        "config": request.config.model_dump(),
    }


def _declared_models_only(job: Job, result: EvaluationResult) -> EvaluationResult:
    declared = {m.id for m in job.models}
    undeclared = [model_id for model_id in result.model_results if model_id not in declared]
    if not undeclared:
        return result
    logger.warning("Ignoring results for undeclared models %s in job %s", undeclared, job.id)
    return result.model_copy(
        update={
            "model_results": {
                model_id: mr for model_id, mr in result.model_results.items() if model_id in declared
            }
        }
    )
