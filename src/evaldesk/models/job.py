"""Job data models for evaluation submissions.

These models encode the submission contract (EvaluationRequest) and
the persisted job metadata document (Job) written at submission time.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from evaldesk.models.result import EvaluationResult


class JobStatus(str, Enum):
    """Lifecycle status of an evaluation job."""

    pending = "pending"
    running = "running"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"


TERMINAL_STATUSES: frozenset[JobStatus] = frozenset(
    {JobStatus.completed, JobStatus.failed, JobStatus.cancelled}
)


class Prompt(BaseModel):
    """A single prompt in a job's prompt set."""

    model_config = {"extra": "forbid"}

    id: str
    text: str
    expected_output: str | None = None
    category: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ModelParameters(BaseModel):
    """Generation parameters forwarded to the provider."""

    model_config = {"extra": "forbid"}

    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, gt=0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    frequency_penalty: float | None = Field(default=None, ge=-2.0, le=2.0)
    presence_penalty: float | None = Field(default=None, ge=-2.0, le=2.0)


class ModelConfig(BaseModel):
    """A model under evaluation and the provider serving it."""

    model_config = {"extra": "forbid", "protected_namespaces": ()}

    id: str
    provider: str
    model_name: str
    parameters: ModelParameters | None = None
    api_key: str | None = None
    endpoint: str | None = None


class MetricConfig(BaseModel):
    """A metric to compute for every model/prompt pair."""

    model_config = {"extra": "forbid"}

    name: str
    enabled: bool = True
    weight: float = Field(default=1.0, ge=0.0, le=1.0)
    parameters: dict[str, Any] = Field(default_factory=dict)


class ExecutionConfig(BaseModel):
    """Execution settings handed to the evaluation engine."""

    model_config = {"extra": "forbid"}

    parallel_requests: int = Field(default=5, gt=0)
    timeout_seconds: float = Field(default=120, gt=0)
    retry_attempts: int = Field(default=3, ge=0)


class EvaluationRequest(BaseModel):
    """A job submission: prompts x models x metrics.

    Prompt and model identifiers must be unique, since results are keyed
    by them.
    """

    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1)
    prompts: list[Prompt] = Field(min_length=1)
    models: list[ModelConfig] = Field(min_length=1)
    metrics: list[MetricConfig] = Field(min_length=1)
    config: ExecutionConfig = Field(default_factory=ExecutionConfig)

    @model_validator(mode="after")
    def _check_unique_ids(self) -> EvaluationRequest:
        for label, ids in (
            ("prompt", [p.id for p in self.prompts]),
            ("model", [m.id for m in self.models]),
            ("metric", [m.name for m in self.metrics]),
        ):
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            if duplicates:
                raise ValueError(
                    f"Duplicate {label} identifiers: {', '.join(duplicates)}"
                )
        return self


class Job(BaseModel):
    """Persisted job metadata, optionally merged with its result document.

    ``results`` is never written to the metadata document; it is merged
    in on read when a result document exists.
    """

    id: str
    name: str
    status: JobStatus = JobStatus.pending
    created_at: datetime
    completed_at: datetime | None = None
    prompts: list[Prompt] = Field(default_factory=list)
    models: list[ModelConfig] = Field(default_factory=list)
    metrics: list[MetricConfig] = Field(default_factory=list)
    config: ExecutionConfig = Field(default_factory=ExecutionConfig)
    results: EvaluationResult | None = None

    def provider_for(self, model_id: str) -> str | None:
        """Return the provider configured for a model id, if any."""
        for model in self.models:
            if model.id == model_id:
                return model.provider
        return None
