"""evaldesk data models - re-exports all public model classes."""

from evaldesk.models.comparison import (
    Comparison,
    GroupBy,
    JobStatusReport,
    Leaderboard,
    Progress,
    Ranking,
    ResultsSummary,
    StatusRecord,
)
from evaldesk.models.config import ProjectConfig
from evaldesk.models.job import (
    EvaluationRequest,
    ExecutionConfig,
    Job,
    JobStatus,
    MetricConfig,
    ModelConfig,
    Prompt,
)
from evaldesk.models.result import (
    EvaluationResult,
    MetricResult,
    ModelOutput,
    ModelResult,
    PerformanceMetrics,
    ResultSummary,
)

__all__ = [
    "Comparison",
    "EvaluationRequest",
    "EvaluationResult",
    "ExecutionConfig",
    "GroupBy",
    "Job",
    "JobStatus",
    "JobStatusReport",
    "Leaderboard",
    "MetricConfig",
    "MetricResult",
    "ModelConfig",
    "ModelOutput",
    "ModelResult",
    "PerformanceMetrics",
    "ProjectConfig",
    "Progress",
    "Prompt",
    "Ranking",
    "ResultSummary",
    "ResultsSummary",
    "StatusRecord",
]
