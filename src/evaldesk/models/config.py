"""Project configuration model for evaldesk.

Captures evaldesk.yaml fields with sensible defaults for storage,
engine invocation, polling and concurrency settings.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

CONFIG_FILENAME = "evaldesk.yaml"
DEFAULT_STORAGE_DIR = ".evaldesk"


class EngineSettings(BaseModel):
    """How to reach the external evaluation engine.

    ``name`` is a builtin engine name ("subprocess", "dry-run") or a
    dotted path to an EvaluationEngine subclass. ``metrics`` and
    ``providers`` are only used by the dry-run engine.
    """

    model_config = {"extra": "forbid"}

    name: str = "subprocess"
    command: list[str] = Field(default_factory=lambda: ["eaas"])
    submit_timeout_seconds: float = Field(default=600.0, gt=0)
    detach: bool = False
    metrics: list[str] = Field(default_factory=list)
    providers: list[str] = Field(default_factory=list)


class PollingSettings(BaseModel):
    """Defaults for waiting on a job to finish."""

    model_config = {"extra": "forbid"}

    interval_seconds: float = Field(default=5.0, gt=0)
    timeout_seconds: float = Field(default=600.0, gt=0)


class ProjectConfig(BaseModel):
    """Project-level configuration loaded from evaldesk.yaml."""

    model_config = {"extra": "forbid"}

    storage_dir: str = DEFAULT_STORAGE_DIR
    max_workers: int = Field(default=8, ge=1)
    max_compare_jobs: int = Field(default=10, ge=2)
    leaderboard_limit: int = Field(default=20, ge=1)
    log_level: str = "WARNING"
    ci_mode: bool = False
    engine: EngineSettings = Field(default_factory=EngineSettings)
    polling: PollingSettings = Field(default_factory=PollingSettings)


def find_project_root(start: Path | None = None) -> Path:
    """Walk up from start (default: cwd) looking for evaldesk.yaml or .evaldesk/.

    Args:
        start: Starting path (file or directory). Defaults to cwd.

    Returns:
        Path to the project root directory containing evaldesk.yaml or
        .evaldesk/, or cwd if neither is found.
    """
    current = (start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent
    while current != current.parent:
        if (current / CONFIG_FILENAME).exists() or (current / DEFAULT_STORAGE_DIR).exists():
            return current
        current = current.parent
    return Path.cwd()


def load_project_config(project_root: Path | None = None) -> ProjectConfig:
    """Load ProjectConfig from evaldesk.yaml. Returns defaults if not found.

    Args:
        project_root: Path to the project root directory. If None,
            uses find_project_root() to locate it.

    Returns:
        Validated ProjectConfig instance.
    """
    if project_root is None:
        project_root = find_project_root()
    config_path = project_root / CONFIG_FILENAME
    if not config_path.exists():
        return ProjectConfig()
    import yaml

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if raw is None:
        return ProjectConfig()
    return ProjectConfig.model_validate(raw)
