"""evaldesk engines - boundary to the external evaluation runner.

Re-exports the EvaluationEngine ABC, the builtin engines and the
engine registry functions.
"""

from evaldesk.engine.base import EvaluationEngine
from evaldesk.engine.dry_run import DryRunEngine
from evaldesk.engine.registry import engine_from_settings, get_engine
from evaldesk.engine.subprocess_engine import SubprocessEngine

__all__ = [
    "DryRunEngine",
    "EvaluationEngine",
    "SubprocessEngine",
    "engine_from_settings",
    "get_engine",
]
