"""Engine registry for resolving engine names to classes.

Supports both builtin engine names ("subprocess", "dry-run") and
custom dotted-path imports (e.g., "my.module.MyEngine").
"""

from __future__ import annotations

import importlib
from typing import Any

from evaldesk.engine.base import EvaluationEngine
from evaldesk.models.config import EngineSettings

# Mapping of builtin engine short names to their fully-qualified class paths.
BUILTIN_ENGINES: dict[str, str] = {
    "subprocess": "evaldesk.engine.subprocess_engine.SubprocessEngine",
    "dry-run": "evaldesk.engine.dry_run.DryRunEngine",
}


def get_engine(name: str, **kwargs: Any) -> EvaluationEngine:
    """Resolve an engine by name or dotted path and return an instance.

    Args:
        name: A builtin engine name or a fully-qualified dotted path
              to an EvaluationEngine subclass.
        **kwargs: Passed to the engine constructor.

    Returns:
        An instance of the resolved engine class.

    Raises:
        ValueError: If the name is not a builtin and has no dots (unknown).
        ImportError: If the module or class cannot be imported.
        TypeError: If the resolved class is not a subclass of EvaluationEngine.
    """
    if name in BUILTIN_ENGINES:
        dotted_path = BUILTIN_ENGINES[name]
    elif "." in name:
        dotted_path = name
    else:
        available = ", ".join(sorted(BUILTIN_ENGINES.keys()))
        raise ValueError(
            f"Unknown engine '{name}'. "
            f"Available builtin engines: {available}. "
            f"For custom engines, provide the full dotted path "
            f"(e.g., 'my.module.MyEngine')."
        )

    module_path, _, class_name = dotted_path.rpartition(".")
    if not module_path or not class_name:
        raise ValueError(
            f"Invalid engine path '{dotted_path}'. "
            f"Expected format: 'module.path.ClassName'."
        )

    module = importlib.import_module(module_path)
    try:
        cls = getattr(module, class_name)
    except AttributeError:
        raise ImportError(
            f"Module '{module_path}' has no attribute '{class_name}'."
        ) from None

    if not isinstance(cls, type) or not issubclass(cls, EvaluationEngine):
        raise TypeError(
            f"'{dotted_path}' is not a subclass of EvaluationEngine. "
            f"Custom engines must inherit from evaldesk.engine.base.EvaluationEngine."
        )

    return cls(**kwargs)


def engine_from_settings(settings: EngineSettings) -> EvaluationEngine:
    """Build the engine described by the ``engine`` section of evaldesk.yaml.

    Builtin engines receive the settings they understand; custom engines
    are constructed without arguments.
    """
    if settings.name == "subprocess":
        return get_engine(
            settings.name,
            command=settings.command,
            submit_timeout_seconds=settings.submit_timeout_seconds,
            detach=settings.detach,
        )
    if settings.name == "dry-run":
        return get_engine(settings.name, metrics=settings.metrics, providers=settings.providers)
    return get_engine(settings.name)
