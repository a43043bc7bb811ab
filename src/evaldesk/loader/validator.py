"""Request validation: parse a submission file, then validate it.

Two stages: parse YAML/JSON with key positions, then validate against
the EvaluationRequest model. Every error is collected with its dotted
field path, source position and, for unknown keys, a typo suggestion.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from evaldesk.loader.yaml_parser import (
    RequestParseError,
    parse_request_file,
    parse_request_source,
)
from evaldesk.models.job import (
    EvaluationRequest,
    ExecutionConfig,
    MetricConfig,
    ModelConfig,
    ModelParameters,
    Prompt,
)

# Model whose fields are valid at a given location (list indices dropped).
_MODELS_BY_LOCATION: dict[tuple[str, ...], type[BaseModel]] = {
    (): EvaluationRequest,
    ("prompts",): Prompt,
    ("models",): ModelConfig,
    ("models", "parameters"): ModelParameters,
    ("metrics",): MetricConfig,
    ("config",): ExecutionConfig,
}


@dataclass
class ValidationErrorDetail:
    """A single validation error with source position and context.

    Attributes:
        field: Dotted path of the offending field ("prompts.0.text").
        message: Human-readable error description.
        type: Pydantic error type string (e.g. 'missing', 'extra_forbidden').
        line: 1-indexed line number in the source, or None if unknown.
        col: 1-indexed column number in the source, or None if unknown.
        suggestion: 'Did you mean X?' suggestion for typos, or None.
        input_value: The invalid input value, if available.
    """

    field: str
    message: str
    type: str
    line: int | None = None
    col: int | None = None
    suggestion: str | None = None
    input_value: Any = field(default=None)


def _position_for(field_path: str, positions: dict[str, tuple[int, int]]) -> tuple[int | None, int | None]:
    """Find the closest recorded position, trimming the path from the right."""
    parts = field_path.split(".")
    while parts:
        candidate = ".".join(parts)
        if candidate in positions:
            return positions[candidate]
        parts.pop()
    return None, None


def _suggest(loc: tuple[str | int, ...]) -> str | None:
    """Suggest the closest valid field name for an unknown key."""
    if not loc:
        return None
    parent = tuple(str(p) for p in loc[:-1] if not isinstance(p, int))
    model = _MODELS_BY_LOCATION.get(parent)
    if model is None:
        return None
    matches = difflib.get_close_matches(str(loc[-1]), list(model.model_fields), n=1, cutoff=0.6)
    if matches:
        return f"Did you mean '{matches[0]}'?"
    return None


def validate_request(
    raw_data: dict[str, Any],
    positions: dict[str, tuple[int, int]] | None = None,
) -> tuple[EvaluationRequest | None, list[ValidationErrorDetail]]:
    """Validate parsed request data against EvaluationRequest.

    Returns:
        Tuple of (EvaluationRequest, []) on success, or (None, errors).
    """
    positions = positions or {}
    try:
        return EvaluationRequest.model_validate(raw_data), []
    except PydanticValidationError as exc:
        errors: list[ValidationErrorDetail] = []
        for err in exc.errors():
            loc = tuple(err.get("loc", ()))
            field_path = ".".join(str(part) for part in loc) or "<root>"
            error_type = err.get("type", "unknown")
            line, col = _position_for(field_path, positions)
            errors.append(
                ValidationErrorDetail(
                    field=field_path,
                    message=err.get("msg", "Validation error"),
                    type=error_type,
                    line=line,
                    col=col,
                    suggestion=_suggest(loc) if error_type == "extra_forbidden" else None,
                    input_value=err.get("input"),
                )
            )
        return None, errors


def _parse_failure(exc: RequestParseError) -> list[ValidationErrorDetail]:
    return [
        ValidationErrorDetail(
            field="<file>",
            message=exc.message,
            type="syntax_error",
            line=exc.line,
            col=exc.column,
        )
    ]


def _empty(kind: str) -> list[ValidationErrorDetail]:
    return [
        ValidationErrorDetail(
            field="<file>",
            message=f"{kind} is empty or is not a mapping",
            type="empty_input",
        )
    ]


def load_request_file(filepath: Path) -> tuple[EvaluationRequest | None, list[ValidationErrorDetail]]:
    """Load and validate a YAML or JSON submission file.

    Returns:
        Tuple of (EvaluationRequest, []) on success, or (None, errors)
        with every problem found.
    """
    try:
        raw_data, positions = parse_request_file(filepath)
    except RequestParseError as exc:
        return None, _parse_failure(exc)
    if raw_data is None:
        return None, _empty("File")
    return validate_request(raw_data, positions)


def load_request_string(
    source: str,
    filename: str = "<string>",
) -> tuple[EvaluationRequest | None, list[ValidationErrorDetail]]:
    """Validate a submission given as YAML or JSON text."""
    try:
        raw_data, positions = parse_request_source(source, filename=filename)
    except RequestParseError as exc:
        return None, _parse_failure(exc)
    if raw_data is None:
        return None, _empty("Input")
    return validate_request(raw_data, positions)
