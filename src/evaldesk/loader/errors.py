"""Formatter for request validation errors (annotated human or concise CI).

Human mode points at the offending source line with a caret underline;
CI mode prints one ``file:line:col -- field: message`` line per error.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rich.console import Console

    from evaldesk.loader.validator import ValidationErrorDetail


# Map Pydantic error types to error codes
ERROR_CODES: dict[str, str] = {
    "extra_forbidden": "E001",
    "missing": "E002",
    "value_error": "E003",
    "too_short": "E003",
    "string_too_short": "E003",
    "less_than_equal": "E003",
    "greater_than_equal": "E003",
    "greater_than": "E003",
    "string_type": "E004",
    "int_type": "E004",
    "int_parsing": "E004",
    "float_type": "E004",
    "float_parsing": "E004",
    "bool_type": "E004",
    "bool_parsing": "E004",
    "list_type": "E004",
    "dict_type": "E004",
    "model_type": "E004",
    "syntax_error": "E006",
    "empty_input": "E007",
}

ERROR_DESCRIPTIONS: dict[str, str] = {
    "E001": "unknown field",
    "E002": "required field missing",
    "E003": "invalid value",
    "E004": "type mismatch",
    "E006": "syntax error",
    "E007": "empty input",
}


def detect_ci() -> bool:
    return os.environ.get("CI", "").lower() in ("true", "1", "yes")


class ErrorFormatter:
    """Formats validation errors for human or CI consumption.

    Args:
        ci_mode: If True, use concise one-line output. If None,
            auto-detect from the CI environment variable.
    """

    def __init__(self, ci_mode: bool | None = None) -> None:
        self.ci_mode = detect_ci() if ci_mode is None else ci_mode

    @staticmethod
    def error_code(error_type: str) -> str:
        if error_type in ERROR_CODES:
            return ERROR_CODES[error_type]
        for key, code in ERROR_CODES.items():
            if key in error_type:
                return code
        return "E999"

    def format_error(
        self,
        error: ValidationErrorDetail,
        source_lines: list[str],
        filename: str,
    ) -> str:
        if self.ci_mode:
            suffix = f" ({error.suggestion})" if error.suggestion else ""
            return f"{filename}:{error.line or 0}:{error.col or 0} -- {error.field}: {error.message}{suffix}"
        return self._annotate(error, source_lines, filename)

    def _annotate(
        self,
        error: ValidationErrorDetail,
        source_lines: list[str],
        filename: str,
    ) -> str:
        """Render an error like:

            error[E001]: unknown field
              --> request.yaml:4:5
               |
             4 |     txet: What is 2+2?
               |     ^^^^ Extra inputs are not permitted
               |
               = help: Did you mean 'text'?
        """
        code = self.error_code(error.type)
        out = [f"error[{code}]: {ERROR_DESCRIPTIONS.get(code, 'validation error')}"]

        idx = (error.line or 0) - 1
        if error.line is not None and 0 <= idx < len(source_lines):
            out.append(f"  --> {filename}:{error.line}:{error.col or 1}")
            out.append("   |")
            src = source_lines[idx].rstrip()
            gutter = str(error.line)
            out.append(f" {gutter} | {src}")
            key = error.field.split(".")[-1]
            start = src.find(key)
            marker = f"{' ' * start}{'^' * len(key)} " if start >= 0 else ""
            out.append(f" {' ' * len(gutter)} | {marker}{error.message}")
        else:
            location = f"{filename}:{error.line}" if error.line is not None else filename
            out.append(f"  --> {location}")
            out.append("   |")
            out.append(f"   | {error.field}: {error.message}")
        out.append("   |")

        if error.suggestion:
            out.append(f"   = help: {error.suggestion}")
        return "\n".join(out)

    def format_all(
        self,
        errors: list[ValidationErrorDetail],
        source: str,
        filename: str,
    ) -> str:
        """Format every error, separated by blank lines."""
        lines = source.splitlines()
        return "\n\n".join(self.format_error(e, lines, filename) for e in errors)

    def print_errors(
        self,
        errors: list[ValidationErrorDetail],
        source: str,
        filename: str,
        console: Console,
    ) -> None:
        console.print(self.format_all(errors, source, filename), markup=False, highlight=False)
