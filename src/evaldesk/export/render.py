"""Serialize jobs and comparisons to json, csv or html bytes."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence
from enum import Enum
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from evaldesk.errors import ValidationError
from evaldesk.export.report import build_job_report, build_report
from evaldesk.export.rows import (
    COMPARISON_ROW_HEADER,
    JOB_ROW_HEADER,
    comparison_rows,
    job_rows,
)
from evaldesk.models.comparison import Comparison
from evaldesk.models.job import Job

TEMPLATES_DIR = Path(__file__).parent / "templates"


class ExportFormat(str, Enum):
    json = "json"
    csv = "csv"
    html = "html"


def parse_format(fmt: ExportFormat | str) -> ExportFormat:
    """Normalize a format name, raising ValidationError for unknown ones."""
    if isinstance(fmt, ExportFormat):
        return fmt
    try:
        return ExportFormat(fmt.lower())
    except ValueError:
        raise ValidationError(
            f"Unsupported export format '{fmt}'",
            operation="export",
            details={"allowed": [f.value for f in ExportFormat]},
        ) from None


def export_job(job: Job, fmt: ExportFormat | str = ExportFormat.json) -> bytes:
    """Render a job (with results merged) in the requested format."""
    export_format = parse_format(fmt)
    if export_format == ExportFormat.json:
        return job.model_dump_json(indent=2).encode("utf-8")
    if export_format == ExportFormat.csv:
        return _to_csv(JOB_ROW_HEADER, job_rows(job))
    return _render("job.html.j2", report=build_job_report(job), rows=job_rows(job))


def export_comparison(comparison: Comparison, fmt: ExportFormat | str = ExportFormat.json) -> bytes:
    """Render a comparison in the requested format.

    csv and html need a model-grouped comparison.
    """
    export_format = parse_format(fmt)
    if export_format == ExportFormat.json:
        return comparison.model_dump_json(indent=2).encode("utf-8")
    if export_format == ExportFormat.csv:
        return _to_csv(COMPARISON_ROW_HEADER, comparison_rows(comparison))
    return _render("comparison.html.j2", report=build_report(comparison))


def _to_csv(header: Sequence[str], rows: Iterable[Sequence[object]]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def _render(template_name: str, **context: object) -> bytes:
    env = Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        autoescape=select_autoescape(default=True),
        keep_trailing_newline=True,
    )
    return env.get_template(template_name).render(**context).encode("utf-8")
