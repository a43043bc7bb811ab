"""Export of jobs and comparisons as rows, reports and json/csv/html bytes."""

from evaldesk.export.render import ExportFormat, export_comparison, export_job, parse_format
from evaldesk.export.report import build_job_report, build_report
from evaldesk.export.rows import comparison_rows, job_rows

__all__ = [
    "ExportFormat",
    "build_job_report",
    "build_report",
    "comparison_rows",
    "export_comparison",
    "export_job",
    "job_rows",
    "parse_format",
]
