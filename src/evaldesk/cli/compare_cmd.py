"""evaldesk compare -- compare two or more jobs by model, prompt or metric."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from evaldesk.cli.common import exit_on_failure, load_service
from evaldesk.cli.output import render_comparison


def compare(
    job_ids: list[str] = typer.Argument(..., help="Job IDs to compare (space-separated)"),
    group_by: str = typer.Option("model", "--group-by", "-g", help="Group by model, prompt or metric"),
    metrics: Optional[str] = typer.Option(None, "--metrics", "-m", help="Comma-separated metrics to include"),
    fmt: str = typer.Option("table", "--format", "-f", help="table, json, csv or html"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the export to this file"),
) -> None:
    """Compare results from multiple jobs."""
    service = load_service()
    metric_filter = [m.strip() for m in metrics.split(",") if m.strip()] if metrics else None

    outcome = service.compare_jobs(job_ids, group_by, metric_filter)
    exit_on_failure(outcome)
    comparison = outcome.data
    console = Console()

    if fmt == "table":
        render_comparison(comparison, console)
        return

    exported = service.export_comparison(comparison, fmt)
    exit_on_failure(exported)
    if output is not None:
        output.write_bytes(exported.data)
        console.print(f"[green]Comparison saved to {output}[/green]")
    else:
        sys.stdout.write(exported.data.decode("utf-8"))
        sys.stdout.write("\n")
