"""evaldesk results -- show or export a completed job's results."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from evaldesk.cli.common import exit_on_failure, load_service
from evaldesk.cli.output import render_job_results


def results(
    job_id: str = typer.Argument(..., help="Job ID to show results for"),
    fmt: str = typer.Option("table", "--format", "-f", help="table, json, csv or html"),
    metric: Optional[str] = typer.Option(None, "--metric", "-m", help="Show one metric only (table format)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the export to this file"),
) -> None:
    """Show the results of an evaluation job."""
    service = load_service()
    console = Console()

    if fmt == "table":
        outcome = service.get_job(job_id)
        exit_on_failure(outcome)
        job = outcome.data
        if job.results is None:
            console.print(
                f"[yellow]Job is {job.status.value}.[/yellow] "
                f"Run 'evaldesk status {job_id}' for more info."
            )
            return
        render_job_results(job, console, metric=metric)
        return

    exported = service.export_job(job_id, fmt)
    exit_on_failure(exported)
    if output is not None:
        output.write_bytes(exported.data)
        console.print(f"[green]Results saved to {output}[/green]")
    else:
        sys.stdout.write(exported.data.decode("utf-8"))
        sys.stdout.write("\n")
