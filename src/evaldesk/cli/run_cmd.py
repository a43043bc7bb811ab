"""evaldesk run -- submit an evaluation request and optionally watch it.

Loads a YAML/JSON request file, validates it field by field, persists
the job, hands it to the configured engine, and with --watch polls
until the job reaches a terminal status.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from evaldesk.cli.common import err_console, exit_on_failure, load_service, output_json
from evaldesk.cli.output import create_watch_progress, render_status
from evaldesk.loader.errors import ErrorFormatter
from evaldesk.loader.validator import load_request_file
from evaldesk.models.job import JobStatus


def run(
    request_path: Path = typer.Argument(..., help="Path to the evaluation request (YAML or JSON)"),
    models: Optional[str] = typer.Option(None, "--models", "-m", help="Comma-separated model IDs to keep"),
    watch: bool = typer.Option(False, "--watch", "-w", help="Wait for the job to finish"),
    interval: Optional[float] = typer.Option(None, "--interval", help="Seconds between status polls"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Give up watching after this many seconds"),
    format_json: bool = typer.Option(False, "--json", help="Output pure JSON to stdout"),
) -> None:
    """Submit an evaluation job."""
    if not request_path.is_file():
        err_console.print(f"[bold red]Request file not found:[/bold red] {request_path}")
        raise typer.Exit(code=1)

    service = load_service()
    request, errors = load_request_file(request_path)
    if errors:
        ErrorFormatter(ci_mode=True if service.config.ci_mode else None).print_errors(
            errors,
            request_path.read_text(encoding="utf-8"),
            str(request_path),
            err_console,
        )
        raise typer.Exit(code=1)
    assert request is not None

    if models:
        keep = {m.strip() for m in models.split(",") if m.strip()}
        selected = [m for m in request.models if m.id in keep]
        if not selected:
            err_console.print(f"[bold red]No models match:[/bold red] {models}")
            raise typer.Exit(code=1)
        request = request.model_copy(update={"models": selected})

    submitted = service.submit_job(request)
    exit_on_failure(submitted, as_json=format_json)
    job_id = submitted.data

    if not watch:
        if format_json:
            output_json(submitted.to_dict())
        else:
            console = Console()
            console.print(f"Evaluation started: [green]{job_id}[/green]")
            console.print(f"\nRun [cyan]evaldesk status {job_id}[/cyan] to check progress")
            console.print(f"Run [cyan]evaldesk results {job_id}[/cyan] to view results")
        return

    progress = None if format_json else create_watch_progress(err_console)
    if progress is not None:
        with progress:
            task = progress.add_task("Evaluating", total=100)

            def on_progress(report) -> None:
                if report.progress is not None:
                    progress.update(task, completed=report.progress.percentage)

            waited = service.wait_for_job(job_id, interval=interval, timeout=timeout, on_progress=on_progress)
    else:
        waited = service.wait_for_job(job_id, interval=interval, timeout=timeout)

    exit_on_failure(waited, as_json=format_json)
    report = waited.data
    if format_json:
        output_json(waited.to_dict())
    else:
        render_status(report, Console())
    if report.status != JobStatus.completed:
        raise typer.Exit(code=1)
