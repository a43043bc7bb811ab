"""evaldesk list -- list jobs newest first, optionally by status."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from evaldesk.cli.common import exit_on_failure, load_service, output_json
from evaldesk.cli.output import render_job_list


def list_jobs(
    status: Optional[str] = typer.Option(
        None, "--status", "-s", help="Filter by status (pending, running, completed, failed, cancelled)"
    ),
    limit: int = typer.Option(10, "--limit", "-n", help="Number of jobs to show"),
    offset: int = typer.Option(0, "--offset", help="Number of jobs to skip"),
    format_json: bool = typer.Option(False, "--json", help="Output pure JSON to stdout"),
) -> None:
    """List evaluation jobs."""
    outcome = load_service().list_jobs(status=status, limit=limit, offset=offset)
    exit_on_failure(outcome, as_json=format_json)
    if format_json:
        output_json(outcome.to_dict())
    else:
        render_job_list(outcome.data, Console())
