"""evaldesk status -- show a job's resolved status and progress."""

from __future__ import annotations

import typer
from rich.console import Console

from evaldesk.cli.common import exit_on_failure, load_service, output_json
from evaldesk.cli.output import render_status


def status(
    job_id: str = typer.Argument(..., help="Job ID to check"),
    format_json: bool = typer.Option(False, "--json", help="Output pure JSON to stdout"),
) -> None:
    """Show the status of an evaluation job."""
    outcome = load_service().get_status(job_id)
    exit_on_failure(outcome, as_json=format_json)
    if format_json:
        output_json(outcome.to_dict())
    else:
        render_status(outcome.data, Console())
