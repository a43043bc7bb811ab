"""evaldesk summary -- totals across every stored job."""

from __future__ import annotations

import typer
from rich.console import Console

from evaldesk.cli.common import exit_on_failure, load_service, output_json
from evaldesk.cli.output import render_summary


def summary(
    format_json: bool = typer.Option(False, "--json", help="Output pure JSON to stdout"),
) -> None:
    """Summarize all evaluation jobs."""
    outcome = load_service().summary()
    exit_on_failure(outcome, as_json=format_json)
    if format_json:
        output_json(outcome.to_dict())
    else:
        render_summary(outcome.data, Console())
