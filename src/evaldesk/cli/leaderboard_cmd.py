"""evaldesk leaderboard -- rank models across all completed jobs."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from evaldesk.cli.common import exit_on_failure, load_service, output_json
from evaldesk.cli.output import render_leaderboard


def leaderboard(
    metric: Optional[str] = typer.Option(None, "--metric", "-m", help="Metric to rank by (default: all metrics)"),
    providers: Optional[list[str]] = typer.Option(None, "--provider", "-p", help="Only rank models from this provider (repeatable)"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Number of models to show"),
    format_json: bool = typer.Option(False, "--json", help="Output pure JSON to stdout"),
) -> None:
    """Show the model performance leaderboard."""
    outcome = load_service().leaderboard(metric=metric, providers=providers or None, limit=limit)
    exit_on_failure(outcome, as_json=format_json)
    if format_json:
        output_json(outcome.to_dict())
    else:
        render_leaderboard(outcome.data, Console())
