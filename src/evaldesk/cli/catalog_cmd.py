"""evaldesk metrics / providers -- what the configured engine supports."""

from __future__ import annotations

import typer
from rich.console import Console

from evaldesk.cli.common import exit_on_failure, load_service, output_json


def _print_names(title: str, names: list[str]) -> None:
    console = Console()
    console.print(f"[bold]{title}[/bold]")
    for name in names:
        console.print(f"  {name}")


def metrics(
    format_json: bool = typer.Option(False, "--json", help="Output pure JSON to stdout"),
) -> None:
    """List the metrics the engine can compute."""
    outcome = load_service().available_metrics()
    exit_on_failure(outcome, as_json=format_json)
    if format_json:
        output_json(outcome.to_dict())
    else:
        _print_names("Available Metrics:", outcome.data)


def providers(
    format_json: bool = typer.Option(False, "--json", help="Output pure JSON to stdout"),
) -> None:
    """List the model providers the engine can call."""
    outcome = load_service().available_providers()
    exit_on_failure(outcome, as_json=format_json)
    if format_json:
        output_json(outcome.to_dict())
    else:
        _print_names("Available Model Providers:", outcome.data)
