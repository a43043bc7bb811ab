"""evaldesk config -- write a sample evaluation request to edit and run."""

from __future__ import annotations

import json
from pathlib import Path

import typer
import yaml
from rich.console import Console

from evaldesk.cli.common import err_console, exit_on_failure, load_service


def config(
    output: Path = typer.Option(Path("evaluation-config.yaml"), "--output", "-o", help="Output file (.yaml, .yml or .json)"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Generate a sample evaluation request file."""
    if output.exists() and not force:
        err_console.print(f"[bold red]{output} already exists.[/bold red] Use --force to overwrite.")
        raise typer.Exit(code=1)

    outcome = load_service().sample_request()
    exit_on_failure(outcome)
    data = outcome.data.model_dump(mode="json", exclude_none=True)

    if output.suffix.lower() == ".json":
        content = json.dumps(data, indent=2) + "\n"
    else:
        content = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    output.write_text(content, encoding="utf-8")

    console = Console()
    console.print(f"[green]Sample configuration saved to {output}[/green]")
    console.print("\nEdit the configuration file and run:")
    console.print(f"[cyan]evaldesk run {output}[/cyan]")
