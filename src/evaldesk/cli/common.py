"""Helpers shared by the CLI commands: service construction and failure exits."""

from __future__ import annotations

import json
import sys
from typing import Any

import typer
import yaml
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape

from evaldesk.log import ensure_logging
from evaldesk.models.config import find_project_root, load_project_config
from evaldesk.outcome import Outcome
from evaldesk.service import EvalService

err_console = Console(stderr=True)


def load_service() -> EvalService:
    """Build an EvalService for the project containing the cwd.

    Exits with code 1 if evaldesk.yaml is invalid or names an unknown engine.
    """
    project_root = find_project_root()
    try:
        config = load_project_config(project_root)
    except (PydanticValidationError, yaml.YAMLError, ValueError) as exc:
        err_console.print(f"[bold red]Invalid evaldesk.yaml:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    ensure_logging(config.log_level)
    try:
        return EvalService.from_config(project_root, config)
    except (ValueError, ImportError, TypeError) as exc:
        err_console.print(f"[bold red]Engine error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)


def output_json(payload: dict[str, Any]) -> None:
    """Write a JSON document to stdout with no markup."""
    sys.stdout.write(json.dumps(payload, indent=2, default=str))
    sys.stdout.write("\n")


def exit_on_failure(outcome: Outcome[Any], *, as_json: bool = False) -> None:
    """Report a failed outcome and exit with code 1; no-op on success."""
    if outcome.success:
        return
    if as_json:
        output_json(outcome.to_dict())
    else:
        err_console.print(f"[bold red]Error:[/bold red] {escape(outcome.error or '')} [dim]({outcome.code})[/dim]")
    raise typer.Exit(code=1)
