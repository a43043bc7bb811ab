"""evaldesk CLI entry point."""

from typing import Optional

import typer

from evaldesk import __version__
from evaldesk.cli.catalog_cmd import metrics, providers
from evaldesk.cli.compare_cmd import compare
from evaldesk.cli.config_cmd import config
from evaldesk.cli.leaderboard_cmd import leaderboard
from evaldesk.cli.list_cmd import list_jobs
from evaldesk.cli.results_cmd import results
from evaldesk.cli.run_cmd import run
from evaldesk.cli.status_cmd import status
from evaldesk.cli.summary_cmd import summary
from evaldesk.log import setup_logging

app = typer.Typer(
    name="evaldesk",
    help="Track, compare and rank LLM evaluation jobs",
    no_args_is_help=True,
)

# Register subcommands
app.command()(run)
app.command()(status)
app.command()(results)
app.command(name="list")(list_jobs)
app.command()(compare)
app.command()(leaderboard)
app.command()(summary)
app.command()(metrics)
app.command()(providers)
app.command()(config)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"evaldesk {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        envvar="EVALDESK_LOG_LEVEL",
        help="Logging level (overrides evaldesk.yaml).",
    ),
) -> None:
    """Track, compare and rank LLM evaluation jobs."""
    if log_level:
        try:
            setup_logging(log_level)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--log-level") from exc
