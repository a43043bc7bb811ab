"""Rich terminal output for jobs, comparisons, leaderboards and summaries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from evaldesk.analysis.aggregation import truncate

if TYPE_CHECKING:
    from evaldesk.models.comparison import (
        Comparison,
        JobPage,
        JobStatusReport,
        Leaderboard,
        ResultsSummary,
    )
    from evaldesk.models.job import Job


# Status styling: status value -> Rich style
_STATUS_STYLES: dict[str, str] = {
    "pending": "yellow",
    "running": "blue",
    "completed": "bold green",
    "failed": "bold red",
    "cancelled": "dim",
}

_MEDALS = {1: "\U0001f947", 2: "\U0001f948", 3: "\U0001f949"}


def status_text(status: str) -> str:
    style = _STATUS_STYLES.get(status, "white")
    return f"[{style}]{status}[/{style}]"


def create_watch_progress(console: Console) -> Progress | None:
    """Create a progress bar for watching a job, or None when not a terminal."""
    if not console.is_terminal:
        return None
    return Progress(
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def render_status(report: JobStatusReport, console: Console) -> None:
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Job ID", report.job_id)
    table.add_row("Status", status_text(report.status.value))
    table.add_row("Created", report.created_at.isoformat(timespec="seconds"))
    table.add_row(
        "Completed",
        report.completed_at.isoformat(timespec="seconds") if report.completed_at else "N/A",
    )
    if report.progress is not None:
        p = report.progress
        table.add_row(
            "Progress",
            f"{p.percentage}% ({p.completed_prompts}/{p.total_prompts} prompts, "
            f"{p.completed_evaluations}/{p.total_evaluations} evaluations)",
        )
    if report.message:
        table.add_row("Message", report.message)
    console.print()
    console.print(table)


def render_job_results(job: Job, console: Console, metric: str | None = None) -> None:
    """Render per-model performance and metric scores for a completed job."""
    if job.results is None:
        console.print("[dim]No results available yet.[/dim]")
        return

    console.print()
    console.print(f"[bold]Job:[/bold] {job.name} ({job.id})")

    perf_table = Table(box=box.ROUNDED, title="Model Performance")
    perf_table.add_column("Model")
    perf_table.add_column("Success", justify="right")
    perf_table.add_column("Outputs", justify="right")
    perf_table.add_column("Avg Latency", justify="right")
    perf_table.add_column("Tokens", justify="right")
    perf_table.add_column("Cost", justify="right")
    for model_id, result in job.results.model_results.items():
        perf = result.performance
        perf_table.add_row(
            model_id,
            f"{perf.success_rate:.0%}",
            str(len(result.outputs)),
            f"{perf.average_latency_ms:.0f}ms",
            str(perf.total_tokens),
            f"${perf.total_cost_usd:.4f}",
        )
    console.print(perf_table)

    metric_table = Table(box=box.ROUNDED, title="Metric Scores")
    metric_table.add_column("Model")
    metric_table.add_column("Metric")
    metric_table.add_column("Score", justify="right")
    for model_id, result in job.results.model_results.items():
        for name, metric_result in result.metrics.items():
            if metric is None or name == metric:
                metric_table.add_row(model_id, name, f"{metric_result.score:.3f}")
    console.print(metric_table)


def render_job_list(page: JobPage, console: Console) -> None:
    if not page.jobs:
        console.print("[dim]No jobs found.[/dim]")
        return
    table = Table(box=box.ROUNDED, title="Evaluation Jobs")
    table.add_column("Job ID")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Created")
    table.add_column("Completed")
    for job in page.jobs:
        table.add_row(
            job.id[:8],
            truncate(job.name, 30),
            status_text(job.status.value),
            job.created_at.date().isoformat(),
            job.completed_at.date().isoformat() if job.completed_at else "N/A",
        )
    console.print(table)
    shown_to = page.offset + len(page.jobs)
    console.print(f"\nShowing {page.offset + 1}-{shown_to} of {page.total} job(s).")


def render_comparison(comparison: Comparison, console: Console) -> None:
    """Render a comparison table whose columns follow the grouping."""
    names = ", ".join(j.name for j in comparison.jobs_compared)
    console.print()
    console.print(f"[bold]Jobs compared:[/bold] {names}")
    console.print(f"[bold]Grouped by:[/bold] {comparison.group_by.value}")

    group = comparison.group_by.value
    if group == "model":
        table = Table(box=box.ROUNDED, title="Comparison by Model")
        table.add_column("Model")
        table.add_column("Jobs", justify="right")
        table.add_column("Metrics")
        table.add_column("Success", justify="right")
        table.add_column("Avg Latency", justify="right")
        table.add_column("Avg Cost", justify="right")
        table.add_column("Evaluations", justify="right")
        for model_id, entry in comparison.data.items():
            summary = entry.performance_summary
            metrics = ", ".join(f"{k}={v:.3f}" for k, v in entry.aggregated_metrics.items())
            table.add_row(
                model_id,
                str(len(entry.jobs)),
                metrics or "-",
                f"{summary.avg_success_rate:.0%}",
                f"{summary.avg_latency_ms:.0f}ms",
                f"${summary.avg_cost_usd:.4f}",
                str(summary.evaluations_count),
            )
    elif group == "prompt":
        table = Table(box=box.ROUNDED, title="Comparison by Prompt")
        table.add_column("Prompt")
        table.add_column("Text")
        table.add_column("Job")
        table.add_column("Model")
        table.add_column("Scores")
        for prompt_id, entry in comparison.data.items():
            for perf in entry.model_performances:
                scores = ", ".join(f"{k}={v:.3f}" for k, v in perf.metrics.items())
                table.add_row(prompt_id, truncate(entry.prompt_text, 40), perf.job_id[:8], perf.model_id, scores or "-")
    else:
        table = Table(box=box.ROUNDED, title="Comparison by Metric")
        table.add_column("Metric")
        table.add_column("Job")
        table.add_column("Model")
        table.add_column("Score", justify="right")
        for metric_name, entry in comparison.data.items():
            for score in entry.model_scores:
                table.add_row(metric_name, score.job_name, score.model_id, f"{score.score:.3f}")
    console.print(table)


def render_leaderboard(board: Leaderboard, console: Console) -> None:
    if not board.rankings:
        console.print("[dim]No completed jobs with scores yet.[/dim]")
        return
    table = Table(box=box.ROUNDED, title=f"Model Leaderboard ({board.metric})")
    table.add_column("Rank", justify="right")
    table.add_column("Model")
    table.add_column("Provider")
    table.add_column("Score", justify="right")
    table.add_column("Evaluations", justify="right")
    table.add_column("Avg Latency", justify="right")
    table.add_column("Cost / 1k tok", justify="right")
    for r in board.rankings:
        table.add_row(
            _MEDALS.get(r.rank, str(r.rank)),
            r.model_id,
            r.provider,
            f"{r.score:.3f}",
            str(r.evaluations_count),
            f"{r.avg_latency_ms:.0f}ms",
            f"${r.avg_cost_per_1k_tokens:.4f}",
        )
    console.print(table)


def render_summary(summary: ResultsSummary, console: Console) -> None:
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Jobs", f"{summary.completed_jobs}/{summary.total_jobs} completed")
    table.add_row("Evaluations", str(summary.total_evaluations))
    table.add_row("Total cost", f"${summary.total_cost_usd:.4f}")
    table.add_row("Avg latency", f"{summary.avg_latency_ms:.0f}ms")
    console.print()
    console.print(table)

    if summary.top_performing_models:
        top = Table(box=box.ROUNDED, title="Top Models")
        top.add_column("Model")
        top.add_column("Avg Score", justify="right")
        top.add_column("Evaluations", justify="right")
        for model in summary.top_performing_models:
            top.add_row(model.model_id, f"{model.avg_score:.3f}", str(model.evaluation_count))
        console.print(top)
