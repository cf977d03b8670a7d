"""Status command for cronloom CLI."""

from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from cronloom.cli import app, console
from cronloom.cli.utils import format_datetime, resolve_state_file
from cronloom.engine.errors import StateError
from cronloom.models import JobStatus
from cronloom.storage import StateStore

STATUS_STYLES = {
    JobStatus.RUNNING: "green",
    JobStatus.PAUSED: "yellow",
    JobStatus.STOPPED: "dim",
    JobStatus.ERROR: "red",
}


@app.command()
def status(
    state_file: Path | None = typer.Option(
        None,
        "--state-file",
        "-s",
        help="State file to read (defaults to persistence.file_path from config)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """Show jobs recorded in a saved scheduler state."""
    path = resolve_state_file(state_file)

    try:
        document = StateStore(path).load()
    except StateError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    if document is None:
        if json_output:
            console.print_json(data={"error": f"State file not found: {path}", "jobs": []})
        else:
            console.print(f"[yellow]No state file found at {path}[/]")
            console.print("Enable [cyan]persistence[/] in config.yaml to save scheduler state.")
        raise typer.Exit(1)

    if json_output:
        console.print_json(document.model_dump_json())
        return

    if not document.jobs:
        console.print(f"[yellow]No jobs in state saved {format_datetime(document.timestamp)}[/]")
        return

    table = Table(title=f"Jobs (saved {format_datetime(document.timestamp)})")
    table.add_column("Name", style="cyan")
    table.add_column("Cron")
    table.add_column("Status")
    table.add_column("Priority", justify="right")
    table.add_column("Runs", justify="right")
    table.add_column("Failures", justify="right")
    table.add_column("Avg (ms)", justify="right")
    table.add_column("Last Error")

    for job in document.jobs:
        style = STATUS_STYLES[job.status]
        metrics = job.metrics
        table.add_row(
            job.name,
            job.cron,
            f"[{style}]{job.status.value}[/]",
            str(job.priority),
            str(metrics.total_executions) if metrics else "-",
            str(metrics.failure_count) if metrics else "-",
            f"{metrics.average_duration_ms:.1f}" if metrics else "-",
            (metrics.last_error_message or "") if metrics else "",
        )

    console.print(table)
