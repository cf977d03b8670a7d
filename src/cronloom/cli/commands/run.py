"""Run command for cronloom CLI."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import typer
import yaml
from pydantic import BaseModel, Field, ValidationError
from rich.markup import escape
from rich.table import Table

from cronloom.cli import app, console
from cronloom.cli.utils import setup_logging
from cronloom.config import ConfigError, load_persistence_options, load_scheduler_config
from cronloom.engine.errors import CronloomError, JobExecutionError
from cronloom.scheduler import SchedulerService

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from cronloom.models import JobMetrics, PersistenceOptions, SchedulerConfig

logger = logging.getLogger(__name__)


class CommandJob(BaseModel):
    """A shell command scheduled from a jobs file."""

    name: str = Field(..., min_length=1)
    cron: str = Field(..., min_length=1)
    command: str = Field(..., min_length=1, description="Shell command to execute")
    priority: int = 0
    max_history: int | None = Field(default=None, ge=1)
    timeout: float | None = Field(
        default=None, gt=0, description="Seconds before the command is killed"
    )


class JobsFile(BaseModel):
    jobs: list[CommandJob] = Field(default_factory=list)


def load_jobs_file(path: Path) -> JobsFile:
    """Parse and validate a jobs YAML file.

    Raises:
        ValueError: If the YAML is malformed or not a mapping.
        ValidationError: If an entry is missing fields.
    """
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping with a 'jobs' list")
    return JobsFile.model_validate(data)


def command_callback(job: CommandJob) -> Callable[[], Awaitable[None]]:
    """Build the async callback that runs a job's shell command.

    A non-zero exit code or a timeout raises JobExecutionError, which the
    scheduler records as a failed execution.
    """

    async def run_command() -> None:
        proc = await asyncio.create_subprocess_shell(
            job.command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                proc.communicate(), timeout=job.timeout
            )
        except TimeoutError:
            proc.kill()
            await proc.wait()
            raise JobExecutionError(f"Command timed out after {job.timeout}s", job.name)

        stdout = stdout_bytes.decode("utf-8", errors="replace").strip()
        stderr = stderr_bytes.decode("utf-8", errors="replace").strip()
        if stdout:
            logger.info(f"[{job.name}] {stdout}")

        exit_code = proc.returncode or 0
        if exit_code != 0:
            detail = f": {stderr}" if stderr else ""
            raise JobExecutionError(f"Command exited with code {exit_code}{detail}", job.name)

    return run_command


async def serve_jobs(
    jobs: list[CommandJob],
    config: SchedulerConfig,
    persistence: PersistenceOptions,
    duration: float | None = None,
) -> dict[str, JobMetrics]:
    """Register and start every job, then wait.

    Args:
        jobs: Jobs to run.
        config: Scheduler defaults.
        persistence: State saving options.
        duration: Stop after this many seconds. Runs until cancelled when None.

    Returns:
        Final metrics per job name.
    """

    def report_error(error: BaseException, job_name: str) -> None:
        console.print(f"[red]✗[/] [cyan]{job_name}[/]: {error}")

    # Jobs come from the file, so nothing is restored over them
    service = SchedulerService(
        config,
        persistence=persistence.model_copy(update={"auto_restore": False}),
        on_error=report_error,
    )
    try:
        for job in jobs:
            service.add(
                name=job.name,
                cron=job.cron,
                callback=command_callback(job),
                priority=job.priority,
                max_history=job.max_history,
                start=True,
            )

        if duration is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(duration)
    finally:
        # Saves the final state when persistence is enabled
        service.stop_all()

    return {name: service.get_metrics(name) for name in service.get_job_names()}


@app.command()
def run(
    jobs_file: Path = typer.Argument(..., help="YAML file with a 'jobs' list"),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging",
    ),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Write logs to this file instead of stderr",
    ),
    duration: float | None = typer.Option(
        None,
        "--duration",
        min=0,
        help="Stop after this many seconds (default: run until Ctrl+C)",
    ),
) -> None:
    """Run shell-command jobs on their cron schedules.

    The jobs file looks like:

        jobs:
          - name: backup
            cron: "0 30 2 * * *"
            command: ./backup.sh

    Examples:
        cronloom run ~/.cronloom/jobs.yaml
        cronloom run jobs.yaml --debug --log-file cronloom.log
    """
    if not jobs_file.exists():
        console.print(f"[red]Error:[/] Jobs file not found: {jobs_file}")
        raise typer.Exit(1)

    try:
        jobs = load_jobs_file(jobs_file).jobs
    except ValidationError as e:
        console.print(f"[red]✗[/] Invalid jobs file [cyan]{jobs_file.name}[/]:")
        for error in e.errors():
            loc = " → ".join(str(loc_part) for loc_part in error["loc"])
            console.print(f"  [red]•[/] [yellow]{loc}[/]: {error['msg']}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    if not jobs:
        console.print(f"[yellow]No jobs defined in {jobs_file}[/]")
        raise typer.Exit(1)

    try:
        config = load_scheduler_config()
        persistence = load_persistence_options()
    except ConfigError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    setup_logging(log_file, debug)

    table = Table(title=f"Scheduling {len(jobs)} job(s)")
    table.add_column("Name", style="cyan")
    table.add_column("Cron")
    table.add_column("Command")
    table.add_column("Priority", justify="right")
    for job in jobs:
        table.add_row(job.name, job.cron, job.command, str(job.priority))
    console.print(table)
    console.print("[dim]Press Ctrl+C to stop[/]")

    try:
        metrics = asyncio.run(serve_jobs(jobs, config, persistence, duration))
    except KeyboardInterrupt:
        console.print("\n[yellow]Scheduler stopped.[/]")
        return
    except CronloomError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    summary = Table(title="Run summary")
    summary.add_column("Name", style="cyan")
    summary.add_column("Runs", justify="right")
    summary.add_column("Failures", justify="right")
    summary.add_column("Avg (ms)", justify="right")
    for name, job_metrics in metrics.items():
        summary.add_row(
            name,
            str(job_metrics.total_executions),
            str(job_metrics.failure_count),
            f"{job_metrics.average_duration_ms:.1f}",
        )
    console.print(summary)
    console.print("[green]✓[/] Scheduler stopped")
