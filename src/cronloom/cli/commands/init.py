"""Init command for cronloom CLI."""

import typer

from cronloom.cli import app, console
from cronloom.config import CONFIG_FILENAME, DEFAULT_CONFIG, get_cronloom_dir

EXAMPLE_JOBS = """\
jobs:
  - name: heartbeat
    cron: "@every_minute"
    command: echo "cronloom is alive"

  - name: morning-report
    cron: "@at_9:00"
    command: date
    priority: 10
"""


@app.command()
def init(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration",
    ),
) -> None:
    """Initialize the cronloom directory.

    Creates the ~/.cronloom directory (or $CRONLOOM_HOME) with:
    - config.yaml with default settings
    - jobs.yaml with example shell jobs for `cronloom run`
    """
    cronloom_dir = get_cronloom_dir()
    config_file = cronloom_dir / CONFIG_FILENAME

    if config_file.exists() and not force:
        console.print(f"[yellow]cronloom already initialized at {cronloom_dir}[/]")
        console.print("Use [cyan]--force[/] to reinitialize")
        raise typer.Exit(1)

    cronloom_dir.mkdir(parents=True, exist_ok=True)
    config_file.write_text(DEFAULT_CONFIG)

    jobs_file = cronloom_dir / "jobs.yaml"
    jobs_file.write_text(EXAMPLE_JOBS)

    console.print(f"[green]✓[/] Initialized cronloom at {cronloom_dir}")
    console.print(f"[green]✓[/] Created config file: {config_file}")
    console.print(f"[green]✓[/] Created example jobs file: {jobs_file}")
    console.print()
    console.print(f"Run [cyan]cronloom run {jobs_file}[/] to start the example jobs")
