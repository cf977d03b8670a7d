"""Next command for cronloom CLI."""

from datetime import datetime

import typer
from rich.markup import escape
from rich.table import Table

from cronloom.cli import app, console
from cronloom.cli.utils import format_datetime
from cronloom.engine.errors import CronloomError
from cronloom.engine.parser import CronParser


@app.command("next")
def next_occurrences(
    expression: str = typer.Argument(..., help="Six-field cron expression or @preset"),
    count: int = typer.Option(
        5,
        "--count",
        "-n",
        min=1,
        max=1000,
        help="Number of occurrences to show",
    ),
    previous: bool = typer.Option(
        False,
        "--previous",
        "-p",
        help="Show past occurrences instead of upcoming ones",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """Show when an expression fires next.

    Examples:
        cronloom next "0 */15 * * * *"
        cronloom next @at_9:30 --count 3
        cronloom next @weekly --previous
    """
    try:
        parser = CronParser(expression)
        occurrences: list[datetime] = []
        reference = parser.now()
        for _ in range(count):
            reference = (
                parser.get_previous(reference) if previous else parser.get_next(reference)
            )
            occurrences.append(reference)
    except CronloomError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    if json_output:
        console.print_json(
            data={
                "expression": expression,
                "direction": "previous" if previous else "next",
                "occurrences": [o.isoformat() for o in occurrences],
            }
        )
        return

    table = Table(title=f"{'Previous' if previous else 'Next'} runs of {expression}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Time", style="cyan")
    table.add_column("Day")

    for index, occurrence in enumerate(occurrences, start=1):
        table.add_row(str(index), format_datetime(occurrence), occurrence.strftime("%A"))

    console.print(table)
