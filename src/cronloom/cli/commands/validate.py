"""Validate command for cronloom CLI."""

import typer
from rich.markup import escape
from rich.table import Table

from cronloom.cli import app, console
from cronloom.engine.errors import ExpressionError
from cronloom.engine.fields import FIELD_SPECS
from cronloom.engine.parser import parse_expression
from cronloom.engine.presets import normalize_expression


@app.command()
def validate(
    expression: str = typer.Argument(..., help="Six-field cron expression or @preset"),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show the expanded expression and every field's values",
    ),
) -> None:
    """Validate a cron expression.

    Checks that the expression:
    - Is a known preset, or has exactly six fields
    - Uses valid wildcard, range, step and list syntax
    - Stays inside each field's bounds
    """
    try:
        normalized = normalize_expression(expression)
        cron_time = parse_expression(expression)
    except ExpressionError as e:
        console.print(f"[red]✗[/] Invalid expression [cyan]{expression}[/]: {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/] Expression [cyan]{expression}[/] is valid")

    if verbose:
        console.print()
        console.print(f"  [dim]Expanded:[/] {normalized}")
        console.print()

        table = Table(title="Fields")
        table.add_column("Field", style="cyan")
        table.add_column("Source")
        table.add_column("Values")

        values = cron_time.to_dict()
        for spec, source in zip(FIELD_SPECS, normalized.split()):
            field_values = values[spec.name]
            shown = "*" if len(field_values) == len(spec.domain) else ", ".join(
                str(v) for v in field_values
            )
            table.add_row(spec.name, source, shown)

        console.print(table)
