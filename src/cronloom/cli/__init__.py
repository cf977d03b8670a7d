"""cronloom CLI interface."""

import typer
from rich.console import Console

# CLI App
app = typer.Typer(
    name="cronloom",
    help="In-process cron scheduling with six-field expressions.",
    no_args_is_help=True,
)

# Console for rich output
console = Console()

# Import commands to register them
from cronloom.cli.commands import init, next_cmd, run, status, validate  # noqa: E402, F401


@app.command()
def version() -> None:
    """Show cronloom version."""
    from cronloom import __version__

    console.print(f"cronloom v{__version__}")


if __name__ == "__main__":
    app()
