"""CLI commands for cronloom."""

# Import command modules to register them with the app
# These imports have side effects (register commands via @app.command())
from cronloom.cli.commands import init, next_cmd, run, status, validate

__all__ = ["init", "next_cmd", "run", "status", "validate"]
