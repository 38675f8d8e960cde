"""Main CLI entry point using Typer."""

from __future__ import annotations

import typer
from rich.console import Console

from restart_orchestrator import __version__
from restart_orchestrator.cli.commands import restart
from restart_orchestrator.logging.config import configure_logging

app = typer.Typer(
    name="restartctl",
    help="Rolling restarts for Kubernetes workloads selected by name.",
    add_completion=True,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"restartctl version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode.",
    ),
    log_json: bool = typer.Option(
        False,
        "--log-json",
        help="Emit console logs as JSON.",
    ),
) -> None:
    """restartctl - force a rolling restart of a class of workloads across namespaces."""
    configure_logging(verbose=verbose, debug=debug, json_output=log_json)


app.command("restart")(restart.restart)
app.command("plan")(restart.plan)


if __name__ == "__main__":
    app()
