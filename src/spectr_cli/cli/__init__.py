"""Command line entry point for spectr."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from .commands import deps_command, merge_command, validate_command

console = Console(stderr=True)

app = typer.Typer(
    name="spectr",
    help="Validate spec-driven development documents",
    add_completion=False,
    no_args_is_help=True,
)

app.command("validate")(validate_command)
app.command("deps")(deps_command)
app.command("merge")(merge_command)


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def main():
    app()


__all__ = ["app", "main"]
