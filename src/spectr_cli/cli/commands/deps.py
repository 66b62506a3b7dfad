"""``spectr deps``: inspect a change's proposal dependencies."""

from __future__ import annotations

import json as json_lib
from pathlib import Path

import typer
from rich.console import Console

from spectr_cli.core import (
    AcceptanceError,
    ConfigError,
    FrontmatterError,
    build_dependency_graph,
    get_dependents,
    load_config,
    validate_dependencies,
    validate_dependencies_for_accept,
)

from ..ui import format_issue

console = Console()


def deps_command(
    change_id: str = typer.Argument(..., help="ID of the change to check"),
    accept: bool = typer.Option(
        False,
        "--accept",
        help="Fail unless every required change is archived",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON (machine-parseable)",
    ),
    path: Path = typer.Option(
        Path("."),
        "--path",
        help="Directory inside the project (spectr.yaml is searched upwards)",
    ),
) -> None:
    """Report dependency status and cycles for CHANGE_ID."""
    try:
        config = load_config(path)
    except ConfigError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1)
    spectr_root = config.root_path

    if accept:
        try:
            validate_dependencies_for_accept(change_id, spectr_root)
        except (AcceptanceError, FrontmatterError) as exc:
            console.print(f"[red]Error: {exc}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]✓[/green] '{change_id}' has no unmet dependencies")
        return

    try:
        result = validate_dependencies(change_id, spectr_root)
    except FrontmatterError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1)
    dependents = get_dependents(change_id, build_dependency_graph(spectr_root))

    if json_output:
        output = {
            "change": change_id,
            "valid": not result.has_errors,
            "issues": [issue.to_dict() for issue in result.issues],
            "unmet": [
                {"id": dep.id, "reason": dep.reason, "status": dep.status.value}
                for dep in result.unmet
            ],
            "cycles": result.cycles,
            "dependents": dependents,
        }
        print(json_lib.dumps(output, indent=2))
    else:
        if not result.issues:
            console.print(f"[green]✓[/green] '{change_id}': all dependencies satisfied")
        for issue in result.issues:
            console.print(format_issue(issue), highlight=False)
        if dependents:
            console.print(f"[dim]Required by: {', '.join(dependents)}[/dim]")

    if result.has_errors:
        raise typer.Exit(1)
