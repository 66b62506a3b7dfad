"""``spectr merge``: apply a change's delta specs to the base specs."""

from __future__ import annotations

import json as json_lib
import logging
from pathlib import Path

import typer
from rich.console import Console

from spectr_cli.archive import MergeError, merge_change, write_merged_specs
from spectr_cli.core import ConfigError, load_config
from spectr_cli.core.discovery import CHANGES_DIRNAME
from spectr_cli.markdown import MarkdownSyntaxError
from spectr_cli.validation import SpecFileError, validate_change_delta_specs

from ..ui import format_issue

logger = logging.getLogger(__name__)

console = Console()


def merge_command(
    change_id: str = typer.Argument(..., help="ID of the change to merge"),
    write: bool = typer.Option(
        False,
        "--write",
        help="Write the merged specs (default is a dry run)",
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
    """Merge CHANGE_ID's delta specs into the base specs."""
    try:
        config = load_config(path)
    except ConfigError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1)
    spectr_root = config.root_path

    change_dir = spectr_root / CHANGES_DIRNAME / change_id
    if not change_dir.is_dir():
        console.print(f"[red]Error: change '{change_id}' not found[/red]")
        raise typer.Exit(1)

    try:
        report = validate_change_delta_specs(change_dir, spectr_root, config.strictness)
        if not report.valid:
            console.print(f"[red]Error: '{change_id}' has validation errors[/red]")
            for issue in report.errors:
                console.print(format_issue(issue), highlight=False)
            raise typer.Exit(1)
        results = merge_change(change_dir, spectr_root)
    except (SpecFileError, MarkdownSyntaxError, MergeError) as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1)

    if write:
        for written in write_merged_specs(results, spectr_root):
            logger.debug("Updated %s", written)

    if json_output:
        output = {
            "change": change_id,
            "written": write,
            "specs": [result.to_dict() for result in results],
        }
        print(json_lib.dumps(output, indent=2))
        return

    for result in results:
        counts = result.counts
        label = "new" if result.created else "updated"
        console.print(
            f"[green]✓[/green] {result.capability} ({label}): "
            f"+{counts.added} ~{counts.modified} -{counts.removed} →{counts.renamed}",
            highlight=False,
        )
    if not write:
        console.print("[dim]Dry run, pass --write to update the specs[/dim]")
