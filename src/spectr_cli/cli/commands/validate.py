"""``spectr validate``: validate one item or many."""

from __future__ import annotations

import json as json_lib
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from spectr_cli.core import ConfigError, load_config
from spectr_cli.validation import (
    AmbiguousItemError,
    ItemNotFoundError,
    ItemType,
    Strictness,
    collect_items,
    resolve_item,
    resolve_strictness,
    validate_items,
)

from ..ui import render_results, summarize

logger = logging.getLogger(__name__)

console = Console()


def validate_command(
    item: Optional[str] = typer.Argument(
        None,
        help="Name of a change or spec to validate",
    ),
    item_type: Optional[ItemType] = typer.Option(
        None,
        "--type",
        help="Treat ITEM as a change or a spec (needed when both exist)",
    ),
    all_items: bool = typer.Option(
        False,
        "--all",
        help="Validate every active change and spec",
    ),
    changes: bool = typer.Option(
        False,
        "--changes",
        help="Validate every active change",
    ),
    specs: bool = typer.Option(
        False,
        "--specs",
        help="Validate every spec",
    ),
    strictness: Optional[Strictness] = typer.Option(
        None,
        "--strictness",
        case_sensitive=False,
        help="Override the configured strictness (strict, warn)",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        min=1,
        help="Worker threads for bulk runs (defaults to the configured value)",
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
    """Validate changes and specs. Exits 1 if anything is invalid."""
    bulk = all_items or changes or specs
    if item and bulk:
        console.print("[red]Error: Pass either an item name or --all/--changes/--specs, not both[/red]")
        raise typer.Exit(1)
    if not item and not bulk:
        console.print("[red]Error: Nothing to validate. Pass an item name or --all/--changes/--specs[/red]")
        raise typer.Exit(1)

    try:
        config = load_config(path)
    except ConfigError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1)

    spectr_root = config.root_path
    effective = resolve_strictness(config.strictness, strictness)
    logger.debug("Validating under %s with strictness=%s", spectr_root, effective)

    if item:
        try:
            items = [resolve_item(spectr_root, item, item_type)]
        except (ItemNotFoundError, AmbiguousItemError) as exc:
            console.print(f"[red]Error: {exc}[/red]")
            raise typer.Exit(1)
    else:
        items = collect_items(
            spectr_root,
            changes=all_items or changes,
            specs=all_items or specs,
        )

    if not items:
        if json_output:
            print(json_lib.dumps({"items": [], "summary": summarize([])}, indent=2))
        else:
            console.print("[dim]No items to validate[/dim]")
        return

    results = validate_items(
        items,
        spectr_root,
        strictness=effective,
        workers=workers or config.workers,
    )

    # JSON output for scripting (use print() to avoid Rich markup)
    if json_output:
        if item:
            output = results[0].to_dict()
        else:
            output = {
                "items": [result.to_dict() for result in results],
                "summary": summarize(results),
            }
        print(json_lib.dumps(output, indent=2))
    else:
        render_results(console, results)

    if not all(result.valid for result in results):
        raise typer.Exit(1)
