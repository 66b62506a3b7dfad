"""Rich rendering of validation results."""

from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.table import Table

from spectr_cli.validation import BulkResult, ValidationIssue, ValidationLevel

_LEVEL_STYLES = {
    ValidationLevel.ERROR: "red",
    ValidationLevel.WARNING: "yellow",
    ValidationLevel.INFO: "cyan",
}


def format_issue(issue: ValidationIssue) -> str:
    style = _LEVEL_STYLES.get(issue.level, "white")
    return (
        f"  [{style}]{issue.level.value}[/{style}] "
        f"[dim]{issue.path}:{issue.line}[/dim] {issue.message}"
    )


def render_result(console: Console, result: BulkResult) -> None:
    """Print one item's outcome followed by its issues."""
    label = f"{result.type.value} [bold]{result.name}[/bold]"
    if result.error is not None:
        console.print(f"[red]✗[/red] {label}: [red]{result.error}[/red]")
        return

    if result.report is None:
        return
    if result.valid:
        console.print(f"[green]✓[/green] {label} is valid")
    else:
        console.print(f"[red]✗[/red] {label} has {result.report.summary.errors} error(s)")
    for issue in result.report.issues:
        console.print(format_issue(issue), highlight=False)


def render_results(console: Console, results: Sequence[BulkResult]) -> None:
    """Print every result, then a summary table for multi-item runs."""
    for result in results:
        render_result(console, result)

    if len(results) < 2:
        return

    table = Table(title="Validation Summary")
    table.add_column("Item", style="bold")
    table.add_column("Type", style="cyan")
    table.add_column("Status")
    table.add_column("Errors", justify="right")
    table.add_column("Warnings", justify="right")

    for result in results:
        status = "[green]valid[/green]" if result.valid else "[red]invalid[/red]"
        if result.report is None:
            errors, warnings = "-", "-"
        else:
            errors = str(result.report.summary.errors)
            warnings = str(result.report.summary.warnings)
        table.add_row(result.name, result.type.value, status, errors, warnings)

    console.print()
    console.print(table)
    passed = sum(1 for r in results if r.valid)
    console.print(f"\n[dim]Total: {len(results)} item(s), {passed} passed, {len(results) - passed} failed[/dim]")


def summarize(results: Sequence[BulkResult]) -> dict[str, int]:
    passed = sum(1 for r in results if r.valid)
    return {"total": len(results), "passed": passed, "failed": len(results) - passed}
