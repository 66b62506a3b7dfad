"""Validate many changes and specs in one run.

Items are independent, so they may be validated on a thread pool; results
always come back in input order. A cancel event is checked before each
item starts. A fatal precondition on one item (unreadable file, missing
``specs/`` directory, unclosed fence, ...) is recorded on that item's
:class:`BulkResult` and the run continues.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from spectr_cli.core.discovery import (
    CHANGES_DIRNAME,
    SPEC_FILENAME,
    SPECS_DIRNAME,
    get_active_change_ids,
    get_spec_ids,
)
from spectr_cli.markdown import MarkdownSyntaxError

from .change_rules import validate_change_delta_specs
from .exceptions import AmbiguousItemError, ItemNotFoundError, SpecFileError, ValidationCancelled
from .models import BulkResult, ItemType, ValidationReport
from .spec_rules import validate_spec_file
from .strictness import Strictness

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationItem:
    """A change directory or a base spec file to validate."""

    name: str
    type: ItemType
    path: Path


def change_item(spectr_root: Path, change_id: str) -> ValidationItem:
    return ValidationItem(change_id, ItemType.CHANGE, spectr_root / CHANGES_DIRNAME / change_id)


def spec_item(spectr_root: Path, spec_id: str) -> ValidationItem:
    return ValidationItem(spec_id, ItemType.SPEC, spectr_root / SPECS_DIRNAME / spec_id / SPEC_FILENAME)


def collect_items(
    spectr_root: Path,
    changes: bool = True,
    specs: bool = True,
) -> list[ValidationItem]:
    """Active changes then specs, each group sorted by name."""
    items: list[ValidationItem] = []
    if changes:
        items.extend(change_item(spectr_root, cid) for cid in get_active_change_ids(spectr_root))
    if specs:
        items.extend(spec_item(spectr_root, sid) for sid in get_spec_ids(spectr_root))
    return items


def resolve_item(
    spectr_root: Path,
    name: str,
    item_type: ItemType | None = None,
) -> ValidationItem:
    """Find the change or spec called ``name``.

    Raises:
        ItemNotFoundError: If no item of the requested type has that name.
        AmbiguousItemError: If ``item_type`` is None and both kinds match.
    """
    is_change = name in get_active_change_ids(spectr_root)
    is_spec = name in get_spec_ids(spectr_root)

    if item_type is ItemType.CHANGE:
        if not is_change:
            raise ItemNotFoundError(name, "change")
        return change_item(spectr_root, name)
    if item_type is ItemType.SPEC:
        if not is_spec:
            raise ItemNotFoundError(name, "spec")
        return spec_item(spectr_root, name)

    if is_change and is_spec:
        raise AmbiguousItemError(name)
    if is_change:
        return change_item(spectr_root, name)
    if is_spec:
        return spec_item(spectr_root, name)
    raise ItemNotFoundError(name)


def validate_item(
    item: ValidationItem,
    spectr_root: Path,
    strictness: Strictness = Strictness.STRICT,
) -> ValidationReport:
    """Validate a single item; fatal preconditions propagate."""
    if item.type is ItemType.CHANGE:
        return validate_change_delta_specs(item.path, spectr_root, strictness)
    return validate_spec_file(item.path, strictness)


def _run_item(
    item: ValidationItem,
    spectr_root: Path,
    strictness: Strictness,
) -> BulkResult:
    try:
        report = validate_item(item, spectr_root, strictness)
    except (SpecFileError, MarkdownSyntaxError) as exc:
        logger.debug("Validation of %s %s failed: %s", item.type, item.name, exc)
        return BulkResult.from_error(item.name, item.type, exc)
    return BulkResult.from_report(item.name, item.type, report)


def validate_items(
    items: Sequence[ValidationItem],
    spectr_root: Path,
    strictness: Strictness = Strictness.STRICT,
    workers: int = 1,
    cancel: threading.Event | None = None,
) -> list[BulkResult]:
    """Validate ``items`` and return one result per item, in input order.

    Args:
        items: Items to validate
        spectr_root: Root holding ``specs/`` and ``changes/``
        strictness: Policy passed to every validator
        workers: Number of worker threads; 1 validates sequentially
        cancel: When set, no further item is started

    Raises:
        ValidationCancelled: If ``cancel`` stopped the run early; carries the
            results produced so far.
    """

    def cancelled() -> bool:
        return cancel is not None and cancel.is_set()

    if workers <= 1:
        results: list[BulkResult] = []
        for item in items:
            if cancelled():
                raise ValidationCancelled(results)
            results.append(_run_item(item, spectr_root, strictness))
        return results

    def run_unless_cancelled(item: ValidationItem) -> BulkResult | None:
        if cancelled():
            return None
        return _run_item(item, spectr_root, strictness)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(run_unless_cancelled, item) for item in items]
        outcomes = [future.result() for future in futures]

    results = [result for result in outcomes if result is not None]
    if len(results) < len(items):
        raise ValidationCancelled(results)
    return results
