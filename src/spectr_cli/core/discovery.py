"""Locate specs and changes under a spectr root directory.

Layout::

    <root>/specs/<capability>/spec.md
    <root>/changes/<change-id>/proposal.md
    <root>/changes/archive/<YYYY-MM-DD->?<change-id>/
"""

from __future__ import annotations

import re
from enum import StrEnum
from pathlib import Path

SPECS_DIRNAME = "specs"
CHANGES_DIRNAME = "changes"
ARCHIVE_DIRNAME = "archive"
PROPOSAL_FILENAME = "proposal.md"
SPEC_FILENAME = "spec.md"
TASKS_FILENAME = "tasks.md"

_DATED_ARCHIVE = re.compile(r"^\d{4}-\d{2}-\d{2}-(?P<change_id>.+)$")


class ChangeStatus(StrEnum):
    """Lifecycle state of a change, as seen on disk."""

    ARCHIVED = "archived"
    ACTIVE = "active"
    UNKNOWN = "unknown"


def _visible_dirs(parent: Path) -> list[Path]:
    if not parent.is_dir():
        return []
    return sorted(
        child for child in parent.iterdir()
        if child.is_dir() and not child.name.startswith(".")
    )


def get_active_change_ids(spectr_root: Path) -> list[str]:
    """IDs of changes under ``changes/`` that hold a proposal, sorted.

    ``archive/`` and hidden directories are skipped.
    """
    return [
        change_dir.name
        for change_dir in _visible_dirs(spectr_root / CHANGES_DIRNAME)
        if change_dir.name != ARCHIVE_DIRNAME
        and (change_dir / PROPOSAL_FILENAME).is_file()
    ]


def get_spec_ids(spectr_root: Path) -> list[str]:
    """Capability names under ``specs/`` that hold a ``spec.md``, sorted."""
    return [
        spec_dir.name
        for spec_dir in _visible_dirs(spectr_root / SPECS_DIRNAME)
        if (spec_dir / SPEC_FILENAME).is_file()
    ]


def get_archived_change_ids(spectr_root: Path) -> list[str]:
    """Change IDs found under ``changes/archive/`` with any date prefix removed."""
    ids = []
    for archived in _visible_dirs(spectr_root / CHANGES_DIRNAME / ARCHIVE_DIRNAME):
        match = _DATED_ARCHIVE.match(archived.name)
        ids.append(match.group("change_id") if match else archived.name)
    return ids


def is_change_archived(change_id: str, spectr_root: Path) -> bool:
    return change_id in get_archived_change_ids(spectr_root)


def get_change_status(change_id: str, spectr_root: Path) -> ChangeStatus:
    """Classify ``change_id`` as archived, active, or unknown.

    Archive wins over an active directory of the same name.
    """
    if is_change_archived(change_id, spectr_root):
        return ChangeStatus.ARCHIVED
    if change_id in get_active_change_ids(spectr_root):
        return ChangeStatus.ACTIVE
    return ChangeStatus.UNKNOWN
