from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture()
def spectr_root(tmp_path: Path) -> Path:
    """Empty ``<project>/spectr`` tree with ``specs/`` and ``changes/``."""
    root = tmp_path / "spectr"
    (root / "specs").mkdir(parents=True)
    (root / "changes").mkdir()
    return root


@pytest.fixture()
def write_spec(spectr_root: Path) -> Callable[[str, str], Path]:
    """Write ``specs/<capability>/spec.md`` and return its path."""

    def _write(capability: str, content: str) -> Path:
        spec_dir = spectr_root / "specs" / capability
        spec_dir.mkdir(parents=True, exist_ok=True)
        path = spec_dir / "spec.md"
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def make_change(spectr_root: Path) -> Callable[..., Path]:
    """Create ``changes/<change_id>`` with a proposal, delta specs and tasks.

    ``specs`` maps paths relative to the change's ``specs/`` directory
    (e.g. ``"auth/spec.md"``) to file content.
    """

    def _make(
        specs: dict[str, str] | None = None,
        change_id: str = "my-change",
        proposal: str = "# Proposal\n",
        tasks: str | None = None,
    ) -> Path:
        change_dir = spectr_root / "changes" / change_id
        change_dir.mkdir(parents=True, exist_ok=True)
        (change_dir / "proposal.md").write_text(proposal, encoding="utf-8")
        for rel_path, content in (specs or {}).items():
            path = change_dir / "specs" / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        if tasks is not None:
            (change_dir / "tasks.md").write_text(tasks, encoding="utf-8")
        return change_dir

    return _make


@pytest.fixture()
def archive_change(spectr_root: Path) -> Callable[[str], Path]:
    """Create a dated ``changes/archive/<date>-<change_id>`` directory."""

    def _archive(change_id: str, date: str = "2024-01-15") -> Path:
        archived = spectr_root / "changes" / "archive" / f"{date}-{change_id}"
        archived.mkdir(parents=True)
        (archived / "proposal.md").write_text("# Archived\n", encoding="utf-8")
        return archived

    return _archive
