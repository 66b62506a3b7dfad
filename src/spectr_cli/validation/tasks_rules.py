"""Structural checks for a change's ``tasks.md``.

Expected shape::

    ## 1. Setup
    - [ ] Create the table
    - [x] Write the migration

    ## 2. API
    - [ ] Add the endpoint

Every finding is a WARNING; task layout never blocks validation.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from spectr_cli.markdown import CodeBlock, Document, Header, MarkdownSyntaxError, parse

from .models import ValidationIssue, ValidationLevel

logger = logging.getLogger(__name__)

_SECTION_TITLE = re.compile(r"^([1-9][0-9]*)\.\s+(.+)$")
_TASK_ITEM = re.compile(r"^\s*-\s*\[([xX ])\]")


@dataclass
class TaskSection:
    number: int
    name: str
    line: int
    task_count: int = 0


@dataclass
class TasksStructure:
    """Numbered sections and checklist items found in a tasks file."""

    sections: list[TaskSection] = field(default_factory=list)
    orphaned_tasks: int = 0
    first_orphan_line: int = 0
    total_tasks: int = 0

    @property
    def empty_sections(self) -> list[TaskSection]:
        return [s for s in self.sections if s.task_count == 0]

    @property
    def missing_numbers(self) -> list[int]:
        """Numbers absent from 1..max(section number)."""
        present = {s.number for s in self.sections}
        if not present:
            return []
        return [n for n in range(1, max(present) + 1) if n not in present]

    @property
    def is_ascending(self) -> bool:
        numbers = [s.number for s in self.sections]
        return all(a < b for a, b in zip(numbers, numbers[1:]))


def parse_tasks_structure(doc: Document) -> TasksStructure:
    """Collect numbered sections and checklist items, skipping code blocks."""
    structure = TasksStructure()
    current: TaskSection | None = None

    for node in doc:
        if isinstance(node, CodeBlock):
            continue
        if isinstance(node, Header):
            match = _SECTION_TITLE.match(node.text) if node.level == 2 else None
            if match:
                current = TaskSection(
                    number=int(match.group(1)),
                    name=match.group(2).strip(),
                    line=node.line,
                )
                structure.sections.append(current)
            continue

        for offset, line in enumerate(node.raw.splitlines()):
            if not _TASK_ITEM.match(line):
                continue
            structure.total_tasks += 1
            if current is not None:
                current.task_count += 1
                continue
            if structure.orphaned_tasks == 0:
                structure.first_orphan_line = node.line + offset
            structure.orphaned_tasks += 1

    return structure


def check_tasks_content(content: str, path: str) -> list[ValidationIssue]:
    """Run the tasks checks over ``content``; all findings are warnings."""

    def warn(line: int, message: str) -> ValidationIssue:
        return ValidationIssue(ValidationLevel.WARNING, path, line, message)

    try:
        structure = parse_tasks_structure(parse(content))
    except MarkdownSyntaxError as exc:
        return [warn(exc.line, f"Could not parse tasks file: {exc}")]

    issues: list[ValidationIssue] = []
    if structure.total_tasks == 0:
        issues.append(warn(1, "Tasks file has no task items ('- [ ]' or '- [x]')"))

    if not structure.sections:
        issues.append(warn(1, "Tasks file has no numbered sections (expected '## 1. <title>')"))
        return issues

    if structure.orphaned_tasks:
        issues.append(
            warn(
                structure.first_orphan_line,
                f"Found {structure.orphaned_tasks} orphaned task(s) "
                "before the first numbered section",
            )
        )

    for section in structure.empty_sections:
        issues.append(warn(section.line, f"Section '{section.number}. {section.name}' has no tasks"))

    missing = structure.missing_numbers
    first_line = structure.sections[0].line
    if missing:
        numbers = ", ".join(str(n) for n in missing)
        issues.append(warn(first_line, f"Task sections are not sequential: missing section number(s) {numbers}"))
    elif not structure.is_ascending:
        issues.append(warn(first_line, "Task sections are not sequential: numbers are out of order"))

    return issues


def validate_tasks_file(path: Path) -> list[ValidationIssue]:
    """Check ``path`` if it exists; a missing tasks file yields no issues."""
    if not path.is_file():
        return []
    logger.debug("Checking tasks file %s", path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return [ValidationIssue(ValidationLevel.WARNING, str(path), 1, f"Could not read tasks file: {exc}")]
    return check_tasks_content(content, str(path))
