"""Rules for the delta specs of a change.

A change lays out one delta spec per touched capability::

    changes/<change-id>/specs/<capability>/spec.md

Each delta spec holds at least one of ``## ADDED Requirements``,
``## MODIFIED Requirements``, ``## REMOVED Requirements`` and
``## RENAMED Requirements``. Requirement names are namespaced by
capability: duplicates and cross-section conflicts are only reported
within one capability, across every file of the change.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from spectr_cli.core.discovery import SPEC_FILENAME, SPECS_DIRNAME, TASKS_FILENAME
from spectr_cli.markdown import (
    DeltaOperation,
    DeltaPlan,
    extract_delta,
    extract_requirements,
    extract_sections,
    normalize_requirement_name,
    parse,
)

from .exceptions import NoSpecFilesError, SpecsDirectoryNotFoundError
from .models import ValidationIssue, ValidationLevel, ValidationReport
from .spec_rules import REQUIREMENTS_SECTION, check_requirement, read_spec_file
from .strictness import Strictness
from .tasks_rules import validate_tasks_file

logger = logging.getLogger(__name__)

NO_DELTA_SECTIONS_MESSAGE = (
    "Spec file must contain at least one delta section "
    "(ADDED, MODIFIED, REMOVED, or RENAMED Requirements)"
)

RENAMED_FROM = "RENAMED FROM"
RENAMED_TO = "RENAMED TO"

# Slots a requirement name may not occupy together within one capability.
# The issue is reported at the occurrence in the second slot.
CONFLICTING_SLOTS: tuple[tuple[str, str], ...] = (
    (DeltaOperation.ADDED, DeltaOperation.MODIFIED),
    (DeltaOperation.ADDED, DeltaOperation.REMOVED),
    (DeltaOperation.ADDED, RENAMED_TO),
    (DeltaOperation.MODIFIED, DeltaOperation.REMOVED),
    (DeltaOperation.MODIFIED, RENAMED_FROM),
    (DeltaOperation.REMOVED, RENAMED_FROM),
)

_REASON_LINE = re.compile(r"^\s*\*\*Reason(?:\*\*\s*:|:\*\*)", re.MULTILINE)


@dataclass(frozen=True)
class _Occurrence:
    name: str
    path: str
    line: int


@dataclass
class _NameRegistry:
    """First occurrence of each requirement name per (capability, slot)."""

    slots: dict[tuple[str, str], dict[str, _Occurrence]] = field(default_factory=dict)
    capabilities: list[str] = field(default_factory=list)

    def record(self, capability: str, slot: str, occurrence: _Occurrence) -> bool:
        """Record ``occurrence``; False when the name is already in this slot."""
        if capability not in self.capabilities:
            self.capabilities.append(capability)
        names = self.slots.setdefault((capability, slot), {})
        key = normalize_requirement_name(occurrence.name)
        if key in names:
            return False
        names[key] = occurrence
        return True

    def conflicts(self) -> list[ValidationIssue]:
        issues = []
        for capability in self.capabilities:
            for first, second in CONFLICTING_SLOTS:
                first_names = self.slots.get((capability, first), {})
                for key, occurrence in self.slots.get((capability, second), {}).items():
                    if key not in first_names:
                        continue
                    issues.append(
                        _error(
                            occurrence.path,
                            occurrence.line,
                            f'Requirement "{occurrence.name}" appears in both '
                            f"{first} and {second} sections",
                        )
                    )
        return issues


def _error(path: str, line: int, message: str) -> ValidationIssue:
    return ValidationIssue(ValidationLevel.ERROR, path, line, message)


def find_delta_spec_files(specs_dir: Path) -> list[Path]:
    """``<capability>/.../spec.md`` files below ``specs_dir``, sorted."""
    return sorted(
        path
        for path in specs_dir.rglob(SPEC_FILENAME)
        if path.is_file() and len(path.relative_to(specs_dir).parts) >= 2
    )


def load_base_requirement_names(base_spec: Path) -> set[str] | None:
    """Normalized requirement names of a base spec, or None if it does not exist."""
    if not base_spec.is_file():
        return None
    sections = extract_sections(parse(read_spec_file(base_spec)))
    content = sections.get(REQUIREMENTS_SECTION, "")
    return {normalize_requirement_name(req.name) for req in extract_requirements(content)}


def _check_requirement_sections(
    plan: DeltaPlan,
    path: str,
    lines: list[str],
    capability: str,
    base_names: set[str] | None,
    registry: _NameRegistry,
    strictness: Strictness,
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for operation in (DeltaOperation.ADDED, DeltaOperation.MODIFIED, DeltaOperation.REMOVED):
        for requirement in plan.requirements(operation):
            name, line = requirement.name, requirement.line

            if operation is DeltaOperation.REMOVED:
                if not _REASON_LINE.search(requirement.content):
                    issues.append(
                        _error(path, line, f'REMOVED requirement "{name}" must include a **Reason**: line')
                    )
            else:
                issues.extend(
                    check_requirement(
                        requirement, path, line, lines, strictness,
                        subject=f"{operation} requirement",
                    )
                )

            if not registry.record(capability, operation, _Occurrence(name, path, line)):
                issues.append(
                    _error(path, line, f'Duplicate requirement name in {operation} section: "{name}"')
                )

            if base_names is None:
                continue
            exists = normalize_requirement_name(name) in base_names
            if operation is DeltaOperation.ADDED and exists:
                issues.append(_error(path, line, f'ADDED requirement "{name}" already exists in base spec'))
            elif operation is not DeltaOperation.ADDED and not exists:
                issues.append(_error(path, line, f'{operation} requirement "{name}" does not exist in base spec'))
    return issues


def _check_renamed_section(
    plan: DeltaPlan,
    path: str,
    capability: str,
    base_names: set[str] | None,
    registry: _NameRegistry,
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for malformed in plan.malformed_renames:
        counterpart = "TO" if malformed.kind == "FROM" else "FROM"
        issues.append(
            _error(
                path,
                malformed.line,
                f'Malformed RENAMED requirement: {malformed.kind} "{malformed.name}" '
                f"has no matching {counterpart} entry",
            )
        )

    for rename in plan.renamed:
        if not registry.record(capability, RENAMED_FROM, _Occurrence(rename.from_name, path, rename.from_line)):
            issues.append(
                _error(
                    path,
                    rename.from_line,
                    f'Duplicate FROM requirement name in RENAMED section: "{rename.from_name}"',
                )
            )
        if not registry.record(capability, RENAMED_TO, _Occurrence(rename.to_name, path, rename.to_line)):
            issues.append(
                _error(
                    path,
                    rename.to_line,
                    f'Duplicate TO requirement name in RENAMED section: "{rename.to_name}"',
                )
            )

        if base_names is None:
            continue
        if normalize_requirement_name(rename.from_name) not in base_names:
            issues.append(
                _error(
                    path,
                    rename.from_line,
                    f'RENAMED FROM requirement "{rename.from_name}" does not exist in base spec',
                )
            )
        if normalize_requirement_name(rename.to_name) in base_names:
            issues.append(
                _error(
                    path,
                    rename.to_line,
                    f'RENAMED TO requirement "{rename.to_name}" already exists in base spec',
                )
            )
    return issues


def _validate_delta_file(
    spec_path: Path,
    capability: str,
    spectr_root: Path,
    registry: _NameRegistry,
    strictness: Strictness,
) -> list[ValidationIssue]:
    content = read_spec_file(spec_path)
    plan = extract_delta(parse(content))
    path = str(spec_path)

    if not plan.has_sections():
        return [_error(path, 1, NO_DELTA_SECTIONS_MESSAGE)]

    issues = [
        _error(path, plan.section_lines[operation], f"{operation} Requirements section is empty")
        for operation in DeltaOperation
        if plan.is_empty(operation)
    ]

    base_names = load_base_requirement_names(
        spectr_root / SPECS_DIRNAME / capability / SPEC_FILENAME
    )
    lines = content.splitlines()
    issues.extend(
        _check_requirement_sections(plan, path, lines, capability, base_names, registry, strictness)
    )
    issues.extend(_check_renamed_section(plan, path, capability, base_names, registry))
    return issues


def validate_change_delta_specs(
    change_dir: Path,
    spectr_root: Path,
    strictness: Strictness = Strictness.STRICT,
) -> ValidationReport:
    """Validate every delta spec of a change, plus its optional tasks file.

    Args:
        change_dir: ``<root>/changes/<change-id>``
        spectr_root: ``<root>``, used to find base specs for cross-references
        strictness: Policy for the per-requirement SHALL/MUST and scenario findings

    Raises:
        SpecsDirectoryNotFoundError: If ``change_dir/specs`` is missing.
        NoSpecFilesError: If no ``<capability>/spec.md`` exists under it.
        SpecFileError: If a spec file cannot be read.
        MarkdownSyntaxError: If a spec file cannot be parsed.
    """
    specs_dir = change_dir / SPECS_DIRNAME
    if not specs_dir.is_dir():
        raise SpecsDirectoryNotFoundError(specs_dir)
    spec_files = find_delta_spec_files(specs_dir)
    if not spec_files:
        raise NoSpecFilesError(specs_dir)

    registry = _NameRegistry()
    issues: list[ValidationIssue] = []
    for spec_path in spec_files:
        capability = spec_path.relative_to(specs_dir).parts[0]
        logger.debug("Validating delta spec %s (capability=%s)", spec_path, capability)
        issues.extend(_validate_delta_file(spec_path, capability, spectr_root, registry, strictness))

    issues.extend(registry.conflicts())
    issues.extend(validate_tasks_file(change_dir / TASKS_FILENAME))
    return ValidationReport.from_issues(issues)
