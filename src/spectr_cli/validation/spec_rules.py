"""Rules for base specification files (``specs/<capability>/spec.md``).

A base spec needs a ``## Requirements`` section; every requirement in it
should state SHALL or MUST and carry at least one ``#### Scenario:``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from spectr_cli.markdown import (
    Requirement,
    contains_shall_or_must,
    extract_requirements,
    extract_sections,
    find_malformed_scenario,
    parse,
)

from .exceptions import SpecFileError
from .locate import find_malformed_scenario_line, find_requirement_line, find_section_line
from .models import ValidationIssue, ValidationLevel, ValidationReport
from .strictness import Strictness, apply_strictness

logger = logging.getLogger(__name__)

REQUIREMENTS_SECTION = "Requirements"

MISSING_REQUIREMENTS_MESSAGE = "Missing required '## Requirements' section"
MALFORMED_SCENARIO_MESSAGE = (
    "Scenarios must use '#### Scenario:' format (4 hashtags followed by 'Scenario:')"
)


def read_spec_file(path: Path) -> str:
    """Read a spec file as UTF-8.

    Raises:
        SpecFileError: If the file is missing, unreadable or not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecFileError(f"failed to read {path}: {exc}") from exc


def check_requirement(
    requirement: Requirement,
    path: str,
    line: int,
    lines: Sequence[str],
    strictness: Strictness = Strictness.STRICT,
    subject: str = "Requirement",
) -> list[ValidationIssue]:
    """Content checks shared by base and delta specs.

    Args:
        requirement: The requirement to check
        path: File path used in issue locations
        line: Line of the requirement header
        lines: Source lines of the file, for locating malformed scenarios
        strictness: Policy for the SHALL/MUST and scenario warnings
        subject: Message prefix, e.g. ``"ADDED requirement"``
    """
    location = f"{path}: Requirement '{requirement.name}'"
    warnings: list[ValidationIssue] = []

    if not contains_shall_or_must(requirement.content):
        warnings.append(
            ValidationIssue(
                ValidationLevel.WARNING,
                location,
                line,
                f"{subject} should contain SHALL or MUST to indicate normative requirement",
            )
        )

    if requirement.scenarios:
        return apply_strictness(warnings, strictness)

    warnings.append(
        ValidationIssue(
            ValidationLevel.WARNING,
            location,
            line,
            f"{subject} should have at least one scenario",
        )
    )
    issues = apply_strictness(warnings, strictness)

    offending = find_malformed_scenario(requirement.content)
    if offending is not None:
        issues.append(
            ValidationIssue(
                ValidationLevel.ERROR,
                location,
                find_malformed_scenario_line(lines, offending, line),
                MALFORMED_SCENARIO_MESSAGE,
            )
        )
    return issues


def validate_spec_content(
    content: str,
    path: str,
    strictness: Strictness = Strictness.STRICT,
) -> ValidationReport:
    """Validate base spec text.

    Raises:
        MarkdownSyntaxError: If the content cannot be parsed.
    """
    doc = parse(content)
    lines = content.splitlines()
    sections = extract_sections(doc)

    if REQUIREMENTS_SECTION not in sections:
        return ValidationReport.from_issues(
            [ValidationIssue(ValidationLevel.ERROR, path, 1, MISSING_REQUIREMENTS_MESSAGE)]
        )

    section_line = find_section_line(lines, REQUIREMENTS_SECTION)
    issues: list[ValidationIssue] = []
    for requirement in extract_requirements(sections[REQUIREMENTS_SECTION]):
        line = find_requirement_line(lines, requirement.name, section_line)
        issues.extend(check_requirement(requirement, path, line, lines, strictness))
    return ValidationReport.from_issues(issues)


def validate_spec_file(
    path: Path,
    strictness: Strictness = Strictness.STRICT,
) -> ValidationReport:
    """Validate the base spec at ``path``.

    Raises:
        SpecFileError: If the file cannot be read.
        MarkdownSyntaxError: If the file cannot be parsed.
    """
    logger.debug("Validating spec %s (strictness=%s)", path, strictness)
    content = read_spec_file(path)
    return validate_spec_content(content, str(path), strictness)
