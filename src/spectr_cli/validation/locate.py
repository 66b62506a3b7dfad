"""Recover source line numbers by re-scanning raw lines.

Every lookup goes through :func:`locate`; the named helpers only supply
the pattern.
"""

from __future__ import annotations

import re
from typing import Callable, Sequence

from spectr_cli.markdown.extraction import MALFORMED_SCENARIO_PATTERNS

LinePredicate = Callable[[str], bool]


def locate(
    lines: Sequence[str],
    pattern: str | re.Pattern[str] | LinePredicate,
    from_line: int = 1,
    default: int | None = None,
) -> int:
    """Find the first 1-indexed line at or after ``from_line`` matching ``pattern``.

    Args:
        lines: Source lines (without newlines)
        pattern: Substring, compiled regex (searched in the stripped line),
            or predicate over the stripped line
        from_line: 1-indexed line to start from
        default: Returned when nothing matches (defaults to ``from_line``)
    """
    if isinstance(pattern, str):
        needle = pattern
        matches: LinePredicate = lambda line: needle in line
    elif isinstance(pattern, re.Pattern):
        regex = pattern
        matches = lambda line: regex.search(line) is not None
    else:
        matches = pattern

    for index in range(max(from_line, 1) - 1, len(lines)):
        if matches(lines[index].strip()):
            return index + 1
    return from_line if default is None else default


def find_section_line(lines: Sequence[str], section_name: str) -> int:
    """Line of ``## <section_name>``, or 1 when absent."""
    header = "## " + section_name
    return locate(lines, lambda line: line.startswith(header), 1, default=1)


def find_requirement_line(lines: Sequence[str], name: str, from_line: int) -> int:
    """Line of ``### Requirement: <name>`` searching from ``from_line``.

    The whole header must match, so ``Login`` never resolves to a
    ``Login Extended`` header.
    """
    header = re.compile(r"^###\s+Requirement:\s*" + re.escape(name) + r"\s*$")
    return locate(lines, header, from_line)


def find_malformed_scenario_line(
    lines: Sequence[str], offending: str | None, from_line: int
) -> int:
    """Line of a mis-formatted scenario header at or after ``from_line``.

    ``offending`` is the exact stripped line when known; otherwise the first
    line matching any malformed-scenario pattern is used.
    """
    if offending:
        return locate(lines, lambda line: line == offending, from_line)
    return locate(
        lines,
        lambda line: any(p.search(line) for _label, p in MALFORMED_SCENARIO_PATTERNS),
        from_line,
    )
