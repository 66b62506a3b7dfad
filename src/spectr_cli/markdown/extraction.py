"""Structural extraction over parsed spec documents.

Everything here walks parser nodes rather than raw lines, so a ``#`` line
inside a fenced code block is never taken for a heading.

Base specs::

    ## Requirements
    ### Requirement: <Name>
    #### Scenario: <Name>

Delta specs use the four delta sections (``## ADDED Requirements`` and
friends); RENAMED entries are bullet pairs::

    - FROM: ### Requirement: <Old>
    - TO: ### Requirement: <New>
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Iterable, Iterator

from .nodes import CodeBlock, Document, Header, ListItem, Node
from .parser import parse

REQUIREMENT_PREFIX = "Requirement:"
SCENARIO_PREFIX = "Scenario:"

_SHALL_OR_MUST = re.compile(r"(?<![A-Za-z0-9_])(?:shall|must)(?![A-Za-z0-9_])", re.IGNORECASE)
_WHITESPACE_RUN = re.compile(r"\s+")
_DELTA_HEADER = re.compile(r"^(ADDED|MODIFIED|REMOVED|RENAMED)\s+Requirements$")
_RENAME_BULLET = re.compile(
    r"^(?P<kind>FROM|TO):\s*`?\s*###\s+Requirement:\s*(?P<name>.+?)\s*`?\s*$"
)

# Ordered: the first matching pattern wins. Lines are stripped before matching.
MALFORMED_SCENARIO_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("### Scenario:", re.compile(r"^###\s+Scenario:")),
    ("##### Scenario:", re.compile(r"^#####\s+Scenario:")),
    ("###### Scenario:", re.compile(r"^######\s+Scenario:")),
    ("**Scenario:", re.compile(r"^\*\*Scenario:")),
    ("- **Scenario:", re.compile(r"^[-*]\s+\*\*Scenario:")),
)


class DeltaOperation(StrEnum):
    """The four delta section kinds, in canonical order."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    REMOVED = "REMOVED"
    RENAMED = "RENAMED"


@dataclass
class Section:
    """A level-2 section: its header text, header line and body nodes."""

    name: str
    line: int
    nodes: list[Node] = field(default_factory=list)

    @property
    def content(self) -> str:
        return "".join(node.raw for node in self.nodes).strip()


@dataclass
class Requirement:
    """A ``### Requirement:`` block.

    ``line`` is the header line relative to whatever was parsed (the whole
    file when built from document nodes, the passed content otherwise).
    """

    name: str
    content: str
    scenarios: list[str] = field(default_factory=list)
    line: int = 0


@dataclass(frozen=True)
class RenameOp:
    from_name: str
    to_name: str
    from_line: int
    to_line: int


@dataclass(frozen=True)
class MalformedRename:
    """A FROM bullet with no TO after it, or a TO with no FROM before it."""

    kind: str
    name: str
    line: int


@dataclass
class DeltaPlan:
    """All delta entries found in one change spec file."""

    added: list[Requirement] = field(default_factory=list)
    modified: list[Requirement] = field(default_factory=list)
    removed: list[Requirement] = field(default_factory=list)
    renamed: list[RenameOp] = field(default_factory=list)
    malformed_renames: list[MalformedRename] = field(default_factory=list)
    # Header line of every delta section present in the file
    section_lines: dict[DeltaOperation, int] = field(default_factory=dict)

    def requirements(self, operation: DeltaOperation) -> list[Requirement]:
        return {
            DeltaOperation.ADDED: self.added,
            DeltaOperation.MODIFIED: self.modified,
            DeltaOperation.REMOVED: self.removed,
        }.get(operation, [])

    def has_sections(self) -> bool:
        return bool(self.section_lines)

    def is_empty(self, operation: DeltaOperation) -> bool:
        """True when ``operation``'s section is present but holds no entries."""
        if operation not in self.section_lines:
            return False
        if operation is DeltaOperation.RENAMED:
            return not self.renamed and not self.malformed_renames
        return not self.requirements(operation)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def iter_sections(doc: Document) -> Iterator[Section]:
    """Yield each level-2 section in document order.

    Nodes before the first level-2 header belong to no section.
    """
    current: Section | None = None
    for node in doc:
        if isinstance(node, Header) and node.level == 2:
            if current is not None:
                yield current
            current = Section(name=node.text, line=node.line)
            continue
        if current is not None:
            current.nodes.append(node)
    if current is not None:
        yield current


def extract_sections(doc: Document) -> dict[str, str]:
    """Map each level-2 header text to its trimmed section body.

    A repeated header keeps the content of its last occurrence.
    """
    return {section.name: section.content for section in iter_sections(doc)}


# ---------------------------------------------------------------------------
# Requirements and scenarios
# ---------------------------------------------------------------------------


def requirement_header_name(node: Node) -> str | None:
    """Name of a ``### Requirement:`` header node, or None for any other node."""
    if isinstance(node, Header) and node.level == 3 and node.text.startswith(REQUIREMENT_PREFIX):
        return node.text[len(REQUIREMENT_PREFIX):].strip()
    return None


def requirements_from_nodes(nodes: Iterable[Node]) -> list[Requirement]:
    """Collect requirements from already-parsed nodes, keeping their lines."""
    requirements: list[Requirement] = []
    current: Requirement | None = None
    body: list[str] = []

    for node in nodes:
        name = requirement_header_name(node)
        if name is not None:
            if current is not None:
                requirements.append(_close_requirement(current, body))
            current = Requirement(name=name, content="", line=node.line)
            body = []
            continue
        if current is None:
            continue
        if isinstance(node, Header) and node.level in (2, 3):
            requirements.append(_close_requirement(current, body))
            current = None
            continue
        body.append(node.raw)

    if current is not None:
        requirements.append(_close_requirement(current, body))
    return requirements


def _close_requirement(requirement: Requirement, body: list[str]) -> Requirement:
    requirement.content = "".join(body).strip()
    requirement.scenarios = extract_scenarios(requirement.content)
    return requirement


def extract_requirements(content: str) -> list[Requirement]:
    """Parse ``content`` and return its ``### Requirement:`` blocks in order."""
    return requirements_from_nodes(parse(content))


def extract_scenarios(content: str) -> list[str]:
    """Return each ``#### Scenario:`` block of a requirement body, trimmed.

    A block includes its header line and closes at any header of level 4 or
    shallower.
    """
    scenarios: list[str] = []
    current: list[str] | None = None

    for node in parse(content):
        if isinstance(node, Header) and node.level <= 4:
            if current is not None:
                scenarios.append("".join(current).strip())
                current = None
            if node.level == 4 and node.text.startswith(SCENARIO_PREFIX):
                current = [node.raw]
            continue
        if current is not None:
            current.append(node.raw)

    if current is not None:
        scenarios.append("".join(current).strip())
    return scenarios


def find_malformed_scenario(content: str) -> str | None:
    """Return the first line of ``content`` that looks like a mis-formatted
    scenario header, ignoring fenced code blocks."""
    for node in parse(content):
        if isinstance(node, CodeBlock):
            continue
        for line in node.raw.splitlines():
            stripped = line.strip()
            for _label, pattern in MALFORMED_SCENARIO_PATTERNS:
                if pattern.search(stripped):
                    return stripped
    return None


def contains_shall_or_must(text: str) -> bool:
    """True if ``text`` holds SHALL or MUST as a whole word (any case)."""
    return _SHALL_OR_MUST.search(text) is not None


def normalize_requirement_name(name: str) -> str:
    """Comparison key for requirement names. Never use it for display."""
    return _WHITESPACE_RUN.sub(" ", name.strip()).lower()


# ---------------------------------------------------------------------------
# Delta specs
# ---------------------------------------------------------------------------


def delta_operation(section_name: str) -> DeltaOperation | None:
    match = _DELTA_HEADER.match(section_name)
    if match is None:
        return None
    return DeltaOperation(match.group(1))


def parse_renamed(nodes: Iterable[Node]) -> tuple[list[RenameOp], list[MalformedRename]]:
    """Pair ``- FROM:`` / ``- TO:`` bullets of a RENAMED section.

    A TO must be the next rename bullet after its FROM. Unpaired bullets are
    returned as :class:`MalformedRename` entries.
    """
    renames: list[RenameOp] = []
    malformed: list[MalformedRename] = []
    pending: tuple[str, int] | None = None

    for node in nodes:
        if not isinstance(node, ListItem):
            continue
        match = _RENAME_BULLET.match(node.content)
        if match is None:
            continue
        kind, name = match.group("kind"), match.group("name")
        if kind == "FROM":
            if pending is not None:
                malformed.append(MalformedRename("FROM", pending[0], pending[1]))
            pending = (name, node.line)
        elif pending is None:
            malformed.append(MalformedRename("TO", name, node.line))
        else:
            renames.append(RenameOp(pending[0], name, pending[1], node.line))
            pending = None

    if pending is not None:
        malformed.append(MalformedRename("FROM", pending[0], pending[1]))
    return renames, malformed


def extract_delta(doc: Document) -> DeltaPlan:
    """Collect the delta entries of a change spec document."""
    plan = DeltaPlan()
    for section in iter_sections(doc):
        operation = delta_operation(section.name)
        if operation is None:
            continue
        plan.section_lines[operation] = section.line
        if operation is DeltaOperation.RENAMED:
            renames, malformed = parse_renamed(section.nodes)
            plan.renamed.extend(renames)
            plan.malformed_renames.extend(malformed)
        else:
            plan.requirements(operation).extend(requirements_from_nodes(section.nodes))
    return plan
