"""Apply a change's delta specs to the base specs.

Each ``changes/<id>/specs/<capability>/spec.md`` is merged into
``specs/<capability>/spec.md``. Operations run in a fixed order::

    RENAMED -> REMOVED -> MODIFIED -> ADDED

Renamed and modified requirements keep their position in the base spec;
added requirements are appended to the ``## Requirements`` section.
Everything outside that section is carried over verbatim.

A capability without a base spec gets a skeleton, and only ADDED
requirements may target it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Union

from spectr_cli.core.discovery import SPEC_FILENAME, SPECS_DIRNAME
from spectr_cli.markdown import (
    DeltaOperation,
    Header,
    Node,
    delta_operation,
    extract_delta,
    iter_sections,
    normalize_requirement_name,
    parse,
    requirement_header_name,
)
from spectr_cli.validation import NoSpecFilesError, SpecsDirectoryNotFoundError
from spectr_cli.validation.change_rules import find_delta_spec_files
from spectr_cli.validation.spec_rules import REQUIREMENTS_SECTION, read_spec_file

from .exceptions import MergeError

logger = logging.getLogger(__name__)


@dataclass
class OperationCounts:
    """Number of delta operations actually applied."""

    added: int = 0
    modified: int = 0
    removed: int = 0
    renamed: int = 0

    @property
    def total(self) -> int:
        return self.added + self.modified + self.removed + self.renamed

    def to_dict(self) -> dict[str, int]:
        return {
            "added": self.added,
            "modified": self.modified,
            "removed": self.removed,
            "renamed": self.renamed,
        }


@dataclass(frozen=True)
class RequirementBlock:
    """A requirement header plus everything up to the next requirement."""

    name: str
    header: str
    body: str = ""

    @property
    def key(self) -> str:
        return normalize_requirement_name(self.name)

    @property
    def raw(self) -> str:
        return self.header + self.body

    def renamed(self, new_name: str) -> RequirementBlock:
        return RequirementBlock(new_name, f"### Requirement: {new_name}\n", self.body)


@dataclass
class MergeResult:
    """Merged spec text for one capability."""

    capability: str
    content: str
    counts: OperationCounts = field(default_factory=OperationCounts)
    created: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "capability": self.capability,
            "created": self.created,
            "counts": self.counts.to_dict(),
        }


Segment = Union[Node, RequirementBlock]


def split_requirement_blocks(nodes: Iterable[Node]) -> list[Segment]:
    """Group ``nodes`` into requirement blocks, leaving other nodes as they are.

    A block opens at a ``### Requirement:`` header and closes at the next
    one or at any header of level 2 or shallower.
    """
    segments: list[Segment] = []
    name: str | None = None
    header = ""
    body: list[str] = []

    def close() -> None:
        if name is not None:
            segments.append(RequirementBlock(name, header, "".join(body)))

    for node in nodes:
        node_name = requirement_header_name(node)
        ends_block = node_name is not None or (isinstance(node, Header) and node.level <= 2)
        if ends_block:
            close()
            name = None
        if node_name is not None:
            name, header, body = node_name, node.raw, []
            continue
        if name is not None:
            body.append(node.raw)
        else:
            segments.append(node)

    close()
    return segments


def format_capability_name(capability: str) -> str:
    """``archive-workflow`` -> ``Archive Workflow``."""
    return " ".join(word[:1].upper() + word[1:] for word in capability.split("-"))


def generate_spec_skeleton(capability: str) -> str:
    return f"# {format_capability_name(capability)} Specification\n\n## Requirements\n"


def _raw(segments: Iterable[Segment]) -> str:
    return "".join(segment.raw for segment in segments)


def _is_requirements_header(segment: Segment) -> bool:
    return (
        isinstance(segment, Header)
        and segment.level == 2
        and segment.text == REQUIREMENTS_SECTION
    )


def _split_base(content: str) -> tuple[str, str, list[RequirementBlock], str]:
    """Split a base spec into preamble, section lead, requirements and the rest.

    The preamble ends with the ``## Requirements`` header. Without that
    section, requirement blocks found anywhere are pulled out and the
    section is placed where the first of them stood (or at the end).
    """
    segments = split_requirement_blocks(parse(content))
    start = next((i for i, s in enumerate(segments) if _is_requirements_header(s)), None)

    if start is not None:
        end = next(
            (
                i for i in range(start + 1, len(segments))
                if isinstance(segments[i], Header) and segments[i].level <= 2
            ),
            len(segments),
        )
        section = segments[start + 1:end]
        lead = _raw(s for s in section if not isinstance(s, RequirementBlock))
        blocks = [s for s in section if isinstance(s, RequirementBlock)]
        return _raw(segments[:start + 1]), lead, blocks, _raw(segments[end:])

    blocks = [s for s in segments if isinstance(s, RequirementBlock)]
    if not blocks:
        return content.rstrip("\n") + "\n\n## Requirements\n", "", [], ""
    first = segments.index(blocks[0])
    rest = [s for s in segments[first:] if not isinstance(s, RequirementBlock)]
    preamble = _raw(segments[:first]).rstrip("\n") + "\n\n## Requirements\n"
    return preamble, "", blocks, _raw(rest)


def _reconstruct(preamble: str, lead: str, blocks: list[RequirementBlock], after: str) -> str:
    parts = [preamble.rstrip("\n")]
    if lead.strip():
        parts.append(lead.strip("\n"))
    parts.extend(block.raw.rstrip("\n") for block in blocks)
    merged = "\n\n".join(parts)
    if after.strip():
        return merged + "\n\n" + after.lstrip("\n").rstrip("\n") + "\n"
    return merged + "\n"


def _index(blocks: list[RequirementBlock], name: str) -> int | None:
    key = normalize_requirement_name(name)
    return next((i for i, block in enumerate(blocks) if block.key == key), None)


def merge_spec(base_content: str | None, delta_content: str, capability: str) -> MergeResult:
    """Apply ``delta_content`` to ``base_content``.

    Args:
        base_content: Current base spec, or None when the capability is new
        delta_content: The change's delta spec for this capability
        capability: Capability name, used for the skeleton title

    Raises:
        MergeError: If the delta has no operations, has unpaired RENAMED
            bullets, or targets a new capability with anything but ADDED.
        MarkdownSyntaxError: If either document cannot be parsed.
    """
    delta_doc = parse(delta_content)
    plan = extract_delta(delta_doc)
    if plan.malformed_renames:
        raise MergeError(f"delta spec for '{capability}' has malformed RENAMED entries")

    delta_blocks: dict[DeltaOperation, list[RequirementBlock]] = {
        DeltaOperation.ADDED: [],
        DeltaOperation.MODIFIED: [],
    }
    for section in iter_sections(delta_doc):
        operation = delta_operation(section.name)
        if operation in delta_blocks:
            delta_blocks[operation].extend(
                s for s in split_requirement_blocks(section.nodes) if isinstance(s, RequirementBlock)
            )
    added = delta_blocks[DeltaOperation.ADDED]
    modified = delta_blocks[DeltaOperation.MODIFIED]

    if not (added or modified or plan.removed or plan.renamed):
        raise MergeError(f"delta spec for '{capability}' has no operations")

    counts = OperationCounts()
    if base_content is None:
        if modified or plan.removed or plan.renamed:
            raise MergeError(
                f"target spec '{capability}' does not exist; "
                "only ADDED requirements are allowed for new specs"
            )
        counts.added = len(added)
        content = _reconstruct(generate_spec_skeleton(capability), "", added, "")
        return MergeResult(capability, content, counts, created=True)

    preamble, lead, blocks, after = _split_base(base_content)

    for rename in plan.renamed:
        index = _index(blocks, rename.from_name)
        if index is None:
            logger.warning("%s: cannot rename missing requirement %r", capability, rename.from_name)
            continue
        blocks[index] = blocks[index].renamed(rename.to_name)
        counts.renamed += 1

    for requirement in plan.removed:
        index = _index(blocks, requirement.name)
        if index is None:
            logger.warning("%s: cannot remove missing requirement %r", capability, requirement.name)
            continue
        del blocks[index]
        counts.removed += 1

    for block in modified:
        index = _index(blocks, block.name)
        if index is None:
            logger.warning("%s: cannot modify missing requirement %r", capability, block.name)
            continue
        blocks[index] = block
        counts.modified += 1

    blocks.extend(added)
    counts.added = len(added)

    return MergeResult(capability, _reconstruct(preamble, lead, blocks, after), counts)


def merge_change(change_dir: Path, spectr_root: Path) -> list[MergeResult]:
    """Merge every delta spec of a change, one result per capability.

    Several delta files for one capability are applied in path order, each
    on top of the previous result. Nothing is written.

    Raises:
        SpecsDirectoryNotFoundError: If ``change_dir/specs`` is missing.
        NoSpecFilesError: If no ``<capability>/spec.md`` exists under it.
        SpecFileError: If a spec file cannot be read.
        MergeError: If a delta cannot be applied.
    """
    specs_dir = change_dir / SPECS_DIRNAME
    if not specs_dir.is_dir():
        raise SpecsDirectoryNotFoundError(specs_dir)
    delta_files = find_delta_spec_files(specs_dir)
    if not delta_files:
        raise NoSpecFilesError(specs_dir)

    results: dict[str, MergeResult] = {}
    for delta_path in delta_files:
        capability = delta_path.relative_to(specs_dir).parts[0]
        previous = results.get(capability)
        if previous is not None:
            base = previous.content
        else:
            base_path = spectr_root / SPECS_DIRNAME / capability / SPEC_FILENAME
            base = read_spec_file(base_path) if base_path.is_file() else None

        logger.debug("Merging %s into capability %s", delta_path, capability)
        result = merge_spec(base, read_spec_file(delta_path), capability)
        if previous is not None:
            result.created = previous.created
            for name, value in previous.counts.to_dict().items():
                setattr(result.counts, name, getattr(result.counts, name) + value)
        results[capability] = result

    return list(results.values())


def write_merged_specs(results: Iterable[MergeResult], spectr_root: Path) -> list[Path]:
    """Write each merged spec to ``specs/<capability>/spec.md``."""
    written = []
    for result in results:
        path = spectr_root / SPECS_DIRNAME / result.capability / SPEC_FILENAME
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(result.content, encoding="utf-8")
        logger.debug("Wrote %s", path)
        written.append(path)
    return written
