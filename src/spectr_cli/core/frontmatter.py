"""YAML frontmatter of change proposals.

A proposal may open with a frontmatter block declaring its dependencies::

    ---
    id: add-auth
    requires:
      - id: add-users
        reason: auth needs the user table
    enables:
      - id: add-sso
    ---
    # Proposal ...

A proposal without frontmatter has no dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import ruamel.yaml
from ruamel.yaml.error import YAMLError

FRONTMATTER_DELIMITER = "---"


class FrontmatterError(Exception):
    """Frontmatter is unterminated, not valid YAML, or has the wrong shape."""


@dataclass(frozen=True)
class Dependency:
    id: str
    reason: str = ""


@dataclass
class ProposalMetadata:
    """Dependency metadata declared by a proposal."""

    id: str = ""
    requires: list[Dependency] = field(default_factory=list)
    enables: list[Dependency] = field(default_factory=list)

    def has_dependencies(self) -> bool:
        return bool(self.requires)

    @property
    def required_ids(self) -> list[str]:
        return [dep.id for dep in self.requires]

    @property
    def enabled_ids(self) -> list[str]:
        return [dep.id for dep in self.enables]


def extract_frontmatter(content: str) -> str | None:
    """Return the raw frontmatter text, or None when the content has none.

    Raises:
        FrontmatterError: If the opening delimiter is never closed.
    """
    lines = content.splitlines()
    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        return None
    for index, line in enumerate(lines[1:], start=1):
        if line.strip() == FRONTMATTER_DELIMITER:
            return "\n".join(lines[1:index])
    raise FrontmatterError("frontmatter not closed: missing closing '---'")


def _parse_dependencies(value: Any, key: str) -> list[Dependency]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise FrontmatterError(f"'{key}' must be a list")

    dependencies = []
    for entry in value:
        # Bare IDs are accepted as shorthand for {id: ...}
        if isinstance(entry, str):
            dependencies.append(Dependency(id=entry))
            continue
        if not isinstance(entry, dict) or not entry.get("id"):
            raise FrontmatterError(f"every '{key}' entry needs an 'id'")
        dependencies.append(
            Dependency(id=str(entry["id"]), reason=str(entry.get("reason") or ""))
        )
    return dependencies


def parse_proposal_frontmatter(content: str) -> ProposalMetadata:
    """Parse proposal metadata from markdown content.

    Raises:
        FrontmatterError: If frontmatter exists but is unterminated or invalid.
    """
    raw = extract_frontmatter(content)
    if raw is None:
        return ProposalMetadata()

    yaml = ruamel.yaml.YAML(typ="safe")
    try:
        data = yaml.load(raw)
    except YAMLError as exc:
        raise FrontmatterError(f"invalid YAML in frontmatter: {exc}") from exc

    if data is None:
        return ProposalMetadata()
    if not isinstance(data, dict):
        raise FrontmatterError("frontmatter must be a YAML mapping")

    return ProposalMetadata(
        id=str(data.get("id") or ""),
        requires=_parse_dependencies(data.get("requires"), "requires"),
        enables=_parse_dependencies(data.get("enables"), "enables"),
    )


def read_proposal_metadata(path: Path) -> ProposalMetadata:
    """Read ``path`` and parse its frontmatter.

    Raises:
        FrontmatterError: If the file cannot be read or its frontmatter is invalid.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FrontmatterError(f"failed to read {path}: {exc}") from exc
    return parse_proposal_frontmatter(content)
