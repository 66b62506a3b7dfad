"""Dependency graph of active change proposals.

Proposals declare prerequisites in frontmatter (``requires:``). A change
should only be accepted once everything it requires has been archived,
and the requirement relation must stay acyclic.

The graph is an adjacency mapping (change ID -> required change IDs) built
fresh from disk for each call; nothing is cached between runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator

from spectr_cli.validation.models import ValidationIssue, ValidationLevel, ValidationReport

from .discovery import (
    CHANGES_DIRNAME,
    PROPOSAL_FILENAME,
    ChangeStatus,
    get_active_change_ids,
    get_change_status,
    is_change_archived,
)
from .frontmatter import FrontmatterError, ProposalMetadata, read_proposal_metadata

logger = logging.getLogger(__name__)


class AcceptanceError(Exception):
    """A change is not ready to be accepted."""
    pass


class SelfDependencyError(AcceptanceError):
    """A proposal lists itself in ``requires`` or ``enables``."""

    def __init__(self, change_id: str, relation: str = "require"):
        self.change_id = change_id
        super().__init__(f"proposal cannot {relation} itself: {change_id}")


class UnmetDependenciesError(AcceptanceError):
    """Required dependencies have not been archived yet."""

    def __init__(self, change_id: str, dependencies: list[str]):
        self.change_id = change_id
        self.dependencies = dependencies
        if len(dependencies) == 1:
            message = (
                f"cannot accept '{change_id}': required dependency "
                f"'{dependencies[0]}' is not archived"
            )
        else:
            message = (
                f"cannot accept '{change_id}': required dependencies not archived: "
                f"{', '.join(dependencies)}"
            )
        super().__init__(message)


@dataclass
class DependencyGraph:
    """Proposal metadata per change, plus the ``requires`` edges."""

    nodes: dict[str, ProposalMetadata] = field(default_factory=dict)
    edges: dict[str, list[str]] = field(default_factory=dict)

    def add_node(self, change_id: str, metadata: ProposalMetadata | None = None) -> None:
        metadata = metadata or ProposalMetadata()
        self.nodes[change_id] = metadata
        self.edges[change_id] = metadata.required_ids

    def __contains__(self, change_id: object) -> bool:
        return change_id in self.nodes

    def __iter__(self) -> Iterator[str]:
        return iter(self.nodes)


@dataclass(frozen=True)
class UnmetDependency:
    id: str
    reason: str
    status: ChangeStatus


@dataclass
class DependencyValidationResult:
    """Advisory dependency findings for one change."""

    issues: list[ValidationIssue] = field(default_factory=list)
    unmet: list[UnmetDependency] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(issue.level is ValidationLevel.ERROR for issue in self.issues)

    @property
    def has_warnings(self) -> bool:
        return bool(self.unmet)

    def to_report(self) -> ValidationReport:
        return ValidationReport.from_issues(self.issues)


def proposal_path(change_id: str, spectr_root: Path) -> Path:
    return spectr_root / CHANGES_DIRNAME / change_id / PROPOSAL_FILENAME


def check_self_reference(metadata: ProposalMetadata, change_id: str) -> None:
    """Raise SelfDependencyError if the proposal requires or enables itself."""
    if change_id in metadata.required_ids:
        raise SelfDependencyError(change_id, "require")
    if change_id in metadata.enabled_ids:
        raise SelfDependencyError(change_id, "enable")


def build_dependency_graph(spectr_root: Path) -> DependencyGraph:
    """Build the graph over every active change.

    A proposal whose frontmatter cannot be parsed still becomes a node, with
    no edges.
    """
    graph = DependencyGraph()
    for change_id in get_active_change_ids(spectr_root):
        try:
            metadata = read_proposal_metadata(proposal_path(change_id, spectr_root))
        except FrontmatterError as exc:
            logger.warning("Ignoring dependencies of %s: %s", change_id, exc)
            metadata = None
        graph.add_node(change_id, metadata)
    return graph


class _Color(Enum):
    WHITE = 0  # unvisited
    GRAY = 1  # on the current path
    BLACK = 2  # finished


def detect_cycles(graph: DependencyGraph) -> list[list[str]]:
    """Return every cycle reached by depth-first search from each unvisited node.

    Each cycle starts and ends with the same change ID, e.g.
    ``["a", "b", "a"]``. The same cycle may be reported more than once.
    """
    color: dict[str, _Color] = {}
    parent: dict[str, str] = {}
    cycles: list[list[str]] = []

    for start in graph.nodes:
        if color.get(start, _Color.WHITE) is not _Color.WHITE:
            continue
        color[start] = _Color.GRAY
        stack = [(start, iter(graph.edges.get(start, [])))]

        while stack:
            node, neighbours = stack[-1]
            for dep in neighbours:
                state = color.get(dep, _Color.WHITE)
                if state is _Color.GRAY:
                    cycle = [dep]
                    current = node
                    while current != dep:
                        cycle.insert(0, current)
                        current = parent[current]
                    cycle.insert(0, dep)
                    cycles.append(cycle)
                elif state is _Color.WHITE:
                    parent[dep] = node
                    color[dep] = _Color.GRAY
                    stack.append((dep, iter(graph.edges.get(dep, []))))
                    break
            else:
                color[node] = _Color.BLACK
                stack.pop()

    return cycles


def get_dependents(change_id: str, graph: DependencyGraph) -> list[str]:
    """Changes that directly require ``change_id``."""
    return [node for node, deps in graph.edges.items() if change_id in deps]


def validate_dependencies(change_id: str, spectr_root: Path) -> DependencyValidationResult:
    """Advisory dependency check for ``change_id``.

    Unarchived or unknown dependencies are warnings; self-reference and any
    cycle through ``change_id`` are errors.

    Raises:
        FrontmatterError: If the change's proposal cannot be read or parsed.
    """
    path = proposal_path(change_id, spectr_root)
    metadata = read_proposal_metadata(path)
    result = DependencyValidationResult()

    def issue(level: ValidationLevel, message: str) -> None:
        result.issues.append(ValidationIssue(level, str(path), 1, message))

    try:
        check_self_reference(metadata, change_id)
    except SelfDependencyError as exc:
        issue(ValidationLevel.ERROR, str(exc))
        return result

    for dep in metadata.requires:
        status = get_change_status(dep.id, spectr_root)
        if status is ChangeStatus.ARCHIVED:
            continue
        result.unmet.append(UnmetDependency(dep.id, dep.reason, status))
        if status is ChangeStatus.ACTIVE:
            issue(ValidationLevel.WARNING, f"Dependency '{dep.id}' is not yet archived (currently active)")
        else:
            issue(ValidationLevel.WARNING, f"Dependency '{dep.id}' not found")

    for cycle in detect_cycles(build_dependency_graph(spectr_root)):
        if change_id in cycle:
            result.cycles.append(cycle)
            issue(ValidationLevel.ERROR, f"Circular dependency detected: {' → '.join(cycle)}")

    return result


def validate_dependencies_for_accept(change_id: str, spectr_root: Path) -> None:
    """Strict check run before accepting ``change_id``.

    Raises:
        FrontmatterError: If the change's proposal cannot be read or parsed.
        SelfDependencyError: If the proposal references itself.
        UnmetDependenciesError: Naming every required change not yet archived.
    """
    metadata = read_proposal_metadata(proposal_path(change_id, spectr_root))
    check_self_reference(metadata, change_id)

    unmet = [
        dep.id for dep in metadata.requires
        if not is_change_archived(dep.id, spectr_root)
    ]
    if unmet:
        raise UnmetDependenciesError(change_id, unmet)
