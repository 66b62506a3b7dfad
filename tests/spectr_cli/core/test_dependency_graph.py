"""Tests for the proposal dependency graph."""

from __future__ import annotations

from pathlib import Path

import pytest

from spectr_cli.core import (
    ChangeStatus,
    DependencyGraph,
    ProposalMetadata,
    SelfDependencyError,
    UnmetDependenciesError,
    build_dependency_graph,
    detect_cycles,
    get_dependents,
    validate_dependencies,
    validate_dependencies_for_accept,
)
from spectr_cli.core.frontmatter import Dependency
from spectr_cli.validation import ValidationLevel


def _graph(edges: dict[str, list[str]]) -> DependencyGraph:
    graph = DependencyGraph()
    for change_id, requires in edges.items():
        graph.add_node(change_id, ProposalMetadata(id=change_id, requires=[Dependency(r) for r in requires]))
    return graph


def _proposal(*requires: str, change_id: str = "") -> str:
    lines = ["---"]
    if change_id:
        lines.append(f"id: {change_id}")
    if requires:
        lines.append("requires:")
        lines.extend(f"  - id: {dep}" for dep in requires)
    lines.extend(["---", "# Proposal", ""])
    return "\n".join(lines)


class TestDetectCycles:
    def test_two_node_cycle(self):
        assert detect_cycles(_graph({"a": ["b"], "b": ["a"]})) == [["a", "b", "a"]]

    def test_three_node_cycle_reported_once(self):
        cycles = detect_cycles(_graph({"a": ["b"], "b": ["c"], "c": ["a"]}))

        assert cycles == [["a", "b", "c", "a"]]

    def test_linear_chain_has_no_cycles(self):
        assert detect_cycles(_graph({"a": ["b"], "b": ["c"], "c": []})) == []

    def test_self_loop(self):
        assert detect_cycles(_graph({"a": ["a"]})) == [["a", "a"]]

    def test_edges_to_unknown_nodes_are_followed_safely(self):
        assert detect_cycles(_graph({"a": ["missing"]})) == []

    def test_empty_graph(self):
        assert detect_cycles(DependencyGraph()) == []


class TestGraphQueries:
    def test_dependents(self):
        graph = _graph({"a": ["c"], "b": ["c"], "c": []})

        assert get_dependents("c", graph) == ["a", "b"]
        assert get_dependents("a", graph) == []

    def test_membership(self):
        graph = _graph({"a": []})

        assert "a" in graph
        assert "b" not in graph
        assert list(graph) == ["a"]


class TestBuildDependencyGraph:
    def test_reads_requires_from_proposals(self, make_change, spectr_root: Path):
        make_change(change_id="a", proposal=_proposal("b"))
        make_change(change_id="b", proposal="# No frontmatter\n")

        graph = build_dependency_graph(spectr_root)

        assert graph.edges == {"a": ["b"], "b": []}

    def test_broken_frontmatter_becomes_node_without_edges(self, make_change, spectr_root: Path):
        make_change(change_id="broken", proposal="---\nrequires:\n  - id: x\n# never closed\n")

        graph = build_dependency_graph(spectr_root)

        assert "broken" in graph
        assert graph.edges["broken"] == []

    def test_archived_changes_are_not_nodes(self, make_change, archive_change, spectr_root: Path):
        make_change(change_id="active")
        archive_change("done")

        assert list(build_dependency_graph(spectr_root)) == ["active"]

    def test_undecodable_proposal_becomes_node_without_edges(self, make_change, spectr_root: Path):
        change_dir = make_change(change_id="garbled")
        (change_dir / "proposal.md").write_bytes(b"---\nrequires:\n  - id: x\n---\n\xff")
        make_change(change_id="fine", proposal=_proposal("garbled"))

        graph = build_dependency_graph(spectr_root)

        assert graph.edges == {"fine": ["garbled"], "garbled": []}


class TestValidateDependencies:
    def test_no_dependencies(self, make_change, spectr_root: Path):
        make_change(change_id="solo")

        result = validate_dependencies("solo", spectr_root)

        assert result.issues == []
        assert not result.has_errors
        assert not result.has_warnings

    def test_archived_dependency_is_met(self, make_change, archive_change, spectr_root: Path):
        archive_change("base")
        make_change(change_id="feature", proposal=_proposal("base"))

        assert validate_dependencies("feature", spectr_root).issues == []

    def test_active_and_unknown_dependencies_warn(self, make_change, spectr_root: Path):
        make_change(change_id="base")
        make_change(change_id="feature", proposal=_proposal("base", "ghost"))

        result = validate_dependencies("feature", spectr_root)

        assert [(i.level, i.message) for i in result.issues] == [
            (ValidationLevel.WARNING, "Dependency 'base' is not yet archived (currently active)"),
            (ValidationLevel.WARNING, "Dependency 'ghost' not found"),
        ]
        assert [(u.id, u.status) for u in result.unmet] == [
            ("base", ChangeStatus.ACTIVE),
            ("ghost", ChangeStatus.UNKNOWN),
        ]
        assert result.has_warnings
        assert not result.has_errors
        assert result.to_report().valid

    def test_self_reference_is_an_error(self, make_change, spectr_root: Path):
        make_change(change_id="loop", proposal=_proposal("loop"))

        result = validate_dependencies("loop", spectr_root)

        (issue,) = result.issues
        assert issue.level is ValidationLevel.ERROR
        assert issue.message == "proposal cannot require itself: loop"
        assert issue.line == 1

    def test_cycle_is_an_error(self, make_change, spectr_root: Path):
        make_change(change_id="a", proposal=_proposal("b"))
        make_change(change_id="b", proposal=_proposal("a"))

        result = validate_dependencies("a", spectr_root)

        assert result.has_errors
        assert result.cycles == [["a", "b", "a"]]
        assert "Circular dependency detected: a → b → a" in [i.message for i in result.issues]

    def test_cycle_elsewhere_is_ignored(self, make_change, spectr_root: Path):
        make_change(change_id="a", proposal=_proposal("b"))
        make_change(change_id="b", proposal=_proposal("a"))
        make_change(change_id="c")

        assert validate_dependencies("c", spectr_root).cycles == []


class TestValidateDependenciesForAccept:
    def test_all_archived_passes(self, make_change, archive_change, spectr_root: Path):
        archive_change("base")
        make_change(change_id="feature", proposal=_proposal("base"))

        validate_dependencies_for_accept("feature", spectr_root)

    def test_single_unmet_dependency(self, make_change, spectr_root: Path):
        make_change(change_id="base")
        make_change(change_id="feature", proposal=_proposal("base"))

        with pytest.raises(UnmetDependenciesError) as exc_info:
            validate_dependencies_for_accept("feature", spectr_root)

        assert str(exc_info.value) == "cannot accept 'feature': required dependency 'base' is not archived"

    def test_multiple_unmet_dependencies(self, make_change, spectr_root: Path):
        make_change(change_id="feature", proposal=_proposal("one", "two"))

        with pytest.raises(UnmetDependenciesError) as exc_info:
            validate_dependencies_for_accept("feature", spectr_root)

        assert exc_info.value.dependencies == ["one", "two"]
        assert str(exc_info.value) == "cannot accept 'feature': required dependencies not archived: one, two"

    def test_self_reference(self, make_change, spectr_root: Path):
        make_change(change_id="loop", proposal=_proposal("loop"))

        with pytest.raises(SelfDependencyError, match="proposal cannot require itself: loop"):
            validate_dependencies_for_accept("loop", spectr_root)
