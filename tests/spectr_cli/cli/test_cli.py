"""Tests for the spectr command line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from spectr_cli.cli import app

runner = CliRunner()

VALID_SPEC = (
    "## Requirements\n\n### Requirement: X\nThe system SHALL do X.\n\n"
    "#### Scenario: s\n- **WHEN** a\n- **THEN** b\n"
)

SOFT_SPEC = (
    "## Requirements\n\n### Requirement: X\nUsers do X.\n\n"
    "#### Scenario: s\n- **WHEN** a\n- **THEN** b\n"
)


@pytest.fixture()
def project(spectr_root: Path) -> Path:
    return spectr_root.parent


def _invoke(*args: str):
    return runner.invoke(app, list(args))


class TestValidateCommand:
    def test_single_valid_spec(self, project: Path, write_spec):
        write_spec("auth", VALID_SPEC)

        result = _invoke("validate", "auth", "--path", str(project), "--json")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["name"] == "auth"
        assert data["type"] == "spec"
        assert data["valid"] is True
        assert data["report"]["summary"] == {"errors": 0, "warnings": 0}

    def test_invalid_spec_exits_one(self, project: Path, write_spec):
        write_spec("auth", SOFT_SPEC)

        result = _invoke("validate", "auth", "--path", str(project), "--json")

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["valid"] is False
        assert data["report"]["issues"][0]["level"] == "ERROR"

    def test_strictness_override(self, project: Path, write_spec):
        write_spec("auth", SOFT_SPEC)

        result = _invoke("validate", "auth", "--path", str(project), "--json", "--strictness", "warn")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["report"]["summary"] == {"errors": 0, "warnings": 1}

    def test_configured_strictness(self, project: Path, write_spec):
        (project / "spectr.yaml").write_text("validation:\n  strictness: warn\n", encoding="utf-8")
        write_spec("auth", SOFT_SPEC)

        result = _invoke("validate", "auth", "--path", str(project), "--json")

        assert result.exit_code == 0

    def test_bulk_run(self, project: Path, write_spec, make_change):
        write_spec("auth", VALID_SPEC)
        write_spec("billing", "# Billing\n")
        make_change(change_id="no-specs")

        result = _invoke("validate", "--all", "--path", str(project), "--json")

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert [(i["type"], i["name"], i["valid"]) for i in data["items"]] == [
            ("change", "no-specs", False),
            ("spec", "auth", True),
            ("spec", "billing", False),
        ]
        assert "error" in data["items"][0]
        assert data["summary"] == {"total": 3, "passed": 1, "failed": 2}

    def test_bulk_run_with_workers(self, project: Path, write_spec):
        write_spec("auth", VALID_SPEC)
        write_spec("billing", VALID_SPEC)

        result = _invoke("validate", "--specs", "--workers", "2", "--path", str(project), "--json")

        assert result.exit_code == 0
        assert json.loads(result.stdout)["summary"]["passed"] == 2

    def test_nothing_to_validate_in_empty_project(self, project: Path):
        result = _invoke("validate", "--all", "--path", str(project), "--json")

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "items": [],
            "summary": {"total": 0, "passed": 0, "failed": 0},
        }

    def test_item_and_bulk_flag_conflict(self, project: Path):
        result = _invoke("validate", "auth", "--all", "--path", str(project))

        assert result.exit_code == 1

    def test_no_arguments(self, project: Path):
        result = _invoke("validate", "--path", str(project))

        assert result.exit_code == 1
        assert "Nothing to validate" in result.stdout

    def test_unknown_item(self, project: Path):
        result = _invoke("validate", "ghost", "--path", str(project))

        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_ambiguous_item_needs_type(self, project: Path, write_spec, make_change):
        write_spec("auth", VALID_SPEC)
        make_change({"auth/spec.md": VALID_SPEC.replace("## Requirements", "## ADDED Requirements")}, change_id="auth")

        ambiguous = _invoke("validate", "auth", "--path", str(project))
        typed = _invoke("validate", "auth", "--type", "spec", "--path", str(project), "--json")

        assert ambiguous.exit_code == 1
        assert typed.exit_code == 0
        assert json.loads(typed.stdout)["type"] == "spec"

    def test_invalid_config(self, project: Path):
        (project / "spectr.yaml").write_text("validation:\n  strictness: loose\n", encoding="utf-8")

        result = _invoke("validate", "--all", "--path", str(project))

        assert result.exit_code == 1

    def test_human_output(self, project: Path, write_spec):
        write_spec("auth", VALID_SPEC)

        result = _invoke("validate", "auth", "--path", str(project))

        assert result.exit_code == 0
        assert "valid" in result.stdout


def _proposal(*requires: str) -> str:
    body = "".join(f"  - id: {dep}\n" for dep in requires)
    return f"---\nrequires:\n{body}---\n# Proposal\n"


class TestDepsCommand:
    def test_unmet_dependency_is_advisory(self, project: Path, make_change):
        make_change(change_id="base")
        make_change(change_id="feature", proposal=_proposal("base"))

        result = _invoke("deps", "feature", "--path", str(project), "--json")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["valid"] is True
        assert data["unmet"] == [{"id": "base", "reason": "", "status": "active"}]
        assert data["cycles"] == []

    def test_dependents_are_listed(self, project: Path, make_change):
        make_change(change_id="base")
        make_change(change_id="feature", proposal=_proposal("base"))

        result = _invoke("deps", "base", "--path", str(project), "--json")

        assert json.loads(result.stdout)["dependents"] == ["feature"]

    def test_cycle_fails(self, project: Path, make_change):
        make_change(change_id="a", proposal=_proposal("b"))
        make_change(change_id="b", proposal=_proposal("a"))

        result = _invoke("deps", "a", "--path", str(project), "--json")

        assert result.exit_code == 1
        assert json.loads(result.stdout)["cycles"] == [["a", "b", "a"]]

    def test_accept_blocks_on_unarchived_dependency(self, project: Path, make_change):
        make_change(change_id="base")
        make_change(change_id="feature", proposal=_proposal("base"))

        result = _invoke("deps", "feature", "--accept", "--path", str(project))

        assert result.exit_code == 1

    def test_accept_passes_once_archived(self, project: Path, make_change, archive_change):
        archive_change("base")
        make_change(change_id="feature", proposal=_proposal("base"))

        result = _invoke("deps", "feature", "--accept", "--path", str(project))

        assert result.exit_code == 0

    def test_unknown_change(self, project: Path):
        result = _invoke("deps", "ghost", "--path", str(project))

        assert result.exit_code == 1


ADDED_X = (
    "## ADDED Requirements\n\n### Requirement: Y\nThe system SHALL do Y.\n\n"
    "#### Scenario: s\n- **WHEN** a\n- **THEN** b\n"
)


class TestMergeCommand:
    def test_dry_run_reports_counts_without_writing(self, project: Path, spectr_root: Path, write_spec, make_change):
        base = write_spec("auth", VALID_SPEC)
        make_change(specs={"auth/spec.md": ADDED_X})

        result = _invoke("merge", "my-change", "--path", str(project), "--json")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["written"] is False
        assert data["specs"] == [
            {
                "capability": "auth",
                "created": False,
                "counts": {"added": 1, "modified": 0, "removed": 0, "renamed": 0},
            }
        ]
        assert base.read_text(encoding="utf-8") == VALID_SPEC

    def test_write_updates_and_creates_specs(self, project: Path, spectr_root: Path, write_spec, make_change):
        write_spec("auth", VALID_SPEC)
        make_change(specs={"auth/spec.md": ADDED_X, "billing/spec.md": ADDED_X})

        result = _invoke("merge", "my-change", "--write", "--path", str(project))

        assert result.exit_code == 0
        auth = (spectr_root / "specs" / "auth" / "spec.md").read_text(encoding="utf-8")
        assert auth.index("### Requirement: X") < auth.index("### Requirement: Y")
        billing = (spectr_root / "specs" / "billing" / "spec.md").read_text(encoding="utf-8")
        assert billing.startswith("# Billing Specification\n\n## Requirements\n")

    def test_invalid_change_is_not_merged(self, project: Path, spectr_root: Path, make_change):
        make_change(specs={"auth/spec.md": "## ADDED Requirements\n\n### Requirement: Y\nNo keyword.\n"})

        result = _invoke("merge", "my-change", "--write", "--path", str(project))

        assert result.exit_code == 1
        assert not (spectr_root / "specs" / "auth").exists()

    def test_unknown_change(self, project: Path):
        result = _invoke("merge", "ghost", "--path", str(project))

        assert result.exit_code == 1
