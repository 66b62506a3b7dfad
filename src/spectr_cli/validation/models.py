"""Value types shared by every validator: issues, reports and bulk results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Iterable


class ValidationLevel(StrEnum):
    """Severity of a validation issue."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class ItemType(StrEnum):
    """Kind of item validated in a bulk run."""

    CHANGE = "change"
    SPEC = "spec"


@dataclass(frozen=True)
class ValidationIssue:
    """A single finding, located at a 1-indexed line of ``path``."""

    level: ValidationLevel
    path: str
    line: int
    message: str

    def escalated(self) -> ValidationIssue:
        """Copy of this issue at ERROR level (warnings only)."""
        if self.level is not ValidationLevel.WARNING:
            return self
        return ValidationIssue(ValidationLevel.ERROR, self.path, self.line, self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level.value,
            "path": self.path,
            "line": self.line,
            "message": self.message,
        }


@dataclass(frozen=True)
class ValidationSummary:
    errors: int = 0
    warnings: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"errors": self.errors, "warnings": self.warnings}


@dataclass(frozen=True)
class ValidationReport:
    """Aggregated outcome of validating one item.

    ``valid`` is true exactly when no ERROR-level issue exists.
    """

    valid: bool
    issues: list[ValidationIssue] = field(default_factory=list)
    summary: ValidationSummary = field(default_factory=ValidationSummary)

    @classmethod
    def from_issues(cls, issues: Iterable[ValidationIssue]) -> ValidationReport:
        issues = list(issues)
        errors = sum(1 for issue in issues if issue.level is ValidationLevel.ERROR)
        warnings = sum(1 for issue in issues if issue.level is ValidationLevel.WARNING)
        return cls(
            valid=errors == 0,
            issues=issues,
            summary=ValidationSummary(errors=errors, warnings=warnings),
        )

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.level is ValidationLevel.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.level is ValidationLevel.WARNING]

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "issues": [issue.to_dict() for issue in self.issues],
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class BulkResult:
    """Outcome for one item of a bulk run.

    Exactly one of ``report`` and ``error`` is set. ``error`` holds the
    message of a fatal precondition failure for this item.
    """

    name: str
    type: ItemType
    valid: bool
    report: ValidationReport | None = None
    error: str | None = None

    @classmethod
    def from_report(cls, name: str, item_type: ItemType, report: ValidationReport) -> BulkResult:
        return cls(name=name, type=item_type, valid=report.valid, report=report)

    @classmethod
    def from_error(cls, name: str, item_type: ItemType, error: Exception | str) -> BulkResult:
        return cls(name=name, type=item_type, valid=False, error=str(error))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "type": self.type.value,
            "valid": self.valid,
        }
        if self.report is not None:
            data["report"] = self.report.to_dict()
        if self.error is not None:
            data["error"] = self.error
        return data
