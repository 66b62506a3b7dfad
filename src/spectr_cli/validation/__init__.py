"""Validation of base specs, change deltas and task files."""

from .exceptions import (
    AmbiguousItemError,
    ItemNotFoundError,
    NoSpecFilesError,
    SpecFileError,
    SpecsDirectoryNotFoundError,
    ValidationCancelled,
    ValidationError,
)
from .models import (
    BulkResult,
    ItemType,
    ValidationIssue,
    ValidationLevel,
    ValidationReport,
    ValidationSummary,
)
from .strictness import Strictness, apply_strictness, resolve_strictness
from .locate import (
    find_malformed_scenario_line,
    find_requirement_line,
    find_section_line,
    locate,
)
from .spec_rules import check_requirement, validate_spec_content, validate_spec_file
from .change_rules import validate_change_delta_specs
from .tasks_rules import check_tasks_content, validate_tasks_file
from .bulk import (
    ValidationItem,
    collect_items,
    resolve_item,
    validate_item,
    validate_items,
)

__all__ = [
    # Exceptions
    "AmbiguousItemError",
    "ItemNotFoundError",
    "NoSpecFilesError",
    "SpecFileError",
    "SpecsDirectoryNotFoundError",
    "ValidationCancelled",
    "ValidationError",
    # Models
    "BulkResult",
    "ItemType",
    "ValidationIssue",
    "ValidationLevel",
    "ValidationReport",
    "ValidationSummary",
    # Strictness
    "Strictness",
    "apply_strictness",
    "resolve_strictness",
    # Line recovery
    "find_malformed_scenario_line",
    "find_requirement_line",
    "find_section_line",
    "locate",
    # Validators
    "check_requirement",
    "validate_spec_content",
    "validate_spec_file",
    "validate_change_delta_specs",
    "check_tasks_content",
    "validate_tasks_file",
    # Bulk
    "ValidationItem",
    "collect_items",
    "resolve_item",
    "validate_item",
    "validate_items",
]
