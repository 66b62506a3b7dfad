"""Fatal validation errors.

Findings about document content are reported as issues, never raised.
Only the conditions below abort validation of a single target.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from .models import BulkResult


class ValidationError(Exception):
    """Base exception for validation errors."""
    pass


class SpecFileError(ValidationError):
    """A spec file or directory needed for validation is missing or unreadable."""
    pass


class SpecsDirectoryNotFoundError(SpecFileError):
    """A change has no ``specs/`` directory."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"specs directory not found: {path}")


class NoSpecFilesError(SpecFileError):
    """A change's ``specs/`` directory holds no ``<capability>/spec.md``."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"no spec files found in {path}")


class ValidationCancelled(ValidationError):
    """A bulk run was cancelled before every item was validated.

    Attributes:
        results: Results for the items completed before cancellation, in
            input order.
    """

    def __init__(self, results: List["BulkResult"], message: str | None = None):
        self.results = results
        super().__init__(
            message
            or f"validation cancelled after {len(results)} item(s)"
        )


class ItemNotFoundError(ValidationError):
    """No active change or spec carries the requested name."""

    def __init__(self, name: str, item_type: str | None = None):
        self.name = name
        self.item_type = item_type
        super().__init__(f"{item_type or 'item'} '{name}' not found")


class AmbiguousItemError(ValidationError):
    """The requested name exists both as a change and as a spec."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"item '{name}' exists as both change and spec, "
            "use --type to disambiguate"
        )
