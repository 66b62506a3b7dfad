"""CLI command modules for spectr."""

from .deps import deps_command
from .merge import merge_command
from .validate import validate_command

__all__ = ["deps_command", "merge_command", "validate_command"]
