"""Merging of change delta specs into the base specs."""

from .exceptions import MergeError
from .merge import (
    MergeResult,
    OperationCounts,
    RequirementBlock,
    format_capability_name,
    generate_spec_skeleton,
    merge_change,
    merge_spec,
    split_requirement_blocks,
    write_merged_specs,
)

__all__ = [
    "MergeError",
    "MergeResult",
    "OperationCounts",
    "RequirementBlock",
    "format_capability_name",
    "generate_spec_skeleton",
    "merge_change",
    "merge_spec",
    "split_requirement_blocks",
    "write_merged_specs",
]
