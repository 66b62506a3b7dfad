"""Project configuration, change discovery and proposal dependencies."""

from .discovery import (
    ChangeStatus,
    get_active_change_ids,
    get_archived_change_ids,
    get_change_status,
    get_spec_ids,
    is_change_archived,
)
from .config import ConfigError, SpectrConfig, load_config
from .frontmatter import (
    Dependency,
    FrontmatterError,
    ProposalMetadata,
    extract_frontmatter,
    parse_proposal_frontmatter,
    read_proposal_metadata,
)
from .dependency_graph import (
    AcceptanceError,
    DependencyGraph,
    DependencyValidationResult,
    SelfDependencyError,
    UnmetDependenciesError,
    build_dependency_graph,
    detect_cycles,
    get_dependents,
    validate_dependencies,
    validate_dependencies_for_accept,
)

__all__ = [
    "ChangeStatus",
    "get_active_change_ids",
    "get_archived_change_ids",
    "get_change_status",
    "get_spec_ids",
    "is_change_archived",
    "ConfigError",
    "SpectrConfig",
    "load_config",
    "Dependency",
    "FrontmatterError",
    "ProposalMetadata",
    "extract_frontmatter",
    "parse_proposal_frontmatter",
    "read_proposal_metadata",
    "AcceptanceError",
    "DependencyGraph",
    "DependencyValidationResult",
    "SelfDependencyError",
    "UnmetDependenciesError",
    "build_dependency_graph",
    "detect_cycles",
    "get_dependents",
    "validate_dependencies",
    "validate_dependencies_for_accept",
]
