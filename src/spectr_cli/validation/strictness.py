"""Strictness policy for per-requirement findings.

Two modes exist: STRICT escalates the SHALL/MUST and missing-scenario
warnings to errors; WARN reports them as warnings. STRICT is the default.
Tasks-file findings are never escalated.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Iterable

from .models import ValidationIssue


class Strictness(StrEnum):
    """How per-requirement warnings are reported.

    - STRICT: Escalate warnings to errors (blocks validity)
    - WARN: Keep warnings as warnings
    """

    STRICT = "strict"
    WARN = "warn"


def resolve_strictness(
    config_default: Strictness = Strictness.STRICT,
    runtime_override: Strictness | None = None,
) -> Strictness:
    """Resolve the effective strictness.

    Precedence (highest to lowest):
    1. Runtime override (CLI --strictness flag)
    2. Project config (validation.strictness in spectr.yaml)

    Examples:
        >>> resolve_strictness()
        <Strictness.STRICT: 'strict'>

        >>> resolve_strictness(Strictness.STRICT, Strictness.WARN)
        <Strictness.WARN: 'warn'>
    """
    if runtime_override is not None:
        return runtime_override
    return config_default


def apply_strictness(
    issues: Iterable[ValidationIssue],
    strictness: Strictness,
) -> list[ValidationIssue]:
    """Return ``issues`` with warnings escalated when ``strictness`` is STRICT."""
    if strictness is Strictness.STRICT:
        return [issue.escalated() for issue in issues]
    return list(issues)
