"""Errors raised while merging delta specs into base specs."""


class MergeError(Exception):
    """A delta spec cannot be applied to its base spec."""
    pass
