"""spectr: parse, validate and track spec-driven development documents."""

__version__ = "0.1.0"
