"""Tokenizer, parser and structural extraction for spec Markdown."""

from .exceptions import MarkdownSyntaxError
from .tokens import Token, TokenType, tokenize
from .nodes import CodeBlock, Document, Header, ListItem, Node, Text
from .parser import parse
from .extraction import (
    DeltaOperation,
    DeltaPlan,
    MalformedRename,
    RenameOp,
    Requirement,
    Section,
    contains_shall_or_must,
    delta_operation,
    extract_delta,
    extract_requirements,
    extract_scenarios,
    extract_sections,
    find_malformed_scenario,
    iter_sections,
    normalize_requirement_name,
    parse_renamed,
    requirement_header_name,
    requirements_from_nodes,
)

__all__ = [
    "MarkdownSyntaxError",
    "Token",
    "TokenType",
    "tokenize",
    "CodeBlock",
    "Document",
    "Header",
    "ListItem",
    "Node",
    "Text",
    "parse",
    "DeltaOperation",
    "DeltaPlan",
    "MalformedRename",
    "RenameOp",
    "Requirement",
    "Section",
    "contains_shall_or_must",
    "delta_operation",
    "extract_delta",
    "extract_requirements",
    "extract_scenarios",
    "extract_sections",
    "find_malformed_scenario",
    "iter_sections",
    "normalize_requirement_name",
    "parse_renamed",
    "requirement_header_name",
    "requirements_from_nodes",
]
