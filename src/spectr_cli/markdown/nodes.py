"""Document model produced by the spec Markdown parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Union


@dataclass(frozen=True)
class Header:
    """ATX header (``## Title``). ``text`` is trimmed, ``raw`` is verbatim."""

    level: int
    text: str
    raw: str
    line: int


@dataclass(frozen=True)
class Text:
    """Plain text passed through unchanged."""

    content: str
    line: int

    @property
    def raw(self) -> str:
        return self.content


@dataclass(frozen=True)
class CodeBlock:
    """Fenced code block; ``content`` excludes both fence lines."""

    language: str
    content: str
    raw: str
    line: int


@dataclass(frozen=True)
class ListItem:
    """Single ``-`` or ``*`` list item line."""

    marker: str
    content: str
    raw: str
    line: int


Node = Union[Header, Text, CodeBlock, ListItem]


@dataclass
class Document:
    """Ordered sequence of nodes covering the whole input."""

    nodes: list[Node] = field(default_factory=list)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def raw(self) -> str:
        """Concatenated raw text of every node (the original input)."""
        return "".join(node.raw for node in self.nodes)

    def headers(self, level: int | None = None) -> list[Header]:
        return [
            node
            for node in self.nodes
            if isinstance(node, Header) and (level is None or node.level == level)
        ]
