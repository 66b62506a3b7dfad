"""Exceptions raised while tokenizing or parsing spec Markdown."""

from __future__ import annotations


class MarkdownSyntaxError(SyntaxError):
    """Input could not be tokenized (for example an unclosed code fence).

    Attributes:
        line: 1-indexed line on which the offending construct starts.
    """

    def __init__(self, message: str, line: int):
        self.line = line
        super().__init__(message)
