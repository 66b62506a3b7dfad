"""Tokenizer for the constrained Markdown dialect used by spec documents.

Only four constructs are recognised: ATX headers, fenced code blocks,
list items and everything else (plain text). The tokenizer is a small
state machine; each state function consumes some input, queues tokens and
returns the next state (or ``None`` once input is exhausted).

Token values are the exact source slices, so joining every value in order
reproduces the input.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import StrEnum
from typing import Callable, Iterator

FENCE = "```"
LIST_MARKERS = ("- ", "* ")


class TokenType(StrEnum):
    """Kinds of token produced by :func:`tokenize`."""

    ERROR = "error"
    EOF = "eof"
    TEXT = "text"
    HEADER = "header"
    CODE_BLOCK = "code_block"
    LIST = "list"


@dataclass(frozen=True)
class Token:
    """A classified slice of input.

    ``line`` is the 1-indexed line on which the slice starts.
    """

    type: TokenType
    value: str
    line: int


_State = Callable[[], "_State | None"]


class _Lexer:
    def __init__(self, text: str):
        self.text = text
        self.start = 0
        self.pos = 0
        self.line = 1
        self.pending: deque[Token] = deque()

    # -- helpers -----------------------------------------------------------

    def _at_line_start(self) -> bool:
        return self.pos == 0 or self.text[self.pos - 1] == "\n"

    def _emit(self, token_type: TokenType) -> None:
        value = self.text[self.start:self.pos]
        self.pending.append(Token(token_type, value, self.line))
        self.line += value.count("\n")
        self.start = self.pos

    def _flush_text(self) -> None:
        if self.pos > self.start:
            self._emit(TokenType.TEXT)

    def _consume_line(self) -> None:
        newline = self.text.find("\n", self.pos)
        self.pos = len(self.text) if newline == -1 else newline + 1

    # -- states ------------------------------------------------------------

    def lex_text(self) -> _State | None:
        text = self.text
        while self.pos < len(text):
            if text.startswith(FENCE, self.pos):
                self._flush_text()
                return self.lex_code_block
            if self._at_line_start():
                if text[self.pos] == "#":
                    self._flush_text()
                    return self.lex_header
                if text.startswith(LIST_MARKERS, self.pos):
                    self._flush_text()
                    return self.lex_list
            self.pos += 1

        self._flush_text()
        self.pending.append(Token(TokenType.EOF, "", self.line))
        return None

    def lex_header(self) -> _State | None:
        while self.pos < len(self.text) and self.text[self.pos] == "#":
            self.pos += 1
        self._consume_line()
        self._emit(TokenType.HEADER)
        return self.lex_text

    def lex_code_block(self) -> _State | None:
        closing = self.text.find(FENCE, self.pos + len(FENCE))
        if closing == -1:
            self.pending.append(
                Token(TokenType.ERROR, "unclosed code block", self.line)
            )
            return None
        self.pos = closing + len(FENCE)
        self._emit(TokenType.CODE_BLOCK)
        return self.lex_text

    def lex_list(self) -> _State | None:
        self._consume_line()
        self._emit(TokenType.LIST)
        return self.lex_text

    def run(self) -> Iterator[Token]:
        state: _State | None = self.lex_text
        while state is not None:
            state = state()
            while self.pending:
                yield self.pending.popleft()


def tokenize(text: str) -> Iterator[Token]:
    """Yield tokens for ``text`` lazily, ending with EOF (or ERROR).

    An unclosed code fence yields a single ERROR token whose value is
    ``"unclosed code block"``; no EOF follows it.
    """
    return _Lexer(text).run()
