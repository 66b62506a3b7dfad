"""Turn the token stream into a :class:`~spectr_cli.markdown.nodes.Document`."""

from __future__ import annotations

from typing import Callable

from .exceptions import MarkdownSyntaxError
from .nodes import CodeBlock, Document, Header, ListItem, Node, Text
from .tokens import FENCE, Token, TokenType, tokenize


def _build_header(token: Token) -> Header:
    stripped = token.value.strip()
    level = len(stripped) - len(stripped.lstrip("#"))
    return Header(
        level=level,
        text=stripped[level:].strip(),
        raw=token.value,
        line=token.line,
    )


def _build_code_block(token: Token) -> CodeBlock:
    lines = token.value.split("\n")
    if len(lines) == 1:
        # Fence opened and closed on the same line: ```inline```
        return CodeBlock(
            language="",
            content=token.value[len(FENCE):-len(FENCE)],
            raw=token.value,
            line=token.line,
        )
    body = lines[1:-1]
    # Text sharing a line with the closing fence: "last line```"
    tail = lines[-1][:-len(FENCE)]
    if tail.strip():
        body.append(tail)
    return CodeBlock(
        language=lines[0][len(FENCE):].strip(),
        content="\n".join(body),
        raw=token.value,
        line=token.line,
    )


def _build_list_item(token: Token) -> ListItem:
    marker = token.value[0]
    return ListItem(
        marker=marker,
        content=token.value[1:].strip(),
        raw=token.value,
        line=token.line,
    )


def _build_text(token: Token) -> Text:
    return Text(content=token.value, line=token.line)


_BUILDERS: dict[TokenType, Callable[[Token], Node]] = {
    TokenType.HEADER: _build_header,
    TokenType.CODE_BLOCK: _build_code_block,
    TokenType.LIST: _build_list_item,
    TokenType.TEXT: _build_text,
}


def parse(text: str) -> Document:
    """Parse ``text`` into a document.

    Raises:
        MarkdownSyntaxError: If the tokenizer reports an error, e.g. an
            unclosed code fence.
    """
    nodes: list[Node] = []
    for token in tokenize(text):
        if token.type is TokenType.EOF:
            break
        if token.type is TokenType.ERROR:
            raise MarkdownSyntaxError(
                f"lexing error at line {token.line}: {token.value}",
                line=token.line,
            )
        builder = _BUILDERS.get(token.type)
        if builder is None:
            continue
        nodes.append(builder(token))
    return Document(nodes)
