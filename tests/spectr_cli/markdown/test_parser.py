"""Tests for parse() and the document model."""

from __future__ import annotations

import pytest

from spectr_cli.markdown import (
    CodeBlock,
    Header,
    ListItem,
    MarkdownSyntaxError,
    Text,
    parse,
)

SAMPLE = """# Auth Specification

## Requirements

### Requirement: Login
The system SHALL log users in.

```yaml
## not: a section
```

#### Scenario: ok
- **WHEN** a user logs in
* **THEN** it works
"""


class TestParse:
    def test_round_trip_reproduces_input(self):
        assert parse(SAMPLE).raw == SAMPLE

    def test_round_trip_without_trailing_newline(self):
        text = "## Title\nno newline at end"
        assert parse(text).raw == text

    def test_header_level_and_trimmed_text(self):
        (header,) = parse("### Requirement: Login  \n").nodes
        assert header == Header(
            level=3,
            text="Requirement: Login",
            raw="### Requirement: Login  \n",
            line=1,
        )

    def test_code_block_language_and_content(self):
        node = parse("```go\nfmt.Println()\nx := 1\n```").nodes[0]
        assert isinstance(node, CodeBlock)
        assert node.language == "go"
        assert node.content == "fmt.Println()\nx := 1"

    def test_closing_fence_on_content_line_keeps_content(self):
        node = parse("```py\nline1\nline2```").nodes[0]
        assert isinstance(node, CodeBlock)
        assert node.language == "py"
        assert node.content == "line1\nline2"

    def test_code_block_with_only_fences_is_empty(self):
        node = parse("```\n```").nodes[0]
        assert isinstance(node, CodeBlock)
        assert node.language == ""
        assert node.content == ""

    def test_list_item_marker_and_content(self):
        nodes = parse("- FROM: old\n* TO: new\n").nodes
        assert nodes == [
            ListItem(marker="-", content="FROM: old", raw="- FROM: old\n", line=1),
            ListItem(marker="*", content="TO: new", raw="* TO: new\n", line=2),
        ]

    def test_text_is_passed_through(self):
        (node,) = parse("  plain text\n").nodes
        assert node == Text(content="  plain text\n", line=1)
        assert node.raw == "  plain text\n"

    def test_headers_inside_fences_are_not_headers(self):
        doc = parse(SAMPLE)
        assert [h.text for h in doc.headers(level=2)] == ["Requirements"]

    def test_node_lines_are_one_indexed(self):
        doc = parse(SAMPLE)
        lines = {h.text: h.line for h in doc.headers()}
        assert lines["Auth Specification"] == 1
        assert lines["Requirements"] == 3
        assert lines["Requirement: Login"] == 5
        assert lines["Scenario: ok"] == 12

    def test_unclosed_fence_raises_with_line(self):
        with pytest.raises(MarkdownSyntaxError, match="lexing error at line 3: unclosed code block") as exc_info:
            parse("# T\n\n```\nnope\n")
        assert exc_info.value.line == 3
