"""Tests for block-end detection."""

from __future__ import annotations

from intentmap.anchors.blocks import BlockStyle, block_end, detect_header, opens_block


def test_multiline_python_signature_is_followed_to_colon() -> None:
    lines = [
        "def build(",
        "    name,",
        "    value=(1, 2),",
        "):",
        "    return name",
        "",
        "other = 1",
    ]

    header = detect_header(lines, 0)

    assert header.style is BlockStyle.INDENT
    assert header.end == 3
    assert block_end(lines, 0) == 4


def test_allman_brace_on_next_line() -> None:
    lines = [
        "void Run()",
        "{",
        "    Work();",
        "}",
        "int after;",
    ]

    assert detect_header(lines, 0).style is BlockStyle.BRACE
    assert block_end(lines, 0) == 3


def test_comments_do_not_open_or_close_blocks() -> None:
    lines = [
        "function f() { // }",
        "  /* } */ return 1;",
        "}",
        "g();",
    ]

    assert block_end(lines, 0) == 2


def test_hash_comment_colon_is_not_a_block() -> None:
    assert not opens_block("value = 1  # note:")
    assert opens_block("if ready:  # start")
    assert opens_block("while (true) {")


def test_single_line_declaration_ends_where_it_starts() -> None:
    lines = ["const limit = 10;", "const other = 2;"]

    assert detect_header(lines, 0).style is BlockStyle.LINE
    assert block_end(lines, 0) == 0
