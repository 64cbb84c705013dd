"""Block-end strategies for indentation- and brace-delimited source."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Sequence

_STRING_LITERAL = re.compile(
    r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'|`(?:\\.|[^`\\])*`'
)
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/")
_HASH_COMMENT = re.compile(r"(?:^|\s)#.*$")
_SLASH_COMMENT = re.compile(r"//.*$")
_HEADER_LOOKAHEAD = 12


class BlockStyle(Enum):
    INDENT = "indent"
    BRACE = "brace"
    LINE = "line"


@dataclass(frozen=True)
class Header:
    """Where a declaration's header stops and how its body is delimited."""

    style: BlockStyle
    end: int


def indentation(line: str) -> int:
    expanded = line.expandtabs(4)
    return len(expanded) - len(expanded.lstrip())


def is_blank(line: str) -> bool:
    return not line.strip()


def _without_strings(line: str) -> str:
    return _STRING_LITERAL.sub('""', line)


def _indent_code(line: str) -> str:
    return _HASH_COMMENT.sub("", _without_strings(line)).rstrip()


def _brace_code(line: str) -> str:
    code = _BLOCK_COMMENT.sub("", _without_strings(line))
    return _SLASH_COMMENT.sub("", code).rstrip()


def detect_header(lines: Sequence[str], start: int) -> Header:
    """Classify the declaration starting at ``start``.

    Multi-line signatures are followed until bracket depth returns to zero;
    the line that closes them decides the style.
    """
    depth = 0
    limit = min(len(lines), start + _HEADER_LOOKAHEAD)
    for index in range(start, limit):
        code = _brace_code(lines[index])
        for char in code:
            if char in "([":
                depth += 1
            elif char in ")]":
                depth -= 1
        if depth > 0:
            continue
        if _indent_code(lines[index]).endswith(":"):
            return Header(BlockStyle.INDENT, index)
        if "{" in code:
            return Header(BlockStyle.BRACE, index)
        following = _next_non_blank(lines, index + 1)
        if following is not None and lines[following].lstrip().startswith("{"):
            return Header(BlockStyle.BRACE, following)
        return Header(BlockStyle.LINE, index)
    return Header(BlockStyle.INDENT, start)


def opens_block(line: str) -> bool:
    """Return True when ``line`` ends by opening an indented or braced body."""
    return _indent_code(line).endswith(":") or _brace_code(line).endswith("{")


def block_end(lines: Sequence[str], start: int) -> int:
    """Return the index of the last line belonging to the block at ``start``."""
    header = detect_header(lines, start)
    return _STRATEGIES[header.style](lines, start, header.end)


def _indent_end(lines: Sequence[str], start: int, header_end: int) -> int:
    baseline = indentation(lines[start])
    last = header_end
    for index in range(header_end + 1, len(lines)):
        line = lines[index]
        if is_blank(line):
            continue
        if indentation(line) <= baseline:
            break
        last = index
    return last


def _brace_end(lines: Sequence[str], start: int, header_end: int) -> int:
    depth = 0
    opened = False
    last = start
    for index in range(start, len(lines)):
        code = _brace_code(lines[index])
        for char in code:
            if char == "{":
                depth += 1
                opened = True
            elif char == "}":
                depth -= 1
        if not is_blank(lines[index]):
            last = index
        if opened and depth <= 0:
            return index
    return max(last, header_end)


def _line_end(lines: Sequence[str], start: int, header_end: int) -> int:
    return header_end


def _next_non_blank(lines: Sequence[str], index: int) -> int | None:
    while index < len(lines):
        if not is_blank(lines[index]):
            return index
        index += 1
    return None


_STRATEGIES: Dict[BlockStyle, Callable[[Sequence[str], int, int], int]] = {
    BlockStyle.INDENT: _indent_end,
    BlockStyle.BRACE: _brace_end,
    BlockStyle.LINE: _line_end,
}


__all__ = [
    "BlockStyle",
    "Header",
    "block_end",
    "detect_header",
    "indentation",
    "is_blank",
    "opens_block",
]
