"""Anchor syntax: the closed set of anchor kinds and their textual form."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from ..errors import AnchorSyntaxError

_ANCHOR_PATTERN = re.compile(r"^@(?P<kind>[a-z]+):(?P<value>.*)$", re.DOTALL)
_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")
_LINE_RANGE = re.compile(r"^(?P<start>\d+)(?:\s*-\s*(?P<end>\d+))?$")
_METHOD_SEPARATORS = ("::", ".")


@dataclass(frozen=True)
class FunctionAnchor:
    name: str

    def __str__(self) -> str:
        return f"@function:{self.name}"


@dataclass(frozen=True)
class ClassAnchor:
    name: str

    def __str__(self) -> str:
        return f"@class:{self.name}"


@dataclass(frozen=True)
class MethodAnchor:
    class_name: str
    method_name: str

    def __str__(self) -> str:
        return f"@method:{self.class_name}.{self.method_name}"


@dataclass(frozen=True)
class PatternAnchor:
    text: str

    def __str__(self) -> str:
        return f"@pattern:{self.text}"


@dataclass(frozen=True)
class LineAnchor:
    start: int
    end: int

    def __str__(self) -> str:
        if self.start == self.end:
            return f"@line:{self.start}"
        return f"@line:{self.start}-{self.end}"


@dataclass(frozen=True)
class ChunkAnchor:
    """Conceptual anchor with no code location."""

    id: str

    def __str__(self) -> str:
        return f"@chunk:{self.id}"


AnchorSpec = Union[
    FunctionAnchor, ClassAnchor, MethodAnchor, PatternAnchor, LineAnchor, ChunkAnchor
]


def parse_anchor(text: str) -> AnchorSpec:
    """Parse anchor text such as ``@function:handle`` into an anchor spec.

    Raises:
        AnchorSyntaxError: when the text names no known anchor kind or the
            value does not fit that kind.
    """
    stripped = text.strip()
    match = _ANCHOR_PATTERN.match(stripped)
    if not match:
        raise AnchorSyntaxError(text, "expected '@kind:value'")
    kind = match.group("kind")
    value = match.group("value").strip()
    if not value:
        raise AnchorSyntaxError(text, "empty anchor value")

    if kind == "function":
        return FunctionAnchor(_identifier(text, value))
    if kind == "class":
        return ClassAnchor(_identifier(text, value))
    if kind == "method":
        return _parse_method(text, value)
    if kind == "pattern":
        return PatternAnchor(value)
    if kind == "line":
        return _parse_line_range(text, value)
    if kind == "chunk":
        if any(char.isspace() for char in value):
            raise AnchorSyntaxError(text, "chunk ids cannot contain whitespace")
        return ChunkAnchor(value)
    raise AnchorSyntaxError(text, f"unknown anchor kind '{kind}'")


def is_virtual(anchor: AnchorSpec) -> bool:
    """Return True for anchors that never point at code."""
    return isinstance(anchor, ChunkAnchor)


def _identifier(text: str, value: str) -> str:
    if not _IDENTIFIER.match(value):
        raise AnchorSyntaxError(text, f"'{value}' is not an identifier")
    return value


def _parse_method(text: str, value: str) -> MethodAnchor:
    for separator in _METHOD_SEPARATORS:
        if separator in value:
            class_part, method_part = value.rsplit(separator, 1)
            return MethodAnchor(
                class_name=_identifier(text, class_part.strip()),
                method_name=_identifier(text, method_part.strip()),
            )
    raise AnchorSyntaxError(text, "expected 'Class.method'")


def _parse_line_range(text: str, value: str) -> LineAnchor:
    match = _LINE_RANGE.match(value)
    if not match:
        raise AnchorSyntaxError(text, "expected 'start-end' line numbers")
    start = int(match.group("start"))
    end = int(match.group("end")) if match.group("end") else start
    if start < 1:
        raise AnchorSyntaxError(text, "line numbers start at 1")
    if end < start:
        raise AnchorSyntaxError(text, "end line precedes start line")
    return LineAnchor(start=start, end=end)


__all__ = [
    "AnchorSpec",
    "ChunkAnchor",
    "ClassAnchor",
    "FunctionAnchor",
    "LineAnchor",
    "MethodAnchor",
    "PatternAnchor",
    "is_virtual",
    "parse_anchor",
]
