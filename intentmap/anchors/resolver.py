"""Resolve anchor specs against raw source text."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from ..models import AnchorResult
from .blocks import BlockStyle, block_end, detect_header, indentation, opens_block
from .fingerprint import HashPolicy, fingerprint
from .spec import (
    AnchorSpec,
    ChunkAnchor,
    ClassAnchor,
    FunctionAnchor,
    LineAnchor,
    MethodAnchor,
    PatternAnchor,
)

_FUNCTION_TEMPLATES = (
    r"^(?P<indent>\s*)(?:export\s+)?(?:async\s+)?def\s+{name}\s*[(\[]",
    r"^(?P<indent>\s*)(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*{name}\s*[(<]",
    r"^(?P<indent>\s*)(?:export\s+)?(?:const|let|var)\s+{name}\s*(?::[^=]+)?=",
    r"^(?P<indent>\s*)(?:pub(?:\([^)]*\))?\s+)?(?:async\s+)?(?:fn|func|fun)\s+{name}\s*[(<]",
)

# Object-literal and Vue-style members: ``name(args) {``.
_SHORTHAND_TEMPLATE = r"^(?P<indent>\s*)(?:(?:async|static|get|set)\s+)*\*?{name}\s*\("

# Method bodies inside brace classes are often declared without a keyword.
_METHOD_TEMPLATES = _FUNCTION_TEMPLATES + (
    r"^(?P<indent>\s*)(?:(?:public|private|protected|static|async|override|get|set)\s+)*\*?{name}\s*[(<]",
    r"^(?P<indent>\s*)(?:(?!(?:return|new|throw|await|else|yield|if|elif|while|for|with|not|and|or|in|is|assert|del|case|switch|catch|typeof|delete|void)\b)[\w<>\[\],.?]+\s+)+{name}\s*\(",
)

_CLASS_TEMPLATE = (
    r"^(?P<indent>\s*)(?:export\s+)?(?:default\s+)?"
    r"(?:(?:pub(?:\([^)]*\))?|public|private|protected|internal|abstract|final|sealed|static|data|partial)\s+)*"
    r"(?:class|struct|interface|trait|enum)\s+{name}\b"
)

Region = Tuple[int, int]


def resolve_anchor(
    spec: AnchorSpec, source_text: str, *, policy: HashPolicy | None = None
) -> AnchorResult:
    """Locate ``spec`` in ``source_text``.

    A miss is a normal outcome and yields ``found=False`` with no range.
    Line numbers in the result are 1-indexed and inclusive.
    """
    if isinstance(spec, ChunkAnchor):
        return AnchorResult(found=True, content="", hash=fingerprint("", policy))

    lines = split_lines(source_text)
    region: Optional[Region]
    if isinstance(spec, FunctionAnchor):
        region = _find_function(lines, spec.name)
    elif isinstance(spec, ClassAnchor):
        region = _find_class(lines, spec.name)
    elif isinstance(spec, MethodAnchor):
        region = _find_method(lines, spec.class_name, spec.method_name)
    elif isinstance(spec, PatternAnchor):
        region = _find_pattern(lines, spec.text)
    elif isinstance(spec, LineAnchor):
        region = _line_region(lines, spec)
    else:
        raise TypeError(f"Unsupported anchor type: {type(spec).__name__}")

    if region is None:
        return AnchorResult(found=False)
    start, end = region
    content = "\n".join(lines[start : end + 1])
    return AnchorResult(
        found=True,
        start_line=start + 1,
        end_line=end + 1,
        content=content,
        hash=fingerprint(content, policy),
    )


def split_lines(source_text: str) -> List[str]:
    """Split text into lines the way editors number them."""
    if not source_text:
        return []
    lines = source_text.replace("\r\n", "\n").split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _compile(templates: Sequence[str], name: str) -> List[re.Pattern[str]]:
    escaped = re.escape(name)
    return [re.compile(template.replace("{name}", escaped)) for template in templates]


def _find_declaration(
    lines: Sequence[str],
    patterns: Sequence[re.Pattern[str]],
    lower: int,
    upper: int,
    keywords: Optional[Sequence[re.Pattern[str]]] = None,
) -> Optional[Region]:
    """Return the first region in ``lines[lower:upper]`` declared by ``patterns``.

    With ``keywords`` set, a match whose header is a single statement counts
    only when one of ``keywords`` also matches; otherwise it is a bare call
    such as ``self.helper()`` or ``helper();``.
    """
    for index in range(lower, upper):
        line = lines[index]
        if not any(pattern.match(line) for pattern in patterns):
            continue
        if keywords is not None and detect_header(lines, index).style is BlockStyle.LINE:
            if not any(keyword.match(line) for keyword in keywords):
                continue
        end = min(block_end(lines, index), upper - 1)
        return _with_decorators(lines, index, lower), end
    return None


def _find_function(lines: Sequence[str], name: str) -> Optional[Region]:
    keywords = _compile(_FUNCTION_TEMPLATES, name)
    patterns = keywords + _compile((_SHORTHAND_TEMPLATE,), name)
    return _find_declaration(lines, patterns, 0, len(lines), keywords)


def _find_class(lines: Sequence[str], name: str) -> Optional[Region]:
    pattern = _compile((_CLASS_TEMPLATE,), name)
    return _find_declaration(lines, pattern, 0, len(lines))


def _find_method(lines: Sequence[str], class_name: str, method_name: str) -> Optional[Region]:
    class_region = _find_class(lines, class_name)
    if class_region is None:
        return None
    class_start, class_end = class_region
    class_pattern = _compile((_CLASS_TEMPLATE,), class_name)[0]
    body_start = class_start
    while body_start < class_end and not class_pattern.match(lines[body_start]):
        body_start += 1
    return _find_declaration(
        lines,
        _compile(_METHOD_TEMPLATES, method_name),
        body_start + 1,
        class_end + 1,
        _compile(_FUNCTION_TEMPLATES, method_name),
    )


def _find_pattern(lines: Sequence[str], text: str) -> Optional[Region]:
    for index, line in enumerate(lines):
        if text in line:
            if opens_block(line):
                return index, block_end(lines, index)
            return index, index
    return None


def _line_region(lines: Sequence[str], spec: LineAnchor) -> Optional[Region]:
    total = len(lines)
    if spec.start > total:
        return None
    return spec.start - 1, min(spec.end, total) - 1


def _with_decorators(lines: Sequence[str], start: int, lower: int) -> int:
    baseline = indentation(lines[start])
    index = start
    while index - 1 >= lower:
        previous = lines[index - 1]
        if not previous.lstrip().startswith("@") or indentation(previous) != baseline:
            break
        index -= 1
    return index


__all__ = ["resolve_anchor", "split_lines"]
