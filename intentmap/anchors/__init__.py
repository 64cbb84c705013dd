"""Anchor syntax, source matching and content fingerprints."""

from .fingerprint import DEFAULT_POLICY, HashPolicy, fingerprint
from .resolver import resolve_anchor, split_lines
from .spec import (
    AnchorSpec,
    ChunkAnchor,
    ClassAnchor,
    FunctionAnchor,
    LineAnchor,
    MethodAnchor,
    PatternAnchor,
    is_virtual,
    parse_anchor,
)

__all__ = [
    "AnchorSpec",
    "ChunkAnchor",
    "ClassAnchor",
    "DEFAULT_POLICY",
    "FunctionAnchor",
    "HashPolicy",
    "LineAnchor",
    "MethodAnchor",
    "PatternAnchor",
    "fingerprint",
    "is_virtual",
    "parse_anchor",
    "resolve_anchor",
    "split_lines",
]
