"""Scalar coercion for YAML values that should be read as text."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence


def as_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    # YAML reads dates, commit hashes such as 1234567 and numeric ids as non-strings.
    if isinstance(value, (int, float, bool)) or hasattr(value, "isoformat"):
        return str(value)
    return None


def as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, Sequence):
        result = [as_str(item) for item in value]
        return [item for item in result if item]
    return []


def unique(values: Sequence[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered
