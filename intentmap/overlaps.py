"""Pairwise overlap detection between resolved anchor ranges."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class OverlapCandidate:
    """Where one anchor landed; entries without a file or range never overlap."""

    anchor_id: str
    file: Optional[str]
    start_line: Optional[int]
    end_line: Optional[int]

    @property
    def located(self) -> bool:
        return bool(self.file) and self.start_line is not None and self.end_line is not None


def detect_overlaps(candidates: Iterable[OverlapCandidate]) -> Dict[str, List[str]]:
    """Map each anchor id to the ids whose line ranges intersect it in the same file.

    Ranges are inclusive. The relation is symmetric and not transitive; ids
    appear in order of first discovery and never in their own list.
    """
    overlaps: Dict[str, List[str]] = {}
    for (_, anchor_id), related in detect_file_overlaps(candidates).items():
        for other in related:
            _record(overlaps, anchor_id, other)
    return overlaps


def detect_file_overlaps(
    candidates: Iterable[OverlapCandidate],
) -> Dict[Tuple[str, str], List[str]]:
    """Like :func:`detect_overlaps` but keyed by ``(file, anchor id)``.

    The same anchor text can land in several files; each placement keeps
    only the overlaps found in its own file.
    """
    by_file: Dict[str, List[OverlapCandidate]] = defaultdict(list)
    for candidate in candidates:
        if candidate.located:
            by_file[candidate.file].append(candidate)  # type: ignore[index]

    overlaps: Dict[Tuple[str, str], List[str]] = {}
    for file, entries in by_file.items():
        for i, first in enumerate(entries):
            for second in entries[i + 1 :]:
                if first.anchor_id == second.anchor_id:
                    continue
                if _intersects(first, second):
                    _record(overlaps, (file, first.anchor_id), second.anchor_id)
                    _record(overlaps, (file, second.anchor_id), first.anchor_id)
    return overlaps


def _intersects(a: OverlapCandidate, b: OverlapCandidate) -> bool:
    return a.start_line <= b.end_line and b.start_line <= a.end_line  # type: ignore[operator]


def _record(overlaps: Dict, source: object, target: str) -> None:
    related = overlaps.setdefault(source, [])
    if target not in related:
        related.append(target)


__all__ = ["OverlapCandidate", "detect_file_overlaps", "detect_overlaps"]
