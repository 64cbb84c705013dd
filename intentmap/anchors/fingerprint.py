"""Content fingerprints for resolved anchor regions."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from typing import Callable, Dict

NORMALIZE_RAW = "raw"
NORMALIZE_TRIM = "trim"
NORMALIZE_WHITESPACE = "whitespace"

ALGORITHM_ROLLING = "rolling"
ALGORITHM_SHA256 = "sha256"

_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass(frozen=True)
class HashPolicy:
    """How region content is normalised and digested before comparison.

    ``trim`` drops blank lines around the region, ``whitespace`` additionally
    ignores indentation, spacing and blank lines inside it. ``rolling`` is the
    short hash already written into existing ``<!-- hash: -->`` comments.
    """

    normalize: str = NORMALIZE_TRIM
    algorithm: str = ALGORITHM_ROLLING

    def __post_init__(self) -> None:
        if self.normalize not in _NORMALIZERS:
            raise ValueError(f"Unknown hash normalisation '{self.normalize}'")
        if self.algorithm not in _ALGORITHMS:
            raise ValueError(f"Unknown hash algorithm '{self.algorithm}'")

    @property
    def signature(self) -> str:
        return f"{self.normalize}/{self.algorithm}"


def fingerprint(content: str, policy: HashPolicy | None = None) -> str:
    """Return the hash of ``content`` under ``policy``."""
    policy = policy or DEFAULT_POLICY
    normalised = _NORMALIZERS[policy.normalize](content)
    return _ALGORITHMS[policy.algorithm](normalised)


def trim_blank_lines(content: str) -> str:
    lines = content.split("\n")
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(lines[start:end])


def _collapse_whitespace(content: str) -> str:
    lines = []
    for line in content.split("\n"):
        collapsed = _WHITESPACE_RUN.sub(" ", line).strip()
        if collapsed:
            lines.append(collapsed)
    return "\n".join(lines)


def rolling_hash(content: str) -> str:
    """32-bit ``h * 31 + unit`` hash over UTF-16 code units, as lowercase hex."""
    value = 0
    data = content.encode("utf-16-le")
    for index in range(0, len(data), 2):
        unit = data[index] | (data[index + 1] << 8)
        value = ((value << 5) - value + unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return format(abs(value), "x")[:8]


def _sha256(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:16]


_NORMALIZERS: Dict[str, Callable[[str], str]] = {
    NORMALIZE_RAW: lambda content: content,
    NORMALIZE_TRIM: trim_blank_lines,
    NORMALIZE_WHITESPACE: _collapse_whitespace,
}

_ALGORITHMS: Dict[str, Callable[[str], str]] = {
    ALGORITHM_ROLLING: rolling_hash,
    ALGORITHM_SHA256: _sha256,
}

NORMALIZATIONS = tuple(_NORMALIZERS)
ALGORITHMS = tuple(_ALGORITHMS)

DEFAULT_POLICY = HashPolicy()


__all__ = [
    "ALGORITHMS",
    "ALGORITHM_ROLLING",
    "ALGORITHM_SHA256",
    "DEFAULT_POLICY",
    "HashPolicy",
    "NORMALIZATIONS",
    "NORMALIZE_RAW",
    "NORMALIZE_TRIM",
    "NORMALIZE_WHITESPACE",
    "fingerprint",
    "rolling_hash",
    "trim_blank_lines",
]
