"""Core data models shared across intentmap components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .anchors.spec import AnchorSpec

ACTIVE_STATUS = "active"

STATE_FRESH = "fresh"
STATE_STALE = "stale"
STATE_OBSOLETE = "obsolete"
STATE_NEW = "new"


@dataclass(frozen=True)
class IntentEntry:
    """One manifest row pointing at an intent document."""

    id: str
    file: str
    status: str
    superseded_by: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE_STATUS


@dataclass(frozen=True)
class SkippedEntry:
    """Manifest list item dropped by the permissive entry policy."""

    index: int
    reason: str


@dataclass
class Manifest:
    """Repository-level index of intent documents."""

    version: int = 1
    default_lang: str = "en"
    intents: List[IntentEntry] = field(default_factory=list)
    skipped: List[SkippedEntry] = field(default_factory=list)

    def active_intents(self) -> List[IntentEntry]:
        return [entry for entry in self.intents if entry.is_active]


@dataclass(frozen=True)
class Frontmatter:
    """Structured header of an intent document."""

    id: str
    files: Tuple[str, ...] = ()
    status: str = ACTIVE_STATUS
    author: Optional[str] = None
    date: Optional[str] = None
    risk: Optional[str] = None
    tags: Tuple[str, ...] = ()
    base_commit: Optional[str] = None
    superseded_by: Optional[str] = None


@dataclass(frozen=True)
class Link:
    """Cross-reference from a chunk to another anchor, possibly in another file."""

    target: str
    reason: str

    @property
    def file(self) -> Optional[str]:
        if self.target.startswith("@") or "@" not in self.target:
            return None
        return self.target.split("@", 1)[0]

    @property
    def anchor_text(self) -> str:
        if self.target.startswith("@") or "@" not in self.target:
            return self.target
        return "@" + self.target.split("@", 1)[1]


@dataclass(frozen=True)
class Chunk:
    """One documented region or concept tied to a single anchor."""

    anchor: "AnchorSpec"
    title: str
    description: str = ""
    decisions: Tuple[str, ...] = ()
    links: Tuple[Link, ...] = ()
    stored_hash: Optional[str] = None

    @property
    def anchor_id(self) -> str:
        return str(self.anchor)


@dataclass(frozen=True)
class SkippedChunk:
    """Chunk dropped because its header or anchor could not be parsed."""

    header: str
    line: int
    reason: str


@dataclass
class IntentDocument:
    """Parsed intent document resolved to one language."""

    frontmatter: Frontmatter
    title: str
    summary: str
    motivation: Optional[str]
    chunks: List[Chunk] = field(default_factory=list)
    skipped: List[SkippedChunk] = field(default_factory=list)
    raw: str = ""


@dataclass(frozen=True)
class AnchorResult:
    """Outcome of resolving one anchor against one source text."""

    found: bool
    start_line: Optional[int] = None
    end_line: Optional[int] = None
    content: str = ""
    hash: str = ""

    @property
    def has_range(self) -> bool:
        return self.found and self.start_line is not None and self.end_line is not None


@dataclass
class ResolvedChunk:
    """A chunk together with where (and whether) its anchor was found."""

    chunk: Chunk
    resolved_file: Optional[str] = None
    resolved: Optional[AnchorResult] = None
    hash_match: Optional[bool] = None
    overlaps: List[str] = field(default_factory=list)

    @property
    def anchor_id(self) -> str:
        return self.chunk.anchor_id

    @property
    def state(self) -> str:
        if self.resolved is None:
            return STATE_OBSOLETE
        if self.hash_match is None:
            return STATE_NEW
        return STATE_FRESH if self.hash_match else STATE_STALE


@dataclass
class ResolvedIntent:
    """An active manifest entry with its parsed document and resolved chunks."""

    entry: IntentEntry
    document: IntentDocument
    chunks: List[ResolvedChunk] = field(default_factory=list)
    is_new: bool = False
    intent_file_path: str = ""


@dataclass
class ResolutionReport:
    """Everything produced by one orchestrated resolution run."""

    manifest: Manifest
    intents: List[ResolvedIntent] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    unparsed: List[str] = field(default_factory=list)

    def all_chunks(self) -> List[ResolvedChunk]:
        return [chunk for intent in self.intents for chunk in intent.chunks]
