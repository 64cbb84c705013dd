"""Parser for ``*.intent.md`` documents.

A document is YAML frontmatter followed by a markdown body::

    ---
    id: notes-store
    files:
      - src/notes.py
    ---

    # Notes storage
    # fr: Stockage des notes

    ## Summary
    en: Persist notes to disk.
    fr: Enregistrer les notes sur disque.

    ### @class:NoteStore | Note store
    <!-- hash: 1a2b3c4d -->
    Owns the on-disk format.
    > Decision: JSON lines, append only
    @link config.py@pattern:NOTES_PATH | Storage location

Body text is resolved to a single language while parsing; see
:func:`intentmap.parsing.language.select_lines` for the fallback rule.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

import yaml

from ..anchors.spec import parse_anchor
from ..errors import AnchorSyntaxError
from ..logging import get_logger
from ..models import Chunk, Frontmatter, IntentDocument, Link, SkippedChunk
from ._coerce import as_str, as_str_list, unique
from .language import DEFAULT_LANGUAGES, LanguageTagger, TaggedLine, join_block, select_lines

logger = get_logger("document")

_FRONTMATTER = re.compile(
    r"\A\ufeff?---[ \t]*\n(?P<yaml>.*?)^---[ \t]*$\n?", re.DOTALL | re.MULTILINE
)
_TITLE = re.compile(r"^#\s+(?P<text>[^#].*?)\s*$")
_SECTION = re.compile(r"^##\s+(?P<name>.+?)\s*$")
_HEADING = re.compile(r"^#{1,6}\s")
_RULE = re.compile(r"^---\s*$")
_CHUNK_START = re.compile(r"^###\s+@")
_CHUNK_END = re.compile(r"^#{1,2}\s")
_CHUNK_HEADER = re.compile(r"^###\s+(?P<anchor>@[^|]+?)\s*\|\s*(?P<title>.*?)\s*$")
_CHUNK_SUBTITLE = re.compile(r"^###\s+(?P<text>.+?)\s*$")
_HASH_COMMENT = re.compile(r"<!--\s*hash:\s*(?P<hash>[0-9A-Za-z]+)\s*-->")
_HTML_COMMENT = re.compile(r"^\s*<!--.*-->\s*$")
_QUOTE = re.compile(r"^>\s?(?P<text>.*)$")
_DECISION = re.compile(r"^decision:\s*(?P<text>.+)$", re.IGNORECASE)
_LINK = re.compile(r"^@link\s+(?P<target>[^\s|]+)\s*(?:\|\s*(?P<reason>.*?))?\s*$")


@dataclass
class _ParseContext:
    lang: str
    default_lang: str
    tagger: LanguageTagger
    skipped: List[SkippedChunk] = field(default_factory=list)


def parse_document(
    text: str,
    lang: Optional[str] = None,
    *,
    default_lang: str = "en",
    languages: Iterable[str] | None = None,
) -> Optional[IntentDocument]:
    """Parse one intent document resolved to ``lang``.

    Returns ``None`` when the frontmatter block is missing or is not a YAML
    mapping. Chunks with an unusable header are dropped and listed in
    ``IntentDocument.skipped``.
    """
    if not text:
        return None
    normalised = text.replace("\r\n", "\n")
    match = _FRONTMATTER.match(normalised)
    if not match:
        logger.debug("Document has no frontmatter block")
        return None
    frontmatter = _parse_frontmatter(match.group("yaml"))
    if frontmatter is None:
        return None

    default_lang = (default_lang or "en").lower()
    requested = (lang or default_lang).lower()
    tagger = LanguageTagger(languages or DEFAULT_LANGUAGES).with_languages(requested, default_lang)
    context = _ParseContext(lang=requested, default_lang=default_lang, tagger=tagger)

    body = normalised[match.end() :].split("\n")
    offset = normalised[: match.end()].count("\n")

    motivation = _section(body, "motivation", context)
    document = IntentDocument(
        frontmatter=frontmatter,
        title=_title(body, context),
        summary=_section(body, "summary", context),
        motivation=motivation or None,
        chunks=list(_chunks(body, offset, context)),
        skipped=context.skipped,
        raw=text,
    )
    return document


def _parse_frontmatter(block: str) -> Optional[Frontmatter]:
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        logger.warning("Frontmatter is not valid YAML: %s", exc)
        return None
    if not isinstance(data, dict):
        logger.warning("Frontmatter must be a mapping")
        return None
    return Frontmatter(
        id=as_str(data.get("id")) or "",
        files=tuple(unique(as_str_list(data.get("files")))),
        status=(as_str(data.get("status")) or "active").lower(),
        author=as_str(data.get("author")),
        date=as_str(data.get("date")),
        risk=as_str(data.get("risk")),
        tags=tuple(as_str_list(data.get("tags"))),
        base_commit=as_str(data.get("from")),
        superseded_by=as_str(data.get("superseded_by")),
    )


def _title(lines: Sequence[str], context: _ParseContext) -> str:
    for index, line in enumerate(lines):
        match = _TITLE.match(line)
        if not match:
            continue
        overrides = _overrides(lines[index + 1 :], _TITLE, context)
        return overrides.get(context.lang, match.group("text"))
    return ""


def _overrides(
    lines: Sequence[str], pattern: re.Pattern[str], context: _ParseContext
) -> Dict[str, str]:
    """Collect ``# <lang>: text`` style lines directly following a heading."""
    overrides: Dict[str, str] = {}
    for line in lines:
        match = pattern.match(line)
        if not match:
            break
        tagged = context.tagger.split(match.group("text"))
        if tagged is None:
            break
        overrides.setdefault(tagged.lang or "", tagged.text.strip())
    return overrides


def _section(lines: Sequence[str], name: str, context: _ParseContext) -> str:
    start = None
    for index, line in enumerate(lines):
        match = _SECTION.match(line)
        if match and match.group("name").lower() == name:
            start = index + 1
            break
    if start is None:
        return ""
    tagged: List[TaggedLine] = []
    for line in lines[start:]:
        if _HEADING.match(line) or _RULE.match(line):
            break
        tagged.append(context.tagger.tag(line.rstrip()))
    return join_block(select_lines(tagged, context.lang, context.default_lang))


def _chunks(lines: Sequence[str], offset: int, context: _ParseContext) -> Iterable[Chunk]:
    index = 0
    while index < len(lines):
        if not _CHUNK_START.match(lines[index]):
            index += 1
            continue
        end = index + 1
        while end < len(lines):
            line = lines[end]
            if _CHUNK_START.match(line) or _CHUNK_END.match(line) or _RULE.match(line):
                break
            end += 1
        chunk = _parse_chunk(lines[index:end], offset + index + 1, context)
        if chunk is not None:
            yield chunk
        index = end


def _parse_chunk(
    lines: Sequence[str], line_number: int, context: _ParseContext
) -> Optional[Chunk]:
    header = lines[0].rstrip()
    match = _CHUNK_HEADER.match(header)
    if not match or not match.group("title"):
        _skip(context, header, line_number, "expected '### @kind:value | Title'")
        return None
    try:
        anchor = parse_anchor(match.group("anchor"))
    except AnchorSyntaxError as exc:
        _skip(context, header, line_number, exc.reason)
        return None

    titles = _overrides(lines[1:], _CHUNK_SUBTITLE, context)
    stored_hash: Optional[str] = None
    description: List[TaggedLine] = []
    decisions: List[TaggedLine] = []
    links: List[Link] = []

    for line in lines[1:]:
        line = line.rstrip()
        if _CHUNK_SUBTITLE.match(line):
            continue
        hash_match = _HASH_COMMENT.search(line)
        if hash_match:
            stored_hash = hash_match.group("hash")
            continue
        if _HTML_COMMENT.match(line):
            continue
        quote = _QUOTE.match(line)
        if quote:
            decision = _decision(quote.group("text").strip(), context)
            if decision is not None:
                decisions.append(decision)
            continue
        link = _LINK.match(line)
        if link:
            links.append(Link(target=link.group("target"), reason=link.group("reason") or ""))
            continue
        description.append(context.tagger.tag(line))

    return Chunk(
        anchor=anchor,
        title=titles.get(context.lang, match.group("title")),
        description=join_block(select_lines(description, context.lang, context.default_lang)),
        decisions=tuple(
            text for text in select_lines(decisions, context.lang, context.default_lang) if text
        ),
        links=tuple(links),
        stored_hash=stored_hash,
    )


def _decision(text: str, context: _ParseContext) -> Optional[TaggedLine]:
    if not text:
        return None
    match = _DECISION.match(text)
    if match:
        return TaggedLine(text=match.group("text").strip(), lang=context.default_lang)
    tagged = context.tagger.split(text)
    if tagged is not None:
        return TaggedLine(text=tagged.text.strip(), lang=tagged.lang)
    return TaggedLine(text=text)


def _skip(context: _ParseContext, header: str, line_number: int, reason: str) -> None:
    logger.warning("Skipping chunk at line %d (%s): %s", line_number, header, reason)
    context.skipped.append(SkippedChunk(header=header, line=line_number, reason=reason))


__all__ = ["parse_document"]
