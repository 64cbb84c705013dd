"""Resolution pipeline: manifest entries to documents to resolved chunks."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .anchors import DEFAULT_POLICY, HashPolicy, is_virtual, resolve_anchor
from .config import IntentMapConfig
from .logging import get_logger
from .models import (
    AnchorResult,
    Chunk,
    IntentEntry,
    Manifest,
    ResolutionReport,
    ResolvedChunk,
    ResolvedIntent,
)
from .overlaps import OverlapCandidate, detect_file_overlaps
from .parsing import DEFAULT_LANGUAGES, parse_document, parse_manifest
from .sources import INTENTS_DIRNAME, TextSource
from .stores import ResolutionCache, resolution_key


class IntentResolver:
    """Resolves every active intent of a manifest against a text source."""

    def __init__(
        self,
        source: TextSource,
        *,
        policy: HashPolicy | None = None,
        languages: Sequence[str] | None = None,
        default_lang: str | None = None,
        strict_entries: bool = False,
        intent_dir: str = ".intent",
        cache: ResolutionCache | None = None,
    ) -> None:
        self.source = source
        self.policy = policy or DEFAULT_POLICY
        self.languages = list(languages or DEFAULT_LANGUAGES)
        self.default_lang = default_lang
        self.strict_entries = strict_entries
        self.intent_dir = intent_dir.rstrip("/")
        self.cache = cache
        self.logger = get_logger("orchestrator")

    @classmethod
    def from_config(
        cls,
        source: TextSource,
        config: IntentMapConfig,
        cache: ResolutionCache | None = None,
    ) -> "IntentResolver":
        """Build a resolver honouring the settings of ``.intentmap.yml``."""
        return cls(
            source,
            policy=config.hashing.policy,
            languages=config.languages,
            default_lang=config.default_lang,
            strict_entries=config.manifest.strict_entries,
            intent_dir=config.intent_dir.as_posix(),
            cache=cache,
        )

    def resolve_text(
        self,
        manifest_text: str,
        lang: str | None = None,
        changed_intent_files: Iterable[str] = (),
    ) -> Optional[ResolutionReport]:
        """Parse ``manifest_text`` and resolve it; ``None`` if it does not parse."""
        manifest = parse_manifest(manifest_text, strict_entries=self.strict_entries)
        if manifest is None:
            self.logger.warning("Manifest could not be parsed; nothing to resolve")
            return None
        return self.resolve(manifest, lang=lang, changed_intent_files=changed_intent_files)

    def resolve(
        self,
        manifest: Manifest,
        lang: str | None = None,
        changed_intent_files: Iterable[str] = (),
    ) -> ResolutionReport:
        default_lang = self.default_lang or manifest.default_lang
        changed = {_basename(path) for path in changed_intent_files}
        sources: Dict[str, Optional[str]] = {}
        report = ResolutionReport(manifest=manifest)

        for entry in manifest.active_intents():
            resolved = self._resolve_entry(entry, lang, default_lang, changed, sources, report)
            if resolved is not None:
                report.intents.append(resolved)

        self._attach_overlaps(report)
        if self.cache is not None:
            self.cache.persist()

        chunks = report.all_chunks()
        self.logger.info(
            "Resolved %d intent(s), %d chunk(s): %d located, %d obsolete",
            len(report.intents),
            len(chunks),
            sum(1 for chunk in chunks if chunk.resolved is not None),
            sum(1 for chunk in chunks if chunk.resolved is None),
        )
        if report.missing or report.unparsed:
            self.logger.info(
                "Skipped %d missing and %d unparseable intent document(s)",
                len(report.missing),
                len(report.unparsed),
            )
        return report

    # ------------------------------------------------------------------
    # Internal helpers

    def _resolve_entry(
        self,
        entry: IntentEntry,
        lang: str | None,
        default_lang: str,
        changed: set[str],
        sources: Dict[str, Optional[str]],
        report: ResolutionReport,
    ) -> Optional[ResolvedIntent]:
        text = self.source.read_document(entry.file, lang)
        if text is None:
            self.logger.debug("Intent document %s not found", entry.file)
            report.missing.append(entry.file)
            return None

        document = parse_document(
            text, lang, default_lang=default_lang, languages=self.languages
        )
        if document is None:
            self.logger.warning("Intent document %s could not be parsed", entry.file)
            report.unparsed.append(entry.file)
            return None

        files = document.frontmatter.files
        chunks = [self._resolve_chunk(chunk, files, sources) for chunk in document.chunks]
        return ResolvedIntent(
            entry=entry,
            document=document,
            chunks=chunks,
            is_new=_basename(entry.file) in changed,
            intent_file_path=f"{self.intent_dir}/{INTENTS_DIRNAME}/{entry.file}",
        )

    def _resolve_chunk(
        self,
        chunk: Chunk,
        files: Sequence[str],
        sources: Dict[str, Optional[str]],
    ) -> ResolvedChunk:
        if is_virtual(chunk.anchor):
            result = resolve_anchor(chunk.anchor, "", policy=self.policy)
            return ResolvedChunk(
                chunk=chunk, resolved=result, hash_match=_hash_match(chunk, result)
            )

        for path in files:
            source_text = self._source_text(path, sources)
            if source_text is None:
                continue
            result = self._lookup(chunk, path, source_text)
            if result.found:
                return ResolvedChunk(
                    chunk=chunk,
                    resolved_file=path,
                    resolved=result,
                    hash_match=_hash_match(chunk, result),
                )

        self.logger.debug("Anchor %s not found in %s", chunk.anchor_id, ", ".join(files) or "no files")
        return ResolvedChunk(chunk=chunk)

    def _lookup(self, chunk: Chunk, path: str, source_text: str) -> AnchorResult:
        if self.cache is None:
            return resolve_anchor(chunk.anchor, source_text, policy=self.policy)
        key = resolution_key(path, chunk.anchor_id, self.policy.signature, source_text)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        result = resolve_anchor(chunk.anchor, source_text, policy=self.policy)
        self.cache.put(key, result)
        return result

    def _source_text(self, path: str, sources: Dict[str, Optional[str]]) -> Optional[str]:
        if path not in sources:
            sources[path] = self.source.read_source(path)
            if sources[path] is None:
                self.logger.debug("Source file %s is unreadable; skipping", path)
        return sources[path]

    def _attach_overlaps(self, report: ResolutionReport) -> None:
        chunks = report.all_chunks()
        candidates = [
            OverlapCandidate(
                anchor_id=chunk.anchor_id,
                file=chunk.resolved_file,
                start_line=chunk.resolved.start_line if chunk.resolved else None,
                end_line=chunk.resolved.end_line if chunk.resolved else None,
            )
            for chunk in chunks
        ]
        overlaps = detect_file_overlaps(candidates)
        for chunk in chunks:
            if chunk.resolved_file is None:
                continue
            for other in overlaps.get((chunk.resolved_file, chunk.anchor_id), []):
                if other not in chunk.overlaps:
                    chunk.overlaps.append(other)


def _hash_match(chunk: Chunk, result: AnchorResult) -> Optional[bool]:
    if chunk.stored_hash is None or not result.found:
        return None
    return chunk.stored_hash == result.hash


def _basename(path: str) -> str:
    return path.replace("\\", "/").rsplit("/", 1)[-1]


def summarize(report: ResolutionReport) -> List[Tuple[str, str, str, str]]:
    """Flatten a report into ``(intent id, anchor, state, location)`` rows."""
    rows: List[Tuple[str, str, str, str]] = []
    for intent in report.intents:
        for chunk in intent.chunks:
            location = "-"
            if chunk.resolved_file and chunk.resolved and chunk.resolved.has_range:
                location = (
                    f"{chunk.resolved_file}:{chunk.resolved.start_line}-{chunk.resolved.end_line}"
                )
            elif chunk.resolved is not None:
                location = "(virtual)"
            rows.append((intent.entry.id, chunk.anchor_id, chunk.state, location))
    return rows


__all__ = ["IntentResolver", "summarize"]
