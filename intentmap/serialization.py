"""Plain-dict encodings of intentmap records, ready for ``json.dumps``.

Field names follow the published record layout (``startLine``,
``resolvedFile``, ``hashMatch`` ...) rather than Python attribute names.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .models import (
    AnchorResult,
    Chunk,
    Frontmatter,
    IntentDocument,
    Link,
    Manifest,
    ResolutionReport,
    ResolvedChunk,
    ResolvedIntent,
)


def manifest_to_dict(manifest: Manifest) -> Dict[str, Any]:
    return {
        "version": manifest.version,
        "default_lang": manifest.default_lang,
        "intents": [
            {
                "id": entry.id,
                "file": entry.file,
                "status": entry.status,
                "superseded_by": entry.superseded_by,
            }
            for entry in manifest.intents
        ],
        "skipped": [{"index": skip.index, "reason": skip.reason} for skip in manifest.skipped],
    }


def frontmatter_to_dict(frontmatter: Frontmatter) -> Dict[str, Any]:
    return {
        "id": frontmatter.id,
        "files": list(frontmatter.files),
        "author": frontmatter.author,
        "date": frontmatter.date,
        "status": frontmatter.status,
        "risk": frontmatter.risk,
        "tags": list(frontmatter.tags),
        "from": frontmatter.base_commit,
        "superseded_by": frontmatter.superseded_by,
    }


def link_to_dict(link: Link) -> Dict[str, str]:
    return {"target": link.target, "reason": link.reason}


def chunk_to_dict(chunk: Chunk) -> Dict[str, Any]:
    return {
        "anchor": chunk.anchor_id,
        "title": chunk.title,
        "description": chunk.description,
        "decisions": list(chunk.decisions),
        "links": [link_to_dict(link) for link in chunk.links],
        "storedHash": chunk.stored_hash,
    }


def document_to_dict(document: IntentDocument) -> Dict[str, Any]:
    return {
        "frontmatter": frontmatter_to_dict(document.frontmatter),
        "title": document.title,
        "summary": document.summary,
        "motivation": document.motivation,
        "chunks": [chunk_to_dict(chunk) for chunk in document.chunks],
        "skipped": [
            {"header": skip.header, "line": skip.line, "reason": skip.reason}
            for skip in document.skipped
        ],
    }


def anchor_result_to_dict(result: AnchorResult) -> Dict[str, Any]:
    return {
        "found": result.found,
        "startLine": result.start_line,
        "endLine": result.end_line,
        "content": result.content,
        "hash": result.hash,
    }


def anchor_result_from_dict(payload: object) -> Optional[AnchorResult]:
    if not isinstance(payload, dict):
        return None
    found = payload.get("found")
    content = payload.get("content", "")
    digest = payload.get("hash", "")
    start = payload.get("startLine")
    end = payload.get("endLine")
    if not isinstance(found, bool) or not isinstance(content, str) or not isinstance(digest, str):
        return None
    if not _optional_int(start) or not _optional_int(end):
        return None
    return AnchorResult(found=found, start_line=start, end_line=end, content=content, hash=digest)


def resolved_chunk_to_dict(chunk: ResolvedChunk) -> Dict[str, Any]:
    data = chunk_to_dict(chunk.chunk)
    data.update(
        {
            "resolvedFile": chunk.resolved_file,
            "resolved": anchor_result_to_dict(chunk.resolved) if chunk.resolved else None,
            "hashMatch": chunk.hash_match,
            "overlaps": list(chunk.overlaps),
            "state": chunk.state,
        }
    )
    return data


def resolved_intent_to_dict(intent: ResolvedIntent) -> Dict[str, Any]:
    data = document_to_dict(intent.document)
    data.update(
        {
            "entry": {"id": intent.entry.id, "file": intent.entry.file, "status": intent.entry.status},
            "isNew": intent.is_new,
            "intentFilePath": intent.intent_file_path,
            "resolvedChunks": [resolved_chunk_to_dict(chunk) for chunk in intent.chunks],
        }
    )
    return data


def report_to_dict(report: ResolutionReport) -> Dict[str, Any]:
    return {
        "manifest": manifest_to_dict(report.manifest),
        "intents": [resolved_intent_to_dict(intent) for intent in report.intents],
        "missing": list(report.missing),
        "unparsed": list(report.unparsed),
    }


def _optional_int(value: object) -> bool:
    return value is None or (isinstance(value, int) and not isinstance(value, bool))


__all__ = [
    "anchor_result_from_dict",
    "anchor_result_to_dict",
    "chunk_to_dict",
    "document_to_dict",
    "manifest_to_dict",
    "report_to_dict",
    "resolved_chunk_to_dict",
    "resolved_intent_to_dict",
]
