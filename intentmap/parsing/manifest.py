"""Manifest parsing for ``.intent/manifest.yaml``."""

from __future__ import annotations

from typing import Any, Optional

import yaml

from ..logging import get_logger
from ..models import IntentEntry, Manifest, SkippedEntry
from ._coerce import as_str

logger = get_logger("manifest")

DEFAULT_VERSION = 1
DEFAULT_LANG = "en"
MISSING_STATUS = "draft"


class _MalformedEntry(Exception):
    pass


def parse_manifest(text: str, *, strict_entries: bool = False) -> Optional[Manifest]:
    """Decode manifest text, returning ``None`` when it is empty or unusable.

    With ``strict_entries`` a single malformed intent entry rejects the whole
    manifest; otherwise the entry is skipped and recorded in ``Manifest.skipped``.
    """
    if not text or not text.strip():
        return None
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        logger.warning("Manifest is not valid YAML: %s", exc)
        return None
    if not isinstance(data, dict):
        logger.warning("Manifest root must be a mapping")
        return None

    version = _as_version(data.get("version", DEFAULT_VERSION))
    if version is None:
        logger.warning("Manifest version must be an integer, got %r", data.get("version"))
        return None
    default_lang = as_str(data.get("default_lang")) or DEFAULT_LANG

    raw_intents = data.get("intents")
    if raw_intents is None:
        raw_intents = []
    if not isinstance(raw_intents, list):
        logger.warning("Manifest 'intents' must be a list")
        return None

    manifest = Manifest(version=version, default_lang=default_lang.lower())
    for index, raw in enumerate(raw_intents):
        try:
            manifest.intents.append(_parse_entry(raw))
        except _MalformedEntry as exc:
            if strict_entries:
                logger.warning("Rejecting manifest: entry %d %s", index, exc)
                return None
            logger.warning("Skipping manifest entry %d: %s", index, exc)
            manifest.skipped.append(SkippedEntry(index=index, reason=str(exc)))
    return manifest


def _parse_entry(raw: Any) -> IntentEntry:
    if not isinstance(raw, dict):
        raise _MalformedEntry("is not a mapping")
    entry_id = as_str(raw.get("id"))
    file_name = as_str(raw.get("file"))
    if not entry_id:
        raise _MalformedEntry("has no id")
    if not file_name:
        raise _MalformedEntry(f"'{entry_id}' has no file")
    status = as_str(raw.get("status")) or MISSING_STATUS
    return IntentEntry(
        id=entry_id,
        file=file_name,
        status=status.lower(),
        superseded_by=as_str(raw.get("superseded_by")),
    )


def _as_version(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


__all__ = ["parse_manifest"]
