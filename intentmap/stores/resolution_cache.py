"""Caller-side cache for anchor resolutions."""

from __future__ import annotations

import hashlib
import json
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

from ..logging import get_logger
from ..models import AnchorResult
from ..serialization import anchor_result_from_dict, anchor_result_to_dict

_CACHE_VERSION = 1

logger = get_logger("cache")


def resolution_key(path: str, anchor_id: str, policy_signature: str, source_text: str) -> str:
    """Build a key that changes whenever the source text or hash policy changes."""
    digest = hashlib.sha256(source_text.encode("utf-8")).hexdigest()
    return f"{path}|{anchor_id}|{policy_signature}|{digest}"


class ResolutionCache:
    """Stores anchor results keyed by file, anchor, hash policy and source digest."""

    def __init__(
        self,
        path: Path | None = None,
        *,
        default_ttl: float | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._path = path
        self._default_ttl = default_ttl
        self._clock = clock or (lambda: datetime.now(UTC))
        self._entries: Dict[str, Dict[str, object]] = {}
        self._dirty = False
        if self._path is not None:
            self._load(self._path)

    def get(self, key: str) -> Optional[AnchorResult]:
        entry = self._entries.get(key)
        if not entry:
            return None
        expires_at = entry.get("expires_at")
        if isinstance(expires_at, str) and _parse_time(expires_at) <= self._clock():
            self._entries.pop(key, None)
            self._dirty = True
            return None
        return anchor_result_from_dict(entry.get("result"))

    def put(self, key: str, value: AnchorResult, ttl: float | None = None) -> None:
        ttl = self._default_ttl if ttl is None else ttl
        now = self._clock()
        entry: Dict[str, object] = {
            "result": anchor_result_to_dict(value),
            "updated_at": _format_time(now),
        }
        if ttl is not None:
            entry["expires_at"] = _format_time(now + timedelta(seconds=ttl))
        self._entries[key] = entry
        self._dirty = True

    def prune(self, keys_to_keep: Iterable[str]) -> None:
        keep = set(keys_to_keep)
        removed = [key for key in self._entries if key not in keep]
        if removed:
            for key in removed:
                self._entries.pop(key, None)
            self._dirty = True

    def persist(self) -> None:
        if not self._dirty or self._path is None:
            return
        payload = {
            "version": _CACHE_VERSION,
            "entries": self._entries,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
        )
        self._dirty = False

    def clear(self) -> None:
        self._entries.clear()
        self._dirty = True

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError) as exc:
            logger.debug("Ignoring unreadable cache %s: %s", path, exc)
            return
        if not isinstance(data, dict) or data.get("version") != _CACHE_VERSION:
            return
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return
        valid_entries: Dict[str, Dict[str, object]] = {}
        for key, raw in entries.items():
            if not isinstance(key, str) or not isinstance(raw, dict):
                continue
            if anchor_result_from_dict(raw.get("result")) is None:
                continue
            if "expires_at" in raw and not _is_timestamp(raw["expires_at"]):
                continue
            valid_entries[key] = raw
        self._entries = valid_entries
        self._dirty = False


def _format_time(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


def _parse_time(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _is_timestamp(value: object) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parsed = _parse_time(value)
    except ValueError:
        return False
    # naive times cannot be compared with the aware clock
    return parsed.tzinfo is not None


__all__ = ["ResolutionCache", "resolution_key"]
