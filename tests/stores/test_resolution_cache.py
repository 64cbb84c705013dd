"""Tests for the resolution cache store."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

from intentmap.models import AnchorResult
from intentmap.stores import ResolutionCache, resolution_key

RESULT = AnchorResult(found=True, start_line=3, end_line=7, content="def f():\n    pass", hash="abc123")


def test_resolution_cache_round_trip(tmp_path: Path) -> None:
    cache_path = tmp_path / "nested" / "cache.json"
    cache = ResolutionCache(cache_path)
    key = resolution_key("a.py", "@function:f", "trim/rolling", "def f():\n    pass\n")
    cache.put(key, RESULT)
    cache.put("miss", AnchorResult(found=False))
    cache.persist()

    loaded = ResolutionCache(cache_path)

    assert loaded.get(key) == RESULT
    assert loaded.get("miss") == AnchorResult(found=False)
    assert len(loaded) == 2


def test_resolution_key_changes_with_source_and_policy() -> None:
    base = resolution_key("a.py", "@class:A", "trim/rolling", "class A:\n    pass\n")

    assert base == resolution_key("a.py", "@class:A", "trim/rolling", "class A:\n    pass\n")
    assert base != resolution_key("a.py", "@class:A", "trim/rolling", "class A:\n    x = 1\n")
    assert base != resolution_key("a.py", "@class:A", "raw/sha256", "class A:\n    pass\n")
    assert base != resolution_key("b.py", "@class:A", "trim/rolling", "class A:\n    pass\n")


def test_entries_expire_after_ttl() -> None:
    now = datetime(2024, 1, 1, tzinfo=UTC)
    clock = {"now": now}
    cache = ResolutionCache(clock=lambda: clock["now"], default_ttl=60)
    cache.put("short", RESULT, ttl=10)
    cache.put("default", RESULT)

    clock["now"] = now + timedelta(seconds=30)

    assert cache.get("short") is None
    assert cache.get("default") == RESULT


def test_resolution_cache_prune_removes_unused(tmp_path: Path) -> None:
    cache = ResolutionCache(tmp_path / "cache.json")
    cache.put("a", RESULT)
    cache.put("b", RESULT)

    cache.prune(["a"])
    cache.persist()

    reloaded = ResolutionCache(tmp_path / "cache.json")
    assert reloaded.get("a") == RESULT
    assert reloaded.get("b") is None


def test_clear_empties_the_cache(tmp_path: Path) -> None:
    cache = ResolutionCache(tmp_path / "cache.json")
    cache.put("a", RESULT)
    cache.persist()

    cache.clear()
    cache.persist()

    assert len(ResolutionCache(tmp_path / "cache.json")) == 0


def test_unreadable_or_foreign_cache_files_are_ignored(tmp_path: Path) -> None:
    garbage = tmp_path / "garbage.json"
    garbage.write_text("{not json", encoding="utf-8")
    old = tmp_path / "old.json"
    old.write_text(json.dumps({"version": 0, "entries": {}}), encoding="utf-8")
    partial = tmp_path / "partial.json"
    partial.write_text(
        json.dumps(
            {
                "version": 1,
                "entries": {
                    "good": {"result": {"found": True, "startLine": 1, "endLine": 1, "content": "x", "hash": "78"}},
                    "bad": {"result": {"found": "yes"}},
                },
            }
        ),
        encoding="utf-8",
    )

    assert len(ResolutionCache(garbage)) == 0
    assert len(ResolutionCache(old)) == 0
    assert len(ResolutionCache(tmp_path / "absent.json")) == 0
    loaded = ResolutionCache(partial)
    assert len(loaded) == 1
    assert loaded.get("good") == AnchorResult(found=True, start_line=1, end_line=1, content="x", hash="78")


def test_entries_with_unreadable_expiry_are_dropped(tmp_path: Path) -> None:
    result = {"found": True, "startLine": 1, "endLine": 1, "content": "x", "hash": "78"}
    cache_path = tmp_path / "cache.json"
    cache_path.write_text(
        json.dumps(
            {
                "version": 1,
                "entries": {
                    "garbled": {"result": result, "expires_at": "not-a-date"},
                    "numeric": {"result": result, "expires_at": 5},
                    "naive": {"result": result, "expires_at": "2099-01-01T00:00:00"},
                    "valid": {"result": result, "expires_at": "2099-01-01T00:00:00Z"},
                },
            }
        ),
        encoding="utf-8",
    )

    cache = ResolutionCache(cache_path)

    assert len(cache) == 1
    assert cache.get("garbled") is None
    assert cache.get("numeric") is None
    assert cache.get("naive") is None
    assert cache.get("valid") == AnchorResult(found=True, start_line=1, end_line=1, content="x", hash="78")


def test_persist_without_path_is_a_no_op() -> None:
    cache = ResolutionCache()
    cache.put("a", RESULT)
    cache.persist()

    assert cache.get("a") == RESULT
