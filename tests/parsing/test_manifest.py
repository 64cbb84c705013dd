"""Tests for intentmap.parsing.manifest."""

from __future__ import annotations

import textwrap

import pytest

from intentmap.models import IntentEntry, SkippedEntry
from intentmap.parsing import parse_manifest

MANIFEST = textwrap.dedent(
    """\
    version: 1
    default_lang: FR
    intents:
      - id: notes
        file: notes.intent.md
        status: Active
      - id: legacy
        file: legacy.intent.md
        status: superseded
        superseded_by: notes
      - file: orphan.intent.md
      - id: draft-one
        file: draft.intent.md
      - just a string
    """
)


def test_manifest_keeps_valid_entries_and_records_skips() -> None:
    manifest = parse_manifest(MANIFEST)

    assert manifest is not None
    assert manifest.version == 1
    assert manifest.default_lang == "fr"
    assert manifest.intents == [
        IntentEntry(id="notes", file="notes.intent.md", status="active"),
        IntentEntry(
            id="legacy", file="legacy.intent.md", status="superseded", superseded_by="notes"
        ),
        IntentEntry(id="draft-one", file="draft.intent.md", status="draft"),
    ]
    assert manifest.skipped == [
        SkippedEntry(index=2, reason="has no id"),
        SkippedEntry(index=4, reason="is not a mapping"),
    ]
    assert [entry.id for entry in manifest.active_intents()] == ["notes"]


def test_strict_entries_reject_the_whole_manifest() -> None:
    assert parse_manifest(MANIFEST, strict_entries=True) is None


def test_strict_entries_accept_clean_manifest() -> None:
    text = "intents:\n  - id: a\n    file: a.intent.md\n    status: active\n"

    manifest = parse_manifest(text, strict_entries=True)

    assert manifest is not None
    assert manifest.version == 1
    assert manifest.default_lang == "en"
    assert [entry.id for entry in manifest.intents] == ["a"]


def test_missing_intents_key_gives_empty_manifest() -> None:
    manifest = parse_manifest("version: 2\n")

    assert manifest is not None
    assert manifest.version == 2
    assert manifest.intents == []


def test_numeric_ids_are_read_as_text() -> None:
    manifest = parse_manifest("intents:\n  - id: 42\n    file: answer.intent.md\n")

    assert manifest is not None
    assert manifest.intents[0].id == "42"


def test_unusable_manifests_return_none() -> None:
    assert parse_manifest("") is None
    assert parse_manifest("   \n") is None
    assert parse_manifest("intents: [unclosed") is None
    assert parse_manifest("- just\n- a list\n") is None
    assert parse_manifest("version: one\n") is None
    assert parse_manifest("intents: notes.intent.md\n") is None


def test_skipped_entries_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level("WARNING", logger="intentmap")

    parse_manifest(MANIFEST)

    messages = [record.getMessage() for record in caplog.records]
    assert "Skipping manifest entry 2: has no id" in messages
