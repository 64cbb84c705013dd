"""Tests for intentmap.sources."""

from __future__ import annotations

from intentmap.sources import MappingSource, language_variant
from tests._fixtures.repo_builder import RepoBuilder


def test_language_variant_names() -> None:
    assert language_variant("notes.intent.md", "fr") == "notes.intent.fr.md"
    assert language_variant("notes.intent.md", None) is None
    assert language_variant("notes.md", "fr") is None


def test_directory_source_reads_manifest_documents_and_code(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/a.py": "def a():\n    pass\n"})
    repo_builder.write_manifest("intents: []\n")
    repo_builder.write_intent("a.intent.md", "---\nid: a\n---\n")
    repo_builder.write_intent("a.intent.fr.md", "---\nid: a-fr\n---\n")
    source = repo_builder.source()

    assert source.read_manifest() == "intents: []\n"
    assert source.read_document("a.intent.md") == "---\nid: a\n---\n"
    assert source.read_document("a.intent.md", "fr") == "---\nid: a-fr\n---\n"
    assert source.read_document("a.intent.md", "de") == "---\nid: a\n---\n"
    assert source.read_document("missing.intent.md") is None
    assert source.read_source("src/a.py") == "def a():\n    pass\n"
    assert source.read_source("src/missing.py") is None


def test_directory_source_refuses_paths_outside_root(repo_builder: RepoBuilder) -> None:
    outside = repo_builder.path().parent / "secret.py"
    outside.write_text("token = 1\n", encoding="utf-8")

    assert repo_builder.source().read_source("../secret.py") is None


def test_directory_source_without_manifest(repo_builder: RepoBuilder) -> None:
    assert repo_builder.source().read_manifest() is None


def test_mapping_source_prefers_language_variant() -> None:
    source = MappingSource(
        documents={"a.intent.md": "base", "a.intent.es.md": "es"},
        sources={"a.py": "code"},
        manifest="intents: []",
    )

    assert source.read_manifest() == "intents: []"
    assert source.read_document("a.intent.md", "es") == "es"
    assert source.read_document("a.intent.md", "fr") == "base"
    assert source.read_source("a.py") == "code"
    assert source.read_source("b.py") is None
