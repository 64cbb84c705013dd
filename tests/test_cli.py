"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from intentmap.anchors import fingerprint
from intentmap.cli import _build_parser, main
from tests._fixtures.repo_builder import RepoBuilder

SOURCE = "def handle(x):\n    return x\n"


def _build_repo(repo_builder: RepoBuilder, stored_hash: str) -> Path:
    repo_builder.write({"a.py": SOURCE})
    repo_builder.write_manifest(
        """
        intents:
          - id: f1
            file: f1.intent.md
            status: active
          - file: broken.intent.md
        """
    )
    repo_builder.write_intent(
        "f1.intent.md",
        f"---\nid: f1\nfiles: [a.py]\n---\n### @function:handle | Handler\n<!-- hash: {stored_hash} -->\n",
    )
    return repo_builder.path()


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "resolve"])
    assert args.verbose is True
    assert args.command == "resolve"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["manifest", "--verbose"])
    assert args.verbose is True
    assert args.command == "manifest"


def test_cli_resolve_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["resolve", "repo", "--lang", "fr", "--changed", "a.intent.md", "--changed", "b.intent.md"]
    )
    assert args.path == "repo"
    assert args.lang == "fr"
    assert args.changed == ["a.intent.md", "b.intent.md"]
    assert args.json is False


def test_resolve_prints_chunk_states(
    repo_builder: RepoBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _build_repo(repo_builder, fingerprint(SOURCE.rstrip("\n")))

    main(["resolve", str(root)])

    out = capsys.readouterr().out
    assert "f1\tfresh\t@function:handle\ta.py:1-2" in out


def test_resolve_json_output(repo_builder: RepoBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    root = _build_repo(repo_builder, "deadbeef")

    main(["resolve", str(root), "--json"])

    payload = json.loads(capsys.readouterr().out)
    (intent,) = payload["intents"]
    (chunk,) = intent["resolvedChunks"]
    assert chunk["anchor"] == "@function:handle"
    assert chunk["resolvedFile"] == "a.py"
    assert chunk["hashMatch"] is False
    assert chunk["state"] == "stale"
    assert chunk["resolved"]["startLine"] == 1


def test_manifest_lists_entries_and_skips(
    repo_builder: RepoBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _build_repo(repo_builder, "deadbeef")

    main(["manifest", str(root)])

    out = capsys.readouterr().out
    assert "f1\tactive\tf1.intent.md" in out
    assert "skipped #1: has no id" in out


def test_missing_manifest_exits_with_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["resolve", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "No intent manifest found" in capsys.readouterr().err


def test_bad_config_exits_with_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / ".intentmap.yml").write_text("- nope\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["manifest", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "mapping at the root" in capsys.readouterr().err


def test_anchor_command_prints_range_and_hash(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "a.py").write_text(SOURCE, encoding="utf-8")

    main(["anchor", "a.py", "@function:handle", "--algorithm", "sha256"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["found"] is True
    assert (payload["startLine"], payload["endLine"]) == (1, 2)
    assert len(payload["hash"]) == 16


def test_anchor_command_rejects_bad_anchor(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "a.py").write_text(SOURCE, encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["anchor", "a.py", "@function:two words"])

    assert excinfo.value.code == 1
    assert "Invalid anchor" in capsys.readouterr().err


def test_anchor_command_reports_miss(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "a.py").write_text(SOURCE, encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["anchor", "a.py", "@class:Missing"])

    assert excinfo.value.code == 1
    assert "not found" in capsys.readouterr().err
