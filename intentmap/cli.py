"""CLI entrypoints for intentmap commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .anchors import HashPolicy, parse_anchor, resolve_anchor
from .anchors.fingerprint import ALGORITHMS, NORMALIZATIONS
from .config import IntentMapConfig, load_config
from .errors import AnchorSyntaxError, ConfigError
from .logging import configure_logging
from .orchestrator import IntentResolver, summarize
from .parsing import parse_manifest
from .serialization import anchor_result_to_dict, manifest_to_dict, report_to_dict
from .sources import MANIFEST_FILENAME, DirectorySource
from .stores import ResolutionCache


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )


def _add_json_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print machine-readable JSON instead of a table.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intentmap",
        description="Resolve intent documents against the code they describe.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write full debug logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve every active intent and report fresh, stale and obsolete chunks.",
    )
    _add_verbose_option(resolve_parser, suppress_default=True)
    _add_path_argument(resolve_parser)
    _add_json_option(resolve_parser)
    resolve_parser.add_argument(
        "--lang",
        default=None,
        help="Language code to render documents in (defaults to the manifest language).",
    )
    resolve_parser.add_argument(
        "--changed",
        action="append",
        default=[],
        metavar="FILE",
        help="Intent file changed in the current diff (repeatable); marked as new in the report.",
    )

    manifest_parser = subparsers.add_parser(
        "manifest",
        help="List manifest entries and any entries that were skipped.",
    )
    _add_verbose_option(manifest_parser, suppress_default=True)
    _add_path_argument(manifest_parser)
    _add_json_option(manifest_parser)

    anchor_parser = subparsers.add_parser(
        "anchor",
        help="Resolve a single anchor against a single source file.",
    )
    _add_verbose_option(anchor_parser, suppress_default=True)
    anchor_parser.add_argument("file", help="Source file to search.")
    anchor_parser.add_argument("anchor", help="Anchor text such as '@function:handle'.")
    anchor_parser.add_argument(
        "--normalize",
        choices=sorted(NORMALIZATIONS),
        default=None,
        help="Override the configured hash normalisation.",
    )
    anchor_parser.add_argument(
        "--algorithm",
        choices=sorted(ALGORITHMS),
        default=None,
        help="Override the configured hash algorithm.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for intentmap commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(getattr(args, "json", False)),
        log_file=args.log_file,
    )

    if args.command == "resolve":
        config = _load(parser, Path(args.path))
        _run_resolve(parser, config, args)
    elif args.command == "manifest":
        config = _load(parser, Path(args.path))
        _run_manifest(parser, config, as_json=bool(args.json))
    elif args.command == "anchor":
        config = _load(parser, Path.cwd())
        _run_anchor(parser, config, args)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _load(parser: argparse.ArgumentParser, path: Path) -> IntentMapConfig:
    try:
        return load_config(path)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")


def _read_manifest_text(parser: argparse.ArgumentParser, config: IntentMapConfig) -> str:
    source = DirectorySource(config.root, config.intent_dir)
    text = source.read_manifest()
    if text is None:
        manifest_path = _relativize(config.intent_root / MANIFEST_FILENAME)
        parser.exit(1, f"No intent manifest found at {manifest_path}\n")
    return text


def _run_resolve(
    parser: argparse.ArgumentParser, config: IntentMapConfig, args: argparse.Namespace
) -> None:
    manifest_text = _read_manifest_text(parser, config)
    cache = None
    if config.cache is not None:
        cache = ResolutionCache(config.cache.path, default_ttl=config.cache.ttl)
    resolver = IntentResolver.from_config(
        DirectorySource(config.root, config.intent_dir), config, cache=cache
    )
    report = resolver.resolve_text(
        manifest_text, lang=args.lang, changed_intent_files=args.changed
    )
    if report is None:
        parser.exit(1, "intentmap resolve failed: the manifest could not be parsed\n")

    if args.json:
        print(json.dumps(report_to_dict(report), indent=2))
        return
    rows = summarize(report)
    if not rows:
        print("No chunks to resolve")
    for intent_id, anchor, state, location in rows:
        print(f"{intent_id}\t{state}\t{anchor}\t{location}")
    for file in report.missing:
        print(f"missing\t{file}")
    for file in report.unparsed:
        print(f"unparsed\t{file}")


def _run_manifest(
    parser: argparse.ArgumentParser, config: IntentMapConfig, *, as_json: bool
) -> None:
    manifest = parse_manifest(
        _read_manifest_text(parser, config),
        strict_entries=config.manifest.strict_entries,
    )
    if manifest is None:
        parser.exit(1, "intentmap manifest failed: the manifest could not be parsed\n")

    if as_json:
        print(json.dumps(manifest_to_dict(manifest), indent=2))
        return
    for entry in manifest.intents:
        print(f"{entry.id}\t{entry.status}\t{entry.file}")
    for skip in manifest.skipped:
        print(f"skipped #{skip.index}: {skip.reason}")


def _run_anchor(
    parser: argparse.ArgumentParser, config: IntentMapConfig, args: argparse.Namespace
) -> None:
    try:
        spec = parse_anchor(args.anchor)
    except AnchorSyntaxError as exc:
        parser.exit(1, f"{exc}\n")
    policy = HashPolicy(
        normalize=args.normalize or config.hashing.normalize,
        algorithm=args.algorithm or config.hashing.algorithm,
    )
    path = Path(args.file)
    try:
        source_text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        parser.exit(1, f"Unable to read {args.file}: {exc}\n")

    result = resolve_anchor(spec, source_text, policy=policy)
    if not result.found:
        parser.exit(1, f"Anchor {spec} not found in {_relativize(path)}\n")
    print(json.dumps(anchor_result_to_dict(result), indent=2))


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
