"""Text sources that feed manifests, intent documents and code into the resolver."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Mapping, Optional, Protocol

from .logging import get_logger

logger = get_logger("sources")

MANIFEST_FILENAME = "manifest.yaml"
INTENTS_DIRNAME = "intents"
_INTENT_SUFFIX = ".intent.md"


class TextSource(Protocol):
    """Supplies raw text; ``None`` means the item does not exist."""

    def read_manifest(self) -> Optional[str]:
        ...

    def read_document(self, file: str, lang: Optional[str] = None) -> Optional[str]:
        ...

    def read_source(self, path: str) -> Optional[str]:
        ...


def language_variant(file: str, lang: Optional[str]) -> Optional[str]:
    """Return ``name.intent.<lang>.md`` for ``name.intent.md``, if applicable."""
    if not lang or not file.endswith(_INTENT_SUFFIX):
        return None
    return f"{file[: -len(_INTENT_SUFFIX)]}.intent.{lang}.md"


class DirectorySource:
    """Reads a checked-out repository laid out as ``<intent_dir>/manifest.yaml``
    and ``<intent_dir>/intents/*.intent.md``."""

    def __init__(self, root: Path, intent_dir: Path | str = ".intent") -> None:
        self.root = Path(root).resolve()
        self.intent_root = self.root / intent_dir

    def read_manifest(self) -> Optional[str]:
        return self._read(self.intent_root / MANIFEST_FILENAME)

    def read_document(self, file: str, lang: Optional[str] = None) -> Optional[str]:
        intents_dir = self.intent_root / INTENTS_DIRNAME
        variant = language_variant(file, lang)
        if variant:
            text = self._read(intents_dir / variant)
            if text is not None:
                return text
        return self._read(intents_dir / file)

    def read_source(self, path: str) -> Optional[str]:
        target = (self.root / PurePosixPath(path)).resolve()
        if self.root not in target.parents:
            logger.warning("Ignoring source path outside the repository: %s", path)
            return None
        return self._read(target)

    @staticmethod
    def _read(path: Path) -> Optional[str]:
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Unable to read %s: %s", path, exc)
            return None


class MappingSource:
    """In-memory source keyed by document file name and source path."""

    def __init__(
        self,
        documents: Mapping[str, str],
        sources: Mapping[str, str],
        manifest: Optional[str] = None,
    ) -> None:
        self._documents = dict(documents)
        self._sources = dict(sources)
        self._manifest = manifest

    def read_manifest(self) -> Optional[str]:
        return self._manifest

    def read_document(self, file: str, lang: Optional[str] = None) -> Optional[str]:
        variant = language_variant(file, lang)
        if variant and variant in self._documents:
            return self._documents[variant]
        return self._documents.get(file)

    def read_source(self, path: str) -> Optional[str]:
        return self._sources.get(path)


__all__ = [
    "DirectorySource",
    "MANIFEST_FILENAME",
    "MappingSource",
    "TextSource",
    "language_variant",
]
