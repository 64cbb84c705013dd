"""Parsers for the intent manifest and intent documents."""

from .document import parse_document
from .language import DEFAULT_LANGUAGES, LanguageTagger, TaggedLine, select_lines
from .manifest import parse_manifest

__all__ = [
    "DEFAULT_LANGUAGES",
    "LanguageTagger",
    "TaggedLine",
    "parse_document",
    "parse_manifest",
    "select_lines",
]
