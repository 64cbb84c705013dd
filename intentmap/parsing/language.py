"""Language-tag selection for multilingual intent content."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

DEFAULT_LANGUAGES = ("en", "fr", "es", "de")


@dataclass(frozen=True)
class TaggedLine:
    """A content line and the language it is written in (``None`` when neutral)."""

    text: str
    lang: Optional[str] = None


class LanguageTagger:
    """Splits ``<lang>: text`` prefixes off lines for a known set of languages."""

    def __init__(self, languages: Iterable[str] = DEFAULT_LANGUAGES) -> None:
        codes = sorted({code.strip().lower() for code in languages if code and code.strip()})
        if not codes:
            codes = list(DEFAULT_LANGUAGES)
        self.languages = tuple(codes)
        alternatives = "|".join(re.escape(code) for code in codes)
        self._prefix = re.compile(rf"^(?P<lang>{alternatives}):\s*(?P<text>.*)$")

    def with_languages(self, *extra: Optional[str]) -> "LanguageTagger":
        wanted = [code for code in extra if code and code.lower() not in self.languages]
        if not wanted:
            return self
        return LanguageTagger(self.languages + tuple(wanted))

    def split(self, line: str) -> Optional[TaggedLine]:
        """Return the tagged form of ``line`` or ``None`` when it carries no tag."""
        match = self._prefix.match(line)
        if not match:
            return None
        return TaggedLine(text=match.group("text"), lang=match.group("lang"))

    def tag(self, line: str) -> TaggedLine:
        return self.split(line) or TaggedLine(text=line)


def select_lines(lines: Sequence[TaggedLine], lang: str, default_lang: str) -> List[str]:
    """Keep neutral lines plus lines in ``lang``, falling back to ``default_lang``.

    Order is preserved. The fallback only applies when no line of the unit is
    tagged with the requested language.
    """
    wanted = lang if any(line.lang == lang for line in lines) else default_lang
    return [line.text for line in lines if line.lang is None or line.lang == wanted]


def join_block(texts: Sequence[str]) -> str:
    """Join selected lines, collapsing blank runs and trimming both ends."""
    kept: List[str] = []
    for text in texts:
        if not text.strip() and (not kept or not kept[-1].strip()):
            continue
        kept.append(text)
    return "\n".join(kept).strip()


__all__ = ["DEFAULT_LANGUAGES", "LanguageTagger", "TaggedLine", "join_block", "select_lines"]
