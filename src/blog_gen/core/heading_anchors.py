"""Deterministic heading anchors and table-of-contents nesting."""

from __future__ import annotations

import re
import unicodedata
from dataclasses import replace

from blog_gen.core.content_schema import TocEntry

FALLBACK_ANCHOR = "section"

_INLINE_MARKUP = re.compile(r"[*_`~]+")
_LINK = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
_PUNCTUATION = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")


def heading_plain_text(text: str) -> str:
    """Drop inline markdown markers so the heading reads as plain text."""
    plain = _LINK.sub(r"\1", text)
    plain = _INLINE_MARKUP.sub("", plain)
    return _WHITESPACE.sub(" ", plain).strip()


def slugify(text: str) -> str:
    """Lowercase, strip punctuation, and hyphenate whitespace."""
    normalized = unicodedata.normalize("NFKC", heading_plain_text(text)).lower()
    stripped = _PUNCTUATION.sub("", normalized).strip()
    slug = _WHITESPACE.sub("-", stripped)
    return slug or FALLBACK_ANCHOR


class AnchorRegistry:
    """Hands out unique anchors within one document; create one per render."""

    def __init__(self) -> None:
        self._taken: set[str] = set()
        self._counts: dict[str, int] = {}

    def anchor_for(self, text: str) -> str:
        base = slugify(text)
        candidate = base
        count = self._counts.get(base, 0)
        while candidate in self._taken:
            count += 1
            candidate = f"{base}-{count}"
        self._counts[base] = count
        self._taken.add(candidate)
        return candidate


def nest_toc(entries: list[TocEntry]) -> list[TocEntry]:
    """Nest a flat, document-ordered entry list by heading level."""

    def collect(start: int, floor: int) -> tuple[list[TocEntry], int]:
        nodes: list[TocEntry] = []
        index = start
        while index < len(entries):
            entry = entries[index]
            if entry.level <= floor:
                break
            children, index = collect(index + 1, entry.level)
            nodes.append(replace(entry, children=tuple(children)))
        return nodes, index

    nested, _ = collect(0, 0)
    return nested
