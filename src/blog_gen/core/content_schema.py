"""Records shared by the content loading, indexing, and rendering stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

DEFAULT_TOC_DEPTH: Final[int] = 2
DEFAULT_TOC_SEARCH_DEPTH: Final[int] = 2


def normalize_path(path: str) -> str:
    """Collapse a content path to `/a/b` form (root stays `/`)."""
    parts = [part for part in path.strip().split("/") if part]
    return "/" + "/".join(parts)


@dataclass(frozen=True)
class ContentIssue:
    """Recoverable problem recorded while loading or rendering one document."""

    code: str
    message: str


@dataclass(frozen=True)
class TocConfig:
    """Depth bounds for table-of-contents extraction."""

    max_depth: int = DEFAULT_TOC_DEPTH
    max_search_depth: int = DEFAULT_TOC_SEARCH_DEPTH


@dataclass(frozen=True)
class TocEntry:
    """One heading in a table of contents; `children` is filled by nesting."""

    level: int
    text: str
    anchor: str
    children: tuple[TocEntry, ...] = ()


@dataclass(frozen=True)
class DocumentMetadata:
    """Typed front-matter fields; everything else in the block is ignored."""

    title: str = ""
    author: str = ""
    created_at: str = ""
    description: str | None = None
    tags: tuple[str, ...] = ()
    toc_config: TocConfig | None = None


@dataclass(frozen=True)
class Document:
    """A content document as held by the store."""

    path: str
    title: str
    author: str
    created_at: str
    body: str
    description: str | None = None
    tags: tuple[str, ...] = ()
    toc_config: TocConfig = field(default_factory=TocConfig)
    issues: tuple[ContentIssue, ...] = ()
