"""Filesystem loader that turns a content directory into `(path, raw_text)` pairs."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from pathlib import Path

CONTENT_SUFFIX = ".md"
_ORDER_PREFIX = re.compile(r"^\d+\.")

logger = logging.getLogger(__name__)


def _is_hidden(part: str) -> bool:
    return part.startswith("_") or part.startswith(".")


def content_path_for(relative: Path) -> str:
    """Derive the route for a file relative to the content directory.

    `blog/1.first-post.md` -> `/blog/first-post`, `blog/index.md` -> `/blog`.
    """
    parts = [_ORDER_PREFIX.sub("", part) for part in relative.with_suffix("").parts]
    if parts and parts[-1] == "index":
        parts = parts[:-1]
    return "/" + "/".join(part for part in parts if part)


def discover_content_files(content_dir: Path) -> list[Path]:
    """Return markdown files in sorted order, skipping `_` and `.` prefixed names."""
    if not content_dir.is_dir():
        logger.warning("source.missing_dir content_dir=%s", content_dir)
        return []
    files: list[Path] = []
    for path in sorted(content_dir.rglob(f"*{CONTENT_SUFFIX}")):
        relative = path.relative_to(content_dir)
        if any(_is_hidden(part) for part in relative.parts):
            continue
        if path.is_file():
            files.append(path)
    return files


def iter_content_sources(content_dir: Path) -> Iterator[tuple[str, str]]:
    """Yield `(route, raw_text)` for each readable content file.

    A file that cannot be read is logged and skipped; the others still load.
    """
    for path in discover_content_files(content_dir):
        try:
            raw_text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("source.read_failed file=%s error=%s", path, exc)
            continue
        yield content_path_for(path.relative_to(content_dir)), raw_text
