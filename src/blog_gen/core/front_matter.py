"""Front-matter extraction for markdown content documents."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

import yaml

from blog_gen.core.content_schema import (
    ContentIssue,
    Document,
    DocumentMetadata,
    TocConfig,
    normalize_path,
)

_DELIMITER = "---"

logger = logging.getLogger(__name__)


class MalformedFrontMatter(ValueError):
    """Raised when a document's front-matter block cannot be parsed."""


def _split_block(raw_text: str) -> tuple[str, str] | None:
    text = raw_text.lstrip("\ufeff").replace("\r\n", "\n")
    lines = text.split("\n")
    if not lines or lines[0].strip() != _DELIMITER:
        return None
    for index in range(1, len(lines)):
        if lines[index].strip() == _DELIMITER:
            block = "\n".join(lines[1:index])
            body = "\n".join(lines[index + 1 :]).lstrip("\n")
            return block, body
    raise MalformedFrontMatter("Front matter is not closed with '---'.")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value).strip()


def _as_tags(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(_as_text(item) for item in value if _as_text(item))
    text = _as_text(value)
    return (text,) if text else ()


def _as_toc_config(value: Any) -> TocConfig | None:
    if not isinstance(value, dict):
        return None
    defaults = TocConfig()
    depth = value.get("depth", value.get("maxDepth", defaults.max_depth))
    search_depth = value.get("searchDepth", value.get("maxSearchDepth", defaults.max_search_depth))
    try:
        return TocConfig(max_depth=int(depth), max_search_depth=int(search_depth))
    except (TypeError, ValueError) as exc:
        raise MalformedFrontMatter(f"Invalid toc options: {value!r}") from exc


def extract_front_matter(raw_text: str) -> tuple[DocumentMetadata, str]:
    """Split raw document text into typed metadata and markdown body.

    Text without a leading `---` line has no front matter and is returned
    whole as the body. Anything that starts a block but cannot be read as a
    YAML mapping raises `MalformedFrontMatter`.
    """
    split = _split_block(raw_text)
    if split is None:
        return DocumentMetadata(), raw_text.lstrip("\ufeff")
    block, body = split
    try:
        loaded = yaml.safe_load(block) if block.strip() else {}
    except yaml.YAMLError as exc:
        raise MalformedFrontMatter(f"Front matter is not valid YAML: {exc}") from exc
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise MalformedFrontMatter("Front matter must be a mapping of keys to values.")

    created_at = loaded.get("createdAt", loaded.get("date"))
    description = loaded.get("description")
    metadata = DocumentMetadata(
        title=_as_text(loaded.get("title")),
        author=_as_text(loaded.get("author")),
        created_at=_as_text(created_at),
        description=_as_text(description) if description is not None else None,
        tags=_as_tags(loaded.get("tags")),
        toc_config=_as_toc_config(loaded.get("toc")),
    )
    return metadata, body


def serialize_front_matter(metadata: DocumentMetadata, body: str = "") -> str:
    """Write metadata back as a `---` YAML block followed by the body."""
    payload: dict[str, Any] = {
        "title": metadata.title,
        "author": metadata.author,
        "createdAt": metadata.created_at,
    }
    if metadata.description is not None:
        payload["description"] = metadata.description
    payload["tags"] = list(metadata.tags)
    if metadata.toc_config is not None:
        payload["toc"] = {
            "depth": metadata.toc_config.max_depth,
            "searchDepth": metadata.toc_config.max_search_depth,
        }
    block = yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
    return f"{_DELIMITER}\n{block}{_DELIMITER}\n{body}"


def load_document(path: str, raw_text: str, *, default_toc: TocConfig | None = None) -> Document:
    """Build a store document, degrading to empty metadata on bad front matter."""
    normalized_path = normalize_path(path)
    issues: list[ContentIssue] = []
    try:
        metadata, body = extract_front_matter(raw_text)
    except MalformedFrontMatter as exc:
        logger.warning("front_matter.malformed path=%s error=%s", normalized_path, exc)
        issues.append(ContentIssue(code="front_matter_malformed", message=str(exc)))
        metadata, body = DocumentMetadata(), raw_text
    else:
        for field_name in ("title", "author"):
            if not getattr(metadata, field_name):
                issues.append(
                    ContentIssue(
                        code=f"{field_name}_missing",
                        message=f"Front matter has no '{field_name}'.",
                    )
                )
    return Document(
        path=normalized_path,
        title=metadata.title,
        author=metadata.author,
        created_at=metadata.created_at,
        body=body,
        description=metadata.description,
        tags=metadata.tags,
        toc_config=metadata.toc_config or default_toc or TocConfig(),
        issues=tuple(issues),
    )
