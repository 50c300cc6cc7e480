"""Filter, sort, and project document records for listing views."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Final, Literal

from blog_gen.core.content_schema import Document, normalize_path
from blog_gen.core.document_store import DocumentStore

SortDirection = Literal["asc", "desc"]

RECORD_FIELDS: Final[tuple[str, ...]] = (
    "path",
    "title",
    "author",
    "created_at",
    "description",
    "tags",
    "body",
    "toc_config",
)
SORTABLE_FIELDS: Final[frozenset[str]] = frozenset(
    {"path", "title", "author", "created_at", "description"}
)
RENDER_ONLY_FIELDS: Final[frozenset[str]] = frozenset({"body", "toc_config"})
FIELD_ALIASES: Final[dict[str, str]] = {"createdAt": "created_at", "tocConfig": "toc_config"}
LISTING_PROJECTION: Final[tuple[str, ...]] = (
    "path",
    "title",
    "description",
    "created_at",
    "author",
    "tags",
)


class InvalidQuery(ValueError):
    """Raised when a query names an unknown field or direction."""


@dataclass(frozen=True)
class ContentQuery:
    """Listing query: excluded paths, sort key/direction, and projected fields."""

    exclude_paths: frozenset[str] = frozenset()
    sort_key: str = "created_at"
    sort_direction: SortDirection = "desc"
    projection: tuple[str, ...] = LISTING_PROJECTION


DEFAULT_LISTING_QUERY: Final[ContentQuery] = ContentQuery(exclude_paths=frozenset({"/blog"}))


def listing_query(listing_root: str) -> ContentQuery:
    """Default listing query with the given listing root document excluded."""
    return ContentQuery(exclude_paths=frozenset({normalize_path(listing_root)}))


def resolve_field(name: str) -> str:
    """Map a field name or camelCase alias to its record name."""
    resolved = FIELD_ALIASES.get(name.strip(), name.strip())
    if resolved not in RECORD_FIELDS:
        raise InvalidQuery(f"Unknown field '{name}'.")
    return resolved


def _parse_created_at(value: str) -> datetime | None:
    text = value.strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def _sort_value(document: Document, sort_key: str) -> tuple[int, object]:
    if sort_key == "created_at":
        parsed = _parse_created_at(document.created_at)
        # Unparseable dates rank below every parsed one and tie among themselves.
        return (1, parsed) if parsed is not None else (0, "")
    raw = getattr(document, sort_key)
    return (1, (raw or "").casefold())


def _project(document: Document, fields: tuple[str, ...]) -> dict[str, object]:
    record: dict[str, object] = {}
    for name in fields:
        value = getattr(document, name)
        record[name] = list(value) if name == "tags" else value
    return record


def validate_query(query: ContentQuery) -> tuple[str, tuple[str, ...]]:
    """Resolve the sort key and projection, raising `InvalidQuery` on bad input."""
    sort_key = resolve_field(query.sort_key)
    if sort_key not in SORTABLE_FIELDS:
        raise InvalidQuery(f"Field '{query.sort_key}' cannot be used as a sort key.")
    if query.sort_direction not in ("asc", "desc"):
        raise InvalidQuery(f"Sort direction must be 'asc' or 'desc', got '{query.sort_direction}'.")
    projection = tuple(resolve_field(name) for name in query.projection)
    render_only = sorted(RENDER_ONLY_FIELDS.intersection(projection))
    if render_only:
        raise InvalidQuery(f"Fields {render_only} are not available in listing projections.")
    return sort_key, projection


def query_documents(
    store: DocumentStore,
    query: ContentQuery = DEFAULT_LISTING_QUERY,
) -> list[dict[str, object]]:
    """Return projected records in listing order.

    Excluded paths are dropped first, then the remaining documents are
    stable-sorted by the sort key, so ties keep store enumeration order.
    """
    sort_key, projection = validate_query(query)
    excluded = {normalize_path(path) for path in query.exclude_paths}
    candidates = [document for document in store if document.path not in excluded]
    ordered = sorted(
        candidates,
        key=lambda document: _sort_value(document, sort_key),
        reverse=query.sort_direction == "desc",
    )
    return [_project(document, projection) for document in ordered]
