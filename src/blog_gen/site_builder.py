"""Static site builder for publishing blog content as plain HTML files."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from blog_gen.adapters.filesystem_source import iter_content_sources
from blog_gen.config import DEFAULT_LISTING_ROOT, SiteSettings, load_settings
from blog_gen.core.content_index import ContentQuery, query_documents
from blog_gen.core.content_schema import TocConfig, normalize_path
from blog_gen.core.document_store import DocumentStore
from blog_gen.listing_view import (
    RenderedPage,
    render_document,
    render_listing_page,
    render_not_found,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SiteBuildResult:
    """Files written by one static build."""

    output_dir: Path
    listing_path: Path
    document_paths: tuple[Path, ...]
    not_found_path: Path
    issue_count: int


def load_store(content_dir: Path, *, default_toc: TocConfig | None = None) -> DocumentStore:
    """Load every content file under `content_dir` into an immutable store."""
    return DocumentStore.from_sources(iter_content_sources(content_dir), default_toc=default_toc)


def render(store: DocumentStore, path: str) -> RenderedPage:
    """Render one document page; absent paths yield the not-found page."""
    return render_document(store, path)


def list_all(store: DocumentStore, query: ContentQuery) -> list[dict[str, object]]:
    """Run a listing query against the store."""
    return query_documents(store, query)


def output_file_for(output_dir: Path, route: str) -> Path:
    """Map `/blog/post` to `<output_dir>/blog/post/index.html`."""
    relative = normalize_path(route).strip("/")
    target = output_dir / relative if relative else output_dir
    return target / "index.html"


def _write(path: Path, page: RenderedPage) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(page.html, encoding="utf-8")
    return path


def build_site(
    content_dir: Path,
    output_dir: Path,
    *,
    listing_root: str = DEFAULT_LISTING_ROOT,
    default_toc: TocConfig | None = None,
) -> SiteBuildResult:
    """Render the listing, every document, and the not-found page to disk."""
    store = load_store(content_dir, default_toc=default_toc)
    listing_root = normalize_path(listing_root)
    listing_page = render_listing_page(store, listing_root=listing_root)
    listing_path = _write(output_file_for(output_dir, listing_root), listing_page)
    if "/" not in store and listing_root != "/":
        _write(output_file_for(output_dir, "/"), listing_page)

    written: list[Path] = []
    for path in store.paths():
        if path == listing_root:
            continue
        page = render(store, path)
        written.append(_write(output_file_for(output_dir, path), page))

    not_found_path = output_dir / "404.html"
    output_dir.mkdir(parents=True, exist_ok=True)
    not_found_path.write_text(render_not_found().html, encoding="utf-8")

    issue_count = sum(len(document.issues) for document in store)
    logger.info(
        "site.build documents=%s listing=%s issues=%s output_dir=%s",
        len(written),
        listing_root,
        issue_count,
        output_dir,
    )
    return SiteBuildResult(
        output_dir=output_dir,
        listing_path=listing_path,
        document_paths=tuple(written),
        not_found_path=not_found_path,
        issue_count=issue_count,
    )


def build_site_from_settings(settings: SiteSettings | None = None) -> SiteBuildResult:
    """Build with environment-derived settings."""
    resolved = settings or load_settings()
    return build_site(
        resolved.content_dir,
        resolved.output_dir,
        listing_root=resolved.listing_root,
        default_toc=resolved.default_toc,
    )
