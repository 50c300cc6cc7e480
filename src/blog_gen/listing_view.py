"""HTML rendering for the post listing and individual document pages."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from html import escape

from blog_gen.config import DEFAULT_LISTING_ROOT
from blog_gen.core.content_index import ContentQuery, listing_query, query_documents
from blog_gen.core.content_schema import TocEntry
from blog_gen.core.document_store import DocumentNotFound, DocumentStore
from blog_gen.core.markdown_processor import RenderedMarkdown, process_markdown

SITE_NAME = "blog_gen"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedPage:
    """A full HTML page plus the status a server should answer with."""

    path: str
    status: int
    title: str
    html: str


def _text(record: Mapping[str, object], key: str) -> str:
    value = record.get(key)
    return "" if value is None else str(value)


def render_tag_chips(tags: Iterable[str]) -> str:
    chips = "".join(f'<li class="tag-chip">{escape(tag)}</li>' for tag in tags)
    return f'<ul class="tag-chips">{chips}</ul>' if chips else ""


def render_summary(record: Mapping[str, object]) -> str:
    """Render one listing entry; absent fields are left out of the block."""
    path = _text(record, "path")
    title = escape(_text(record, "title") or path)
    lines = ['<article class="post-summary">']
    if path:
        href = escape(path, quote=True)
        lines.append(f'  <h2 class="post-summary__title"><a href="{href}">{title}</a></h2>')
    else:
        lines.append(f'  <h2 class="post-summary__title">{title}</h2>')
    description = _text(record, "description")
    if description:
        lines.append(f'  <p class="post-summary__description">{escape(description)}</p>')
    byline = [
        f'<time class="post-summary__date">{escape(_text(record, "created_at"))}</time>'
        if _text(record, "created_at")
        else "",
        f'<span class="post-summary__author">{escape(_text(record, "author"))}</span>'
        if _text(record, "author")
        else "",
    ]
    byline_html = " &middot; ".join(part for part in byline if part)
    if byline_html:
        lines.append(f'  <p class="post-summary__byline">{byline_html}</p>')
    tags = record.get("tags")
    if isinstance(tags, (list, tuple)):
        chips = render_tag_chips(str(tag) for tag in tags)
        if chips:
            lines.append(f"  {chips}")
    lines.append("</article>")
    return "\n".join(lines)


def render_listing(records: Iterable[Mapping[str, object]]) -> str:
    """Render summaries in the order the content index returned them."""
    summaries = [render_summary(record) for record in records]
    if not summaries:
        return '<section class="post-list post-list--empty"><p>No posts yet.</p></section>'
    body = "\n".join(summaries)
    return f'<section class="post-list">\n{body}\n</section>'


def render_toc(entries: Iterable[TocEntry]) -> str:
    """Render a nested TOC tree as nested lists."""
    items: list[str] = []
    for entry in entries:
        children = render_toc(entry.children) if entry.children else ""
        items.append(
            f'<li class="toc__item toc__item--{entry.level}">'
            f'<a href="#{escape(entry.anchor, quote=True)}">{escape(entry.text)}</a>'
            f"{children}</li>"
        )
    return f'<ul class="toc__list">{"".join(items)}</ul>' if items else ""


def build_page(title: str, body_html: str) -> str:
    """Wrap rendered content in a single self-contained page template."""
    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{escape(title)} | {SITE_NAME}</title>
</head>
<body>
  <main class="shell">
{body_html}
  </main>
</body>
</html>
"""


def _article_html(rendered: RenderedMarkdown, header: str) -> str:
    toc_html = render_toc(rendered.toc_tree)
    parts = ['<article class="post">', header]
    if toc_html:
        parts.append(f'<nav class="toc" aria-label="Table of contents">{toc_html}</nav>')
    parts.append(f'<div class="post__content">\n{rendered.html}\n</div>')
    parts.append("</article>")
    return "\n".join(part for part in parts if part)


def render_not_found(path: str = "") -> RenderedPage:
    """Render the user-visible not-found state for a missing document."""
    detail = (
        f"Nothing is published at <code>{escape(path)}</code>."
        if path
        else "The page you asked for does not exist."
    )
    body = (
        '<section class="not-found">\n'
        "<h1>Page not found</h1>\n"
        f"<p>{detail}</p>\n"
        "</section>"
    )
    return RenderedPage(
        path=path,
        status=404,
        title="Not found",
        html=build_page("Not found", body),
    )


def render_document(store: DocumentStore, path: str) -> RenderedPage:
    """Render one document page, or a not-found page when the path is absent."""
    try:
        document = store.get(path)
    except DocumentNotFound as exc:
        logger.info("view.not_found path=%s", exc.path)
        return render_not_found(exc.path)
    rendered = process_markdown(document.body, document.toc_config)
    title = document.title or document.path
    header_parts = [
        '<header class="post__header">',
        f'<h1 class="post__title">{escape(title)}</h1>',
    ]
    byline = " &middot; ".join(
        escape(part) for part in (document.created_at, document.author) if part
    )
    if byline:
        header_parts.append(f'<p class="post__byline">{byline}</p>')
    chips = render_tag_chips(document.tags)
    if chips:
        header_parts.append(chips)
    header_parts.append("</header>")
    article = _article_html(rendered, "\n".join(header_parts))
    return RenderedPage(
        path=document.path,
        status=200,
        title=title,
        html=build_page(title, article),
    )


def render_listing_page(
    store: DocumentStore,
    query: ContentQuery | None = None,
    *,
    listing_root: str = DEFAULT_LISTING_ROOT,
) -> RenderedPage:
    """Render the listing page, led by the listing root document when present."""
    records = query_documents(store, query or listing_query(listing_root))
    intro = ""
    title = "Blog"
    if listing_root in store:
        root_document = store.get(listing_root)
        title = root_document.title or title
        intro = process_markdown(root_document.body, root_document.toc_config).html
    parts = ['<section class="listing">', f'<h1 class="listing__title">{escape(title)}</h1>']
    if intro:
        parts.append(f'<div class="listing__intro">\n{intro}\n</div>')
    parts.append(render_listing(records))
    parts.append("</section>")
    return RenderedPage(
        path=listing_root,
        status=200,
        title=title,
        html=build_page(title, "\n".join(parts)),
    )
