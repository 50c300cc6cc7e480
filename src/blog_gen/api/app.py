"""FastAPI live-preview application serving listing and document pages."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import cast

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse

from blog_gen.api.contracts import (
    DocumentSummaryResponse,
    HealthResponse,
    IssueResponse,
    RenderedDocumentResponse,
    TocEntryResponse,
)
from blog_gen.config import SiteSettings, load_settings
from blog_gen.core.content_index import (
    LISTING_PROJECTION,
    ContentQuery,
    InvalidQuery,
    SortDirection,
    query_documents,
)
from blog_gen.core.content_schema import normalize_path
from blog_gen.core.document_store import DocumentNotFound, DocumentStore
from blog_gen.core.markdown_processor import process_markdown
from blog_gen.listing_view import RenderedPage, render_document, render_listing_page
from blog_gen.site_builder import load_store

logger = logging.getLogger(__name__)


def _page_response(page: RenderedPage) -> HTMLResponse:
    return HTMLResponse(content=page.html, status_code=page.status)


def create_app(
    content_dir: Path | None = None,
    *,
    settings: SiteSettings | None = None,
    store: DocumentStore | None = None,
) -> FastAPI:
    """Create the preview application over a store loaded once at startup."""
    resolved = settings or load_settings()
    if content_dir is not None:
        resolved = replace(resolved, content_dir=content_dir)
    documents = (
        store
        if store is not None
        else load_store(resolved.content_dir, default_toc=resolved.default_toc)
    )
    listing_root = resolved.listing_root

    app = FastAPI(
        title="blog_gen API",
        version="0.1.0",
        description="Live preview of blog listing and document rendering.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=[
            {"name": "system", "description": "Service health and runtime metadata."},
            {"name": "documents", "description": "Listing queries and rendered documents."},
            {"name": "pages", "description": "Full HTML pages as the static build writes them."},
        ],
    )

    logger.info(
        "api.start content_dir=%s documents=%s listing_root=%s",
        resolved.content_dir,
        len(documents),
        listing_root,
    )

    @app.get("/healthz", response_model=HealthResponse, tags=["system"])
    def healthz() -> HealthResponse:
        return HealthResponse(documents=len(documents))

    @app.get(
        "/api/v1/documents",
        response_model=list[DocumentSummaryResponse],
        response_model_exclude_unset=True,
        tags=["documents"],
    )
    def list_documents(
        sort_key: str = "created_at",
        sort_direction: str = "desc",
        exclude: list[str] | None = Query(default=None),
        fields: list[str] | None = Query(default=None),
    ) -> list[DocumentSummaryResponse]:
        query = ContentQuery(
            exclude_paths=frozenset(exclude if exclude is not None else [listing_root]),
            sort_key=sort_key,
            sort_direction=cast(SortDirection, sort_direction),
            projection=tuple(fields) if fields else LISTING_PROJECTION,
        )
        try:
            records = query_documents(documents, query)
        except InvalidQuery as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return [DocumentSummaryResponse.model_validate(record) for record in records]

    @app.get(
        "/api/v1/documents/{document_path:path}",
        response_model=RenderedDocumentResponse,
        tags=["documents"],
    )
    def get_document(document_path: str) -> RenderedDocumentResponse:
        try:
            document = documents.get(document_path)
        except DocumentNotFound as exc:
            raise HTTPException(status_code=404, detail="Document not found") from exc
        rendered = process_markdown(document.body, document.toc_config)
        return RenderedDocumentResponse(
            path=document.path,
            title=document.title,
            author=document.author,
            created_at=document.created_at,
            description=document.description,
            tags=list(document.tags),
            html=rendered.html,
            toc=[TocEntryResponse.from_entry(entry) for entry in rendered.toc_tree],
            issues=[
                IssueResponse.from_issue(issue)
                for issue in (*document.issues, *rendered.issues)
            ],
        )

    @app.get("/", response_class=HTMLResponse, tags=["pages"])
    def index_page() -> HTMLResponse:
        if "/" in documents:
            return _page_response(render_document(documents, "/"))
        return _page_response(render_listing_page(documents, listing_root=listing_root))

    @app.get("/{page_path:path}", response_class=HTMLResponse, tags=["pages"])
    def content_page(page_path: str) -> HTMLResponse:
        if normalize_path(page_path) == listing_root:
            return _page_response(render_listing_page(documents, listing_root=listing_root))
        return _page_response(render_document(documents, page_path))

    return app


app = create_app()
