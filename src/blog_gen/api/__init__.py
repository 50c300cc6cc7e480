"""Public API surface for the live-preview HTTP server."""

from blog_gen.api.app import create_app
from blog_gen.api.contracts import (
    DocumentSummaryResponse,
    HealthResponse,
    RenderedDocumentResponse,
    TocEntryResponse,
)

__all__ = [
    "DocumentSummaryResponse",
    "HealthResponse",
    "RenderedDocumentResponse",
    "TocEntryResponse",
    "create_app",
]
