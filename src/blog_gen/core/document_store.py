"""Immutable, explicitly passed collection of loaded content documents."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from types import MappingProxyType

from blog_gen.core.content_schema import Document, TocConfig, normalize_path
from blog_gen.core.front_matter import load_document

logger = logging.getLogger(__name__)


class DocumentNotFound(KeyError):
    """Raised when a path is requested that the store does not hold."""

    def __init__(self, path: str) -> None:
        super().__init__(path)
        self.path = path

    def __str__(self) -> str:
        return f"Document not found: {self.path}"


class DocumentStore:
    """Read-only documents keyed by path, in enumeration order."""

    def __init__(self, documents: Iterable[Document] = ()) -> None:
        by_path: dict[str, Document] = {}
        for document in documents:
            if document.path in by_path:
                logger.warning("store.duplicate_path path=%s kept=first", document.path)
                continue
            by_path[document.path] = document
        self._documents = MappingProxyType(by_path)

    @classmethod
    def from_sources(
        cls,
        sources: Iterable[tuple[str, str]],
        *,
        default_toc: TocConfig | None = None,
    ) -> DocumentStore:
        """Load `(path, raw_text)` pairs; each pair is parsed independently."""
        documents = [
            load_document(path, raw_text, default_toc=default_toc) for path, raw_text in sources
        ]
        store = cls(documents)
        degraded = sum(1 for document in store if document.issues)
        logger.info("store.load documents=%s with_issues=%s", len(store), degraded)
        return store

    def get(self, path: str) -> Document:
        normalized = normalize_path(path)
        try:
            return self._documents[normalized]
        except KeyError:
            raise DocumentNotFound(normalized) from None

    def paths(self) -> tuple[str, ...]:
        return tuple(self._documents)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and normalize_path(path) in self._documents

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents.values())

    def __len__(self) -> int:
        return len(self._documents)
