from __future__ import annotations

import logging

import pytest

from blog_gen.core.content_schema import Document
from blog_gen.core.document_store import DocumentNotFound, DocumentStore


def _post(title: str, created_at: str = "2024-01-01") -> str:
    return f"---\ntitle: {title}\nauthor: Dana\ncreatedAt: {created_at}\n---\n\nBody of {title}.\n"


def test_from_sources_keeps_enumeration_order() -> None:
    store = DocumentStore.from_sources(
        [
            ("/blog/b", _post("B")),
            ("/blog/a", _post("A")),
            ("/blog", "---\ntitle: Blog\n---\n"),
        ]
    )
    assert store.paths() == ("/blog/b", "/blog/a", "/blog")
    assert [document.title for document in store] == ["B", "A", "Blog"]
    assert len(store) == 3


def test_get_normalizes_requested_path() -> None:
    store = DocumentStore.from_sources([("/blog/first-post", _post("First"))])
    assert store.get("blog/first-post/").title == "First"
    assert "/blog/first-post/" in store
    assert 42 not in store


def test_get_missing_path_raises_document_not_found() -> None:
    store = DocumentStore.from_sources([("/blog/a", _post("A"))])
    with pytest.raises(DocumentNotFound) as excinfo:
        store.get("/blog/missing")
    assert excinfo.value.path == "/blog/missing"
    assert str(excinfo.value) == "Document not found: /blog/missing"


def test_duplicate_paths_keep_first_document(caplog: pytest.LogCaptureFixture) -> None:
    first = Document(path="/blog/a", title="First", author="", created_at="", body="")
    second = Document(path="/blog/a", title="Second", author="", created_at="", body="")
    with caplog.at_level(logging.WARNING):
        store = DocumentStore([first, second])
    assert len(store) == 1
    assert store.get("/blog/a").title == "First"
    assert "store.duplicate_path" in caplog.text


def test_malformed_document_does_not_block_the_others() -> None:
    store = DocumentStore.from_sources(
        [
            ("/blog/good", _post("Good")),
            ("/blog/broken", "---\ntitle: [oops\n---\nbody"),
            ("/blog/also-good", _post("Also good")),
        ]
    )
    assert len(store) == 3
    assert store.get("/blog/good").issues == ()
    assert store.get("/blog/broken").issues[0].code == "front_matter_malformed"
    assert store.get("/blog/also-good").title == "Also good"
