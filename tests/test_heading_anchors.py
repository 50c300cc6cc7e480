from __future__ import annotations

import pytest

from blog_gen.core.content_schema import TocEntry
from blog_gen.core.heading_anchors import (
    FALLBACK_ANCHOR,
    AnchorRegistry,
    heading_plain_text,
    nest_toc,
    slugify,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Setup", "setup"),
        ("Hello, World!", "hello-world"),
        ("  Many   spaces here ", "many-spaces-here"),
        ("Using `pip` **fast**", "using-pip-fast"),
        ("[Linked](https://example.com) title", "linked-title"),
        ("!!!", FALLBACK_ANCHOR),
    ],
)
def test_slugify(text: str, expected: str) -> None:
    assert slugify(text) == expected


def test_heading_plain_text_drops_inline_markers() -> None:
    assert heading_plain_text("A *very* `small` [link](/x)") == "A very small link"


def test_repeated_headings_get_numbered_suffixes() -> None:
    registry = AnchorRegistry()
    anchors = [registry.anchor_for(text) for text in ("Setup", "Setup", "Usage", "Setup")]
    assert anchors == ["setup", "setup-1", "usage", "setup-2"]


def test_suffix_never_collides_with_an_existing_heading() -> None:
    registry = AnchorRegistry()
    anchors = [registry.anchor_for(text) for text in ("Setup 1", "Setup", "Setup")]
    assert anchors == ["setup-1", "setup", "setup-2"]


def test_fresh_registries_produce_identical_anchors() -> None:
    headings = ("Intro", "Details", "Intro", "Details")
    first = AnchorRegistry()
    second = AnchorRegistry()
    assert [first.anchor_for(text) for text in headings] == [
        second.anchor_for(text) for text in headings
    ]


def test_nest_toc_builds_tree_by_level() -> None:
    flat = [
        TocEntry(level=2, text="Intro", anchor="intro"),
        TocEntry(level=3, text="Background", anchor="background"),
        TocEntry(level=3, text="Goals", anchor="goals"),
        TocEntry(level=2, text="Usage", anchor="usage"),
    ]
    tree = nest_toc(flat)
    assert [entry.anchor for entry in tree] == ["intro", "usage"]
    assert [child.anchor for child in tree[0].children] == ["background", "goals"]
    assert tree[1].children == ()


def test_nest_toc_keeps_leading_deeper_entries_at_top_level() -> None:
    flat = [
        TocEntry(level=3, text="Orphan", anchor="orphan"),
        TocEntry(level=2, text="Section", anchor="section"),
    ]
    tree = nest_toc(flat)
    assert [entry.anchor for entry in tree] == ["orphan", "section"]
