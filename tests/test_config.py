from __future__ import annotations

from pathlib import Path

import pytest

from blog_gen.config import SiteSettings, load_settings
from blog_gen.core.content_schema import TocConfig


def test_load_settings_defaults() -> None:
    assert load_settings({}) == SiteSettings()


def test_load_settings_reads_environment() -> None:
    settings = load_settings(
        {
            "BLOG_GEN_CONTENT_DIR": "posts",
            "BLOG_GEN_OUTPUT_DIR": "public",
            "BLOG_GEN_LISTING_ROOT": "writing/",
            "BLOG_GEN_TOC_DEPTH": "3",
            "BLOG_GEN_TOC_SEARCH_DEPTH": "1",
        }
    )
    assert settings.content_dir == Path("posts")
    assert settings.output_dir == Path("public")
    assert settings.listing_root == "/writing"
    assert settings.default_toc == TocConfig(max_depth=3, max_search_depth=1)


@pytest.mark.parametrize(("raw", "expected"), [("0", 1), ("99", 6), ("deep", 2), ("", 2)])
def test_toc_depth_is_bounded(raw: str, expected: int) -> None:
    settings = load_settings({"BLOG_GEN_TOC_DEPTH": raw})
    assert settings.default_toc.max_depth == expected


def test_load_settings_uses_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BLOG_GEN_CONTENT_DIR", "from-env")
    assert load_settings().content_dir == Path("from-env")
