"""Runtime settings resolved from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from blog_gen.core.content_schema import (
    DEFAULT_TOC_DEPTH,
    DEFAULT_TOC_SEARCH_DEPTH,
    TocConfig,
    normalize_path,
)

DEFAULT_CONTENT_DIR = Path("content")
DEFAULT_OUTPUT_DIR = Path("site")
DEFAULT_LISTING_ROOT = "/blog"


@dataclass(frozen=True)
class SiteSettings:
    """Where content lives, where output goes, and listing/TOC defaults."""

    content_dir: Path = DEFAULT_CONTENT_DIR
    output_dir: Path = DEFAULT_OUTPUT_DIR
    listing_root: str = DEFAULT_LISTING_ROOT
    default_toc: TocConfig = TocConfig()


def bounded_int_env(
    env: Mapping[str, str],
    name: str,
    default: int,
    *,
    minimum: int,
    maximum: int,
) -> int:
    """Read an int from `env`, clamped to the bounds; blank or invalid gives `default`."""
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, min(maximum, value))


def _path_env(env: Mapping[str, str], name: str, default: Path) -> Path:
    raw = env.get(name, "").strip()
    return Path(raw) if raw else default


def load_settings(env: Mapping[str, str] | None = None) -> SiteSettings:
    """Build settings from `BLOG_GEN_*` variables, falling back to defaults."""
    source = os.environ if env is None else env
    listing_root = source.get("BLOG_GEN_LISTING_ROOT", "").strip() or DEFAULT_LISTING_ROOT
    return SiteSettings(
        content_dir=_path_env(source, "BLOG_GEN_CONTENT_DIR", DEFAULT_CONTENT_DIR),
        output_dir=_path_env(source, "BLOG_GEN_OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
        listing_root=normalize_path(listing_root),
        default_toc=TocConfig(
            max_depth=bounded_int_env(
                source,
                "BLOG_GEN_TOC_DEPTH",
                DEFAULT_TOC_DEPTH,
                minimum=1,
                maximum=6,
            ),
            max_search_depth=bounded_int_env(
                source,
                "BLOG_GEN_TOC_SEARCH_DEPTH",
                DEFAULT_TOC_SEARCH_DEPTH,
                minimum=1,
                maximum=6,
            ),
        ),
    )
