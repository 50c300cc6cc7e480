"""CLI that prints the listing query result as JSON."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import cast

from blog_gen.config import load_settings
from blog_gen.core.content_index import (
    LISTING_PROJECTION,
    ContentQuery,
    InvalidQuery,
    SortDirection,
)
from blog_gen.site_builder import list_all, load_store


def build_arg_parser() -> argparse.ArgumentParser:
    """Define listing query flags."""
    parser = argparse.ArgumentParser(description="Print blog listing records as JSON.")
    parser.add_argument("--content-dir", default="")
    parser.add_argument("--sort-key", default="created_at")
    parser.add_argument("--sort-direction", default="desc")
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        help="Path to leave out (repeatable; default: the listing root).",
    )
    parser.add_argument(
        "--field",
        action="append",
        default=None,
        help="Field to include (repeatable; default: listing summary fields).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Run one listing query and print the records."""
    parsed = build_arg_parser().parse_args(argv)
    settings = load_settings()
    content_dir = str(parsed.content_dir).strip()
    store = load_store(
        Path(content_dir) if content_dir else settings.content_dir,
        default_toc=settings.default_toc,
    )
    query = ContentQuery(
        exclude_paths=frozenset(parsed.exclude or [settings.listing_root]),
        sort_key=str(parsed.sort_key),
        sort_direction=cast(SortDirection, str(parsed.sort_direction)),
        projection=tuple(parsed.field) if parsed.field else LISTING_PROJECTION,
    )
    try:
        records = list_all(store, query)
    except InvalidQuery as exc:
        raise SystemExit(f"Invalid query: {exc}") from exc
    print(json.dumps(records, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
