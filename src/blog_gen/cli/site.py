"""CLI runner for static site generation."""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path

from blog_gen.adapters.observability import configure_runtime_logging
from blog_gen.config import load_settings
from blog_gen.core.content_schema import normalize_path
from blog_gen.site_builder import build_site_from_settings


def build_arg_parser() -> argparse.ArgumentParser:
    """Define CLI flags for a static build; unset flags fall back to env settings."""
    parser = argparse.ArgumentParser(description="Build the static blog site.")
    parser.add_argument("--content-dir", default="", help="Directory of markdown sources.")
    parser.add_argument("--output-dir", default="", help="Directory for generated HTML.")
    parser.add_argument("--listing-root", default="", help="Route of the listing page.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Build the site and report the output location."""
    configure_runtime_logging()
    parsed = build_arg_parser().parse_args(argv)
    settings = load_settings()
    if str(parsed.content_dir).strip():
        settings = replace(settings, content_dir=Path(str(parsed.content_dir)))
    if str(parsed.output_dir).strip():
        settings = replace(settings, output_dir=Path(str(parsed.output_dir)))
    if str(parsed.listing_root).strip():
        settings = replace(settings, listing_root=normalize_path(str(parsed.listing_root)))

    result = build_site_from_settings(settings)
    print(f"Built site at {result.output_dir}")
    print(f"Listing page: {result.listing_path}")
    print(f"Document pages: {len(result.document_paths)}")
    if result.issue_count:
        print(f"Content issues: {result.issue_count}")


if __name__ == "__main__":
    main()
