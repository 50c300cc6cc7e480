"""CLI entrypoint for the live preview server."""

from __future__ import annotations

import argparse
import os

import uvicorn

from blog_gen.adapters.observability import configure_runtime_logging
from blog_gen.config import load_settings


def build_arg_parser() -> argparse.ArgumentParser:
    """Server flags; content flags are passed to the app through the environment."""
    parser = argparse.ArgumentParser(description="Serve a live preview of the blog.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart when python or markdown sources change.",
    )
    parser.add_argument("--content-dir", default="", help="Directory of markdown sources.")
    parser.add_argument("--listing-root", default="", help="Route of the listing page.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Export content settings, then hand the app import path to uvicorn."""
    configure_runtime_logging()
    parsed = build_arg_parser().parse_args(argv)
    for flag, variable in (
        (parsed.content_dir, "BLOG_GEN_CONTENT_DIR"),
        (parsed.listing_root, "BLOG_GEN_LISTING_ROOT"),
    ):
        if str(flag).strip():
            os.environ[variable] = str(flag).strip()

    reload = bool(parsed.reload)
    uvicorn.run(
        "blog_gen.api.app:app",
        host=str(parsed.host),
        port=int(parsed.port),
        reload=reload,
        reload_dirs=[".", str(load_settings().content_dir)] if reload else None,
        reload_includes=["*.py", "*.md"] if reload else None,
    )


if __name__ == "__main__":
    main()
