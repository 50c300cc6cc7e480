"""Markdown body rendering: transform stages followed by HTML conversion."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import markdown

from blog_gen.core.content_schema import ContentIssue, TocConfig, TocEntry
from blog_gen.core.heading_anchors import nest_toc
from blog_gen.core.markdown_stages import (
    MARKDOWN_STAGES,
    MarkdownStage,
    StageContext,
    restore_stash,
    run_stages,
)

MARKDOWN_EXTENSIONS: tuple[str, ...] = ("attr_list", "tables", "sane_lists")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedMarkdown:
    """HTML output of one body plus its extracted table of contents."""

    html: str
    toc: list[TocEntry]
    toc_tree: list[TocEntry]
    issues: list[ContentIssue]


def convert_markdown(body: str) -> str:
    """Convert markdown to HTML with a converter instance private to this call."""
    converter = markdown.Markdown(extensions=list(MARKDOWN_EXTENSIONS), output_format="html")
    return converter.convert(body)


def process_markdown(
    body: str,
    toc_config: TocConfig | None = None,
    *,
    stages: tuple[MarkdownStage, ...] = MARKDOWN_STAGES,
) -> RenderedMarkdown:
    """Run the stages over one body and convert the result to HTML."""
    context = StageContext(toc_config=toc_config or TocConfig())
    staged = run_stages(body, context, stages)
    html = restore_stash(convert_markdown(staged), context.stash, context.nonce)
    if context.issues:
        logger.info(
            "markdown.render issues=%s headings=%s fragments=%s",
            len(context.issues),
            len(context.toc),
            len(context.stash),
        )
    return RenderedMarkdown(
        html=html,
        toc=list(context.toc),
        toc_tree=nest_toc(context.toc),
        issues=list(context.issues),
    )
