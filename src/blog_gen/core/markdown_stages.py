"""Ordered transform stages applied to a markdown body before conversion.

Every stage shares one contract: it takes the body text plus the per-document
`StageContext` and returns the rewritten body. Rendered HTML fragments go into
the context stash and are referenced from the body by placeholder tokens, so
the markdown converter never re-parses them. Heading lines are only ever
rewritten by the anchor stage.
"""

from __future__ import annotations

import logging
import re
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field

from blog_gen.core.code_highlighting import format_code_block
from blog_gen.core.content_schema import ContentIssue, TocConfig, TocEntry
from blog_gen.core.heading_anchors import AnchorRegistry, heading_plain_text
from blog_gen.core.markdown_blocks import (
    HEADING_RE,
    SETEXT_UNDERLINE_RE,
    Segment,
    split_segments,
)
from blog_gen.core.math_rendering import (
    MathDisplay,
    UnrenderableExpression,
    format_math,
    format_unrendered_math,
)

STASH_PREFIX = "BLOGGENSTASH"
LITERAL_DOLLAR = "&#36;"

# Delimited bodies may wrap lines but never run past a blank line.
_WITHIN_PARAGRAPH = r"(?:(?!\n[ \t]*\n).)+?"
_MATH_RE = re.compile(
    rf"(?P<code>`+){_WITHIN_PARAGRAPH}(?P=code)"
    r"|(?P<escaped>\\\$)"
    rf"|\$\$(?P<dollar_block>{_WITHIN_PARAGRAPH})\$\$"
    rf"|\\\[(?P<bracket_block>{_WITHIN_PARAGRAPH})\\\]"
    rf"|\\\((?P<paren_inline>{_WITHIN_PARAGRAPH})\\\)"
    r"|\$(?P<dollar_inline>[^\s$](?:[^$\n]*?[^\s$\\])?)\$(?!\d)",
    re.DOTALL,
)
_MATH_GROUPS: tuple[tuple[str, MathDisplay], ...] = (
    ("dollar_block", "block"),
    ("bracket_block", "block"),
    ("paren_inline", "inline"),
    ("dollar_inline", "inline"),
)
# Only `{: ...}`, `{#id}` and `{.class}` are attribute lists; `{braces}` is heading text.
_TRAILING_ATTR_LIST = re.compile(r"\s*\{(?::|(?=\s*[#.]))[^}]*\}\s*$")
_CODE_SPAN_RE = re.compile(r"(`+).+?\1")
_UNESCAPED_BRACE_RE = re.compile(r"(?<!\\)[{}]")

logger = logging.getLogger(__name__)


def stash_token(nonce: str, index: int) -> str:
    return f"{STASH_PREFIX}{nonce}N{index}X"


def stash_token_re(nonce: str) -> re.Pattern[str]:
    return re.compile(STASH_PREFIX + re.escape(nonce) + r"N(?P<index>\d+)X")


@dataclass
class StageContext:
    """Mutable state for one document's pass through the stages.

    `nonce` makes this render's stash tokens distinct from anything the author
    wrote, so body text that happens to look like a token is left alone.
    """

    toc_config: TocConfig = field(default_factory=TocConfig)
    stash: list[str] = field(default_factory=list)
    toc: list[TocEntry] = field(default_factory=list)
    issues: list[ContentIssue] = field(default_factory=list)
    anchors: AnchorRegistry = field(default_factory=AnchorRegistry)
    nonce: str = field(default_factory=lambda: secrets.token_hex(4))

    def stash_html(self, html: str) -> str:
        """Keep rendered HTML aside and return the token standing in for it."""
        self.stash.append(html)
        return stash_token(self.nonce, len(self.stash) - 1)

    def record_issue(self, code: str, message: str) -> None:
        self.issues.append(ContentIssue(code=code, message=message))


MarkdownStage = Callable[[str, StageContext], str]


def _rewrite_segments(
    body: str,
    context: StageContext,
    *,
    kind: str,
    rewrite: Callable[[Segment, StageContext], str],
) -> str:
    parts: list[str] = []
    for segment in split_segments(body):
        parts.append(rewrite(segment, context) if segment.kind == kind else segment.text)
    return "\n".join(parts)


def _render_math_fragment(
    source: str,
    latex: str,
    display: MathDisplay,
    context: StageContext,
) -> str:
    try:
        html = format_math(latex, display=display)
    except UnrenderableExpression as exc:
        logger.warning("math.unrenderable source=%r error=%s", source, exc)
        context.record_issue("math_unrenderable", str(exc))
        html = format_unrendered_math(source)
    return context.stash_html(html)


def _rewrite_math(segment: Segment, context: StageContext) -> str:
    def replace_match(match: re.Match[str]) -> str:
        if match.group("code"):
            return match.group(0)
        if match.group("escaped"):
            return LITERAL_DOLLAR
        source = match.group(0)
        for name, display in _MATH_GROUPS:
            latex = match.group(name)
            if latex is not None:
                return _render_math_fragment(source, latex, display, context)
        return source

    return _MATH_RE.sub(replace_match, segment.text)


def math_stage(body: str, context: StageContext) -> str:
    """Replace math delimited prose fragments with rendered MathML."""
    return _rewrite_segments(body, context, kind="prose", rewrite=_rewrite_math)


def _rewrite_fence(segment: Segment, context: StageContext) -> str:
    language = segment.info.split()[0] if segment.info else ""
    code_lines = segment.lines[1:-1] if segment.closed else segment.lines[1:]
    if not segment.closed:
        context.record_issue("code_fence_unclosed", "Code fence runs to end of document.")
    token = context.stash_html(format_code_block("\n".join(code_lines), language))
    return f"\n{token}\n"


def code_stage(body: str, context: StageContext) -> str:
    """Replace fenced code blocks with highlighted HTML blocks."""
    return _rewrite_segments(body, context, kind="fence", rewrite=_rewrite_fence)


def _heading_search_depth(quote_prefix: str) -> int:
    return 1 + quote_prefix.count(">")


def _escape_braces(text: str) -> str:
    """Backslash-escape braces outside code spans so attr_list leaves them as text."""
    parts: list[str] = []
    position = 0
    for match in _CODE_SPAN_RE.finditer(text):
        parts.append(_UNESCAPED_BRACE_RE.sub(r"\\\g<0>", text[position : match.start()]))
        parts.append(match.group(0))
        position = match.end()
    parts.append(_UNESCAPED_BRACE_RE.sub(r"\\\g<0>", text[position:]))
    return "".join(parts)


def _rewrite_heading(segment: Segment, context: StageContext) -> str:
    if len(segment.lines) == 2:
        underline = segment.lines[1]
        setext = SETEXT_UNDERLINE_RE.match(underline)
        if setext is None:
            return segment.text
        quote = ""
        level = 1 if setext.group("marks")[0] == "=" else 2
        raw_text = _TRAILING_ATTR_LIST.sub("", segment.lines[0]).strip()
    else:
        match = HEADING_RE.match(segment.lines[0])
        if match is None:
            return segment.text
        quote = match.group("quote")
        level = len(match.group("marks"))
        raw_text = _TRAILING_ATTR_LIST.sub("", match.group("text")).strip().rstrip("#").strip()

    text = heading_plain_text(raw_text.replace("\\$", "$"))
    anchor = context.anchors.anchor_for(raw_text)
    config = context.toc_config
    if (
        2 <= level <= 1 + config.max_depth
        and _heading_search_depth(quote) <= config.max_search_depth
    ):
        context.toc.append(TocEntry(level=level, text=text, anchor=anchor))
    shown = _escape_braces(raw_text).replace("\\$", LITERAL_DOLLAR)
    attrs = f"{{: #{anchor} .heading .heading--{level} }}"
    if len(segment.lines) == 2:
        return f"{shown} {attrs}\n{underline}"
    return f"{quote}{'#' * level} {shown} {attrs}"


def anchor_stage(body: str, context: StageContext) -> str:
    """Give each heading a unique anchor and record the TOC entries."""
    return _rewrite_segments(body, context, kind="heading", rewrite=_rewrite_heading)


MARKDOWN_STAGES: tuple[MarkdownStage, ...] = (math_stage, code_stage, anchor_stage)


def run_stages(
    body: str,
    context: StageContext,
    stages: tuple[MarkdownStage, ...] = MARKDOWN_STAGES,
) -> str:
    """Apply the stages in order, threading the body through each one."""
    for stage in stages:
        body = stage(body, context)
    return body


def restore_stash(html: str, stash: list[str], nonce: str) -> str:
    """Swap this render's placeholder tokens (bare or paragraph-wrapped) for stashed HTML.

    A token whose index has no stashed fragment is left as it is.
    """
    token_re = stash_token_re(nonce)

    def lookup(match: re.Match[str]) -> str:
        index = int(match.group("index"))
        return stash[index] if index < len(stash) else match.group(0)

    block_tokens = re.compile(r"<p>\s*" + token_re.pattern + r"\s*</p>")
    html = block_tokens.sub(lookup, html)
    return token_re.sub(lookup, html)
