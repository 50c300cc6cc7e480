"""Static code block generation using Pygments.

Converts fenced code into the HTML structure expected by the site styles.
"""

from __future__ import annotations

import logging
from html import escape

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

PLAIN_LANGUAGE = "text"

logger = logging.getLogger(__name__)


def resolve_lexer(language: str) -> Lexer | None:
    """Return a lexer for the language tag, or None when it is unknown."""
    if not language or language == PLAIN_LANGUAGE:
        return None
    try:
        return get_lexer_by_name(language, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return None


def highlight_code(code: str, language: str) -> str:
    """
    Highlight code with Pygments token spans.

    Args:
        code: The source code to highlight
        language: Language tag from the fence info string

    Returns:
        HTML for the inside of the `<code>` element; unknown languages fall
        back to escaped plain text
    """
    # Strip trailing newlines to avoid extra blank lines in output
    code = code.rstrip("\n")
    lexer = resolve_lexer(language)
    if lexer is None:
        if language and language != PLAIN_LANGUAGE:
            logger.info("code.passthrough language=%s", language)
        return escape(code)
    formatter = HtmlFormatter(nowrap=True, classprefix="tok-")
    return highlight(code, lexer, formatter).rstrip("\n")


def format_code_block(code: str, language: str) -> str:
    """
    Generate the complete HTML structure for a code block.

    Args:
        code: The source code
        language: Language tag; empty means unspecified

    Returns:
        HTML with language tag and scroll wrapper hooks
    """
    tag = language or PLAIN_LANGUAGE
    highlighted = highlight_code(code, tag)
    return f"""<div class="code-block">
    <span class="code-language-tag">{escape(tag)}</span>
    <div class="code-scroll">
        <pre><code class="language-{escape(tag, quote=True)} highlight">{highlighted}</code></pre>
    </div>
</div>"""
