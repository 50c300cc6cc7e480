"""LaTeX math to MathML rendering for inline and display expressions."""

from __future__ import annotations

from html import escape
from typing import Literal

from latex2mathml.converter import convert

MathDisplay = Literal["inline", "block"]


class UnrenderableExpression(ValueError):
    """Raised when a single math or code fragment cannot be rendered."""


def _check_braces(latex: str) -> None:
    depth = 0
    index = 0
    while index < len(latex):
        char = latex[index]
        if char == "\\":
            index += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                raise UnrenderableExpression("Unbalanced '}' in math expression.")
        index += 1
    if depth:
        raise UnrenderableExpression("Unbalanced '{' in math expression.")


def render_math(latex: str, *, display: MathDisplay = "inline") -> str:
    """Render LaTeX to a MathML `<math>` element."""
    tex = latex.strip()
    if not tex:
        raise UnrenderableExpression("Empty math expression.")
    _check_braces(tex)
    try:
        return convert(tex, display=display)
    except Exception as exc:  # noqa: BLE001
        raise UnrenderableExpression(f"Cannot render {tex!r}: {exc}") from exc


def format_math(latex: str, *, display: MathDisplay = "inline") -> str:
    """Wrap rendered math in the inline span or display div used by the site."""
    mathml = render_math(latex, display=display)
    if display == "block":
        return f'<div class="math math-display">{mathml}</div>'
    return f'<span class="math math-inline">{mathml}</span>'


def format_unrendered_math(source: str) -> str:
    """Show the raw expression source when rendering failed."""
    return f'<span class="math math--unrendered">{escape(source)}</span>'
