from __future__ import annotations

import pytest

from blog_gen.core.content_schema import TocConfig
from blog_gen.core.markdown_blocks import split_segments
from blog_gen.core.markdown_processor import process_markdown
from blog_gen.core.markdown_stages import (
    MARKDOWN_STAGES,
    StageContext,
    anchor_stage,
    code_stage,
    math_stage,
    restore_stash,
    run_stages,
    stash_token,
)
from blog_gen.core.math_rendering import UnrenderableExpression, render_math


def test_stages_run_math_then_code_then_anchors() -> None:
    assert MARKDOWN_STAGES == (math_stage, code_stage, anchor_stage)


def test_split_segments_separates_fences_headings_and_prose() -> None:
    body = "Intro line\n## Heading\n```python\n# comment\n```\nTail"
    kinds = [segment.kind for segment in split_segments(body)]
    assert kinds == ["prose", "heading", "fence", "prose"]


def test_unclosed_fence_runs_to_end_of_body() -> None:
    segments = split_segments("Before\n```\ncode\n## not a heading")
    assert [segment.kind for segment in segments] == ["prose", "fence"]
    assert segments[1].closed is False


def test_math_stage_renders_inline_and_display_math() -> None:
    context = StageContext()
    staged = math_stage("Energy $E = mc^2$ and\n\n$$x^2$$", context)
    assert len(context.stash) == 2
    assert "$" not in staged
    assert context.stash[0].startswith('<span class="math math-inline"><math')
    assert context.stash[1].startswith('<div class="math math-display"><math')


def test_math_failure_is_isolated_to_its_fragment() -> None:
    context = StageContext()
    staged = math_stage(r"Inline $a+b$ and broken $\frac{1}{2$ and $c$.", context)
    html = restore_stash(staged, context.stash, context.nonce)
    assert html.count("<math") == 2
    assert r'<span class="math math--unrendered">$\frac{1}{2$</span>' in html
    assert [issue.code for issue in context.issues] == ["math_unrenderable"]


def test_dollar_amounts_are_not_math() -> None:
    context = StageContext()
    text = "Lunch was $5 and dinner was $10 today."
    assert math_stage(text, context) == text
    assert context.stash == []


def test_escaped_dollars_and_code_spans_are_left_alone() -> None:
    context = StageContext()
    text = r"Costs \$3 and \$4, while `$x$` and `\$y` stay literal."
    staged = math_stage(text, context)
    assert staged == r"Costs &#36;3 and &#36;4, while `$x$` and `\$y` stay literal."
    assert context.stash == []
    html = process_markdown(r"Costs \$3 today.").html
    assert "<p>Costs &#36;3 today.</p>" in html


def test_unbalanced_display_delimiter_stays_in_its_paragraph() -> None:
    for opener, closer in (("$$", "$$"), ("\\[", "\\]")):
        context = StageContext()
        body = (
            f"Broken {opener} opener.\n\nPlain prose paragraph.\n\n"
            f"Good {opener}x^2{closer} here."
        )
        staged = math_stage(body, context)
        assert "\n\nPlain prose paragraph.\n\n" in staged
        assert staged.startswith(f"Broken {opener} opener.")
        assert len(context.stash) == 1
        assert "<msup>" in context.stash[0]
        assert "x^2" not in staged


def test_display_math_may_wrap_lines_within_a_paragraph() -> None:
    context = StageContext()
    staged = math_stage("$$\na + b\n$$", context)
    assert staged == stash_token(context.nonce, 0)


def test_stray_backtick_does_not_hide_math_in_later_paragraphs() -> None:
    context = StageContext()
    staged = math_stage("Type a ` to start code.\n\nThen $x^2$ and `y` later.", context)
    assert len(context.stash) == 1
    assert staged.startswith("Type a ` to start code.\n\nThen ")
    assert staged.endswith(" and `y` later.")


def test_math_stage_does_not_touch_headings_or_fences() -> None:
    context = StageContext()
    body = "## Cost $x$\n```\n$y$\n```\nBody $z$"
    staged = math_stage(body, context)
    lines = staged.split("\n")
    assert lines[0] == "## Cost $x$"
    assert lines[2] == "$y$"
    assert len(context.stash) == 1


def test_render_math_rejects_unbalanced_braces() -> None:
    with pytest.raises(UnrenderableExpression):
        render_math(r"\frac{1}{2")
    with pytest.raises(UnrenderableExpression):
        render_math("   ")


def test_code_stage_highlights_known_languages() -> None:
    context = StageContext()
    staged = code_stage("```python\nprint('hi')\n```", context)
    assert stash_token(context.nonce, 0) in staged
    block = context.stash[0]
    assert '<span class="code-language-tag">python</span>' in block
    assert 'class="language-python highlight"' in block
    assert 'class="tok-' in block


def test_code_stage_passes_unknown_language_through_escaped() -> None:
    context = StageContext()
    code_stage("```nosuchlang\n<b>x</b>\n```", context)
    block = context.stash[0]
    assert "&lt;b&gt;x&lt;/b&gt;" in block
    assert 'class="language-nosuchlang highlight"' in block
    assert context.issues == []


def test_code_stage_records_unclosed_fence() -> None:
    context = StageContext()
    code_stage("```\nnever closed", context)
    assert "never closed" in context.stash[0]
    assert [issue.code for issue in context.issues] == ["code_fence_unclosed"]


def test_anchor_stage_rewrites_headings_with_attribute_lists() -> None:
    context = StageContext()
    staged = anchor_stage("## Setup\n\n## Setup ##\n\ntext", context)
    lines = staged.split("\n")
    assert lines[0] == "## Setup {: #setup .heading .heading--2 }"
    assert lines[2] == "## Setup {: #setup-1 .heading .heading--2 }"
    assert [entry.anchor for entry in context.toc] == ["setup", "setup-1"]


def test_anchor_stage_applies_depth_and_search_depth() -> None:
    context = StageContext(toc_config=TocConfig(max_depth=2, max_search_depth=1))
    body = "# Title\n## Kept\n### Also kept\n#### Too deep\n> ## Quoted"
    anchor_stage(body, context)
    assert [entry.text for entry in context.toc] == ["Kept", "Also kept"]


def test_anchor_stage_ignores_headings_inside_code() -> None:
    context = StageContext()
    staged = run_stages("```bash\n# not a heading\n```\n\n## Real", context)
    assert [entry.text for entry in context.toc] == ["Real"]
    assert "not a heading" in context.stash[0]
    assert "{: #real" in staged


def test_restore_stash_unwraps_block_tokens() -> None:
    html = f"<p>{stash_token('ab12', 0)}</p>\n<p>see {stash_token('ab12', 1)} here</p>"
    restored = restore_stash(html, ["<div>block</div>", "<span>inline</span>"], "ab12")
    assert restored == "<div>block</div>\n<p>see <span>inline</span> here</p>"


def test_restore_stash_leaves_foreign_and_out_of_range_tokens() -> None:
    stash = ["<b>x</b>"]
    html = (
        f"<p>{stash_token('ab12', 0)} BLOGGENSTASH0007X "
        f"{stash_token('ab12', 12000)} {stash_token('cd34', 0)}</p>"
    )
    restored = restore_stash(html, stash, "ab12")
    assert restored == (
        f"<p><b>x</b> BLOGGENSTASH0007X {stash_token('ab12', 12000)} "
        f"{stash_token('cd34', 0)}</p>"
    )


def test_stash_tokens_keep_counting_past_four_digits() -> None:
    context = StageContext()
    for index in range(10001):
        context.stash_html(f"<i>{index}</i>")
    token = stash_token(context.nonce, 10000)
    assert restore_stash(f"<p>{token}</p>", context.stash, context.nonce) == "<i>10000</i>"


def test_token_lookalikes_in_body_text_survive_rendering() -> None:
    html = process_markdown("The token BLOGGENSTASH0007X appears in $x$ prose.").html
    assert "BLOGGENSTASH0007X" in html
    assert "<math" in html


def test_split_segments_detects_indented_code_after_a_break() -> None:
    body = "Para.\n\n    cost = $a$\n\n    total = $b$\n\nAfter."
    segments = split_segments(body)
    assert [segment.kind for segment in segments] == ["prose", "indented", "prose"]
    assert segments[1].lines == ("    cost = $a$", "", "    total = $b$")
    assert "\n".join(segment.text for segment in segments) == body


def test_indented_lines_after_list_items_stay_prose() -> None:
    segments = split_segments("- item\n\n    more of the item\n\nLine\n    wrapped")
    assert [segment.kind for segment in segments] == ["prose"]


def test_math_stage_skips_indented_code() -> None:
    context = StageContext()
    body = "Para $x$.\n\n\tcost = $a$ + $b$\n"
    staged = math_stage(body, context)
    assert staged.endswith("\n\n\tcost = $a$ + $b$\n")
    assert len(context.stash) == 1


def test_split_segments_detects_setext_headings() -> None:
    segments = split_segments("Intro\n\nSetup\n-----\n\nTitle\n===\ntext\nnot a title\n---")
    kinds = [segment.kind for segment in segments]
    assert kinds == ["prose", "heading", "prose", "heading", "prose"]
    assert segments[1].lines == ("Setup", "-----")
    assert segments[3].lines == ("Title", "===")
    assert segments[4].lines == ("text", "not a title", "---")


def test_anchor_stage_rewrites_setext_headings() -> None:
    context = StageContext()
    staged = anchor_stage("Title\n=====\n\nSetup\n-----\n\ntext", context)
    assert staged.split("\n")[:5] == [
        "Title {: #title .heading .heading--1 }",
        "=====",
        "",
        "Setup {: #setup .heading .heading--2 }",
        "-----",
    ]
    assert [(entry.level, entry.anchor) for entry in context.toc] == [(2, "setup")]


def test_anchor_stage_keeps_braces_that_are_not_attribute_lists() -> None:
    context = StageContext()
    staged = anchor_stage("## Using {braces}\n\n## Styled {: .wide}\n\n## Named {#custom}", context)
    lines = staged.split("\n")
    assert lines[0] == r"## Using \{braces\} {: #using-braces .heading .heading--2 }"
    assert lines[2] == "## Styled {: #styled .heading .heading--2 }"
    assert lines[4] == "## Named {: #named .heading .heading--2 }"
    assert [entry.text for entry in context.toc] == ["Using {braces}", "Styled", "Named"]


def test_anchor_stage_is_idempotent_across_runs() -> None:
    body = "## Setup\n\n## Setup\n\n### Notes & caveats"
    first, second = StageContext(), StageContext()
    assert anchor_stage(body, first) == anchor_stage(body, second)
    assert first.toc == second.toc
