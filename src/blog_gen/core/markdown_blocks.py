"""Line-level segmentation of a markdown body into code blocks, headings, and prose."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

FENCE_OPEN_RE = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
HEADING_RE = re.compile(r"^(?P<quote>(?:> ?)*)(?P<marks>#{1,6})(?P<text>.*)$")
SETEXT_UNDERLINE_RE = re.compile(r"^(?P<marks>=+|-+)[ ]*$")
LIST_ITEM_RE = re.compile(r"^ {0,3}(?:[*+-]|\d+\.)[ \t]")

SegmentKind = Literal["fence", "indented", "heading", "prose"]


@dataclass(frozen=True)
class Segment:
    """A run of body lines sharing one kind."""

    kind: SegmentKind
    lines: tuple[str, ...]
    fence: str = ""
    info: str = ""
    closed: bool = True

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


def is_heading_line(line: str) -> bool:
    match = HEADING_RE.match(line)
    if match is None:
        return False
    return bool(match.group("text").strip().strip("#").strip())


def _closes_fence(line: str, fence: str) -> bool:
    stripped = line.strip()
    return (
        len(line) - len(line.lstrip(" ")) <= 3
        and bool(stripped)
        and set(stripped) == {fence[0]}
        and len(stripped) >= len(fence)
    )

def is_setext_underline(line: str) -> bool:
    return SETEXT_UNDERLINE_RE.match(line) is not None


def is_indented_code_line(line: str) -> bool:
    return bool(line.strip()) and line.expandtabs(4).startswith("    ")


def _continues_list(line: str) -> bool:
    return LIST_ITEM_RE.match(line) is not None or is_indented_code_line(line)


def split_segments(body: str) -> list[Segment]:
    """Group body lines into fenced code, indented code, headings, and prose runs.

    A fence is closed by a line of the same character at least as long as the
    opener; an unclosed fence runs to the end of the body. Indented code and
    setext headings only start a block, that is at the top of the body, after a
    blank line, or right after another segment. An indented run that follows a
    list item is list continuation and stays prose.
    """
    lines = body.split("\n")
    segments: list[Segment] = []
    prose: list[str] = []
    last_text = ""

    def flush_prose() -> None:
        if prose:
            segments.append(Segment(kind="prose", lines=tuple(prose)))
            prose.clear()

    index = 0
    while index < len(lines):
        line = lines[index]
        block_start = not prose or not prose[-1].strip()
        if block_start and is_indented_code_line(line) and not _continues_list(last_text):
            flush_prose()
            block = [line]
            index += 1
            while index < len(lines) and (
                not lines[index].strip() or is_indented_code_line(lines[index])
            ):
                block.append(lines[index])
                index += 1
            trailing: list[str] = []
            while not block[-1].strip():
                trailing.insert(0, block.pop())
            segments.append(Segment(kind="indented", lines=tuple(block)))
            prose.extend(trailing)
            last_text = block[-1]
            continue
        fence_match = FENCE_OPEN_RE.match(line)
        if fence_match and not (
            fence_match.group("fence")[0] == "`" and "`" in fence_match.group("info")
        ):
            flush_prose()
            fence = fence_match.group("fence")
            block = [line]
            index += 1
            closed = False
            while index < len(lines):
                block.append(lines[index])
                index += 1
                if _closes_fence(block[-1], fence):
                    closed = True
                    break
            segments.append(
                Segment(
                    kind="fence",
                    lines=tuple(block),
                    fence=fence,
                    info=fence_match.group("info").strip(),
                    closed=closed,
                )
            )
            last_text = block[-1]
            continue
        if is_heading_line(line):
            flush_prose()
            segments.append(Segment(kind="heading", lines=(line,)))
            last_text = line
            index += 1
            continue
        if (
            block_start
            and line.strip()
            and not is_indented_code_line(line)
            and index + 1 < len(lines)
            and is_setext_underline(lines[index + 1])
        ):
            flush_prose()
            segments.append(Segment(kind="heading", lines=(line, lines[index + 1])))
            last_text = lines[index + 1]
            index += 2
            continue
        prose.append(line)
        if line.strip():
            last_text = line
        index += 1

    flush_prose()
    return segments
