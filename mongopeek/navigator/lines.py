"""
Line model for rendered documents.

Rendered text is split into logical lines and wrapped to the view width.
The first segment of a logical line keeps its indentation; continuation
segments start at column zero, which is how the highlight engine tells a
wrapped value apart from a sibling key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class Line:
    """One on-screen line.

    Attributes:
        text: The visible text.
        indent: Width of the leading whitespace.
        continuation: True when this line continues the previous logical line.
    """

    text: str
    indent: int
    continuation: bool = False


def leading_width(text: str) -> int:
    """Width of the leading spaces and tabs of ``text``."""
    return len(text) - len(text.lstrip(" \t"))


def _wrap_logical(line: str, width: int) -> List[Line]:
    indent = leading_width(line)
    if width <= 0 or len(line) <= width:
        return [Line(line, indent)]

    segments: List[Line] = []
    rest = line
    first = True
    while len(rest) > width:
        # Break after the last space that still fits, never inside the indentation
        floor = leading_width(rest) if first else 0
        cut = rest.rfind(" ", floor, width + 1)
        cut = width if cut <= floor else cut + 1
        # A run of spaces stays on the segment it follows
        while cut < len(rest) and rest[cut] == " ":
            cut += 1
        segment, rest = rest[:cut], rest[cut:]
        segments.append(Line(segment, leading_width(segment) if first else 0, not first))
        first = False
        if not rest:
            break
    if rest:
        segments.append(Line(rest, 0, True))
    return segments


def wrap_lines(text: str, width: int) -> List[Line]:
    """Split ``text`` into lines wrapped at ``width`` columns.

    ``width <= 0`` disables wrapping. The result depends only on the
    arguments, so it can be recomputed on every layout change.
    """
    lines: List[Line] = []
    for logical in text.split("\n"):
        lines.extend(_wrap_logical(logical.rstrip("\r"), width))
    return lines


def word_wrap(text: str, width: int) -> List[str]:
    """Like ``wrap_lines`` but returns the line texts only."""
    return [line.text for line in wrap_lines(text, width)]


def join_lines(lines: Iterable[Line]) -> str:
    """Reassemble wrapped lines; the inverse of ``wrap_lines``."""
    parts: List[str] = []
    for index, line in enumerate(lines):
        if index and not line.continuation:
            parts.append("\n")
        parts.append(line.text)
    return "".join(parts)
