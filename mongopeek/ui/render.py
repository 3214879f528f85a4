"""
Painting navigator lines as Rich text.

Keys, values and brackets get their own colours; the selected line carries
a ``>`` marker and every line of the highlighted value gets a background.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from rich.style import Style
from rich.text import Text

from mongopeek.navigator.state import NavigatorState

_KEY_RE = re.compile(r'^(\s*)("(?:[^"\\]|\\.)*")(\s*:)')
_BRACKETS = "{}[]"

SELECTED_MARKER = "> "
UNSELECTED_MARKER = "  "


@dataclass(frozen=True)
class ViewerColors:
    key: str = "#F1FA8C"
    value: str = "#FFFFFF"
    bracket: str = "#FFFFFF"
    highlight: str = "#44475A"
    marker: str = "#50FA7B"


DEFAULT_COLORS = ViewerColors()

# Scanner states carried from one wrapped line to the next
_OUTSIDE, _INSIDE, _ESCAPED = 0, 1, 2


def _paint_value(text: Text, value: str, colors: ViewerColors, state: int = _OUTSIDE) -> int:
    """Append ``value`` to ``text``; return the string state at its end."""
    start = 0
    for i, ch in enumerate(value):
        if state == _ESCAPED:
            state = _INSIDE
        elif state == _INSIDE:
            if ch == "\\":
                state = _ESCAPED
            elif ch == '"':
                state = _OUTSIDE
        elif ch == '"':
            state = _INSIDE
        elif ch in _BRACKETS:
            if i > start:
                text.append(value[start:i], style=colors.value)
            text.append(ch, style=colors.bracket)
            start = i + 1
    if start < len(value):
        text.append(value[start:], style=colors.value)
    return state


def _paint(line: str, colors: ViewerColors, state: int) -> Tuple[Text, int]:
    text = Text()
    rest = line
    match = _KEY_RE.match(line) if state == _OUTSIDE else None
    if match:
        text.append(match.group(1))
        text.append(match.group(2), style=colors.key)
        text.append(match.group(3), style=colors.value)
        rest = line[match.end() :]
    return text, _paint_value(text, rest, colors, state)


def paint_line(line: str, colors: ViewerColors = DEFAULT_COLORS) -> Text:
    """Colour one rendered line."""
    return _paint(line, colors, _OUTSIDE)[0]


def paint_lines(
    lines: Sequence[str],
    state: NavigatorState,
    highlight: Tuple[int, int],
    colors: ViewerColors = DEFAULT_COLORS,
) -> Text:
    """Paint the visible window of ``lines``.

    A string value wrapped over several lines stays coloured as a value,
    brackets included.

    Args:
        lines: Every rendered line of the document.
        state: Scroll position, selection and window height.
        highlight: Absolute ``(start, end)`` of the highlighted value.
        colors: Palette to use.
    """
    start = state.scroll_position
    end = min(start + state.window_height, len(lines))
    scan = _OUTSIDE
    for line in lines[:start]:
        scan = _paint(line, colors, scan)[1]

    painted: List[Text] = []
    for index in range(start, end):
        selected = index == state.absolute_line
        row = Text(SELECTED_MARKER if selected else UNSELECTED_MARKER, style=colors.marker)
        text, scan = _paint(lines[index], colors, scan)
        row.append_text(text)
        if highlight[0] <= index < highlight[1]:
            row.stylize(Style(bgcolor=colors.highlight))
        painted.append(row)
    return Text("\n").join(painted)
