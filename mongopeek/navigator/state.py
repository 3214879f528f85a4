"""
Navigator state machine.

Owns the scroll position and the selected line of one rendered document.
``selected_line`` is relative to the window; the absolute line under the
cursor is ``scroll_position + selected_line``.

Not thread-safe: a single view (or its event loop) must own each navigator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Protocol, Tuple

from .highlight import highlight_range
from .lines import Line, wrap_lines
from .selection import CopyMode, selection_text

logger = logging.getLogger(__name__)


class ClipboardWriter(Protocol):
    def write(self, text: str) -> None: ...


@dataclass
class NavigatorState:
    """Scroll and selection over a list of rendered lines.

    Invariants:
        0 <= scroll_position <= end_position
        0 <= selected_line < min(window_height, len(lines))
    """

    lines: List[str] = field(default_factory=list)
    scroll_position: int = 0
    selected_line: int = 0
    window_height: int = 1

    @property
    def total(self) -> int:
        return len(self.lines)

    @property
    def end_position(self) -> int:
        return max(0, self.total - self.window_height)

    @property
    def visible_count(self) -> int:
        return min(self.window_height, self.total)

    @property
    def absolute_line(self) -> int:
        return self.scroll_position + self.selected_line

    def clamp(self) -> None:
        """Pull scroll and selection back inside the invariants."""
        self.scroll_position = max(0, min(self.scroll_position, self.end_position))
        self.selected_line = max(0, min(self.selected_line, self.visible_count - 1))


class DocumentNavigator:
    """Moves a cursor through rendered document text and copies values."""

    def __init__(self, text: str = "", width: int = 0, height: int = 1):
        self._text = text
        self._width = width
        self._wrapped: List[Line] = wrap_lines(text, width)
        self.state = NavigatorState(
            lines=[line.text for line in self._wrapped],
            window_height=max(1, height),
        )

    @property
    def text(self) -> str:
        return self._text

    @property
    def lines(self) -> List[str]:
        return self.state.lines

    def _rewrap(self) -> None:
        self._wrapped = wrap_lines(self._text, self._width)
        self.state.lines = [line.text for line in self._wrapped]

    def open(self, text: str) -> None:
        """Show new text and reset the cursor to the top."""
        self._text = text
        self._rewrap()
        self.state.scroll_position = 0
        self.state.selected_line = 0

    def resize(self, width: int, height: int) -> None:
        """Re-wrap for a new view size, keeping the cursor where possible."""
        self._width = width
        self.state.window_height = max(1, height)
        self._rewrap()
        self.state.clamp()

    # -- movement --------------------------------------------------------

    def move_down(self) -> None:
        state = self.state
        if state.selected_line < state.visible_count - 1:
            state.selected_line += 1
        elif state.scroll_position < state.end_position:
            state.scroll_position += 1

    def move_up(self) -> None:
        state = self.state
        if state.selected_line > 0:
            state.selected_line -= 1
        elif state.scroll_position > 0:
            state.scroll_position -= 1

    def move_to_top(self) -> None:
        self.state.scroll_position = 0
        self.state.selected_line = 0

    def move_to_bottom(self) -> None:
        state = self.state
        state.scroll_position = state.end_position
        state.selected_line = max(0, state.visible_count - 1)

    def page_down(self) -> None:
        for _ in range(max(1, self.state.window_height // 2)):
            self.move_down()

    def page_up(self) -> None:
        for _ in range(max(1, self.state.window_height // 2)):
            self.move_up()

    # -- selection -------------------------------------------------------

    def visible_range(self) -> Tuple[int, int]:
        start = self.state.scroll_position
        return start, min(start + self.state.window_height, self.state.total)

    def highlighted_range(self) -> Tuple[int, int]:
        """Absolute ``(start, end)`` of the highlighted value, ``end`` exclusive."""
        return highlight_range(self.state.lines, self.state.absolute_line)

    def highlighted_lines(self) -> List[Line]:
        start, end = self.highlighted_range()
        return self._wrapped[start:end]

    def selection_text(self, mode: str = CopyMode.FULL) -> str:
        return selection_text(self.highlighted_lines(), mode)

    def copy_selection(self, mode: str, clipboard: ClipboardWriter) -> str:
        """Copy the highlighted value to ``clipboard`` and return the text."""
        text = self.selection_text(mode)
        clipboard.write(text)
        logger.debug("Copied %d characters (%s)", len(text), mode)
        return text
