"""Line model, highlight engine and navigator for rendered documents."""

from .highlight import highlight_range, next_lines_to_highlight
from .lines import Line, join_lines, word_wrap, wrap_lines
from .selection import CopyMode, selection_text
from .state import DocumentNavigator, NavigatorState

__all__ = [
    "CopyMode",
    "DocumentNavigator",
    "Line",
    "NavigatorState",
    "highlight_range",
    "join_lines",
    "next_lines_to_highlight",
    "selection_text",
    "word_wrap",
    "wrap_lines",
]
