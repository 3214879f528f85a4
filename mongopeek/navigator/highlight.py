"""
Highlight-range engine.

Works out which rendered lines belong to the value under the cursor, using
nothing but leading whitespace. The same range drives the on-screen
highlight and the copy operation.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from .lines import leading_width


def _is_document_close(line: str) -> bool:
    return leading_width(line) == 0 and line.strip() in ("}", "},")


def next_lines_to_highlight(lines: Sequence[str], selected: int) -> int:
    """Count the lines after ``selected`` that belong to the same value.

    Returns 0 when only the selected line is highlighted. Selecting the
    opening line of the document highlights everything.

    Examples:
        >>> rendered = ['{', '  "object": {', '    "nested": "x"', '  }', '}']
        >>> next_lines_to_highlight(rendered, 1)
        2
    """
    if not 0 <= selected < len(lines):
        return 0
    if selected == 0:
        return len(lines) - 1

    current_indent = leading_width(lines[selected])
    if current_indent == 0:
        return 0

    count = 0
    nested = False
    for line in lines[selected + 1 :]:
        if _is_document_close(line):
            break
        next_indent = leading_width(line)

        if nested:
            if 0 < next_indent < current_indent:
                break
            count += 1
            if next_indent == current_indent:
                # Closing bracket of the nested block
                break
            continue

        if next_indent == 0:
            # Wrapped continuation of the value
            count += 1
        elif next_indent > current_indent:
            count += 1
            nested = True
        else:
            # Sibling key or end of the enclosing block
            break
    return count


def highlight_range(lines: Sequence[str], selected: int) -> Tuple[int, int]:
    """Return ``(start, end)`` absolute indices, ``end`` exclusive."""
    if not 0 <= selected < len(lines):
        return selected, selected
    return selected, selected + next_lines_to_highlight(lines, selected) + 1
