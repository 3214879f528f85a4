"""Turning highlighted lines into clipboard text."""

from __future__ import annotations

import re
from enum import Enum
from typing import List, Sequence

from .lines import Line, join_lines

_KEY_PREFIX_RE = re.compile(r'^\s*"(?:[^"\\]|\\.)*"\s*:\s*')


class CopyMode(str, Enum):
    """What part of the highlighted value to copy."""

    FULL = "full"
    VALUE = "value"


def clean_json_whitespace(text: str) -> str:
    """Collapse whitespace outside string literals and pad braces.

    Runs of whitespace (newlines included) become one space, ``{`` and ``}``
    get one space on their inner side, and text inside quotes is untouched.
    """
    out: List[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
            if out and out[-1] == "{":
                out.append(" ")
            out.append(ch)
        elif ch.isspace():
            if out and out[-1] != " ":
                out.append(" ")
        elif ch == "}":
            if out and out[-1] not in (" ", "{"):
                out.append(" ")
            out.append(ch)
        else:
            if out and out[-1] == "{" and ch != "}":
                out.append(" ")
            out.append(ch)
    return "".join(out)


def _trim(text: str) -> str:
    text = text.strip()
    if text.endswith(","):
        text = text[:-1].rstrip()
    return text


def selection_text(lines: Sequence[Line], mode: str = CopyMode.FULL) -> str:
    """Build the text copied for the highlighted ``lines``.

    ``full`` copies the key and value on one line; ``value`` drops the
    leading ``"key":``. Any other mode copies the lines as displayed.
    """
    joined = join_lines(lines)
    if mode not in (CopyMode.FULL, CopyMode.VALUE):
        return joined.strip()

    text = _trim(clean_json_whitespace(joined))
    if mode == CopyMode.VALUE:
        text = _trim(_KEY_PREFIX_RE.sub("", text, count=1))
    return text
