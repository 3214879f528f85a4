"""
Shell-style query text to strict extended JSON.

Users type queries the way the database shell accepts them::

    { name: /^john/i, _id: ObjectId("507f1f77bcf86cd799439011") }

``expand_shorthand`` rewrites that into strict extended-JSON text. The input
is scanned once, left to right, with the scanner always knowing whether it is
inside a string literal, so braces, colons and slashes inside strings are
never touched. Regex literals are recognised by position (only where a value
may start), which keeps ``[/a/, /b/i]`` element-local.
"""

from __future__ import annotations

import json
import re
from datetime import tzinfo
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from mongopeek.exceptions import CompileError

from .dates import parse_iso_date

# Characters allowed in an unquoted key
_BARE_TOKEN_RE = re.compile(r"[\w$.!@#%&*()+\-]+")

_CONSTRUCTOR_RE = re.compile(
    r"(ObjectId|ObjectID|ISODate|NumberInt|NumberLong|NumberDecimal|BinData|MinKey|MaxKey)\s*\("
)
_BARE_SENTINEL_RE = re.compile(r"(MinKey|MaxKey)(?![A-Za-z0-9_$])")
_NUMBER_ARG_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")

_REGEX_FLAGS = frozenset("gimsux")
_VALUE_START = frozenset(":[,")
_KEY_START = frozenset("{,")


class _Expander:
    """Single-pass rewriter; see ``expand_shorthand``."""

    def __init__(self, text: str, default_tz: Optional[tzinfo]) -> None:
        self.text = text
        self.pos = 0
        self.out: List[str] = []
        # Last structural character written, "" at the start
        self.last = ""
        self.default_tz = default_tz

    # -- helpers ---------------------------------------------------------

    def _peek_significant(self, pos: int) -> str:
        while pos < len(self.text) and self.text[pos].isspace():
            pos += 1
        return self.text[pos] if pos < len(self.text) else ""

    def _emit(self, chunk: str, last: str) -> None:
        self.out.append(chunk)
        self.last = last

    def _read_string(self, pos: int) -> Tuple[str, int]:
        """Read a quoted literal at ``pos``; return (decoded value, end position)."""
        quote = self.text[pos]
        i = pos + 1
        chars: List[str] = []
        while i < len(self.text):
            ch = self.text[i]
            if ch == "\\" and i + 1 < len(self.text):
                nxt = self.text[i + 1]
                if quote == "'" and nxt == "'":
                    chars.append("'")
                else:
                    chars.append(ch + nxt)
                i += 2
                continue
            if ch == quote:
                raw = "".join(chars)
                if quote == "'":
                    # Bare double quotes are legal inside single-quoted text
                    raw = re.sub(r'(?<!\\)((?:\\\\)*)"', r'\1\\"', raw)
                try:
                    return json.loads(f'"{raw}"'), i + 1
                except json.JSONDecodeError as e:
                    raise CompileError(
                        f"Invalid string literal: {e.msg}", fragment=self.text[pos : i + 1]
                    ) from e
            chars.append(ch)
            i += 1
        raise CompileError("Unterminated string literal", fragment=self.text[pos:])

    # -- main loop -------------------------------------------------------

    def run(self) -> str:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]

            if ch.isspace():
                self.out.append(ch)
                self.pos += 1
            elif ch in "\"'":
                value, end = self._read_string(self.pos)
                self._emit(json.dumps(value, ensure_ascii=False), '"')
                self.pos = end
            elif ch == "/" and self.last in _VALUE_START:
                self._regex_literal()
            elif ch in "{}[]:,":
                self._emit(ch, ch)
                self.pos += 1
            else:
                self._bare_token()
        return "".join(self.out)

    def _bare_token(self) -> None:
        text = self.text
        start = self.pos

        match = _CONSTRUCTOR_RE.match(text, start)
        if match:
            self._constructor(match.group(1), match.end())
            return
        match = _BARE_SENTINEL_RE.match(text, start)
        if match and self._peek_significant(match.end()) != ":":
            wrapper = "$minKey" if match.group(1) == "MinKey" else "$maxKey"
            self._emit(f'{{"{wrapper}": 1}}', "}")
            self.pos = match.end()
            return

        match = _BARE_TOKEN_RE.match(text, start)
        if not match:
            raise CompileError("Unexpected character", fragment=text[start : start + 20])

        token = match.group(0)
        if self.last in _KEY_START and self._peek_significant(match.end()) == ":":
            self._emit(json.dumps(token), '"')
        else:
            # true/false/null/numbers pass through; anything else fails to decode
            self._emit(token, token[-1])
        self.pos = match.end()

    def _regex_literal(self) -> None:
        text = self.text
        start = self.pos
        i = start + 1
        in_class = False
        while i < len(text):
            ch = text[i]
            if ch == "\\" and i + 1 < len(text):
                i += 2
                continue
            if ch == "\n":
                break
            if ch == "[":
                in_class = True
            elif ch == "]":
                in_class = False
            elif ch == "/" and not in_class:
                break
            i += 1
        if i >= len(text) or text[i] != "/":
            raise CompileError("Unterminated regular expression", fragment=text[start:i])

        pattern = text[start + 1 : i]
        if not pattern:
            raise CompileError("Empty regular expression", fragment=text[start : i + 1])
        i += 1
        flag_start = i
        while i < len(text) and text[i].isalpha():
            i += 1
        flags = text[flag_start:i]
        if set(flags) - _REGEX_FLAGS:
            raise CompileError("Unknown regular expression flag", fragment=text[start:i])

        chunk = '{"$regex": ' + json.dumps(pattern, ensure_ascii=False)
        if flags:
            chunk += ', "$options": ' + json.dumps(flags)
        self._emit(chunk + "}", "}")
        self.pos = i

    def _constructor_args(self, pos: int) -> Tuple[List[Tuple[str, str]], int]:
        """Parse ``arg, arg)``; each arg is ('str', value) or ('num', text)."""
        args: List[Tuple[str, str]] = []
        text = self.text
        while True:
            while pos < len(text) and text[pos].isspace():
                pos += 1
            if pos >= len(text):
                raise CompileError("Unterminated constructor call", fragment=text[max(0, pos - 20) :])
            ch = text[pos]
            if ch == ")" and not args:
                return args, pos + 1
            if ch in "\"'":
                value, pos = self._read_string(pos)
                args.append(("str", value))
            else:
                match = _NUMBER_ARG_RE.match(text, pos)
                if not match:
                    raise CompileError("Invalid constructor argument", fragment=text[pos : pos + 20])
                args.append(("num", match.group(0)))
                pos = match.end()
            while pos < len(text) and text[pos].isspace():
                pos += 1
            if pos < len(text) and text[pos] == ",":
                pos += 1
                continue
            if pos < len(text) and text[pos] == ")":
                return args, pos + 1
            raise CompileError("Expected ',' or ')' in constructor call", fragment=text[pos : pos + 20])

    def _constructor(self, name: str, args_start: int) -> None:
        start = self.pos
        args, end = self._constructor_args(args_start)
        call = self.text[start:end]

        def single(kinds: Tuple[str, ...]) -> str:
            if len(args) != 1 or args[0][0] not in kinds:
                raise CompileError(f"{name}() takes one argument", fragment=call)
            return args[0][1]

        if name in ("ObjectId", "ObjectID"):
            chunk = '{"$oid": ' + json.dumps(single(("str",))) + "}"
        elif name == "ISODate":
            raw = single(("str",))
            try:
                millis = parse_iso_date(raw, self.default_tz).millis
            except ValueError as e:
                raise CompileError(f"Invalid date: {e}", fragment=call) from e
            chunk = f'{{"$date": {{"$numberLong": "{millis}"}}}}'
        elif name in ("NumberInt", "NumberLong"):
            raw = single(("str", "num")).strip()
            bits = 32 if name == "NumberInt" else 64
            if not _INTEGER_RE.match(raw) or not -(2 ** (bits - 1)) <= int(raw) < 2 ** (bits - 1):
                raise CompileError(f"{name}() needs a {bits}-bit integer", fragment=call)
            wrapper = "$numberInt" if bits == 32 else "$numberLong"
            chunk = f'{{"{wrapper}": "{int(raw)}"}}'
        elif name == "NumberDecimal":
            raw = single(("str", "num")).strip()
            try:
                Decimal(raw)
            except InvalidOperation as e:
                raise CompileError("NumberDecimal() needs a decimal number", fragment=call) from e
            chunk = '{"$numberDecimal": ' + json.dumps(raw) + "}"
        elif name == "BinData":
            if len(args) != 2 or args[0][0] != "num" or args[1][0] != "str":
                raise CompileError("BinData() takes a subtype and a base64 string", fragment=call)
            if not _INTEGER_RE.match(args[0][1]) or not 0 <= int(args[0][1]) <= 0xFF:
                raise CompileError("BinData() subtype must be 0-255", fragment=call)
            chunk = (
                '{"$binary": {"base64": '
                + json.dumps(args[1][1])
                + f', "subType": "{int(args[0][1]):02x}"}}}}'
            )
        else:
            if args:
                raise CompileError(f"{name}() takes no arguments", fragment=call)
            wrapper = "$minKey" if name == "MinKey" else "$maxKey"
            chunk = f'{{"{wrapper}": 1}}'

        self._emit(chunk, "}")
        self.pos = end


def expand_shorthand(text: str, default_tz: Optional[tzinfo] = None) -> str:
    """Rewrite shell-style query text into strict extended-JSON text.

    Quotes bare keys, converts single-quoted strings, and expands
    ``ObjectId()``, ``ISODate()``, ``NumberInt()``, ``NumberLong()``,
    ``NumberDecimal()``, ``BinData()``, ``MinKey``/``MaxKey`` and
    ``/pattern/flags`` literals into their extended-JSON wrappers.

    Raises:
        CompileError: On malformed literals, bad constructor arguments or
            unparseable dates.
    """
    return _Expander(text, default_tz).run()
