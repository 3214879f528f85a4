"""System clipboard access.

Tries the platform tools in order (pbcopy, xclip, xsel) and falls back to
pyperclip.
"""

from __future__ import annotations

import logging
import subprocess
from typing import List, Protocol, Sequence

import pyperclip

from mongopeek.config.constants import CLIPBOARD_TIMEOUT_SECONDS
from mongopeek.exceptions import ClipboardError

logger = logging.getLogger(__name__)

_COPY_COMMANDS: Sequence[List[str]] = (
    ["pbcopy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
)
_PASTE_COMMANDS: Sequence[List[str]] = (
    ["pbpaste"],
    ["xclip", "-selection", "clipboard", "-o"],
    ["xsel", "--clipboard", "--output"],
)


class Clipboard(Protocol):
    def write(self, text: str) -> None: ...

    def read(self) -> str: ...


class SystemClipboard:
    """Clipboard backed by the operating system."""

    def write(self, text: str) -> None:
        """Copy ``text`` to the clipboard.

        Raises:
            ClipboardError: If no clipboard tool works.
        """
        for command in _COPY_COMMANDS:
            try:
                subprocess.run(
                    command,
                    input=text.encode("utf-8"),
                    check=True,
                    timeout=CLIPBOARD_TIMEOUT_SECONDS,
                )
                return
            except (FileNotFoundError, subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
                logger.debug("%s not available: %s", command[0], e)

        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            logger.error("Failed to write clipboard: %s", e)
            raise ClipboardError(
                "No clipboard tool available (tried pbcopy, xclip, xsel, pyperclip)"
            ) from e

    def read(self) -> str:
        """Return the clipboard contents with surrounding whitespace trimmed.

        Raises:
            ClipboardError: If no clipboard tool works.
        """
        for command in _PASTE_COMMANDS:
            try:
                result = subprocess.run(
                    command,
                    capture_output=True,
                    check=True,
                    timeout=CLIPBOARD_TIMEOUT_SECONDS,
                )
                return result.stdout.decode("utf-8", errors="replace").strip()
            except (FileNotFoundError, subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
                logger.debug("%s not available: %s", command[0], e)

        try:
            return pyperclip.paste().strip()
        except pyperclip.PyperclipException as e:
            logger.error("Failed to read clipboard: %s", e)
            raise ClipboardError(
                "No clipboard tool available (tried pbpaste, xclip, xsel, pyperclip)"
            ) from e
