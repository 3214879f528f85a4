"""Saved query history.

Plain text, one query per line, oldest first. Multi-line queries are
collapsed onto a single line before saving.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from mongopeek.config.constants import DEFAULT_HISTORY_SIZE

logger = logging.getLogger(__name__)


class QueryHistory:
    """Bounded, de-duplicated list of previously run queries."""

    def __init__(self, path: Path, max_entries: int = DEFAULT_HISTORY_SIZE):
        self.path = Path(path)
        self.max_entries = max_entries

    def load(self) -> List[str]:
        """Entries oldest first; an absent file means no history."""
        if not self.path.exists():
            return []
        lines = self.path.read_text(encoding="utf-8").splitlines()
        return [line for line in lines if line.strip()]

    def save(self, text: str) -> List[str]:
        """Record ``text`` as the newest entry and return the new history.

        An existing identical entry moves to the end; the oldest entries drop
        off once the history is full. Blank text is ignored.
        """
        entry = " ".join(text.split())
        history = self.load()
        if not entry:
            return history

        history = [line for line in history if line != entry]
        history.append(entry)
        history = history[-self.max_entries :]

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("".join(f"{line}\n" for line in history), encoding="utf-8")
        logger.debug("Saved query to history (%d entries)", len(history))
        return history

    def newest_first(self) -> List[str]:
        return list(reversed(self.load()))

    def clear(self) -> None:
        """Remove every entry."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("", encoding="utf-8")
