"""External editor round trip.

The text is written to a temporary file, the user's editor runs on it in
the foreground, and the file contents are read back once the editor exits.
The call blocks for as long as the editor runs; the host UI is expected to
suspend itself around it.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import tempfile
from typing import List, Protocol

from mongopeek.config.constants import EDITOR_FILE_SUFFIX
from mongopeek.config.settings import EditorSettings
from mongopeek.exceptions import EditorRoundTripError

logger = logging.getLogger(__name__)


class TextEditor(Protocol):
    def edit(self, text: str) -> str: ...


class ExternalEditor:
    """Edit text in an external program such as ``vim`` or ``code --wait``."""

    def __init__(self, command: str):
        self.command = command

    @classmethod
    def from_settings(cls, settings: EditorSettings) -> "ExternalEditor":
        return cls(editor_command_from_config(settings))

    def _argv(self) -> List[str]:
        try:
            argv = shlex.split(self.command)
        except ValueError as e:
            raise EditorRoundTripError(f"Cannot parse editor command: {e}", command=self.command) from e
        if not argv:
            raise EditorRoundTripError("No editor configured")
        executable = shutil.which(argv[0])
        if executable is None:
            raise EditorRoundTripError("Editor not found", command=argv[0])
        return [executable, *argv[1:]]

    def edit(self, text: str) -> str:
        """Open ``text`` in the editor and return the saved contents.

        Raises:
            EditorRoundTripError: If the editor is missing or exits non-zero.
        """
        argv = self._argv()
        with tempfile.NamedTemporaryFile(
            mode="w", suffix=EDITOR_FILE_SUFFIX, delete=False, encoding="utf-8"
        ) as tmp_file:
            tmp_file.write(text)
            tmp_path = tmp_file.name

        try:
            logger.debug("Opening %s with %s", tmp_path, argv[0])
            try:
                result = subprocess.run([*argv, tmp_path])
            except OSError as e:
                logger.error("Failed to start editor %s: %s", argv[0], e)
                raise EditorRoundTripError(f"Failed to start editor: {e}", command=argv[0]) from e

            if result.returncode != 0:
                logger.error("Editor %s exited with code %d", argv[0], result.returncode)
                raise EditorRoundTripError(
                    "Editor exited with an error", command=argv[0], exit_code=result.returncode
                )

            with open(tmp_path, "r", encoding="utf-8") as f:
                return f.read()
        finally:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)


def editor_command_from_config(settings: EditorSettings) -> str:
    """Resolve the editor command from settings, ``$EDITOR`` or ``vi``."""
    return settings.resolve_command()
