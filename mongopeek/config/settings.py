"""
mongopeek settings.

Settings are read from ``~/.config/mongopeek/config.json`` and merged over
the defaults below. A missing or unreadable file gives the defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from mongopeek.documents.compiler import CompilerConfig
from mongopeek.exceptions import ConfigurationError

from .constants import (
    CONFIG_FILE_NAME,
    DEFAULT_EDITOR_ENV,
    DEFAULT_HISTORY_SIZE,
    FALLBACK_EDITOR,
    HISTORY_FILE_NAME,
    LOG_FILE_NAME,
    MONGOPEEK_CONFIG_DIR,
    VALID_LOG_LEVELS,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "editor": {"command": "", "env": DEFAULT_EDITOR_ENV},
    "timezone": "UTC",
    "history_size": DEFAULT_HISTORY_SIZE,
    "log_level": "INFO",
    "sort_keys": False,
}


@dataclass
class EditorSettings:
    command: str = ""
    env: str = DEFAULT_EDITOR_ENV

    def resolve_command(self) -> str:
        """The editor command: explicit command, else the env var, else ``vi``."""
        if self.command:
            return self.command
        if self.env:
            value = os.environ.get(self.env, "").strip()
            if value:
                return value
        return FALLBACK_EDITOR


@dataclass
class Settings:
    """Validated mongopeek configuration."""

    config_dir: Path = MONGOPEEK_CONFIG_DIR
    editor: EditorSettings = field(default_factory=EditorSettings)
    timezone: str = "UTC"
    history_size: int = DEFAULT_HISTORY_SIZE
    log_level: str = "INFO"
    sort_keys: bool = False

    @property
    def history_path(self) -> Path:
        return self.config_dir / HISTORY_FILE_NAME

    @property
    def log_path(self) -> Path:
        return self.config_dir / LOG_FILE_NAME

    def compiler_config(self) -> CompilerConfig:
        """Compilation settings derived from this configuration."""
        try:
            return CompilerConfig.for_timezone(self.timezone)
        except ValueError as e:
            raise ConfigurationError(str(e), setting="timezone") from e

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config_dir: Optional[Path] = None) -> "Settings":
        """Build settings from a config mapping, validating each value.

        Raises:
            ConfigurationError: If a value has the wrong type or range.
        """
        merged = {**DEFAULT_CONFIG, **data}

        editor_raw = merged.get("editor") or {}
        if not isinstance(editor_raw, dict):
            raise ConfigurationError("editor must be an object", setting="editor")
        editor = EditorSettings(
            command=str(editor_raw.get("command") or ""),
            env=str(editor_raw.get("env") or ""),
        )

        history_size = merged["history_size"]
        if isinstance(history_size, bool) or not isinstance(history_size, int) or history_size < 1:
            raise ConfigurationError("history_size must be a positive integer", setting="history_size")

        log_level = str(merged["log_level"]).upper()
        if log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"log_level must be one of {', '.join(VALID_LOG_LEVELS)}", setting="log_level"
            )

        settings = cls(
            config_dir=config_dir or MONGOPEEK_CONFIG_DIR,
            editor=editor,
            timezone=str(merged["timezone"]),
            history_size=history_size,
            log_level=log_level,
            sort_keys=bool(merged["sort_keys"]),
        )
        # Fail early on an unknown zone
        settings.compiler_config()
        return settings


def get_config_path(config_dir: Optional[Path] = None) -> Path:
    """Path to config.json inside ``config_dir`` (default config directory)."""
    return (config_dir or MONGOPEEK_CONFIG_DIR) / CONFIG_FILE_NAME


def load_settings(config_dir: Optional[Path] = None) -> Settings:
    """Load settings from disk.

    Returns defaults when the file is missing or not valid JSON. Invalid
    values in a readable file raise ``ConfigurationError``.
    """
    path = get_config_path(config_dir)
    data: Dict[str, Any] = {}
    if path.exists():
        try:
            loaded = json.loads(path.read_text())
            if isinstance(loaded, dict):
                data = loaded
            else:
                logger.warning("Ignoring %s: top level is not an object", path)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
    return Settings.from_dict(data, config_dir)


def save_settings(settings: Settings) -> None:
    """Write ``settings`` back to config.json."""
    path = get_config_path(settings.config_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "editor": {"command": settings.editor.command, "env": settings.editor.env},
        "timezone": settings.timezone,
        "history_size": settings.history_size,
        "log_level": settings.log_level,
        "sort_keys": settings.sort_keys,
    }
    path.write_text(json.dumps(data, indent=2) + "\n")
