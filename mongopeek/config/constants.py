"""
Centralized constants for mongopeek.

Magic numbers and default values live here so the rest of the code can
refer to them by name.
"""

import os
from pathlib import Path

# =============================================================================
# PATHS
# =============================================================================

# MONGOPEEK_CONFIG_DIR overrides the location (used by tests)
MONGOPEEK_CONFIG_DIR = Path(
    os.environ.get("MONGOPEEK_CONFIG_DIR", str(Path.home() / ".config" / "mongopeek"))
)

CONFIG_FILE_NAME = "config.json"
HISTORY_FILE_NAME = "history.txt"
LOG_FILE_NAME = "mongopeek.log"

# =============================================================================
# HISTORY
# =============================================================================

DEFAULT_HISTORY_SIZE = 10  # Saved queries kept in the history file

# =============================================================================
# EDITOR
# =============================================================================

DEFAULT_EDITOR_ENV = "EDITOR"  # Environment variable consulted for the editor
FALLBACK_EDITOR = "vi"  # Used when neither command nor env var is set
EDITOR_FILE_SUFFIX = ".json"

# =============================================================================
# QUERY DEFAULTS
# =============================================================================

DEFAULT_QUERY_LIMIT = 50  # Documents fetched per page in the viewer

# =============================================================================
# LOGGING
# =============================================================================

MAX_LOG_BYTES = 5 * 1024 * 1024  # 5MB per log file
LOG_BACKUP_COUNT = 2
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# =============================================================================
# CLIPBOARD
# =============================================================================

CLIPBOARD_TIMEOUT_SECONDS = 5
