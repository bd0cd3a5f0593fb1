"""Core constants for fileward.

This module defines constants used throughout the engine:
- Characters and device names rejected in file names
- Trash area layout
- Defaults for log queries and favorites
"""

# ============================================================================
# Name Validation
# ============================================================================

#: Characters that may not appear anywhere in a file or folder name
RESERVED_CHARACTERS: tuple[str, ...] = ("<", ">", ":", '"', "|", "?", "*")

#: Path separators; a name is always a single path segment
PATH_SEPARATORS: tuple[str, ...] = ("/", "\\")

#: Device names reserved on Windows, with or without an extension
RESERVED_DEVICE_NAMES: frozenset[str] = frozenset(
    {"CON", "PRN", "AUX", "NUL"}
    | {f"COM{i}" for i in range(1, 10)}
    | {f"LPT{i}" for i in range(1, 10)}
)

# ============================================================================
# Trash Layout
# ============================================================================

#: Subdirectory of the trash area holding staged items
TRASH_FILES_DIR = "files"

#: Subdirectory of the trash area holding TrashRecord sidecars
TRASH_INFO_DIR = "info"

#: Suffix of TrashRecord sidecar files
TRASH_INFO_SUFFIX = ".json"

#: Upper bound on collision counters tried before giving up
MAX_TRASH_NAME_ATTEMPTS = 10_000

# ============================================================================
# Defaults
# ============================================================================

#: Default number of entries returned by get_recent_logs
DEFAULT_LOG_LIMIT = 50

#: Well-known user directories offered as favorites when none were saved
DEFAULT_FAVORITE_DIRS: tuple[str, ...] = ("Downloads", "Documents", "Desktop")
