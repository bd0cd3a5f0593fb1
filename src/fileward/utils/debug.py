"""Debug utility for fileward.

Provides a single debug() function that can be toggled via the
FILEWARD_DEBUG environment variable. Low-level filesystem helpers use it for
step-by-step traces; engine-level events go through structlog instead.

Usage:
    from fileward.utils.debug import debug

    debug(f"Staged {path} as {staged}")

Environment:
    FILEWARD_DEBUG: Set to '1', 'true', 'yes' (case-insensitive) to enable
                    debug output. Any other value or unset disables it.
"""

import os
import sys
from typing import Any

# Determine if debug mode is enabled at module import time
_DEBUG_ENABLED = os.environ.get("FILEWARD_DEBUG", "").lower() in (
    "1",
    "true",
    "yes",
)


def debug(msg: Any) -> None:
    """Print debug message if FILEWARD_DEBUG is enabled.

    Args:
        msg: Message to print. Will be converted to string.

    Note:
        The environment variable is read at import time. Changing it later
        has no effect unless the module is reloaded.
    """
    if _DEBUG_ENABLED:
        print(f"[DEBUG] {msg}", file=sys.stderr)
