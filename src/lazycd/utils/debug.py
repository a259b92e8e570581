"""Debug utility for lazycd.

Provides a single debug() function that can be toggled via the
LAZYCD_DEBUG environment variable. Filesystem primitives use it to trace
rename fallbacks, backups and trash moves without going through the
structured job logs.

Usage:
    from lazycd.utils.debug import debug

    debug(f"Direct rename: {src} -> {dst}")

Environment:
    LAZYCD_DEBUG: Set to '1', 'true', 'yes' (case-insensitive) to enable
                  debug output. Any other value or unset disables it.
"""

import os
import sys
from typing import Any

from lazycd.core.constants import DEBUG_ENV

# Determine if debug mode is enabled at module import time
_DEBUG_ENABLED = os.environ.get(DEBUG_ENV, "").lower() in (
    "1",
    "true",
    "yes",
)


def debug(msg: Any) -> None:
    """Print debug message to stderr if LAZYCD_DEBUG is enabled.

    Args:
        msg: Message to print. Will be converted to string.
    """
    if _DEBUG_ENABLED:
        print(f"[DEBUG] {msg}", file=sys.stderr)
