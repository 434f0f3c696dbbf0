"""Diagnostic output for MyHub.

Debug lines go to stderr so they never mix with command output.
"""

from __future__ import annotations

import sys

from .env import is_debug_mode


def log_debug(message: str) -> None:
    """Log debug message to stderr.
    
    Only outputs if MYHUB_DEBUG is set.
    """
    if is_debug_mode():
        print(f"[myhub] {message}", file=sys.stderr)
