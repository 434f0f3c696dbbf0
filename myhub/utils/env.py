"""Environment utilities for MyHub."""

from __future__ import annotations

import os
from pathlib import Path


def is_debug_mode() -> bool:
    """Check if debug mode is enabled.
    
    Returns:
        True if MYHUB_DEBUG is set to a truthy value
    """
    val = os.environ.get("MYHUB_DEBUG", "").lower()
    return val in ("1", "true", "yes", "on")


def get_home_dir() -> Path:
    """Get user home directory."""
    return Path.home()


def get_global_myhub_dir() -> Path:
    """Get global myhub directory (~/.myhub).
    
    Returns:
        Path to global config directory
    """
    return get_home_dir() / ".myhub"


def get_root_override() -> Path | None:
    """Repository root forced through MYHUB_ROOT, if any."""
    val = os.environ.get("MYHUB_ROOT")
    if isinstance(val, str) and val.strip():
        return Path(val.strip()).expanduser()
    return None
