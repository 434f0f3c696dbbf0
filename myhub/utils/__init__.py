"""Utility modules for MyHub."""

from .fs import atomic_write, copy_file, ensure_dir, safe_json_load, to_relative, walk_files, write_json
from .env import get_home_dir, get_global_myhub_dir, get_root_override, is_debug_mode
from .log import log_debug
from .backup import OverwriteBackup

__all__ = [
    "atomic_write",
    "copy_file",
    "ensure_dir",
    "safe_json_load",
    "to_relative",
    "walk_files",
    "write_json",
    "get_home_dir",
    "get_global_myhub_dir",
    "get_root_override",
    "is_debug_mode",
    "log_debug",
    "OverwriteBackup",
]
