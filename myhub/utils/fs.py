"""File system utilities for MyHub.

Provides atomic writes, JSON persistence and stack-based tree walking.
"""

from __future__ import annotations

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Callable, Iterator


def atomic_write(file_path: Path | str, content: str | bytes, mode: str = "w") -> None:
    """Write content atomically using tempfile + rename pattern.

    Args:
        file_path: Target file path
        content: Content to write
        mode: Write mode ('w' for text, 'wb' for binary)
    """
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    # Create temp file in same directory for atomic rename
    fd, tmp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp"
    )

    try:
        with os.fdopen(fd, mode) as f:
            f.write(content)
        os.replace(tmp_path, path)
    except Exception:
        # Clean up temp file on failure
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def write_json(file_path: Path | str, data: Any) -> None:
    """Atomically replace a JSON document."""
    atomic_write(file_path, json.dumps(data, indent=2) + "\n", mode="w")


def ensure_dir(dir_path: Path | str) -> Path:
    """Ensure directory exists, creating it if necessary.

    Args:
        dir_path: Directory path to create

    Returns:
        Path object for the directory
    """
    path = Path(dir_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_json_load(file_path: Path | str, default: Any = None) -> Any:
    """Safely load JSON file with fallback.

    Args:
        file_path: Path to JSON file
        default: Default value if file doesn't exist or is invalid

    Returns:
        Parsed JSON or default value
    """
    try:
        with open(file_path) as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError):
        return default if default is not None else {}


def walk_files(
    base: Path,
    skip: Callable[[str], bool] | None = None,
) -> Iterator[str]:
    """Yield relative POSIX paths of all regular files under base.

    Uses an explicit stack instead of recursion so deep trees cannot hit
    the interpreter's recursion limit. Directories are visited in sorted
    order, so output is deterministic.

    Args:
        base: Directory to walk
        skip: Predicate on a relative path; matching directories are not
            descended into and matching files are not yielded
    """
    stack: list[str] = [""]
    while stack:
        rel_dir = stack.pop()
        current = base / rel_dir if rel_dir else base
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except FileNotFoundError:
            continue
        subdirs: list[str] = []
        for entry in entries:
            rel = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            if skip is not None and skip(rel):
                continue
            if entry.is_dir(follow_symlinks=False):
                subdirs.append(rel)
            elif entry.is_file(follow_symlinks=False):
                yield rel
        stack.extend(reversed(subdirs))


def copy_file(src: Path, dst: Path) -> None:
    """Copy bytes and mode of src onto dst, creating parent directories."""
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)


def to_relative(root: Path, path: Path | str) -> str | None:
    """Express path relative to root in POSIX form.

    Relative inputs are taken relative to root. Returns None when the
    path resolves outside root.
    """
    candidate = Path(path)
    if not candidate.is_absolute():
        candidate = root / candidate
    try:
        rel = candidate.resolve().relative_to(root.resolve())
    except ValueError:
        return None
    return rel.as_posix()
