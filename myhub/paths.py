"""Repository layout for MyHub.

Everything MyHub persists lives under the ``.myhub`` directory at the
repository root, except the ignore rules in ``.myhubignore``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


METADATA_DIR = ".myhub"
IGNORE_FILE = ".myhubignore"

# Directories that belong to version-control machinery, never to content.
INTERNAL_DIRS = (METADATA_DIR, ".git")


@dataclass(frozen=True)
class RepoPaths:
    """Locations of the durable files of one repository."""
    root: Path

    @property
    def metadata_dir(self) -> Path:
        return self.root / METADATA_DIR

    @property
    def staging_file(self) -> Path:
        return self.metadata_dir / "staging.json"

    @property
    def log_file(self) -> Path:
        return self.metadata_dir / "log.json"

    @property
    def remotes_file(self) -> Path:
        return self.metadata_dir / "remotes.json"

    @property
    def sync_file(self) -> Path:
        return self.metadata_dir / "sync.json"

    @property
    def commits_dir(self) -> Path:
        return self.metadata_dir / "commits"

    @property
    def scratch_dir(self) -> Path:
        """Scratch space on the same filesystem as the working tree."""
        return self.metadata_dir / "tmp"

    @property
    def ignore_file(self) -> Path:
        return self.root / IGNORE_FILE


def is_internal(rel_path: str) -> bool:
    """Check whether a relative path lies inside an internal metadata directory.

    Any component counts, so a nested `vendor/lib/.git/` is internal too.
    """
    parts = rel_path.replace("\\", "/").split("/")
    return any(part in INTERNAL_DIRS for part in parts)


def find_repository_root(start: Path, *, max_depth: int = 64) -> Path | None:
    """Walk upward from start to find an initialized repository root.

    A bare `.myhub/` without a commit log (such as the global config
    directory in the home folder) does not count.

    Returns None if not found within max_depth.
    """
    cur = start.resolve()
    for _ in range(max_depth):
        if RepoPaths(cur).log_file.is_file():
            return cur
        if cur.parent == cur:
            return None
        cur = cur.parent
    return None
