"""Undo support for operations that overwrite working-tree files.

Restore and pull both copy a batch of files over the working tree. Before
the first write, every file about to be replaced is copied aside and every
file or directory about to be created is noted, so a failure part way
through can put the tree back exactly as it was.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from .fs import copy_file
from .log import log_debug


@dataclass
class OverwriteBackup:
    """Saved state of the files a batch of writes will touch."""
    root: Path
    backup_dir: Path
    backed_up: list[str] = field(default_factory=list)
    created_files: list[str] = field(default_factory=list)
    created_dirs: list[Path] = field(default_factory=list)

    def prepare(self, targets: Iterable[str]) -> None:
        """Back up existing targets and note what will be created.

        Args:
            targets: Paths relative to root that are about to be written
        """
        for rel in targets:
            dst = self.root / rel
            if dst.is_file():
                copy_file(dst, self.backup_dir / rel)
                self.backed_up.append(rel)
            else:
                self.created_files.append(rel)

            missing: list[Path] = []
            parent = dst.parent
            while parent != self.root and not parent.exists():
                missing.append(parent)
                parent = parent.parent
            for directory in reversed(missing):
                if directory not in self.created_dirs:
                    self.created_dirs.append(directory)

    def roll_back(self) -> None:
        """Put every touched path back the way prepare() found it."""
        for rel in self.created_files:
            target = self.root / rel
            if target.is_file():
                target.unlink()
        for rel in self.backed_up:
            copy_file(self.backup_dir / rel, self.root / rel)
        # Deepest first so parents are empty by the time they are removed.
        for directory in reversed(self.created_dirs):
            if directory.is_dir() and not any(directory.iterdir()):
                directory.rmdir()
        log_debug(f"rolled back {len(self.backed_up)} overwritten files")
