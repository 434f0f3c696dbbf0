"""Restore snapshots onto the working tree.

The snapshot is extracted into scratch space first. Every file about to
be overwritten is backed up before the first write, so a failure part way
through can put the working tree back exactly as it was.
"""

from __future__ import annotations

import tarfile
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import PartialWriteError, VersionNotFoundError
from ..paths import RepoPaths, is_internal
from ..utils.backup import OverwriteBackup
from ..utils.fs import copy_file
from ..utils.log import log_debug
from .commit_log import CommitLog
from .snapshot_store import SnapshotStore


@dataclass
class RestoreResult:
    """Result of a restore operation."""
    snapshot_id: str
    restored: list[str] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.restored)


class Restorer:
    """Materializes stored snapshots back onto the working tree."""

    def __init__(self, paths: RepoPaths, store: SnapshotStore, log: CommitLog):
        self.paths = paths
        self.root = paths.root
        self.store = store
        self.log = log

    def restore(self, snapshot_id: str) -> RestoreResult:
        """Restore a snapshot.

        Args:
            snapshot_id: Id of a committed snapshot

        Returns:
            RestoreResult listing the restored paths

        Raises:
            VersionNotFoundError: If no complete, committed snapshot has this id
            PartialWriteError: If writing fails; the working tree is rolled back
        """
        if self.log.get(snapshot_id) is None or not self.store.is_complete(snapshot_id):
            raise VersionNotFoundError(snapshot_id)

        self.paths.scratch_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(dir=self.paths.scratch_dir, prefix="restore-") as tmp_dir:
            tmp_path = Path(tmp_dir)
            tree = tmp_path / "tree"
            backup = OverwriteBackup(root=self.root, backup_dir=tmp_path / "rollback")

            try:
                members = self.store.extract(snapshot_id, tree)
            except (OSError, tarfile.TarError) as e:
                raise PartialWriteError("restore", str(e)) from e

            targets = [rel for rel in members if not is_internal(rel)]

            try:
                backup.prepare(targets)
                for rel in targets:
                    self._write(tree / rel, self.root / rel)
            except OSError as e:
                backup.roll_back()
                raise PartialWriteError("restore", str(e)) from e

        log_debug(f"restored {len(targets)} files from {snapshot_id}")
        return RestoreResult(snapshot_id=snapshot_id, restored=targets)

    def _write(self, src: Path, dst: Path) -> None:
        if dst.is_dir():
            raise IsADirectoryError(f"cannot overwrite directory with file: {dst}")
        copy_file(src, dst)

