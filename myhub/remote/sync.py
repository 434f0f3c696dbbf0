"""Push and pull between the working tree and named remotes.

Pull is last-writer-wins: every non-ignored file in the remote replaces
the local copy, with no merge and no conflict detection. Both directions
use the same ignore predicate as staging.
"""

from __future__ import annotations

import asyncio
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import PartialWriteError, RemoteBusyError
from ..paths import RepoPaths, is_internal
from ..utils.backup import OverwriteBackup
from ..utils.fs import copy_file, walk_files
from ..utils.log import log_debug
from ..core.ignore import IgnoreRules, is_ignored
from .registry import RemoteRegistry
from .transport import Transport


@dataclass
class SyncResult:
    """Result of a push or pull."""
    remote: str
    url: str
    branch: str | None = None
    files: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.files)


class RemoteSyncBridge:
    """Moves working-tree content to and from remotes through a transport.

    At most one remote operation may run at a time; a second concurrent
    call is rejected rather than queued.
    """

    def __init__(
        self,
        paths: RepoPaths,
        registry: RemoteRegistry,
        transport: Transport,
        rules: IgnoreRules | None = None,
        push_message: str = "myhub sync",
    ):
        self.paths = paths
        self.root = paths.root
        self.registry = registry
        self.transport = transport
        self.rules = rules or IgnoreRules()
        self.push_message = push_message
        self._lock = asyncio.Lock()

    async def pull(self, remote_name: str, branch: str | None = None) -> SyncResult:
        """Copy the remote's files over the working tree.

        Raises:
            RemoteNotFoundError: If the remote is not registered
            TransportError: If cloning fails
            PartialWriteError: If copying onto the working tree fails; every
                file already overwritten is put back first
            RemoteBusyError: If another remote operation is running
        """
        url = self.registry.resolve(remote_name)
        async with self._exclusive():
            self.paths.scratch_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.TemporaryDirectory(dir=self.paths.scratch_dir, prefix="pull-") as tmp_dir:
                clone_dir = Path(tmp_dir) / "clone"
                await self.transport.clone(url, clone_dir, branch)
                files, skipped = self._plan_merge(clone_dir)
                backup = OverwriteBackup(root=self.root, backup_dir=Path(tmp_dir) / "rollback")
                try:
                    backup.prepare(files)
                    for rel in files:
                        self._overwrite(clone_dir / rel, self.root / rel)
                    self.registry.mark_synced(remote_name, "pull", branch=branch, fileCount=len(files))
                except OSError as e:
                    backup.roll_back()
                    raise PartialWriteError("pull", str(e)) from e

        log_debug(f"pulled {len(files)} files from {remote_name} ({len(skipped)} ignored)")
        return SyncResult(remote=remote_name, url=url, branch=branch, files=files, skipped=skipped)

    async def push(self, remote_name: str, branch: str) -> SyncResult:
        """Publish the whole working tree, minus ignored paths, to a branch.

        Raises:
            RemoteNotFoundError: If the remote is not registered
            TransportError: If any transport step fails
            RemoteBusyError: If another remote operation is running
        """
        url = self.registry.resolve(remote_name)
        async with self._exclusive():
            files = self.collect_tree()
            await self.transport.push(url, branch, self.root, files, self.push_message)

        self.registry.mark_synced(remote_name, "push", branch=branch, fileCount=len(files))
        log_debug(f"pushed {len(files)} files to {remote_name}/{branch}")
        return SyncResult(remote=remote_name, url=url, branch=branch, files=files)

    def collect_tree(self) -> list[str]:
        """List every working-tree file that is neither internal nor ignored."""
        return list(walk_files(self.root, skip=self._excluded))

    def _plan_merge(self, clone_dir: Path) -> tuple[list[str], list[str]]:
        """Split the clone into files to copy and files the ignore rules skip."""
        copied: list[str] = []
        skipped: list[str] = []
        for rel in walk_files(clone_dir, skip=is_internal):
            if is_ignored(rel, self.rules):
                skipped.append(rel)
            else:
                copied.append(rel)
        return copied, skipped

    def _overwrite(self, src: Path, dst: Path) -> None:
        if dst.is_dir():
            raise IsADirectoryError(f"cannot overwrite directory with file: {dst}")
        copy_file(src, dst)

    def _excluded(self, rel: str) -> bool:
        return is_internal(rel) or is_ignored(rel, self.rules)

    def _exclusive(self) -> asyncio.Lock:
        if self._lock.locked():
            raise RemoteBusyError()
        return self._lock
