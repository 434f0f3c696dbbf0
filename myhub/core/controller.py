"""MyHub controller - main orchestrator.

Wires the staging area, snapshot store, commit log, restorer and remote
bridge together for one repository root, and exposes one operation per
CLI command.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

from ..config import ConfigLoader, HubConfig
from ..errors import AlreadyInitializedError, MyHubError, NotInitializedError, PartialWriteError
from ..paths import RepoPaths, find_repository_root
from ..remote.registry import RemoteRegistry
from ..remote.sync import RemoteSyncBridge
from ..remote.transport import GitTransport, Transport
from ..utils.fs import ensure_dir, write_json
from ..utils.log import log_debug
from .commit_log import CommitLog, CommitLogEntry
from .ignore import IgnoreRules, load_rules
from .restorer import Restorer
from .snapshot_store import SnapshotStore
from .staging import StageStatus, StagingArea


class RepositoryController:
    """Main controller for MyHub operations.

    Precondition: the staging record, commit log, remote mapping and sync
    state are updated by read-modify-write of JSON files under `.myhub/`.
    Only one writer may operate on a repository at a time (for example a
    single active CLI invocation); no locking is done here.
    """

    def __init__(self, root: Path | str, transport: Transport | None = None):
        """Initialize controller.

        Args:
            root: Repository root directory
            transport: Remote transport (defaults to git, from config)
        """
        self.root = Path(root).resolve()
        self.paths = RepoPaths(self.root)
        self._config_loader = ConfigLoader(project_root=self.root)
        self._transport = transport
        self._store: SnapshotStore | None = None
        self._bridge: RemoteSyncBridge | None = None

    @classmethod
    def discover(cls, start: Path, transport: Transport | None = None) -> RepositoryController:
        """Build a controller for the repository enclosing start.

        Raises:
            NotInitializedError: If no `.myhub` directory is found upward
        """
        root = find_repository_root(start)
        if root is None:
            raise NotInitializedError(str(start))
        return cls(root, transport=transport)

    @property
    def config(self) -> HubConfig:
        """Get current configuration."""
        return self._config_loader.config

    @property
    def store(self) -> SnapshotStore:
        """Get snapshot store (lazy init)."""
        if self._store is None:
            self._store = SnapshotStore(storage_dir=self.paths.commits_dir, project_root=self.root)
        return self._store

    @property
    def log(self) -> CommitLog:
        return CommitLog(self.paths.log_file, self.store)

    @property
    def remotes(self) -> RemoteRegistry:
        return RemoteRegistry(self.paths.remotes_file, self.paths.sync_file)

    @property
    def bridge(self) -> RemoteSyncBridge:
        """Get remote bridge (lazy init); shared so remote calls serialize."""
        if self._bridge is None:
            remote_config = self.config.remote
            transport = self._transport or GitTransport(
                git_executable=remote_config.git_executable,
                timeout=remote_config.timeout_seconds,
                scratch_dir=self.paths.scratch_dir,
            )
            self._bridge = RemoteSyncBridge(
                self.paths,
                self.remotes,
                transport,
                push_message=remote_config.push_message,
            )
        return self._bridge

    def is_initialized(self) -> bool:
        return self.paths.log_file.is_file()

    def init(self) -> dict[str, Any]:
        """Create an empty repository at the root.

        Returns:
            Result dictionary with success status
        """
        try:
            if self.is_initialized():
                raise AlreadyInitializedError(str(self.root))
            try:
                ensure_dir(self.paths.metadata_dir)
                ensure_dir(self.paths.commits_dir)
                write_json(self.paths.staging_file, [])
                write_json(self.paths.remotes_file, {})
                write_json(self.paths.log_file, [])
            except OSError as e:
                raise PartialWriteError("init", str(e)) from e
        except MyHubError as e:
            return e.to_result()

        log_debug(f"initialized repository at {self.root}")
        return {"success": True, "root": str(self.root), "metadataDir": str(self.paths.metadata_dir)}

    def add(self, paths: Iterable[Path | str]) -> dict[str, Any]:
        """Stage files or directories.

        Ignored and already-staged paths are reported, not treated as
        failures.
        """
        try:
            self._require_initialized()
            staging = StagingArea(self.paths, self._load_rules())
            results = staging.stage_many(paths)
        except MyHubError as e:
            return e.to_result()
        except OSError as e:
            return PartialWriteError("add", str(e)).to_result()

        return {
            "success": True,
            "staged": [r.path for r in results if r.status == StageStatus.STAGED],
            "alreadyStaged": [r.path for r in results if r.status == StageStatus.ALREADY_STAGED],
            "ignored": [r.path for r in results if r.status == StageStatus.IGNORED],
        }

    def commit(self, message: str) -> dict[str, Any]:
        """Freeze staged files into a new snapshot and log it.

        The staging record is cleared only after the snapshot is complete
        and its log entry written. On any failure the record is untouched
        and no entry appears.
        """
        try:
            self._require_initialized()
            staging = StagingArea(self.paths)
            log = self.log
            try:
                with staging.drain() as staged:
                    latest = log.latest()
                    snapshot = self.store.commit(
                        staged,
                        message,
                        previous_id=latest.snapshot_id if latest else None,
                    )
                    try:
                        log.append(CommitLogEntry.from_snapshot(snapshot))
                    except (MyHubError, OSError):
                        self.store.discard(snapshot.snapshot_id)
                        raise
            except OSError as e:
                raise PartialWriteError("commit", str(e)) from e
        except MyHubError as e:
            return e.to_result()

        return {
            "success": True,
            "snapshotId": snapshot.snapshot_id,
            "message": snapshot.message,
            "timestamp": snapshot.timestamp,
            "fileCount": snapshot.file_count,
            "totalSize": snapshot.total_size,
        }

    def history(self) -> dict[str, Any]:
        """List commits, newest first."""
        try:
            self._require_initialized()
            entries = self.log.list(newest_first=True)
        except MyHubError as e:
            return e.to_result()
        return {"success": True, "entries": [entry.to_dict() for entry in entries]}

    def status(self) -> dict[str, Any]:
        """Report staged paths and the latest commit."""
        try:
            self._require_initialized()
            staged = StagingArea(self.paths).entries()
            latest = self.log.latest()
        except MyHubError as e:
            return e.to_result()
        return {
            "success": True,
            "staged": staged,
            "latest": latest.snapshot_id if latest else None,
        }

    def restore(self, snapshot_id: str) -> dict[str, Any]:
        """Restore the working tree to a committed snapshot."""
        try:
            self._require_initialized()
            result = Restorer(self.paths, self.store, self.log).restore(snapshot_id)
        except MyHubError as e:
            return e.to_result()
        except OSError as e:
            return PartialWriteError("restore", str(e)).to_result()
        return {
            "success": True,
            "snapshotId": result.snapshot_id,
            "fileCount": result.file_count,
            "paths": result.restored,
        }

    def remote_add(self, name: str, url: str) -> dict[str, Any]:
        """Register or update a remote."""
        try:
            self._require_initialized()
            try:
                self.remotes.add(name, url)
            except OSError as e:
                raise PartialWriteError("remote add", str(e)) from e
        except MyHubError as e:
            return e.to_result()
        return {"success": True, "name": name, "url": url}

    def remote_list(self) -> dict[str, Any]:
        """List remotes with their last successful push and pull."""
        try:
            self._require_initialized()
            registry = self.remotes
            remotes = [
                {"name": name, "url": url, "sync": registry.sync_state(name)}
                for name, url in sorted(registry.all().items())
            ]
        except MyHubError as e:
            return e.to_result()
        return {"success": True, "remotes": remotes}

    async def push(self, remote_name: str, branch: str) -> dict[str, Any]:
        """Publish the working tree to a remote branch."""
        try:
            self._require_initialized()
            bridge = self.bridge
            bridge.rules = self._load_rules()
            result = await bridge.push(remote_name, branch)
        except MyHubError as e:
            return e.to_result()
        except OSError as e:
            return PartialWriteError("push", str(e)).to_result()
        return {
            "success": True,
            "remote": result.remote,
            "url": result.url,
            "branch": result.branch,
            "fileCount": result.file_count,
        }

    async def pull(self, remote_name: str | None = None, branch: str | None = None) -> dict[str, Any]:
        """Overwrite the working tree with a remote's content."""
        try:
            self._require_initialized()
            name = remote_name or self.config.remote.default_name
            bridge = self.bridge
            bridge.rules = self._load_rules()
            result = await bridge.pull(name, branch)
        except MyHubError as e:
            return e.to_result()
        except OSError as e:
            return PartialWriteError("pull", str(e)).to_result()
        return {
            "success": True,
            "remote": result.remote,
            "url": result.url,
            "fileCount": result.file_count,
            "ignored": result.skipped,
        }

    def _require_initialized(self) -> None:
        if not self.is_initialized():
            raise NotInitializedError(str(self.root))

    def _load_rules(self) -> IgnoreRules:
        """Load ignore rules once for the current operation."""
        return load_rules(self.root, self.config.ignore.additional_rules)
