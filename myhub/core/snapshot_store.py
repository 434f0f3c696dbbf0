"""Snapshot storage for MyHub.

Handles capturing staged files into immutable snapshots using tarfile.
Each snapshot lives in its own directory keyed by snapshot id:

    .myhub/commits/<id>/snapshot.tar.gz
    .myhub/commits/<id>/metadata.json

A snapshot is assembled in a hidden scratch directory and renamed into
place only after every file and the metadata have been written, so a
half-written snapshot is never visible under its id.
"""

from __future__ import annotations

import json
import os
import shutil
import tarfile
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

from ..errors import MissingFileError, NothingStagedError, PartialWriteError, VersionNotFoundError
from ..utils.log import log_debug


ID_FORMAT = "%Y%m%d_%H%M%S_%f"
PARTIAL_PREFIX = ".partial-"


@dataclass
class Snapshot:
    """Metadata for a captured snapshot."""
    snapshot_id: str
    timestamp: str
    message: str
    paths: list[str] = field(default_factory=list)
    total_size: int = 0

    @property
    def file_count(self) -> int:
        return len(self.paths)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "snapshotId": self.snapshot_id,
            "timestamp": self.timestamp,
            "message": self.message,
            "paths": list(self.paths),
            "fileCount": self.file_count,
            "totalSize": self.total_size,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Snapshot:
        """Create from dictionary."""
        return cls(
            snapshot_id=data.get("snapshotId", ""),
            timestamp=data.get("timestamp", ""),
            message=data.get("message", ""),
            paths=list(data.get("paths", [])),
            total_size=data.get("totalSize", 0),
        )


class SnapshotStore:
    """Manages snapshot capture and retrieval."""

    ARCHIVE_NAME = "snapshot.tar.gz"
    METADATA_NAME = "metadata.json"

    def __init__(self, storage_dir: Path, project_root: Path):
        """Initialize snapshot store.

        Args:
            storage_dir: Directory holding one sub-directory per snapshot
            project_root: Repository root the staged paths are relative to
        """
        self.storage_dir = Path(storage_dir)
        self.project_root = Path(project_root)

    def commit(
        self,
        staged_paths: list[str],
        message: str,
        previous_id: str | None = None,
    ) -> Snapshot:
        """Capture the current bytes of every staged path.

        Args:
            staged_paths: Paths relative to the project root, in order
            message: Commit message
            previous_id: Latest committed snapshot id; the new id sorts after it

        Returns:
            The new Snapshot, already complete on disk

        Raises:
            NothingStagedError: If staged_paths is empty
            MissingFileError: If a staged file no longer exists
            PartialWriteError: If any copy fails
        """
        if not staged_paths:
            raise NothingStagedError()

        self.storage_dir.mkdir(parents=True, exist_ok=True)
        created = self._allocate_time(previous_id)
        snapshot_id = created.strftime(ID_FORMAT)
        partial_dir = self.storage_dir / f"{PARTIAL_PREFIX}{snapshot_id}"
        final_dir = self.storage_dir / snapshot_id

        try:
            partial_dir.mkdir(parents=True)
            total_size = 0

            with tarfile.open(partial_dir / self.ARCHIVE_NAME, "w:gz") as tar:
                for rel_path in staged_paths:
                    src = self.project_root / rel_path
                    if not src.is_file():
                        raise MissingFileError(rel_path)
                    self._archive_member(tar, src, rel_path)
                    total_size += src.stat().st_size

            snapshot = Snapshot(
                snapshot_id=snapshot_id,
                timestamp=created.isoformat(timespec="microseconds"),
                message=message,
                paths=list(staged_paths),
                total_size=total_size,
            )

            with open(partial_dir / self.METADATA_NAME, "w") as f:
                json.dump(snapshot.to_dict(), f, indent=2)
                f.flush()
                os.fsync(f.fileno())

            os.replace(partial_dir, final_dir)

        except MissingFileError:
            shutil.rmtree(partial_dir, ignore_errors=True)
            raise
        except (OSError, tarfile.TarError) as e:
            # Clean up on failure
            shutil.rmtree(partial_dir, ignore_errors=True)
            raise PartialWriteError("commit", str(e)) from e

        log_debug(f"captured snapshot {snapshot_id} ({snapshot.file_count} files)")
        return snapshot

    def is_complete(self, snapshot_id: str) -> bool:
        """Check that a snapshot was fully captured."""
        if not snapshot_id or snapshot_id.startswith(".") or "/" in snapshot_id:
            return False
        snapshot_dir = self.storage_dir / snapshot_id
        return (snapshot_dir / self.ARCHIVE_NAME).is_file() and (snapshot_dir / self.METADATA_NAME).is_file()

    def get(self, snapshot_id: str) -> Snapshot | None:
        """Get metadata for a specific snapshot.

        Args:
            snapshot_id: Snapshot id

        Returns:
            Snapshot or None if not found
        """
        if not self.is_complete(snapshot_id):
            return None
        metadata_path = self.storage_dir / snapshot_id / self.METADATA_NAME
        try:
            with open(metadata_path) as f:
                return Snapshot.from_dict(json.load(f))
        except (OSError, json.JSONDecodeError):
            return None

    def extract(self, snapshot_id: str, dest: Path) -> list[str]:
        """Extract a snapshot's files into dest.

        Returns:
            The relative paths of the extracted regular files

        Raises:
            VersionNotFoundError: If the snapshot is missing or incomplete
        """
        if not self.is_complete(snapshot_id):
            raise VersionNotFoundError(snapshot_id)

        archive_path = self.storage_dir / snapshot_id / self.ARCHIVE_NAME
        dest.mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive_path, "r:gz") as tar:
            members = [m for m in tar.getmembers() if m.isfile()]
            tar.extractall(dest, members=members, filter="data")
        return [m.name for m in members]

    def discard(self, snapshot_id: str) -> None:
        """Remove a snapshot that never made it into the commit log."""
        snapshot_dir = self.storage_dir / snapshot_id
        if snapshot_dir.exists():
            shutil.rmtree(snapshot_dir)
            log_debug(f"discarded snapshot {snapshot_id}")

    def _archive_member(self, tar: tarfile.TarFile, src: Path, arcname: str) -> None:
        tar.add(src, arcname=arcname, recursive=False)

    def _allocate_time(self, previous_id: str | None) -> datetime:
        """Pick a capture time whose id sorts after previous_id and is unused."""
        candidate = datetime.now()
        if previous_id:
            try:
                floor = datetime.strptime(previous_id, ID_FORMAT)
            except ValueError:
                floor = None
            if floor is not None and candidate <= floor:
                candidate = floor + timedelta(microseconds=1)
        while self._taken(candidate.strftime(ID_FORMAT)):
            candidate += timedelta(microseconds=1)
        return candidate

    def _taken(self, snapshot_id: str) -> bool:
        return (self.storage_dir / snapshot_id).exists() or (self.storage_dir / f"{PARTIAL_PREFIX}{snapshot_id}").exists()
