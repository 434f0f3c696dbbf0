"""Commit log for MyHub.

Append-only record of committed snapshots, persisted in ``.myhub/log.json``.
The log is the only authority on which commits exist.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from ..errors import InvalidEntryError
from ..utils.fs import safe_json_load, write_json
from .snapshot_store import Snapshot, SnapshotStore


@dataclass(frozen=True)
class CommitLogEntry:
    """One committed snapshot."""
    snapshot_id: str
    message: str
    timestamp: str
    paths: tuple[str, ...] = field(default_factory=tuple)
    total_size: int = 0

    @property
    def file_count(self) -> int:
        return len(self.paths)

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> CommitLogEntry:
        return cls(
            snapshot_id=snapshot.snapshot_id,
            message=snapshot.message,
            timestamp=snapshot.timestamp,
            paths=tuple(snapshot.paths),
            total_size=snapshot.total_size,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "snapshotId": self.snapshot_id,
            "message": self.message,
            "timestamp": self.timestamp,
            "paths": list(self.paths),
            "fileCount": self.file_count,
            "totalSize": self.total_size,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CommitLogEntry:
        """Create from dictionary."""
        return cls(
            snapshot_id=str(data.get("snapshotId", "")),
            message=str(data.get("message", "")),
            timestamp=str(data.get("timestamp", "")),
            paths=tuple(p for p in data.get("paths", []) if isinstance(p, str)),
            total_size=int(data.get("totalSize", 0) or 0),
        )

    def sort_key(self) -> tuple[datetime, str]:
        try:
            created = datetime.fromisoformat(self.timestamp)
        except ValueError:
            created = datetime.min
        return created, self.snapshot_id


class CommitLog:
    """Ordered, append-only list of CommitLogEntry."""

    def __init__(self, log_path: Path, store: SnapshotStore):
        self.log_path = Path(log_path)
        self.store = store

    def append(self, entry: CommitLogEntry) -> None:
        """Record a committed snapshot.

        Raises:
            InvalidEntryError: If the snapshot is not fully captured or is
                already recorded
        """
        if not self.store.is_complete(entry.snapshot_id):
            raise InvalidEntryError(entry.snapshot_id, "snapshot is not fully captured")

        raw = self._load_raw()
        if any(item.get("snapshotId") == entry.snapshot_id for item in raw):
            raise InvalidEntryError(entry.snapshot_id, "snapshot is already recorded")

        raw.append(entry.to_dict())
        write_json(self.log_path, raw)

    def list(self, newest_first: bool = False) -> list[CommitLogEntry]:
        """List all entries ordered by creation time.

        Ordering always comes from sorting, never from storage order.
        """
        entries = [CommitLogEntry.from_dict(item) for item in self._load_raw()]
        entries.sort(key=CommitLogEntry.sort_key, reverse=newest_first)
        return entries

    def get(self, snapshot_id: str) -> CommitLogEntry | None:
        for entry in self.list():
            if entry.snapshot_id == snapshot_id:
                return entry
        return None

    def latest(self) -> CommitLogEntry | None:
        entries = self.list()
        return entries[-1] if entries else None

    def _load_raw(self) -> list[dict]:
        data = safe_json_load(self.log_path, [])
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict)]
