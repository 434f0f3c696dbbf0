"""Core modules for MyHub.

The controller lives in ``myhub.core.controller``; it is not re-exported
here because it depends on ``myhub.remote``, which itself uses the ignore
rules from this package.
"""

from .commit_log import CommitLog, CommitLogEntry
from .ignore import IgnoreRules, is_ignored, load_rules
from .restorer import Restorer, RestoreResult
from .snapshot_store import Snapshot, SnapshotStore
from .staging import StageResult, StageStatus, StagingArea

__all__ = [
    "CommitLog",
    "CommitLogEntry",
    "IgnoreRules",
    "is_ignored",
    "load_rules",
    "Restorer",
    "RestoreResult",
    "Snapshot",
    "SnapshotStore",
    "StageResult",
    "StageStatus",
    "StagingArea",
]
