"""Staging area for MyHub.

Tracks the ordered set of paths intended for the next commit. The set is
persisted in ``.myhub/staging.json`` and is only cleared once a commit has
fully succeeded.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

from ..errors import MissingFileError
from ..paths import RepoPaths, is_internal
from ..utils.fs import safe_json_load, to_relative, walk_files, write_json
from ..utils.log import log_debug
from .ignore import IgnoreRules, is_ignored


class StageStatus(str, Enum):
    """Outcome of staging one path."""
    STAGED = "staged"
    ALREADY_STAGED = "already_staged"  # informational
    IGNORED = "ignored"  # informational


@dataclass
class StageResult:
    path: str
    status: StageStatus


class StagingArea:
    """Ordered, duplicate-free set of pending paths."""

    def __init__(self, paths: RepoPaths, rules: IgnoreRules | None = None):
        self.paths = paths
        self.root = paths.root
        self.rules = rules or IgnoreRules()

    def entries(self) -> list[str]:
        """Return the pending paths in staging order."""
        data = safe_json_load(self.paths.staging_file, [])
        if not isinstance(data, list):
            return []
        return [p for p in data if isinstance(p, str)]

    def stage(self, path: Path | str) -> list[StageResult]:
        """Stage a file, or every file below a directory.

        Args:
            path: Path relative to the repository root (or absolute inside it)

        Returns:
            One StageResult per file considered

        Raises:
            MissingFileError: If the path does not exist under the root
        """
        pending = self.entries()
        results = self._stage_into(pending, path)
        self._save(pending)
        return results

    def stage_many(self, paths: Iterable[Path | str]) -> list[StageResult]:
        """Stage several paths as one batch.

        Informational outcomes never abort the batch. A missing path aborts
        it before anything is written.
        """
        pending = self.entries()
        results: list[StageResult] = []
        for path in paths:
            results.extend(self._stage_into(pending, path))
        self._save(pending)
        return results

    @contextmanager
    def drain(self) -> Iterator[list[str]]:
        """Hand the pending paths to a commit.

        The durable record is cleared only if the managed block finishes
        without raising; otherwise it is left exactly as it was.
        """
        pending = self.entries()
        yield list(pending)
        self._save([])
        log_debug(f"staging cleared ({len(pending)} paths committed)")

    def _stage_into(self, pending: list[str], path: Path | str) -> list[StageResult]:
        rel = to_relative(self.root, path)
        if rel is None or not (self.root / rel).exists():
            raise MissingFileError(str(path))

        target = self.root / rel
        if target.is_dir():
            prefix = "" if rel == "." else rel
            candidates = [
                f"{prefix}/{child}" if prefix else child
                for child in walk_files(target, skip=lambda p: is_internal(f"{prefix}/{p}" if prefix else p))
            ]
        else:
            candidates = [rel]

        return [self._stage_one(pending, candidate) for candidate in candidates]

    def _stage_one(self, pending: list[str], rel: str) -> StageResult:
        if rel in pending:
            log_debug(f"already staged: {rel}")
            return StageResult(rel, StageStatus.ALREADY_STAGED)
        if is_internal(rel) or is_ignored(rel, self.rules):
            log_debug(f"skipped (ignored): {rel}")
            return StageResult(rel, StageStatus.IGNORED)
        pending.append(rel)
        log_debug(f"staged: {rel}")
        return StageResult(rel, StageStatus.STAGED)

    def _save(self, pending: list[str]) -> None:
        write_json(self.paths.staging_file, pending)
