"""Transports that move files to and from remotes.

A transport exposes two coroutines, ``clone`` and ``push``. The git
transport drives the ``git`` executable as an asyncio subprocess; a
cancelled operation kills the child before the cancellation propagates.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Iterable, Protocol

from ..errors import TransportError
from ..utils.fs import copy_file
from ..utils.log import log_debug


class Transport(Protocol):
    """Capability required from anything that talks to a remote."""

    async def clone(self, url: str, dest: Path, branch: str | None = None) -> Path:
        """Copy the remote's content into dest (which must not exist)."""
        ...

    async def push(
        self,
        url: str,
        branch: str,
        tree: Path,
        files: Iterable[str],
        message: str,
    ) -> None:
        """Make `branch` on the remote hold exactly `files` from `tree`."""
        ...


class GitTransport:
    """Transport backed by the git command line."""

    def __init__(
        self,
        git_executable: str = "git",
        timeout: float = 120,
        scratch_dir: Path | None = None,
    ):
        """Initialize the git transport.

        Args:
            git_executable: git binary name or path
            timeout: Seconds allowed for each git invocation
            scratch_dir: Parent directory for push working copies
        """
        self.git_executable = git_executable
        self.timeout = timeout
        self.scratch_dir = scratch_dir

    async def clone(self, url: str, dest: Path, branch: str | None = None) -> Path:
        cmd = ["clone", "--quiet", "--depth", "1"]
        if branch:
            cmd += ["--branch", branch]
        await self._git(*cmd, url, str(dest), operation="clone")
        return dest

    async def push(
        self,
        url: str,
        branch: str,
        tree: Path,
        files: Iterable[str],
        message: str,
    ) -> None:
        if self.scratch_dir is not None:
            self.scratch_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(dir=self.scratch_dir, prefix="push-") as tmp_dir:
            work = Path(tmp_dir) / "work"
            await self._git("clone", "--quiet", url, str(work), operation="push")

            exists = await self._succeeds("rev-parse", "--verify", "--quiet", f"refs/remotes/origin/{branch}", cwd=work)
            if exists:
                await self._git("checkout", "--quiet", "-B", branch, f"origin/{branch}", cwd=work, operation="push")
            else:
                await self._git("symbolic-ref", "HEAD", f"refs/heads/{branch}", cwd=work, operation="push")

            try:
                count = self._mirror(tree, files, work)
            except OSError as e:
                raise TransportError("push", f"cannot stage working tree: {e}") from e

            await self._git("add", "--all", cwd=work, operation="push")
            await self._git(
                "-c", "user.name=myhub",
                "-c", "user.email=myhub@localhost",
                "commit", "--quiet", "--allow-empty", "-m", message,
                cwd=work,
                operation="push",
            )
            await self._git("push", "--quiet", "origin", f"HEAD:refs/heads/{branch}", cwd=work, operation="push")
            log_debug(f"pushed {count} files to {url} ({branch})")

    def _mirror(self, tree: Path, files: Iterable[str], work: Path) -> int:
        """Replace the checkout under work with files from tree."""
        # Drop everything but git's own metadata.
        for child in work.iterdir():
            if child.name == ".git":
                continue
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()
        count = 0
        for rel in files:
            copy_file(tree / rel, work / rel)
            count += 1
        return count

    async def _succeeds(self, *args: str, cwd: Path) -> bool:
        try:
            await self._git(*args, cwd=cwd, operation="rev-parse")
        except TransportError:
            return False
        return True

    async def _git(self, *args: str, cwd: Path | None = None, operation: str) -> str:
        cmd = [self.git_executable, *args]
        log_debug(f"running: {' '.join(cmd)}")
        env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                env=env,
            )
        except OSError as e:
            raise TransportError(operation, f"cannot run {self.git_executable}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            await _kill(process)
            raise TransportError(operation, f"git timed out after {self.timeout}s") from e
        except asyncio.CancelledError:
            await _kill(process)
            raise

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip() or f"exit status {process.returncode}"
            raise TransportError(operation, detail)
        return stdout.decode("utf-8", errors="replace")


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()
