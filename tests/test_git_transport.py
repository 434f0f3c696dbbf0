"""Round trip through a real git remote."""

from __future__ import annotations

import shutil
import subprocess

import pytest

from myhub.core.controller import RepositoryController
from myhub.errors import TransportError
from myhub.remote.transport import GitTransport


pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


@pytest.fixture
def bare_remote(tmp_path):
    remote = tmp_path / "remote.git"
    subprocess.run(["git", "init", "--bare", "--quiet", str(remote)], check=True)
    subprocess.run(["git", "symbolic-ref", "HEAD", "refs/heads/main"], cwd=remote, check=True)
    return remote


def _repo(path, remote) -> RepositoryController:
    path.mkdir()
    controller = RepositoryController(path)
    assert controller.init()["success"]
    assert controller.remote_add("origin", str(remote))["success"]
    return controller


@pytest.mark.asyncio
async def test_push_then_pull(tmp_path, bare_remote):
    alice = _repo(tmp_path / "alice", bare_remote)
    (alice.root / ".myhubignore").write_text("build/\n")
    (alice.root / "notes.txt").write_text("from alice")
    (alice.root / "src").mkdir()
    (alice.root / "src" / "app.py").write_text("print('hi')")
    (alice.root / "build").mkdir()
    (alice.root / "build" / "out.bin").write_bytes(b"\x00")

    pushed = await alice.push("origin", "main")
    assert pushed["success"], pushed

    bob = _repo(tmp_path / "bob", bare_remote)
    (bob.root / "notes.txt").write_text("bob's draft")

    pulled = await bob.pull("origin")
    assert pulled["success"], pulled

    assert (bob.root / "notes.txt").read_text() == "from alice"
    assert (bob.root / "src" / "app.py").read_text() == "print('hi')"
    assert not (bob.root / "build").exists()
    assert not (bob.root / ".git").exists()


@pytest.mark.asyncio
async def test_second_push_updates_branch(tmp_path, bare_remote):
    alice = _repo(tmp_path / "alice", bare_remote)
    (alice.root / "notes.txt").write_text("v1")
    assert (await alice.push("origin", "main"))["success"]

    (alice.root / "notes.txt").write_text("v2")
    assert (await alice.push("origin", "main"))["success"]

    bob = _repo(tmp_path / "bob", bare_remote)
    assert (await bob.pull("origin", "main"))["success"]
    assert (bob.root / "notes.txt").read_text() == "v2"


@pytest.mark.asyncio
async def test_clone_of_missing_remote_fails(tmp_path):
    transport = GitTransport(timeout=30)

    with pytest.raises(TransportError):
        await transport.clone(str(tmp_path / "does-not-exist.git"), tmp_path / "clone")


@pytest.mark.asyncio
async def test_push_of_vanished_file_fails(tmp_path, bare_remote):
    tree = tmp_path / "tree"
    tree.mkdir()
    transport = GitTransport(timeout=30, scratch_dir=tmp_path / "scratch")

    with pytest.raises(TransportError) as exc_info:
        await transport.push(str(bare_remote), "main", tree, ["gone.txt"], "sync")

    assert exc_info.value.operation == "push"
    assert list((tmp_path / "scratch").iterdir()) == []
