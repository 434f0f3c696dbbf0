"""Tests for snapshot store."""

import json
import tarfile

import pytest

from myhub.core.snapshot_store import SnapshotStore
from myhub.errors import MissingFileError, NothingStagedError, PartialWriteError, VersionNotFoundError


@pytest.fixture
def temp_project(tmp_path):
    """Create a temporary project directory with test files."""
    project = tmp_path / "project"
    project.mkdir()

    (project / "app.py").write_text("print('hello')")
    (project / "empty.txt").write_bytes(b"")
    (project / "src" / "pkg").mkdir(parents=True)
    (project / "src" / "pkg" / "data.bin").write_bytes(bytes(range(256)))

    return project


@pytest.fixture
def store(temp_project):
    return SnapshotStore(storage_dir=temp_project / ".myhub" / "commits", project_root=temp_project)


class TestCommit:
    def test_commit_captures_files(self, store):
        snapshot = store.commit(["app.py", "empty.txt", "src/pkg/data.bin"], "first")

        assert snapshot.snapshot_id
        assert snapshot.message == "first"
        assert snapshot.file_count == 3
        assert snapshot.total_size == len("print('hello')") + 256
        assert store.is_complete(snapshot.snapshot_id)

    def test_nothing_staged(self, store):
        with pytest.raises(NothingStagedError):
            store.commit([], "empty")

    def test_archive_holds_exact_bytes(self, store, temp_project, tmp_path):
        snapshot = store.commit(["app.py", "empty.txt", "src/pkg/data.bin"], "first")

        out = tmp_path / "out"
        extracted = store.extract(snapshot.snapshot_id, out)

        assert sorted(extracted) == ["app.py", "empty.txt", "src/pkg/data.bin"]
        assert (out / "empty.txt").read_bytes() == b""
        assert (out / "src" / "pkg" / "data.bin").read_bytes() == bytes(range(256))

    def test_snapshots_do_not_collide(self, store, temp_project, tmp_path):
        first = store.commit(["app.py"], "v1")
        (temp_project / "app.py").write_text("print('changed')")
        second = store.commit(["app.py"], "v2", previous_id=first.snapshot_id)

        assert second.snapshot_id > first.snapshot_id
        store.extract(first.snapshot_id, tmp_path / "one")
        store.extract(second.snapshot_id, tmp_path / "two")
        assert (tmp_path / "one" / "app.py").read_text() == "print('hello')"
        assert (tmp_path / "two" / "app.py").read_text() == "print('changed')"

    def test_ids_increase_even_when_clock_lags(self, store):
        future = "29991231_235959_999998"

        snapshot = store.commit(["app.py"], "late", previous_id=future)

        assert snapshot.snapshot_id == "29991231_235959_999999"

    def test_metadata_written(self, store):
        snapshot = store.commit(["app.py"], "meta")

        meta_path = store.storage_dir / snapshot.snapshot_id / SnapshotStore.METADATA_NAME
        data = json.loads(meta_path.read_text())
        assert data["snapshotId"] == snapshot.snapshot_id
        assert data["paths"] == ["app.py"]
        assert store.get(snapshot.snapshot_id).message == "meta"


class TestCommitAtomicity:
    def test_io_failure_leaves_nothing_behind(self, store, monkeypatch):
        original = SnapshotStore._archive_member

        def flaky(self, tar, src, arcname):
            if arcname == "src/pkg/data.bin":
                raise OSError("disk full")
            return original(self, tar, src, arcname)

        monkeypatch.setattr(SnapshotStore, "_archive_member", flaky)

        with pytest.raises(PartialWriteError):
            store.commit(["app.py", "src/pkg/data.bin"], "broken")

        assert list(store.storage_dir.iterdir()) == []

    def test_vanished_file_fails_whole_commit(self, store, temp_project):
        (temp_project / "empty.txt").unlink()

        with pytest.raises(MissingFileError):
            store.commit(["app.py", "empty.txt"], "broken")

        assert list(store.storage_dir.iterdir()) == []


class TestLookup:
    def test_unknown_snapshot(self, store, tmp_path):
        assert not store.is_complete("20200101_000000_000000")
        assert store.get("20200101_000000_000000") is None
        with pytest.raises(VersionNotFoundError):
            store.extract("20200101_000000_000000", tmp_path / "out")

    def test_partial_directory_is_not_complete(self, store):
        partial = store.storage_dir / ".partial-20200101_000000_000000"
        partial.mkdir(parents=True)

        assert not store.is_complete(".partial-20200101_000000_000000")
        assert not store.is_complete("20200101_000000_000000")

    def test_discard(self, store):
        snapshot = store.commit(["app.py"], "gone")

        store.discard(snapshot.snapshot_id)

        assert not store.is_complete(snapshot.snapshot_id)

    def test_archive_is_gzip_tar(self, store):
        snapshot = store.commit(["app.py"], "fmt")

        archive = store.storage_dir / snapshot.snapshot_id / SnapshotStore.ARCHIVE_NAME
        with tarfile.open(archive, "r:gz") as tar:
            assert tar.getnames() == ["app.py"]
