"""Tests for the staging area."""

import json

import pytest

from myhub.core.ignore import IgnoreRules
from myhub.core.staging import StageStatus, StagingArea
from myhub.errors import MissingFileError
from myhub.paths import RepoPaths


@pytest.fixture
def temp_project(tmp_path):
    """Create a temporary project directory with test files."""
    project = tmp_path / "project"
    project.mkdir()

    (project / "a.txt").write_text("a")
    (project / "b.txt").write_text("b")
    (project / "src").mkdir()
    (project / "src" / "main.py").write_text("def main(): pass")
    (project / "src" / "deep").mkdir()
    (project / "src" / "deep" / "util.py").write_text("")
    (project / "build").mkdir()
    (project / "build" / "out.bin").write_bytes(b"\x00\x01")
    (project / ".myhub").mkdir()
    (project / ".myhub" / "log.json").write_text("[]")

    return project


@pytest.fixture
def staging(temp_project):
    return StagingArea(RepoPaths(temp_project), IgnoreRules.from_patterns(["build/"]))


class TestStage:
    def test_stage_file(self, staging):
        results = staging.stage("a.txt")

        assert [(r.path, r.status) for r in results] == [("a.txt", StageStatus.STAGED)]
        assert staging.entries() == ["a.txt"]

    def test_stage_is_idempotent(self, staging):
        staging.stage("a.txt")
        results = staging.stage("a.txt")

        assert results[0].status == StageStatus.ALREADY_STAGED
        assert staging.entries() == ["a.txt"]

    def test_preserves_insertion_order(self, staging):
        staging.stage("b.txt")
        staging.stage("a.txt")

        assert staging.entries() == ["b.txt", "a.txt"]

    def test_missing_file_fails(self, staging):
        with pytest.raises(MissingFileError):
            staging.stage("nope.txt")
        assert staging.entries() == []

    def test_path_outside_root_fails(self, staging, tmp_path):
        (tmp_path / "outside.txt").write_text("x")

        with pytest.raises(MissingFileError):
            staging.stage("../outside.txt")

    def test_ignored_path_not_added(self, staging):
        results = staging.stage("build/out.bin")

        assert results[0].status == StageStatus.IGNORED
        assert staging.entries() == []

    def test_internal_metadata_never_staged(self, staging):
        results = staging.stage(".myhub/log.json")

        assert results[0].status == StageStatus.IGNORED
        assert staging.entries() == []

    def test_nested_git_directory_never_staged(self, staging, temp_project):
        nested = temp_project / "vendor" / "lib"
        (nested / ".git").mkdir(parents=True)
        (nested / ".git" / "config").write_text("[core]")
        (nested / "lib.py").write_text("x = 1")

        staging.stage("vendor")

        assert staging.entries() == ["vendor/lib/lib.py"]

    def test_absolute_path_inside_root(self, staging, temp_project):
        staging.stage(temp_project / "src" / "main.py")

        assert staging.entries() == ["src/main.py"]

    def test_stage_directory_expands_files(self, staging):
        staging.stage("src")

        assert staging.entries() == ["src/main.py", "src/deep/util.py"]

    def test_stage_root_skips_ignored_and_internal(self, staging):
        results = staging.stage(".")

        assert staging.entries() == ["a.txt", "b.txt", "src/main.py", "src/deep/util.py"]
        ignored = [r.path for r in results if r.status == StageStatus.IGNORED]
        assert ignored == ["build/out.bin"]

    def test_record_persisted(self, staging, temp_project):
        staging.stage("a.txt")

        data = json.loads((temp_project / ".myhub" / "staging.json").read_text())
        assert data == ["a.txt"]


class TestStageMany:
    def test_informational_results_do_not_abort(self, staging):
        staging.stage("a.txt")

        results = staging.stage_many(["a.txt", "build/out.bin", "b.txt"])

        assert [r.status for r in results] == [
            StageStatus.ALREADY_STAGED,
            StageStatus.IGNORED,
            StageStatus.STAGED,
        ]
        assert staging.entries() == ["a.txt", "b.txt"]

    def test_missing_path_aborts_whole_batch(self, staging):
        with pytest.raises(MissingFileError):
            staging.stage_many(["a.txt", "missing.txt"])

        assert staging.entries() == []


class TestDrain:
    def test_drain_clears_on_success(self, staging):
        staging.stage_many(["a.txt", "b.txt"])

        with staging.drain() as staged:
            assert staged == ["a.txt", "b.txt"]

        assert staging.entries() == []

    def test_drain_keeps_record_on_failure(self, staging):
        staging.stage_many(["a.txt", "b.txt"])

        with pytest.raises(RuntimeError):
            with staging.drain():
                raise RuntimeError("capture failed")

        assert staging.entries() == ["a.txt", "b.txt"]
