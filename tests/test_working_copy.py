# tests/test_working_copy.py
from __future__ import annotations

import pytest

from buildnumber.exceptions import DirtyWorkingCopyError, ScmCommandError
from buildnumber.services.connector import connect
from buildnumber.services.working_copy import check_clean, enforce_clean, guard, sync

SVN = "scm:svn:http://svn.example.org/repo/trunk"
GIT = "scm:git:https://example.org/app.git"


def _mutating(runner) -> bool:
    return runner.called("svn", "update") or runner.called("git", "pull")


def test_dirty_svn_working_copy_is_rejected(runner, tmp_path):
    runner.on(["svn", "status"], stdout=["M       src/app.c", "?       notes.txt", "A       src/new.c"])
    handle = connect(SVN, working_copy=tmp_path, runner=runner)

    with pytest.raises(DirtyWorkingCopyError) as exc:
        enforce_clean(handle)

    assert exc.value.files == ["src/app.c:modified", "src/new.c:added"]
    assert "src/app.c:modified" in exc.value.message
    assert not _mutating(runner)


def test_clean_working_copy_passes(runner, tmp_path):
    runner.on(["git", "status"], stdout=["?? scratch.txt"])
    handle = connect(GIT, working_copy=tmp_path, runner=runner)

    enforce_clean(handle)

    assert check_clean(handle) == []
    assert not _mutating(runner)


def test_status_failure_is_a_command_error(runner, tmp_path):
    runner.on(["svn", "status"], exit_code=1, stderr="svn: E155007: '/tmp/x' is not a working copy")
    handle = connect(SVN, working_copy=tmp_path, runner=runner)

    with pytest.raises(ScmCommandError) as exc:
        enforce_clean(handle)
    assert "not a working copy" in exc.value.output


def test_sync_reports_files_and_revision(runner, tmp_path):
    runner.on(["svn", "update"], stdout=["Updating '.':", "U    src/app.c", "Updated to revision 43."])
    handle = connect(SVN, working_copy=tmp_path, runner=runner)

    files, revision = sync(handle)

    assert [str(f) for f in files] == ["src/app.c:updated"]
    assert revision == "43"


def test_guard_runs_check_then_update(runner, tmp_path):
    runner.on(["svn", "status"])
    runner.on(["svn", "update"], stdout=["D    old.c", "At revision 42."])
    handle = connect(SVN, working_copy=tmp_path, runner=runner)

    state = guard(handle, enforce=True, update=True)

    assert [c[:2] for c in runner.calls] == [["svn", "status"], ["svn", "update"]]
    assert state.revision == "42"
    assert state.modified_files == []
    assert [str(f) for f in state.updated_files] == ["old.c:deleted"]
    assert state.root == tmp_path


def test_guard_stops_on_local_modifications(runner, tmp_path):
    runner.on(["svn", "status"], stdout=["M       src/app.c"])
    handle = connect(SVN, working_copy=tmp_path, runner=runner)

    with pytest.raises(DirtyWorkingCopyError):
        guard(handle, enforce=True, update=True)
    assert not _mutating(runner)


def test_guard_offline_skips_everything(runner, tmp_path):
    handle = connect(SVN, working_copy=tmp_path, runner=runner)

    state = guard(handle, enforce=True, update=True, offline=True)

    assert runner.calls == []
    assert state.revision is None


def test_guard_with_policies_off_runs_nothing(runner, tmp_path):
    handle = connect(GIT, working_copy=tmp_path, runner=runner)

    guard(handle)

    assert runner.calls == []
