# tests/test_revision.py
from __future__ import annotations

import logging

import pytest

from conftest import commit_hashes

from buildnumber.exceptions import ScmCommandError
from buildnumber.services.connector import connect
from buildnumber.services.revision_service import RevisionResolver

SVN = "scm:svn:http://svn.example.org/repo/branches/release-1.x"
GIT = "scm:git:https://example.org/app.git"

SVN_INFO = [
    "Path: .",
    "Working Copy Root Path: /work/app",
    "URL: http://svn.example.org/repo/branches/release-1.x",
    "Revision: 42",
    "Node Kind: directory",
    "Last Changed Rev: 40",
]


def _resolver(runner, tmp_path, location=GIT, **kw) -> RevisionResolver:
    return RevisionResolver(connect(location, working_copy=tmp_path, runner=runner), **kw)


def test_svn_revision_and_last_changed(runner, tmp_path):
    runner.on(["svn", "info"], stdout=SVN_INFO)

    plain = _resolver(runner, tmp_path, SVN)
    assert plain.get_revision() == "42"
    assert plain.get_revision(always_ordinal=True) == "42"
    assert plain.info.source_url == "http://svn.example.org/repo/branches/release-1.x"

    last = _resolver(runner, tmp_path, SVN, use_last_committed=True)
    assert last.get_revision() == "40"


def test_svn_never_enumerates_commits(runner, tmp_path):
    runner.on(["svn", "info"], stdout=SVN_INFO)
    _resolver(runner, tmp_path, SVN).get_revision(always_ordinal=True)
    assert all(c[1] == "info" for c in runner.calls)


def test_git_hash_and_total_count(runner, tmp_path):
    commits = commit_hashes(10)
    runner.on(["git", "rev-parse"], stdout=[commits[0]])
    runner.on(["git", "rev-list", "--all"], stdout=commits)

    resolver = _resolver(runner, tmp_path)

    assert resolver.get_revision() == commits[0]
    assert resolver.get_revision(always_ordinal=True) == "10"
    assert not runner.called("git", "log")


def test_git_ordinal_of_last_committed(runner, tmp_path):
    commits = commit_hashes(10)
    runner.on(["git", "rev-parse"], stdout=[commits[0]])
    runner.on(["git", "log"], stdout=[commits[3]])
    runner.on(["git", "rev-list", "--all"], stdout=commits)

    resolver = _resolver(runner, tmp_path, use_last_committed=True)

    assert resolver.get_revision(always_ordinal=True) == "7"
    assert resolver.ordinal_info.commit_id == "10"
    # resolved once per run
    resolver.get_revision(always_ordinal=True)
    assert sum(1 for c in runner.calls if c[:2] == ["git", "rev-list"]) == 1


def test_git_ordinal_of_unknown_commit_is_zero(runner, tmp_path, caplog):
    runner.on(["git", "rev-parse"], stdout=["f" * 40])
    runner.on(["git", "log"], stdout=["e" * 40])
    runner.on(["git", "rev-list", "--all"], stdout=commit_hashes(3))

    with caplog.at_level(logging.WARNING, logger="buildnumber.services.revision"):
        number = _resolver(runner, tmp_path, use_last_committed=True).get_revision(always_ordinal=True)

    assert number == "0"
    assert "not found among 3 enumerated commits" in caplog.text


def test_short_revision_length(runner, tmp_path, caplog):
    runner.on(["git", "rev-parse"], stdout=["abcd1234"])

    with caplog.at_level(logging.WARNING, logger="buildnumber.services.revision"):
        revision = _resolver(runner, tmp_path, short_revision_length=2).get_revision()

    assert revision == "abcd1234"
    assert "--short=2" in runner.calls[0]
    assert "less than 4" in caplog.text


def test_short_revision_ignored_for_svn(runner, tmp_path):
    runner.on(["svn", "info"], stdout=SVN_INFO)
    _resolver(runner, tmp_path, SVN, short_revision_length=7).get_revision()
    assert not any(a.startswith("--short") for a in runner.calls[0])


def test_unversioned_directory_without_fallback(runner, tmp_path):
    runner.on(["git", "rev-parse"], exit_code=128, stderr="fatal: not a git repository")
    resolver = _resolver(runner, tmp_path)

    assert resolver.get_revision() is None
    assert not resolver.degraded


def test_unversioned_directory_with_fallback(runner, tmp_path):
    runner.on(["git", "rev-parse"], stdout=[])
    resolver = _resolver(runner, tmp_path, fallback_revision="offline-build")

    assert resolver.get_revision() == "offline-build"
    assert resolver.degraded


def test_command_error_uses_fallback(runner, tmp_path):
    runner.fail(["git"])
    resolver = _resolver(runner, tmp_path, fallback_revision="offline-build")

    assert resolver.get_revision() == "offline-build"
    assert resolver.get_revision(always_ordinal=True) == "offline-build"
    assert resolver.degraded


def test_command_error_without_fallback_propagates(runner, tmp_path):
    runner.fail(["git"])
    with pytest.raises(ScmCommandError):
        _resolver(runner, tmp_path).get_revision()


def test_enumeration_failure_uses_fallback(runner, tmp_path):
    runner.on(["git", "rev-parse"], stdout=["a" * 40])
    runner.on(["git", "rev-list"], exit_code=128, stderr="fatal: bad object")
    resolver = _resolver(runner, tmp_path, fallback_revision="0")

    assert resolver.get_revision() == "a" * 40
    assert resolver.get_revision(always_ordinal=True) == "0"
    assert resolver.degraded
