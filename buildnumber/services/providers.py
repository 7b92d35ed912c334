# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Tuple, Type

from ..exceptions import ScmCommandError, ScmConnectionError
from ..models.scm import (
    CommandResult,
    InfoItem,
    InfoResult,
    RepositoryHandle,
    ScmFile,
    ScmKind,
    StatusResult,
    UpdateResult,
)
from .scm_command import CommandRunner, check_result, run_scm_command

import logging

log = logging.getLogger("buildnumber.services.providers")


# ------------------------------ Base provider ------------------------------


class ScmProvider:
    """
    Shared capability interface: status, update, info, log, enumerate.

    Commit enumeration and last-commit lookup only exist for distributed
    systems; centralized providers report them as unsupported.
    """

    scm_type: str = ""
    kind: ScmKind = ScmKind.centralized
    executable: str = ""

    def __init__(self, runner: Optional[CommandRunner] = None):
        self.runner: CommandRunner = runner or run_scm_command

    def _run(self, handle: RepositoryHandle, *args: str) -> CommandResult:
        argv = [self.executable, *args, *self._auth_args(handle)]
        return self.runner(argv, handle.working_copy)

    def _auth_args(self, handle: RepositoryHandle) -> List[str]:
        return []

    @staticmethod
    def _failure_fields(result: CommandResult, message: str) -> dict:
        return {
            "success": False,
            "command_line": result.command_line,
            "provider_message": message,
            "command_output": result.stderr or result.output,
        }

    def status(self, handle: RepositoryHandle) -> StatusResult:
        raise NotImplementedError

    def update(self, handle: RepositoryHandle) -> UpdateResult:
        raise NotImplementedError

    def info(self, handle: RepositoryHandle, short_revision_length: int = -1) -> InfoResult:
        raise NotImplementedError

    def list_commits(self, handle: RepositoryHandle) -> List[str]:
        raise ScmCommandError(f"Commit enumeration is not supported by the {self.scm_type} provider.")

    def last_commit_id(self, handle: RepositoryHandle) -> Optional[str]:
        raise ScmCommandError(f"Last commit lookup is not supported by the {self.scm_type} provider.")


# ------------------------------ Subversion ------------------------------

_SVN_STATUS = {
    "A": "added",
    "C": "conflict",
    "D": "deleted",
    "M": "modified",
    "R": "replaced",
    "!": "missing",
    "~": "obstructed",
}
_SVN_UPDATE = {
    "A": "added",
    "C": "conflict",
    "D": "deleted",
    "E": "existed",
    "G": "merged",
    "R": "replaced",
    "U": "updated",
}
_SVN_UPDATE_LINE = re.compile(r"^(?P<text>[ADUCGER ])(?P<props>[UCG ])(?P<lock>[B ])?(?P<tree>[C ])?\s+(?P<path>\S.*)$")
_SVN_REVISION_LINE = re.compile(r"^(?:Updated to|At) revision (?P<rev>\d+)\.")


def parse_svn_status(lines: Sequence[str]) -> List[ScmFile]:
    """
    Parse `svn status` output; unversioned (?), ignored (I) and external (X)
    entries are not local modifications.
    """
    files: List[ScmFile] = []
    for line in lines:
        if len(line) < 8 or line.startswith(("Performing status", "Status against revision", "---")):
            continue
        text, props = line[0], line[1]
        path = line[8:].strip()
        if not path:
            continue
        if text in _SVN_STATUS:
            files.append(ScmFile(path=path, status=_SVN_STATUS[text]))
        elif props in ("M", "C"):
            files.append(ScmFile(path=path, status="conflict" if props == "C" else "modified"))
    return files


def parse_svn_update(lines: Sequence[str]) -> Tuple[List[ScmFile], Optional[str]]:
    files: List[ScmFile] = []
    revision: Optional[str] = None
    for line in lines:
        rm = _SVN_REVISION_LINE.match(line)
        if rm:
            revision = rm.group("rev")
            continue
        m = _SVN_UPDATE_LINE.match(line)
        if not m:
            continue
        code = (m.group("text") + m.group("props")).strip()
        if not code:
            continue
        files.append(ScmFile(path=m.group("path").strip(), status=_SVN_UPDATE.get(code[0], "updated")))
    return files, revision


def parse_svn_info(lines: Sequence[str]) -> Optional[InfoItem]:
    fields: Dict[str, str] = {}
    for line in lines:
        key, sep, value = line.partition(":")
        if sep:
            fields.setdefault(key.strip(), value.strip())
    if "Revision" not in fields:
        return None
    return InfoItem(
        revision=fields["Revision"],
        last_changed_revision=fields.get("Last Changed Rev") or None,
        url=fields.get("URL") or None,
    )


class SvnExeProvider(ScmProvider):
    """Centralized provider driving the `svn` command line client."""

    scm_type = "svn"
    kind = ScmKind.centralized
    executable = "svn"

    def _auth_args(self, handle: RepositoryHandle) -> List[str]:
        args = ["--non-interactive"]
        if handle.credentials.username:
            args += ["--username", handle.credentials.username]
        if handle.credentials.password:
            args += ["--password", handle.credentials.password]
        return args

    def status(self, handle: RepositoryHandle) -> StatusResult:
        res = self._run(handle, "status", ".")
        if not res.success:
            return StatusResult(**self._failure_fields(res, "The svn status command failed."))
        return StatusResult(command_line=res.command_line, changed_files=parse_svn_status(res.stdout_lines))

    def update(self, handle: RepositoryHandle) -> UpdateResult:
        res = self._run(handle, "update", ".")
        if not res.success:
            return UpdateResult(**self._failure_fields(res, "The svn update command failed."))
        files, revision = parse_svn_update(res.stdout_lines)
        return UpdateResult(command_line=res.command_line, updated_files=files, revision=revision)

    def info(self, handle: RepositoryHandle, short_revision_length: int = -1) -> InfoResult:
        res = self._run(handle, "info", ".")
        if not res.success:
            return InfoResult(**self._failure_fields(res, "The svn info command failed."))
        item = parse_svn_info(res.stdout_lines)
        return InfoResult(command_line=res.command_line, items=[item] if item else [])


# ------------------------------ Git ------------------------------

_GIT_STATUS = {
    "A": "added",
    "C": "copied",
    "D": "deleted",
    "M": "modified",
    "R": "renamed",
    "T": "modified",
    "U": "conflict",
}


def parse_git_status(lines: Sequence[str]) -> List[ScmFile]:
    """Parse `git status --porcelain`; untracked (??) and ignored (!!) entries are skipped."""
    files: List[ScmFile] = []
    for line in lines:
        if len(line) < 4 or line[:2] in ("??", "!!"):
            continue
        code = line[:2]
        path = line[3:].strip()
        if " -> " in path:
            path = path.split(" -> ", 1)[1]
        flag = "U" if "U" in code else (code[0] if code[0] != " " else code[1])
        files.append(ScmFile(path=path.strip('"'), status=_GIT_STATUS.get(flag, "modified")))
    return files


def parse_git_name_status(lines: Sequence[str]) -> List[ScmFile]:
    """Parse `git diff --name-status` output (tab separated, renames carry two paths)."""
    files: List[ScmFile] = []
    for line in lines:
        parts = line.split("\t")
        if len(parts) < 2 or not parts[0]:
            continue
        files.append(ScmFile(path=parts[-1], status=_GIT_STATUS.get(parts[0][0], "updated")))
    return files


class GitExeProvider(ScmProvider):
    """Distributed provider driving the `git` command line client."""

    scm_type = "git"
    kind = ScmKind.distributed
    executable = "git"

    def _head(self, handle: RepositoryHandle) -> CommandResult:
        return self._run(handle, "rev-parse", "--verify", "HEAD")

    def status(self, handle: RepositoryHandle) -> StatusResult:
        res = self._run(handle, "status", "--porcelain")
        if not res.success:
            return StatusResult(**self._failure_fields(res, "The git status command failed."))
        return StatusResult(command_line=res.command_line, changed_files=parse_git_status(res.stdout_lines))

    def update(self, handle: RepositoryHandle) -> UpdateResult:
        before = self._head(handle)
        if not before.success:
            return UpdateResult(**self._failure_fields(before, "The git rev-parse command failed."))
        pull = self._run(handle, "pull")
        if not pull.success:
            return UpdateResult(**self._failure_fields(pull, "The git pull command failed."))
        after = self._head(handle)
        if not after.success:
            return UpdateResult(**self._failure_fields(after, "The git rev-parse command failed."))
        old, new = before.output.strip(), after.output.strip()
        if old == new:
            return UpdateResult(command_line=pull.command_line, revision=new)
        diff = self._run(handle, "diff", "--name-status", old, new)
        if not diff.success:
            return UpdateResult(**self._failure_fields(diff, "The git diff command failed."))
        return UpdateResult(
            command_line=pull.command_line,
            updated_files=parse_git_name_status(diff.stdout_lines),
            revision=new,
        )

    def info(self, handle: RepositoryHandle, short_revision_length: int = -1) -> InfoResult:
        args = ["rev-parse", "--verify"]
        if short_revision_length != -1:
            args.append(f"--short={short_revision_length}")
        args.append("HEAD")
        res = self._run(handle, *args)
        if not res.success:
            return InfoResult(**self._failure_fields(res, "The git rev-parse command failed."))
        lines = [ln.strip() for ln in res.stdout_lines if ln.strip()]
        if not lines:
            return InfoResult(command_line=res.command_line)
        return InfoResult(command_line=res.command_line, items=[InfoItem(revision=lines[0])])

    def list_commits(self, handle: RepositoryHandle) -> List[str]:
        """Every commit reachable from any reference, newest first."""
        res = self._run(handle, "rev-list", "--all")
        if not res.success:
            check_result(InfoResult(**self._failure_fields(res, "The git rev-list command failed.")))
        return [ln.strip() for ln in res.stdout_lines if ln.strip()]

    def last_commit_id(self, handle: RepositoryHandle) -> Optional[str]:
        """Full hash of the newest commit touching the working-copy subtree."""
        res = self._run(handle, "log", "-1", "--format=%H", "--", ".")
        if not res.success:
            check_result(InfoResult(**self._failure_fields(res, "The git log command failed.")))
        for ln in res.stdout_lines:
            if ln.strip():
                return ln.strip()
        return None


# ------------------------------ Registry ------------------------------

PROVIDERS: Dict[str, Type[ScmProvider]] = {
    "svn": SvnExeProvider,
    "svnexe": SvnExeProvider,
    "git": GitExeProvider,
    "gitexe": GitExeProvider,
}


def make_provider(implementation: str, runner: Optional[CommandRunner] = None) -> ScmProvider:
    """
    Instantiate the provider registered under `implementation`.
    """
    cls = PROVIDERS.get((implementation or "").lower())
    if cls is None:
        raise ScmConnectionError(
            f"No such provider: '{implementation}'.",
            details={"known": sorted(PROVIDERS)},
        )
    return cls(runner=runner)
