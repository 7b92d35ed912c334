# tests/conftest.py
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pytest

from buildnumber.exceptions import ScmCommandError
from buildnumber.models.scm import CommandResult

Response = Union[CommandResult, Exception]


class FakeRunner:
    """
    Stands in for run_scm_command. Responses are registered by argv prefix;
    the longest matching prefix wins. Every call is recorded.
    """

    def __init__(self) -> None:
        self.responses: Dict[Tuple[str, ...], Response] = {}
        self.calls: List[List[str]] = []

    def on(self, prefix: Sequence[str], stdout: Sequence[str] = (), exit_code: int = 0, stderr: str = "") -> "FakeRunner":
        self.responses[tuple(prefix)] = CommandResult(
            args=list(prefix), exit_code=exit_code, stdout_lines=list(stdout), stderr=stderr
        )
        return self

    def fail(self, prefix: Sequence[str], error: Optional[Exception] = None) -> "FakeRunner":
        self.responses[tuple(prefix)] = error or ScmCommandError(f"SCM executable not found: {prefix[0]}")
        return self

    def __call__(self, args: Sequence[str], cwd: Optional[Path] = None) -> CommandResult:
        argv = [str(a) for a in args]
        self.calls.append(argv)
        best: Optional[Tuple[str, ...]] = None
        for prefix in self.responses:
            if tuple(argv[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            raise AssertionError(f"unexpected command: {argv}")
        res = self.responses[best]
        if isinstance(res, Exception):
            raise res
        return CommandResult(args=argv, exit_code=res.exit_code, stdout_lines=list(res.stdout_lines), stderr=res.stderr)

    def called(self, *prefix: str) -> bool:
        return any(tuple(c[: len(prefix)]) == prefix for c in self.calls)


def commit_hashes(n: int) -> List[str]:
    """Newest-first list of fake 40-char commit ids."""
    return [f"{i:040x}" for i in range(n, 0, -1)]


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate Settings from the developer's environment and .env files."""
    import os

    for key in list(os.environ):
        if key.upper().startswith("BUILDNUMBER_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
