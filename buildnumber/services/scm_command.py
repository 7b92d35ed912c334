# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Optional, Sequence

from ..exceptions import ScmCommandError
from ..models.scm import CommandResult, ScmResult

import logging

log = logging.getLogger("buildnumber.services.scm_command")

CommandRunner = Callable[[Sequence[str], Optional[Path]], CommandResult]


def run_scm_command(args: Sequence[str], cwd: Optional[Path] = None) -> CommandResult:
    """
    Run one SCM process synchronously and capture its output.
    A non-zero exit is returned, not raised; a missing executable raises.
    """
    argv = [str(a) for a in args]
    log.debug("Executing", extra={"command": " ".join(argv), "cwd": str(cwd) if cwd else None})
    try:
        proc = subprocess.run(
            argv,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise ScmCommandError(f"SCM executable not found: {argv[0]}", command=" ".join(argv)) from e
    except OSError as e:
        raise ScmCommandError(f"Cannot execute {argv[0]}: {e}", command=" ".join(argv)) from e
    return CommandResult(
        args=argv,
        exit_code=proc.returncode,
        stdout_lines=proc.stdout.splitlines(),
        stderr=proc.stderr or "",
    )


def check_result(result: ScmResult) -> None:
    """
    Raise ScmCommandError for an unsuccessful provider result, logging the
    provider message and command output first.
    """
    if result.success:
        return
    log.error("Provider message:")
    log.error(result.provider_message or "")
    log.error("Command output:")
    log.error(result.command_output or "")
    raise ScmCommandError(
        result.provider_message or "The SCM command failed.",
        command=result.command_line or None,
        output=result.command_output,
    )
