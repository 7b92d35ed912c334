# SPDX-License-Identifier: Apache-2.0
"""
Error taxonomy for build number resolution.

Each exception carries a machine-readable ``code``, a human message and an
optional ``details`` mapping, so the CLI can render them as an error envelope.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional


class BuildNumberError(Exception):
    """Base exception for every resolution failure."""

    default_code = "BUILD_NUMBER"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = self.default_code
        self.message = message
        self.details: Dict[str, Any] = details or {}

    def __str__(self) -> str:
        return self.message


class ScmConnectionError(BuildNumberError):
    """Raised when a repository location cannot be mapped to a known provider.

    Root cause: the location is not of the form ``scm:<type>:<url>`` or names
    a type/implementation with no registered provider.
    Remediation: fix the repository URL or the provider implementation map.
    """

    default_code = "SCM_CONNECTION"


class DirtyWorkingCopyError(BuildNumberError):
    """Raised when the enforced clean check finds local modifications."""

    default_code = "DIRTY_WORKING_COPY"

    def __init__(self, files: List[str]):
        listing = "\n".join(files)
        super().__init__(
            f"Cannot create the build number because you have local modifications : \n{listing}\n",
            details={"files": list(files)},
        )
        self.files = list(files)


class ScmCommandError(BuildNumberError):
    """Raised when an underlying status/update/info/log/enumeration command fails.

    Root cause: the SCM executable is missing or exited with a non-zero status.
    Remediation: inspect ``details['output']``; configure a fallback revision
    to let builds proceed without a working SCM.
    """

    default_code = "SCM_COMMAND"

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
        output: Optional[str] = None,
    ):
        details: Dict[str, Any] = {}
        if command is not None:
            details["command"] = command
        if exit_code is not None:
            details["exit_code"] = exit_code
        if output:
            details["output"] = output
        super().__init__(message, details=details)
        self.command = command
        self.exit_code = exit_code
        self.output = output


class FormatConfigError(BuildNumberError):
    """Raised for template mode misconfiguration (missing items, bad pattern, bad locale)."""

    default_code = "FORMAT_CONFIG"


class CounterFileError(BuildNumberError):
    """Raised when the counter file cannot be created, read or written, or holds a non-numeric value."""

    default_code = "COUNTER_FILE"


__all__ = [
    "BuildNumberError",
    "ScmConnectionError",
    "DirtyWorkingCopyError",
    "ScmCommandError",
    "FormatConfigError",
    "CounterFileError",
]
