# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, Field, field_validator

if TYPE_CHECKING:  # pragma: no cover
    from ..services.providers import ScmProvider


class ScmKind(str, Enum):
    centralized = "centralized"
    distributed = "distributed"


class Credentials(BaseModel):
    """
    Optional username/password applied to the provider repository.
    Blank values are normalized to None so they are never sent.
    """
    username: Optional[str] = None
    password: Optional[str] = None

    @field_validator("username", "password", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if v is None or not str(v):
            return None
        return str(v)


class ScmFile(BaseModel):
    """
    A file reported by status or update, with its single-word status.
    """
    path: str
    status: str = Field(default="modified", description="added | modified | deleted | renamed | conflict | updated ...")

    def __str__(self) -> str:
        return f"{self.path}:{self.status}"


@dataclass
class CommandResult:
    """
    Outcome of one external SCM process invocation.
    """
    args: List[str]
    exit_code: int
    stdout_lines: List[str] = field(default_factory=list)
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def command_line(self) -> str:
        return " ".join(self.args)

    @property
    def output(self) -> str:
        return "\n".join(self.stdout_lines)


class ScmResult(BaseModel):
    """
    Common envelope for provider results; failed results carry the
    provider message and raw command output for diagnostics.
    """
    success: bool = True
    command_line: str = ""
    provider_message: Optional[str] = None
    command_output: Optional[str] = None


class StatusResult(ScmResult):
    changed_files: List[ScmFile] = Field(default_factory=list)


class UpdateResult(ScmResult):
    updated_files: List[ScmFile] = Field(default_factory=list)
    revision: Optional[str] = Field(default=None, description="Revision reached by the update, when the provider reports one")


class InfoItem(BaseModel):
    revision: Optional[str] = None
    last_changed_revision: Optional[str] = None
    url: Optional[str] = None


class InfoResult(ScmResult):
    items: List[InfoItem] = Field(default_factory=list)


@dataclass
class RepositoryHandle:
    """
    Connection descriptor for one resolution run. Not persisted.
    """
    scm_type: str
    kind: ScmKind
    location: str
    url: str
    working_copy: Path
    provider: "ScmProvider"
    credentials: Credentials = field(default_factory=Credentials)
    implementation: Optional[str] = None

    @property
    def is_distributed(self) -> bool:
        return self.kind == ScmKind.distributed
