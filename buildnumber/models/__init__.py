# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

# Re-export commonly used models for convenience
from .scm import (
    CommandResult,
    Credentials,
    InfoItem,
    InfoResult,
    RepositoryHandle,
    ScmFile,
    ScmKind,
    ScmResult,
    StatusResult,
    UpdateResult,
)
from .revision import RevisionInfo, WorkingCopyState
from .build import BuildProperties, PropertyNames
from .responses import ApiError, ErrorResponse, OkResponse

__all__ = [
    "CommandResult",
    "Credentials",
    "InfoItem",
    "InfoResult",
    "RepositoryHandle",
    "ScmFile",
    "ScmKind",
    "ScmResult",
    "StatusResult",
    "UpdateResult",
    "RevisionInfo",
    "WorkingCopyState",
    "BuildProperties",
    "PropertyNames",
    "ApiError",
    "ErrorResponse",
    "OkResponse",
]
