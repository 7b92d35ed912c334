# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from .scm import ScmFile


class RevisionInfo(BaseModel):
    """
    Identifiers resolved for the working copy.

    - commit_id: numeric revision (centralized) or content hash (distributed);
      after ordinal resolution it holds the total commit count.
    - last_changed_id: last changed revision (centralized) or the commit
      ordinal of the checkout (distributed).
    """
    commit_id: Optional[str] = None
    last_changed_id: Optional[str] = None
    source_url: Optional[str] = None

    model_config = {"extra": "ignore"}


class WorkingCopyState(BaseModel):
    """
    Snapshot produced by the working-copy guard; consumed once.
    """
    root: Path
    modified_files: List[ScmFile] = Field(default_factory=list)
    updated_files: List[ScmFile] = Field(default_factory=list)
    revision: Optional[str] = Field(default=None, description="Revision reported by the sync pass")
