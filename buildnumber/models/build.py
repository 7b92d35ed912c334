# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, Field


class PropertyNames(BaseModel):
    """
    Names under which resolved values are published.
    """
    build_number: str = "buildNumber"
    build_id: str = "buildId"
    timestamp: str = "timestamp"
    branch: str = "scmBranch"


class BuildProperties(BaseModel):
    """
    Values published to the build property store.
    build_id/build_number are None when no revision could be resolved.
    """
    build_id: Optional[str] = None
    build_number: Optional[str] = None
    branch: str = Field(default="UNKNOWN_BRANCH")
    timestamp: str

    def as_properties(self, names: PropertyNames | None = None) -> Dict[str, str]:
        n = names or PropertyNames()
        out: Dict[str, str] = {}
        if self.build_id is not None:
            out[n.build_id] = self.build_id
            out[n.build_number] = self.build_number if self.build_number is not None else self.build_id
        out[n.timestamp] = self.timestamp
        out[n.branch] = self.branch
        return out
