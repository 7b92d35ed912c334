# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import re
from typing import Optional

from ..models.revision import RevisionInfo

TRUNK = "trunk"
UNKNOWN = "UNKNOWN"
UNKNOWN_BRANCH = "UNKNOWN_BRANCH"

# "branches/<name>" or "tags/<name>"; a bare "branches"/"tags" segment as a last resort
_BRANCH_WITH_NAME = re.compile(r"/((?:branches|tags)/[^/]+)")
_BRANCH_SEGMENT = re.compile(r"/((?:branches|tags)[^/]*)")


def extract_branch(source_url: Optional[str]) -> str:
    """
    Derive a branch label from a repository URL:
    ".../trunk/..." -> "trunk", ".../branches/x/..." -> "branches/x",
    ".../tags/v2" -> "tags/v2", anything else -> "UNKNOWN".
    """
    url = source_url or ""
    if "/trunk" in url:
        return TRUNK
    if "/branches" in url or "/tags" in url:
        m = _BRANCH_WITH_NAME.search(url) or _BRANCH_SEGMENT.search(url)
        if m:
            return m.group(1)
    return UNKNOWN


def branch_for(info: Optional[RevisionInfo]) -> str:
    """
    UNKNOWN_BRANCH when no revision info was resolved; otherwise the label
    extracted from the info URL.
    """
    if info is None:
        return UNKNOWN_BRANCH
    return extract_branch(info.source_url)
