# SPDX-License-Identifier: Apache-2.0
"""
Revision resolution for centralized and distributed repositories.

Centralized systems (svn) report a native revision number. Distributed
systems (git) only report a hash, so a sequential ordinal is derived by
counting the commits reachable from all references:

    ordinal = len(commits)                 default
    ordinal = len(commits) - position      last-committed mode

where `position` is the zero-based index of the checkout's newest commit in
the newest-first commit list.
"""
from __future__ import annotations

from typing import Optional, Sequence

from ..exceptions import ScmCommandError
from ..models.revision import RevisionInfo
from ..models.scm import RepositoryHandle
from .scm_command import check_result

import logging

log = logging.getLogger("buildnumber.services.revision")

SHORT_REVISION_DISABLED = -1
MIN_SHORT_REVISION_LENGTH = 4


def commit_ordinal(commits: Sequence[str], target: Optional[str]) -> int:
    """
    Count `len(commits)` down by one for every commit listed before `target`.
    Returns 0 when `target` is not in the list.
    """
    number = len(commits)
    for commit_id in commits:
        if commit_id == target:
            break
        number -= 1
    return number


class RevisionResolver:
    """
    Resolves commit identifiers for one run.

    `degraded` becomes True once the fallback revision has been used; callers
    then stop running the clean-check and sync policies.
    """

    def __init__(
        self,
        handle: RepositoryHandle,
        use_last_committed: bool = False,
        short_revision_length: int = SHORT_REVISION_DISABLED,
        fallback_revision: Optional[str] = None,
    ):
        self.handle = handle
        self.use_last_committed = use_last_committed
        self.short_revision_length = short_revision_length
        self.fallback_revision = fallback_revision or None
        self.degraded = False
        self.info: Optional[RevisionInfo] = None
        self.ordinal_info: Optional[RevisionInfo] = None

    # ------------------------------ Commit id ------------------------------

    def _short_length(self) -> int:
        if not self.handle.is_distributed or self.short_revision_length == SHORT_REVISION_DISABLED:
            return SHORT_REVISION_DISABLED
        log.info("ShortRevision tag detected. The value is '%s'.", self.short_revision_length)
        if 0 <= self.short_revision_length < MIN_SHORT_REVISION_LENGTH:
            log.warning(
                "shortRevision parameter less than %d. Abbreviated git ids shorter than %d characters are not distinguishing.",
                MIN_SHORT_REVISION_LENGTH,
                MIN_SHORT_REVISION_LENGTH,
            )
        return self.short_revision_length

    def resolve_commit_id(self) -> Optional[RevisionInfo]:
        """
        Query `info` for the working copy. Returns None when the working copy
        does not look versioned; provider errors propagate as ScmCommandError.
        """
        result = self.handle.provider.info(self.handle, short_revision_length=self._short_length())
        if result is None or not result.items:
            return None
        check_result(result)
        item = result.items[0]
        info = RevisionInfo(commit_id=item.revision, source_url=item.url)
        if not self.handle.is_distributed and item.last_changed_revision:
            info.last_changed_id = item.last_changed_revision
        self.info = info
        return info

    # ------------------------------ Ordinal ------------------------------

    def resolve_ordinal(self, info: RevisionInfo) -> RevisionInfo:
        """
        Replace the hash of a distributed repository by commit counts:
        commit_id becomes the total count, last_changed_id the ordinal.
        Centralized info is returned unchanged.
        """
        if not self.handle.is_distributed:
            return info

        local_id: Optional[str] = None
        if self.use_last_committed:
            # Full id, never abbreviated: only used for matching
            local_id = self.handle.provider.last_commit_id(self.handle)

        commits = self.handle.provider.list_commits(self.handle)
        total = len(commits)
        number = commit_ordinal(commits, local_id) if self.use_last_committed else total
        if self.use_last_committed and number == 0:
            log.warning(
                "Last committed id %s was not found among %d enumerated commits; commit ordinal is 0.",
                local_id,
                total,
                extra={"commit": local_id, "commit_count": total},
            )
        resolved = info.model_copy(update={"commit_id": str(total), "last_changed_id": str(number)})
        self.ordinal_info = resolved
        return resolved

    # ------------------------------ Public API ------------------------------

    def _fallback(self, error: Optional[ScmCommandError]) -> Optional[str]:
        if error is None:
            log.warning(
                "Cannot determine build information, project must be checked out from SCM "
                "(folder like .git, .svn, etc. must be available)."
            )
            if self.fallback_revision:
                self.degraded = True
            return self.fallback_revision
        log.warning(
            "Cannot get the revision information from the scm repository, proceeding with revision of %s : \n%s",
            self.fallback_revision,
            error,
        )
        self.degraded = True
        return self.fallback_revision

    def get_revision(self, always_ordinal: bool = False) -> Optional[str]:
        """
        Build id (always_ordinal=False) or build number source (True).

        Distributed + always_ordinal returns the commit ordinal; a centralized
        last changed revision wins when last-committed mode is on.
        """
        try:
            info = self.info or self.resolve_commit_id()
            if info is None:
                return self._fallback(None)
            if always_ordinal and self.handle.is_distributed:
                info = self.ordinal_info or self.resolve_ordinal(info)
                return info.last_changed_id or info.commit_id
            if self.use_last_committed and info.last_changed_id:
                return info.last_changed_id
            return info.commit_id
        except ScmCommandError as e:
            if not self.fallback_revision:
                raise
            return self._fallback(e)
