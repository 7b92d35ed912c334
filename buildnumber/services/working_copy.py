# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from typing import List, Optional, Tuple

from ..exceptions import DirtyWorkingCopyError
from ..models.revision import WorkingCopyState
from ..models.scm import RepositoryHandle, ScmFile
from .scm_command import check_result

import logging

log = logging.getLogger("buildnumber.services.working_copy")


def check_clean(handle: RepositoryHandle) -> List[ScmFile]:
    """
    Return the locally modified files of the working copy (empty when clean).
    """
    result = handle.provider.status(handle)
    if result is None:
        return []
    check_result(result)
    return list(result.changed_files)


def enforce_clean(handle: RepositoryHandle) -> List[ScmFile]:
    """
    Fail with DirtyWorkingCopyError when any local modification exists,
    otherwise return the (empty) status listing. Never touches the working copy.
    """
    log.info("Verifying there are no local modifications ...")
    changed = check_clean(handle)
    if changed:
        raise DirtyWorkingCopyError([str(f) for f in changed])
    return changed


def sync(handle: RepositoryHandle) -> Tuple[List[ScmFile], Optional[str]]:
    """
    Update the working copy. Returns (updated files, revision reached) where
    the revision is None if the provider does not report one.
    """
    result = handle.provider.update(handle)
    if result is None:
        return [], None
    check_result(result)
    if result.revision:
        log.info("Got a revision during update: %s", result.revision)
    return list(result.updated_files), result.revision


def guard(
    handle: RepositoryHandle,
    enforce: bool = False,
    update: bool = False,
    offline: bool = False,
) -> WorkingCopyState:
    """
    Apply the clean-check and sync policies in order. Offline mode skips both.
    """
    state = WorkingCopyState(root=handle.working_copy)

    if offline:
        log.info("Executed in offline mode, checking for local modifications: skipped.")
    elif enforce:
        state.modified_files = enforce_clean(handle)
    else:
        log.info("Checking for local modifications: skipped.")

    if offline:
        log.info("Executed in offline mode, updating project files from SCM: skipped.")
    elif update:
        files, revision = sync(handle)
        for f in files:
            log.info("Updated: %s", f)
        if not files:
            log.info("No files needed updating.")
        state.updated_files = files
        state.revision = revision
    else:
        log.info("Updating project files from SCM: skipped.")

    return state
