# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from datetime import datetime
from typing import Callable, MutableMapping, Optional, Sequence

from ..config import Settings
from ..exceptions import ScmCommandError
from ..models.build import BuildProperties
from ..models.revision import RevisionInfo
from ..models.scm import RepositoryHandle
from ..utils.time import build_start_time
from .branch import UNKNOWN_BRANCH, branch_for
from .connector import connect
from .formatter import format_build_number, format_template, format_timestamp
from .revision_service import RevisionResolver
from .scm_command import CommandRunner
from .working_copy import guard

import logging

log = logging.getLogger("buildnumber.services.build")

Properties = MutableMapping[str, str]


class BuildNumberService:
    """
    One resolution run: guard the working copy, resolve build id and build
    number, derive the branch label and publish the values.

    The check/update policy flags live on the instance; once a fallback
    revision has been used they are switched off for the rest of the run.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        runner: Optional[CommandRunner] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.settings = settings or Settings()
        self.runner = runner
        self.clock = clock or build_start_time
        self.do_check = self.settings.ENFORCE_CLEAN_CHECK
        self.do_update = self.settings.SYNC_BEFORE_RESOLVE
        self.revision: Optional[str] = None
        self._handle: Optional[RepositoryHandle] = None
        self._resolver: Optional[RevisionResolver] = None

    # ------------------------------ Wiring ------------------------------

    def handle(self) -> RepositoryHandle:
        if self._handle is None:
            s = self.settings
            self._handle = connect(
                s.scm_location or "",
                credentials=s.credentials,
                working_copy=s.WORKING_COPY_PATH,
                provider_implementations=s.PROVIDER_IMPLEMENTATIONS,
                runner=self.runner,
            )
        return self._handle

    def resolver(self) -> RevisionResolver:
        if self._resolver is None:
            s = self.settings
            self._resolver = RevisionResolver(
                self.handle(),
                use_last_committed=s.USE_LAST_COMMITTED_REVISION,
                short_revision_length=s.SHORT_REVISION_LENGTH,
                fallback_revision=s.REVISION_ON_SCM_FAILURE,
            )
        return self._resolver

    def _degrade(self) -> None:
        self.do_check = False
        self.do_update = False

    # ------------------------------ Steps ------------------------------

    def resolve_from_template(self, now: datetime) -> str:
        s = self.settings
        return format_template(s.FORMAT or "", s.ITEMS, s.COUNTER_FILE, now, s.LOCALE)

    def resolve_from_scm(self) -> tuple[Optional[str], Optional[str]]:
        """
        Returns (build id, unformatted build number).
        """
        handle = self.handle()
        try:
            state = guard(handle, enforce=self.do_check, update=self.do_update, offline=self.settings.OFFLINE)
        except ScmCommandError as e:
            if not self.settings.REVISION_ON_SCM_FAILURE:
                raise
            log.warning("SCM status/update failed, continuing without working-copy checks : \n%s", e)
            self._degrade()
        else:
            if state.revision:
                self.revision = state.revision

        resolver = self.resolver()
        build_id = resolver.get_revision(always_ordinal=False)
        number = resolver.get_revision(always_ordinal=True)
        if resolver.degraded:
            self._degrade()
        self.revision = build_id
        return build_id, number

    def resolve_branch(self) -> str:
        s = self.settings
        if not s.scm_location:
            log.info("No SCM location configured; branch is %s.", UNKNOWN_BRANCH)
            return UNKNOWN_BRANCH
        resolver = self.resolver()
        if resolver.degraded:
            return UNKNOWN_BRANCH
        try:
            info: Optional[RevisionInfo] = resolver.info or resolver.resolve_commit_id()
        except ScmCommandError as e:
            if not s.REVISION_ON_SCM_FAILURE:
                raise
            log.warning(
                "Cannot get the branch information from the scm repository, proceeding with %s : \n%s",
                UNKNOWN_BRANCH,
                e,
            )
            self._degrade()
            return UNKNOWN_BRANCH
        if info is None:
            log.debug("Cannot get the branch information from the scm repository")
            if s.REVISION_ON_SCM_FAILURE:
                self._degrade()
            return UNKNOWN_BRANCH
        return branch_for(info)

    # ------------------------------ Run ------------------------------

    def execute(
        self,
        properties: Optional[Properties] = None,
        siblings: Sequence[Properties] = (),
    ) -> BuildProperties:
        """
        Resolve and publish. With RESOLVE_ONLY_ONCE, SCM values already present
        in `properties` are reused, and results are fanned out to `siblings`.
        Template mode always draws fresh counter values.
        """
        s = self.settings
        names = s.property_names
        now = self.clock()

        if s.FORMAT is not None:
            # template output is published as is; the increment only applies to SCM ids
            build_id = self.resolve_from_template(now)
            build_number = build_id
        elif s.RESOLVE_ONLY_ONCE and properties is not None and names.build_number in properties:
            log.debug("Revision available from previous execution")
            return BuildProperties(
                build_id=properties.get(names.build_id),
                build_number=properties.get(names.build_number),
                branch=properties.get(names.branch, UNKNOWN_BRANCH),
                timestamp=properties.get(names.timestamp, format_timestamp(now, s.TIMESTAMP_FORMAT, s.LOCALE)),
            )
        else:
            build_id, number = self.resolve_from_scm()
            build_number = format_build_number(number, s.BUILD_NUMBER_INCREMENT)

        timestamp = format_timestamp(now, s.TIMESTAMP_FORMAT, s.LOCALE)
        log.info("Storing buildId: %s at timestamp: %s", build_id, timestamp)
        log.info("Storing buildNumber: %s", build_number)
        branch = self.resolve_branch()
        log.info("Storing buildScmBranch: %s", branch)

        result = BuildProperties(build_id=build_id, build_number=build_number, branch=branch, timestamp=timestamp)
        if properties is not None:
            publish(properties, result, s)
        if s.RESOLVE_ONLY_ONCE:
            for sibling in siblings:
                publish(sibling, result, s)
        return result


def publish(target: Properties, result: BuildProperties, settings: Optional[Settings] = None) -> Properties:
    """
    Write `result` into a property mapping under the configured names.
    """
    names = (settings or Settings()).property_names
    target.update(result.as_properties(names))
    return target


def resolve_build_properties(settings: Optional[Settings] = None, runner: Optional[CommandRunner] = None) -> BuildProperties:
    """Convenience entry point: one run with fresh state."""
    return BuildNumberService(settings, runner=runner).execute()
