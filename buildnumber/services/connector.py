# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional, Tuple

from ..exceptions import ScmConnectionError
from ..models.scm import Credentials, RepositoryHandle
from .providers import make_provider
from .scm_command import CommandRunner

import logging

log = logging.getLogger("buildnumber.services.connector")

SCM_PREFIX = "scm"


def parse_scm_location(location: str) -> Tuple[str, str]:
    """
    Split a maven-style location "scm:<type>:<url>" (or "scm:<type>|<url>")
    into (type, provider-specific url).
    """
    s = (location or "").strip()
    if not s:
        raise ScmConnectionError("The scm url cannot be empty.")
    if not s.lower().startswith(SCM_PREFIX) or len(s) <= len(SCM_PREFIX) + 1:
        raise ScmConnectionError(f"The scm url must start with '{SCM_PREFIX}': {s}")
    delimiter = s[len(SCM_PREFIX)]
    if delimiter not in (":", "|"):
        raise ScmConnectionError(f"The scm url does not contain a valid delimiter: {s}")
    rest = s[len(SCM_PREFIX) + 1:]
    # Provider part ends at the first ':' or '|'
    cut = min((i for i in (rest.find(":"), rest.find("|")) if i >= 0), default=-1)
    if cut <= 0:
        raise ScmConnectionError(f"The scm url does not contain a provider type: {s}")
    return rest[:cut].lower(), rest[cut + 1:]


def connect(
    location: str,
    credentials: Optional[Credentials] = None,
    working_copy: Path | str = ".",
    provider_implementations: Optional[Mapping[str, str]] = None,
    runner: Optional[CommandRunner] = None,
) -> RepositoryHandle:
    """
    Build a repository handle for `location`. No SCM command runs here;
    I/O happens on the first provider operation.
    """
    scm_type, url = parse_scm_location(location)
    implementation = scm_type
    overrides = {str(k).lower(): str(v) for k, v in (provider_implementations or {}).items()}
    if scm_type in overrides:
        implementation = overrides[scm_type]
        log.info("Change the default '%s' provider implementation to '%s'.", scm_type, implementation)
    provider = make_provider(implementation, runner=runner)

    creds = credentials or Credentials()
    return RepositoryHandle(
        scm_type=scm_type,
        kind=provider.kind,
        location=location,
        url=url,
        working_copy=Path(working_copy).expanduser(),
        provider=provider,
        credentials=Credentials(username=creds.username, password=creds.password),
        implementation=implementation,
    )
