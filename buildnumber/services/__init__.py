# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import logging

__all__ = [
    "scm_command",
    "providers",
    "connector",
    "working_copy",
    "revision_service",
    "branch",
    "counter_store",
    "formatter",
    "build_service",
]

# Parent logger for the service layer; handlers are configured by the caller
log = logging.getLogger("buildnumber.services")
