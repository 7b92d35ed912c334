# SPDX-License-Identifier: Apache-2.0
"""
Build clock helpers.
Features
--------
- build_start_time(): timezone-aware local "now", captured once per run.
- epoch_millis(): milliseconds since the Unix epoch, the default timestamp form.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def build_start_time() -> datetime:
    """Current local time with tzinfo attached."""
    return datetime.now(timezone.utc).astimezone()


def epoch_millis(moment: datetime) -> int:
    """Milliseconds since 1970-01-01T00:00:00Z; naive values are read as UTC.
    Sub-millisecond precision is truncated toward the past."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - _EPOCH) // timedelta(milliseconds=1)
