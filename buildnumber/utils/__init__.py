# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations
"""
Utility package for buildnumber.
Exports:
- fs: filesystem helpers (directories, atomic writes)
- time: build clock helpers (start time, epoch milliseconds)
"""
from . import fs as fs  # re-export
from . import time as time  # re-export
__all__ = ["fs", "time"]
