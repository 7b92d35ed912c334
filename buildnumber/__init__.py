# SPDX-License-Identifier: Apache-2.0
"""
buildnumber

Resolves build identifiers, sequential build numbers and branch labels
from Subversion or Git working copies.
Exposes nothing at import-time beyond package markers to keep startup fast.
"""
from __future__ import annotations

__version__ = "1.3.0"

__all__ = ["__version__"]
