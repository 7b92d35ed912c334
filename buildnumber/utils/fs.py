# SPDX-License-Identifier: Apache-2.0
"""
Filesystem utilities: parent directory creation and atomic text writes.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


# ------------------------------ Directories ------------------------------


def ensure_parent(path: Path | str) -> Path:
    """Create the parent directory of `path` if missing and return `path` as a Path."""
    p = Path(path).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


# ------------------------------ Atomic writes -----------------------------


def atomic_write_text(path: Path | str, text: str, encoding: str = "utf-8") -> Path:
    """
    Write `text` to a temp file next to `path`, then move it into place.
    Readers never observe a half-written file.
    """
    target = ensure_parent(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="\n") as f:
            f.write(text)
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise
    return target
