# SPDX-License-Identifier: Apache-2.0
"""
Durable build counters kept in a java-properties style text file.

    #buildnumber properties file
    #Mon Oct 19 10:12:00 UTC 2026
    buildNumber=42
    buildNumber.release=7

Keys keep their order and unknown keys survive a rewrite. The file is opened,
read, mutated and written on every use; concurrent writers are not locked
out, so builds sharing one counter file may race.
"""
from __future__ import annotations

import re
from collections import OrderedDict
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from ..exceptions import CounterFileError
from ..utils.fs import atomic_write_text, ensure_parent

import logging

log = logging.getLogger("buildnumber.services.counter_store")

HEADER = "buildnumber properties file"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_HEX4 = re.compile(r"[0-9a-fA-F]{4}")
_COUNTER = re.compile(r"[+-]?\d+", re.ASCII)


# ------------------------------ Parsing ------------------------------


def _logical_lines(lines: Iterable[str]) -> Iterable[str]:
    """Join backslash-continued lines; drop blanks and comments."""
    buf = ""
    for raw in lines:
        line = raw.lstrip()
        if not buf and (not line or line[0] in "#!"):
            continue
        # odd number of trailing backslashes means continuation
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            buf += line[:-1]
            continue
        yield buf + line
        buf = ""
    if buf:
        yield buf


def _unescape(s: str) -> str:
    out: List[str] = []
    i = 0
    while i < len(s):
        ch = s[i]
        if ch == "\\" and i + 1 < len(s):
            nxt = s[i + 1]
            if nxt == "u":
                digits = s[i + 2:i + 6]
                if len(digits) != 4 or not _HEX4.fullmatch(digits):
                    raise ValueError(f"Malformed \\uxxxx encoding: \\u{digits}")
                out.append(chr(int(digits, 16)))
                i += 6
                continue
            out.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    # \uXXXX pairs may encode a surrogate pair
    return "".join(out).encode("utf-16", "surrogatepass").decode("utf-16")


def _split(line: str) -> Tuple[str, str]:
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in "=: \t\f":
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip(" \t\f")
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(" \t\f")
    return _unescape(key), _unescape(rest)


def parse_properties(text: str) -> "OrderedDict[str, str]":
    props: "OrderedDict[str, str]" = OrderedDict()
    for line in _logical_lines(text.splitlines()):
        key, value = _split(line)
        props[key] = value
    return props


def _escape(s: str, is_key: bool) -> str:
    out: List[str] = []
    for i, ch in enumerate(s):
        if ch == "\\":
            out.append("\\\\")
        elif ch in "=:#!":
            out.append("\\" + ch)
        elif ch == " " and (is_key or i == 0):
            out.append("\\ ")
        elif ch in "\t\n\r\f":
            out.append("\\" + {"\t": "t", "\n": "n", "\r": "r", "\f": "f"}[ch])
        elif ch < " " or ch > "~":
            units = ch.encode("utf-16-be", "surrogatepass")
            out.extend("\\u%04X" % int.from_bytes(units[j:j + 2], "big") for j in range(0, len(units), 2))
        else:
            out.append(ch)
    return "".join(out)


def dump_properties(props: Dict[str, str], comment: str = HEADER) -> str:
    stamp = datetime.now(timezone.utc).strftime("%a %b %d %H:%M:%S UTC %Y")
    lines = [f"#{comment}", f"#{stamp}"]
    lines += [f"{_escape(k, True)}={_escape(v, False)}" for k, v in props.items()]
    return "\n".join(lines) + "\n"


# ------------------------------ Counter file ------------------------------


def load_counters(path: Path | str) -> "OrderedDict[str, str]":
    p = Path(path)
    try:
        return parse_properties(p.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return OrderedDict()
    except (OSError, ValueError) as e:
        raise CounterFileError(f"Couldn't load properties file: {p}", details={"path": str(p)}) from e


def next_counter(path: Path | str, name: str) -> int:
    """
    Read counter `name` (0 when absent), increment it, persist the whole file
    and return the new value. The file and its directory are created on first use.
    """
    p = Path(path)
    if not p.exists():
        try:
            ensure_parent(p).touch()
        except OSError as e:
            raise CounterFileError(f"Couldn't create properties file: {p}", details={"path": str(p)}) from e

    props = load_counters(p)
    raw = props.get(name)
    current = "0" if raw is None else raw.strip()
    if not _COUNTER.fullmatch(current):
        raise CounterFileError(
            f"Couldn't parse {name} in properties file to an Integer: {raw}",
            details={"path": str(p), "key": name, "value": raw},
        )
    value = int(current) + 1

    props[name] = str(value)
    try:
        atomic_write_text(p, dump_properties(props))
    except OSError as e:
        raise CounterFileError(f"Couldn't write properties file: {p}", details={"path": str(p)}) from e
    log.debug("Counter incremented", extra={"path": str(p), "key": name, "value": value})
    return value
