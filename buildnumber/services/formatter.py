# SPDX-License-Identifier: Apache-2.0
"""
Build number formatting.

- format_build_number(): direct mode; numeric ids get the configured increment,
  hash ids pass through untouched.
- format_message(): locale-aware MessageFormat-style templates
  ("{0}", "{0,number,#}", "{1,date,yyyy-MM-dd}", '' for a literal quote).
- format_template(): template mode; "timestamp" items become the build start
  time and "buildNumber*" items draw the next value from the counter file.
"""
from __future__ import annotations

import re
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple, Union

from babel import Locale, UnknownLocaleError, default_locale
from babel.dates import format_date, format_datetime, format_time
from babel.numbers import format_decimal, format_percent

from ..exceptions import FormatConfigError
from ..utils.time import epoch_millis
from .counter_store import next_counter

import logging

log = logging.getLogger("buildnumber.services.formatter")

DEFAULT_LOCALE = "en_US"
TIMESTAMP_ITEM = "timestamp"
BUILD_NUMBER_ITEM = "buildNumber"
_STYLES = ("short", "medium", "long", "full")
_NUMERIC = re.compile(r"\d+", re.ASCII)

Element = Tuple[int, Optional[str], Optional[str]]


# ------------------------------ Direct mode ------------------------------


def is_numeric(value: Optional[str]) -> bool:
    return bool(value) and _NUMERIC.fullmatch(value) is not None


def format_build_number(value: Optional[str], increment: int = 0) -> Optional[str]:
    """
    Add `increment` to a purely numeric id; return any other id unchanged.
    """
    if value is None or not is_numeric(value):
        return value
    return str(int(value) + increment)


# ------------------------------ Locale ------------------------------


def parse_locale(tag: Optional[str]) -> Locale:
    """
    Parse "lang", "lang_COUNTRY" or "lang_COUNTRY_VARIANT"; without a tag the
    process default locale is used, then en_US.
    """
    if tag:
        parts = tag.strip().split("_", 2)
        try:
            if len(parts) == 1:
                return Locale.parse(parts[0])
            if len(parts) == 2:
                return Locale(parts[0].lower(), territory=parts[1].upper())
            return Locale(parts[0].lower(), territory=parts[1].upper(), variant=parts[2].upper())
        except (UnknownLocaleError, ValueError, TypeError) as e:
            raise FormatConfigError(f"Unknown locale: {tag}", details={"locale": tag}) from e
    try:
        return Locale.parse(default_locale() or DEFAULT_LOCALE)
    except (UnknownLocaleError, ValueError):
        return Locale.parse(DEFAULT_LOCALE)


# ------------------------------ MessageFormat ------------------------------


def _parse_element(inner: str, pattern: str) -> Element:
    pieces = inner.split(",", 2)
    try:
        index = int(pieces[0].strip())
    except ValueError as e:
        raise FormatConfigError(f"can't parse argument number: {pieces[0]}", details={"pattern": pattern}) from e
    if index < 0:
        raise FormatConfigError(f"negative argument number: {index}", details={"pattern": pattern})
    ftype = pieces[1].strip().lower() if len(pieces) > 1 and pieces[1].strip() else None
    style = pieces[2].strip() if len(pieces) > 2 and pieces[2].strip() else None
    return index, ftype, style


def parse_message(pattern: str) -> List[Union[str, Element]]:
    """
    Split a pattern into literal strings and (index, type, style) elements.
    """
    parts: List[Union[str, Element]] = []
    buf: List[str] = []
    i, n = 0, len(pattern)
    quoted = False
    while i < n:
        ch = pattern[i]
        if ch == "'":
            if i + 1 < n and pattern[i + 1] == "'":
                buf.append("'")
                i += 2
                continue
            quoted = not quoted
            i += 1
            continue
        if quoted or ch != "{":
            buf.append(ch)
            i += 1
            continue

        # argument element; quotes inside are kept for the sub-pattern
        depth, j, inner_quoted = 1, i + 1, False
        inner: List[str] = []
        while j < n:
            c = pattern[j]
            if c == "'":
                inner_quoted = not inner_quoted
            elif not inner_quoted and c == "{":
                depth += 1
            elif not inner_quoted and c == "}":
                depth -= 1
                if depth == 0:
                    break
            inner.append(c)
            j += 1
        if depth:
            raise FormatConfigError("Unmatched braces in the pattern.", details={"pattern": pattern})
        if buf:
            parts.append("".join(buf))
            buf = []
        parts.append(_parse_element("".join(inner), pattern))
        i = j + 1
    if buf:
        parts.append("".join(buf))
    return parts


def _format_number(value: Any, style: Optional[str], locale: Locale) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise FormatConfigError(f"Cannot format given Object as a Number: {value!r}")
    if style is None:
        return format_decimal(value, locale=locale)
    key = style.lower()
    if key == "integer":
        return format_decimal(value, format="#,##0", locale=locale)
    if key == "percent":
        return format_percent(value, locale=locale)
    if key == "currency":
        raise FormatConfigError("The currency number style is not supported.")
    return format_decimal(value, format=style, locale=locale)


def _format_temporal(value: Any, ftype: str, style: Optional[str], locale: Locale) -> str:
    if not isinstance(value, (datetime, date, time)):
        raise FormatConfigError(f"Cannot format given Object as a Date: {value!r}")
    fmt = style or "medium"
    if fmt.lower() in _STYLES:
        fmt = fmt.lower()
        if ftype == "date":
            if isinstance(value, time):
                raise FormatConfigError(f"Cannot format given Object as a Date: {value!r}")
            return format_date(value, format=fmt, locale=locale)
        if not isinstance(value, (datetime, time)):
            raise FormatConfigError(f"Cannot format given Object as a Time: {value!r}")
        return format_time(value, format=fmt, locale=locale)
    if isinstance(value, datetime):
        return format_datetime(value, format=fmt, locale=locale)
    if isinstance(value, date):
        return format_date(value, format=fmt, locale=locale)
    return format_time(value, format=fmt, locale=locale)


def _format_argument(value: Any, ftype: Optional[str], style: Optional[str], locale: Locale) -> str:
    if ftype is None:
        if isinstance(value, datetime):
            return format_datetime(value, format="short", locale=locale)
        if isinstance(value, date):
            return format_date(value, format="short", locale=locale)
        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            return format_decimal(value, locale=locale)
        return "null" if value is None else str(value)
    if ftype == "number":
        return _format_number(value, style, locale)
    if ftype in ("date", "time"):
        return _format_temporal(value, ftype, style, locale)
    raise FormatConfigError(f"unknown format type: {ftype}")


def format_message(pattern: str, args: Sequence[Any], locale: Optional[Locale] = None) -> str:
    """
    Render `pattern` with `args`. Elements referring past the end of `args`
    are rendered as "{n}".
    """
    loc = locale or parse_locale(None)
    out: List[str] = []
    for part in parse_message(pattern):
        if isinstance(part, str):
            out.append(part)
            continue
        index, ftype, style = part
        if index >= len(args):
            out.append("{%d}" % index)
            continue
        try:
            out.append(_format_argument(args[index], ftype, style, loc))
        except (ValueError, TypeError, KeyError) as e:
            raise FormatConfigError(
                f"Cannot format argument {index} with '{ftype},{style}': {e}",
                details={"pattern": pattern},
            ) from e
    return "".join(out)


# ------------------------------ Template mode ------------------------------


def template_arguments(items: Sequence[str], counter_file: Path | str, now: datetime) -> List[Any]:
    args: List[Any] = []
    for item in items:
        if item == TIMESTAMP_ITEM:
            args.append(now)
        elif item.startswith(BUILD_NUMBER_ITEM):
            args.append(next_counter(counter_file, item))
        else:
            args.append(item)
    return args


def format_template(
    template: str,
    items: Sequence[str],
    counter_file: Path | str,
    now: datetime,
    locale: Optional[str] = None,
) -> str:
    """
    Resolve a build number from `template` and its item specifiers.
    """
    if not items:
        raise FormatConfigError(
            "If you set a format, you must provide at least one item, please check documentation."
        )
    loc = parse_locale(locale)
    return format_message(template, template_arguments(items, counter_file, now), loc)


def format_timestamp(now: datetime, pattern: Optional[str] = None, locale: Optional[str] = None) -> str:
    """Epoch milliseconds, or `pattern` applied with the start time as argument 0."""
    if not pattern:
        return str(epoch_millis(now))
    return format_message(pattern, [now], parse_locale(locale))
