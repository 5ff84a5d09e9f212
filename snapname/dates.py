"""
dates.py — Date pattern rendering for the $dt[...] template field.

Patterns use the familiar custom date/time letters found in camera and
photo-management tools:

    yyyy  year (4 digits)        MM    month (01-12)     dd   day (01-31)
    yy    year (2 digits)        M     month (1-12)      d    day (1-31)
    MMMM  month name             MMM   month abbrev.     dddd weekday name
    HH    hour 00-23             hh    hour 01-12        ddd  weekday abbrev.
    mm    minute                 ss    second            tt   AM/PM
    f...  fraction of a second   F...  fraction, trailing zeros dropped

Text inside single or double quotes is copied verbatim, as is any character
escaped with a backslash. Every other character is a literal. A pattern that
contains ``%`` is handed to :meth:`datetime.strftime` unchanged.

A single-letter pattern selects a standard format (d, D, t, T, g, G, s, u),
rendered with invariant English names so generated file names do not depend
on the host locale.
"""

from __future__ import annotations

from datetime import datetime

STANDARD_PATTERNS = {
    "d": "MM/dd/yyyy",
    "D": "dddd, dd MMMM yyyy",
    "t": "HH:mm",
    "T": "HH:mm:ss",
    "g": "MM/dd/yyyy HH:mm",
    "G": "MM/dd/yyyy HH:mm:ss",
    "s": "yyyy-MM-dd'T'HH:mm:ss",
    "u": "yyyy-MM-dd HH:mm:ss'Z'",
}

DEFAULT_PATTERN = STANDARD_PATTERNS["g"]

_PATTERN_LETTERS = set("yMdhHmsfFt")
_MONTHS = [
    "",
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]
_MONTHS_ABBR = [m[:3] for m in _MONTHS]
_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
_DAYS_ABBR = [d[:3] for d in _DAYS]


def _render_token(letter: str, width: int, ts: datetime) -> str:
    if letter == "y":
        if width == 1:
            return str(ts.year % 100)
        if width == 2:
            return f"{ts.year % 100:02d}"
        return f"{ts.year:0{width}d}"
    if letter == "M":
        if width >= 4:
            return _MONTHS[ts.month]
        if width == 3:
            return _MONTHS_ABBR[ts.month]
        return f"{ts.month:0{width}d}"
    if letter == "d":
        if width >= 4:
            return _DAYS[ts.weekday()]
        if width == 3:
            return _DAYS_ABBR[ts.weekday()]
        return f"{ts.day:0{width}d}"
    if letter == "h":
        return f"{(ts.hour % 12) or 12:0{min(width, 2)}d}"
    if letter == "H":
        return f"{ts.hour:0{min(width, 2)}d}"
    if letter == "m":
        return f"{ts.minute:0{min(width, 2)}d}"
    if letter == "s":
        return f"{ts.second:0{min(width, 2)}d}"
    if letter in ("f", "F"):
        digits = f"{ts.microsecond:06d}0"[: min(width, 7)]
        return digits.rstrip("0") if letter == "F" else digits
    # "t"
    marker = "AM" if ts.hour < 12 else "PM"
    return marker[:1] if width == 1 else marker


def format_timestamp(ts: datetime, pattern: str) -> str:
    """Render ``ts`` according to a custom date pattern (see module docstring)."""
    if "%" in pattern:
        return ts.strftime(pattern)
    if len(pattern) == 1 and pattern in STANDARD_PATTERNS:
        pattern = STANDARD_PATTERNS[pattern]

    out = []
    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if ch in _PATTERN_LETTERS:
            j = i
            while j < n and pattern[j] == ch:
                j += 1
            out.append(_render_token(ch, j - i, ts))
            i = j
        elif ch in ("'", '"'):
            end = pattern.find(ch, i + 1)
            if end < 0:
                end = n
            out.append(pattern[i + 1 : end])
            i = end + 1
        elif ch == "\\" and i + 1 < n:
            out.append(pattern[i + 1])
            i += 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def format_default(ts: datetime) -> str:
    """Short date + short time, used when a template does not give a pattern."""
    return format_timestamp(ts, DEFAULT_PATTERN)
