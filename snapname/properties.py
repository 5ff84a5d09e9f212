"""
properties.py — Property catalog for SnapName.

Each recognized metadata field is described by a PropertyDescriptor: a unique
two-letter code used in naming templates, a display name matching the metadata
reader's tag name, and a parse/render pair that turns the reported string into
a TypedValue and back into text suitable for a file name.

The catalog is built once by build_registry() and handed to every component
that needs it.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Iterable, Iterator, Optional

from . import DATE_CODE, PROJECT_NAME
from .dates import format_default
from .errors import PropertyParseError
from .values import TypedValue, ValueKind

logger = logging.getLogger(f"{PROJECT_NAME.lower()}.properties")

# Codes never counted in statistics
EXCLUDED_CODES = frozenset({DATE_CODE, "fn", "sz"})


@dataclass(frozen=True)
class PropertyDescriptor:
    """A recognized metadata property."""

    code: str
    name: str
    kind: ValueKind
    convert_in: Callable[[str], object]
    convert_out: Callable[[object], str]
    aliases: tuple[str, ...] = field(default=())

    def parse(self, raw: str) -> TypedValue:
        """Convert a reported tag value to its typed form.

        Raises PropertyParseError when the value is malformed.
        """
        try:
            return TypedValue(self.kind, self._coerce(self.convert_in(raw)))
        except (ValueError, IndexError, TypeError, ZeroDivisionError, OverflowError) as e:
            raise PropertyParseError(self.code, raw, str(e)) from e

    def _coerce(self, value):
        if self.kind is ValueKind.INTEGER:
            return TypedValue.integer(value).value
        if self.kind is ValueKind.LONG:
            return TypedValue.long(value).value
        if self.kind is ValueKind.REAL:
            return float(value)
        return value

    def render(self, typed: TypedValue) -> str:
        """Convert a typed value to its file-name form."""
        return self.convert_out(typed.value)

    def __str__(self) -> str:
        return f"${self.code}: {self.name}"


# ─── Parse / render helpers ─────────────────────────────────────────────


def _identity(value):
    return value


def format_number(value: float) -> str:
    """Shortest text for a number: integral values drop the fraction."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def extract_first_int(raw: str) -> int:
    """First whitespace-delimited token as an integer ("72 dots per inch" -> 72)."""
    return int(raw.split()[0])


def parse_f_number(raw: str) -> float:
    """Take the part after the first ``/`` ("f/2.8" -> 2.8, "2.8" -> 2.8)."""
    return float(raw[raw.find("/") + 1 :])


def parse_datetime(raw: str) -> datetime:
    """Parse "YYYY:MM:DD HH:MM:SS" or "YYYY-MM-DD HH:MM:SS"."""
    parts = raw.split(" ")
    date_part, time_part = parts[0], parts[1]
    separator = ":" if ":" in date_part else "-"
    year, month, day = (int(p) for p in date_part.split(separator)[:3])
    hour, minute, second = (int(p) for p in time_part.split(":")[:3])
    return datetime(year, month, day, hour, minute, second)


def _magnitude(token: str) -> float:
    if token.find("/") > 0:
        numerator, denominator = token.split("/", 1)
        return float(numerator) / float(denominator)
    return float(token)


_UNITS = {"h": "hours", "m": "minutes", "s": "seconds"}


def parse_duration(raw: str) -> timedelta:
    """Sum (magnitude, unit) pairs: "1/200 sec", "1 hour 2 min 3 sec".

    Magnitudes may be fractions; units are matched on their first letter.
    """
    tokens = raw.split()
    if not tokens:
        raise ValueError("empty duration")
    total = timedelta(0)
    idx = 0
    while idx < len(tokens):
        value = _magnitude(tokens[idx])
        unit = tokens[idx + 1].lower()
        idx += 2
        name = _UNITS.get(unit[0])
        if name is not None:
            total += timedelta(**{name: value})
    return total


def render_duration(duration: timedelta) -> str:
    """Render as hours/minutes/seconds: "1h2m3s", "2m0s", "0.005s"."""
    out = []
    remaining = duration
    hours = remaining / timedelta(hours=1)
    if hours >= 1.0:
        h = math.floor(hours)
        out.append(f"{h}h")
        remaining -= timedelta(hours=h)
    minutes = remaining / timedelta(minutes=1)
    if minutes >= 1.0:
        m = math.floor(minutes)
        out.append(f"{m}m")
        remaining -= timedelta(minutes=m)
    out.append(f"{format_number(remaining.total_seconds())}s")
    return "".join(out)


def parse_cfa(raw: str) -> str:
    """Normalize a color filter array description to its RGB letters."""
    text = raw.lower().replace("red", "r").replace("green", "g").replace("blue", "b").upper()
    return re.sub(r"[^RGB]+", "", text)


def _text(code: str, name: str, *aliases: str, parse=_identity) -> PropertyDescriptor:
    return PropertyDescriptor(code, name, ValueKind.TEXT, parse, _identity, aliases)


def _int(code: str, name: str, *aliases: str, parse=extract_first_int, render=str) -> PropertyDescriptor:
    return PropertyDescriptor(code, name, ValueKind.INTEGER, parse, render, aliases)


def standard_descriptors() -> list[PropertyDescriptor]:
    """The built-in property catalog."""
    return [
        _text("cp", "Compression", "Compression"),
        _text("mk", "Make", "Make"),
        _text("md", "Model", "Model"),
        _text("or", "Orientation", "Orientation"),
        _int("xr", "X Resolution", "XResolution"),
        _int("yr", "Y Resolution", "YResolution"),
        _text("ru", "Resolution Unit", "ResolutionUnit"),
        _text("sf", "Software", "Software"),
        PropertyDescriptor(
            DATE_CODE,
            "Date/Time",
            ValueKind.TIMESTAMP,
            parse_datetime,
            format_default,
            ("DateTime", "DateTimeOriginal", "DateTimeDigitized"),
        ),
        _int("wd", "Image Width", "ImageWidth", "ExifImageWidth"),
        _int("ht", "Image Height", "ImageLength", "ExifImageLength"),
        _text("it", "Photometric Interpretation", "PhotometricInterpretation"),
        _text("cf", "CFA Pattern", "CFAPattern", parse=parse_cfa),
        PropertyDescriptor("et", "Exposure Time", ValueKind.DURATION, parse_duration, render_duration, ("ExposureTime",)),
        PropertyDescriptor(
            "fs", "F-Number", ValueKind.REAL, parse_f_number, lambda fs: f"f{format_number(fs)}", ("FNumber",)
        ),
        _int(
            "is",
            "ISO Speed Ratings",
            "ISOSpeedRatings",
            "PhotographicSensitivity",
            parse=int,
            render=lambda iso: f"iso{iso}",
        ),
        _int("fl", "Focal Length", "FocalLength", render=lambda fl: f"{fl}mm"),
        _text("ls", "Lens Specification", "LensSpecification"),
        _text("lm", "Lens Model", "LensModel"),
        _text("ft", "Detected File Type Name"),
        _text("fd", "Detected File Type Long Name"),
        _text("ex", "Expected File Name Extension"),
        _text("fn", "File Name"),
        PropertyDescriptor("sz", "File Size", ValueKind.LONG, extract_first_int, str),
    ]


class PropertyRegistry:
    """
    Immutable lookup table of property descriptors.

    Descriptors are keyed uniquely by code and by display name. Reader tag
    aliases resolve to the same descriptors, after display names.
    """

    def __init__(self, descriptors: Iterable[PropertyDescriptor], excluded: Iterable[str] = EXCLUDED_CODES):
        by_code: dict[str, PropertyDescriptor] = {}
        by_name: dict[str, PropertyDescriptor] = {}
        for d in descriptors:
            if len(d.code) != 2:
                raise ValueError(f"Property code must be 2 characters: {d.code!r}")
            if d.code in by_code:
                raise ValueError(f"Duplicate property code: {d.code}")
            if d.name in by_name:
                raise ValueError(f"Duplicate property name: {d.name}")
            by_code[d.code] = d
            by_name[d.name] = d

        aliases: dict[str, PropertyDescriptor] = {}
        for d in by_code.values():
            for alias in d.aliases:
                if alias not in by_name:
                    aliases.setdefault(alias, d)

        self._by_code = dict(sorted(by_code.items()))
        self._by_name = by_name
        self._aliases = aliases
        self._excluded = frozenset(excluded)

    def lookup_by_name(self, name: str) -> Optional[PropertyDescriptor]:
        return self._by_name.get(name) or self._aliases.get(name)

    def lookup_by_code(self, code: str) -> Optional[PropertyDescriptor]:
        return self._by_code.get(code)

    def is_excluded(self, code: str) -> bool:
        return code in self._excluded

    def __iter__(self) -> Iterator[PropertyDescriptor]:
        return iter(self._by_code.values())

    def __len__(self) -> int:
        return len(self._by_code)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def help_text(self) -> str:
        """Listing of template codes, in code order."""
        lines = [
            "The following codes are valid for the file and directory patterns. "
            "Sequence numbers are automatically added.",
            "",
        ]
        for d in self:
            if d.code == DATE_CODE:
                lines.append(f"${DATE_CODE}[format]\t{d.name} (format uses yyyy, MM, dd, HH, mm, ss ...)")
            else:
                lines.append(f"${d.code}\t\t{d.name}")
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return ";".join(str(d) for d in self._by_name.values())


def build_registry() -> PropertyRegistry:
    """Build the standard registry. Call once at startup and pass it around."""
    registry = PropertyRegistry(standard_descriptors())
    logger.debug(f"Property registry built with {len(registry)} codes")
    return registry
