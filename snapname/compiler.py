"""
compiler.py — Naming pattern compiler.

A pattern is literal text mixed with property fields:

    $et_$is_$fl_Image       ->  1h2m3s_iso3200_206mm_Image
    $dt[yyyy-MM-dd]         ->  2021-10-26
    $mk/$md                 ->  Sony/ILCE-7M3

``$`` is followed by exactly two characters naming a property code. The date
code may carry a bracketed date pattern (see dates.py). The pattern is parsed
once, left to right, into a tuple of segments; the resulting CompiledPattern
is a pure function of the record it is called with.

Compilation never fails. Unknown codes, and a trailing ``$`` with fewer than
two characters after it, compile to fields that render as "". A date pattern
whose closing bracket is missing is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from . import DATE_CODE, PROJECT_NAME
from .dates import format_timestamp
from .properties import PropertyRegistry
from .record import MetadataRecord
from .values import ValueKind

logger = logging.getLogger(f"{PROJECT_NAME.lower()}.compiler")

SIGIL = "$"
CODE_LENGTH = 2
DATE_OPEN = "["
DATE_CLOSE = "]"
DIRECTORY_SEPARATOR = ";"


@dataclass(frozen=True)
class Literal:
    text: str

    def render(self, record: MetadataRecord) -> str:
        return self.text


@dataclass(frozen=True)
class Field:
    code: str

    def render(self, record: MetadataRecord) -> str:
        return record.file_value(self.code)


@dataclass(frozen=True)
class DateField:
    code: str
    pattern: str

    def render(self, record: MetadataRecord) -> str:
        prop = record.get(self.code)
        if prop is None or prop.typed.kind is not ValueKind.TIMESTAMP:
            return ""
        return format_timestamp(prop.typed.value, self.pattern)


Segment = Union[Literal, Field, DateField]


def parse_pattern(pattern: str, date_code: str = DATE_CODE) -> tuple[Segment, ...]:
    """Split a pattern into segments in source order."""
    segments: list[Segment] = []
    literal = ""
    code = ""
    date_pattern = ""
    state = "literal"

    idx = 0
    while idx < len(pattern):
        ch = pattern[idx]
        idx += 1

        if state == "literal":
            if ch == SIGIL:
                if literal:
                    segments.append(Literal(literal))
                    literal = ""
                state = "code"
            else:
                literal += ch

        elif state == "code":
            code += ch
            if len(code) < CODE_LENGTH:
                continue
            if code == date_code and idx < len(pattern) and pattern[idx] == DATE_OPEN:
                idx += 1
                date_pattern = ""
                state = "date"
            else:
                segments.append(Field(code))
                code = ""
                state = "literal"

        else:  # date
            if ch == DATE_CLOSE:
                segments.append(DateField(code, date_pattern))
                code = ""
                state = "literal"
            else:
                date_pattern += ch

    # end of pattern
    if state == "code":
        segments.append(Field(code))
    elif state == "literal" and literal:
        segments.append(Literal(literal))

    return tuple(segments)


class CompiledPattern:
    """A reusable name generator: ``CompiledPattern(record) -> str``.

    Holds no per-call state, so one instance may be shared across threads.
    """

    __slots__ = ("pattern", "segments")

    def __init__(self, pattern: str, segments: tuple[Segment, ...]):
        self.pattern = pattern
        self.segments = segments

    def __call__(self, record: MetadataRecord) -> str:
        return "".join(segment.render(record) for segment in self.segments)

    @property
    def codes(self) -> list[str]:
        """Property codes referenced by the pattern, in order."""
        return [s.code for s in self.segments if not isinstance(s, Literal)]

    def __repr__(self) -> str:
        return f"CompiledPattern({self.pattern!r})"


def compile_pattern(pattern: Optional[str], registry: Optional[PropertyRegistry] = None) -> CompiledPattern:
    """Compile a naming pattern. ``None`` compiles like the empty pattern.

    When a registry is given, codes it does not know are logged; they still
    compile and render as "".
    """
    pattern = pattern or ""
    compiled = CompiledPattern(pattern, parse_pattern(pattern))
    if registry is not None:
        for code in compiled.codes:
            if code not in registry:
                logger.warning(f"Pattern {pattern!r}: unknown code ${code} will render empty")
    return compiled


def compile_directory_patterns(
    text: Optional[str], registry: Optional[PropertyRegistry] = None
) -> list[CompiledPattern]:
    """Compile a ``;``-separated list of patterns, one per directory level."""
    if not text or not text.strip():
        return []
    return [compile_pattern(part, registry) for part in text.split(DIRECTORY_SEPARATOR)]
