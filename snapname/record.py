"""
record.py — Per-file metadata records.

RecordBuilder turns the grouped (tag name, reported value) pairs produced by the
metadata reader into a MetadataRecord holding at most one typed PropertyValue
per property code.

Rules:
  - groups whose name contains "thumbnail" are skipped entirely
  - tags not in the registry are dropped
  - a malformed value drops only that property
  - a repeated code keeps the strictly greater typed value (first wins on ties
    and for values that cannot be ordered)
  - date, file type, extension, file name and size fall back to filesystem
    facts when no tag supplied them
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Iterator, Optional

from . import DATE_CODE, PROJECT_NAME
from .errors import PropertyParseError
from .properties import PropertyDescriptor, PropertyRegistry
from .values import TypedValue

logger = logging.getLogger(f"{PROJECT_NAME.lower()}.record")

FACTS_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"


@dataclass
class TagGroup:
    """A named group of tags as reported by the metadata reader (e.g. "EXIF")."""

    name: str
    tags: list[tuple[str, str]] = field(default_factory=list)

    @property
    def is_thumbnail(self) -> bool:
        return "thumbnail" in self.name.lower()


@dataclass(frozen=True)
class PropertyValue:
    """A resolved property on a record."""

    code: str
    name: str
    raw: str
    typed: TypedValue
    file_value: str

    @classmethod
    def from_raw(cls, descriptor: PropertyDescriptor, raw: str, name: Optional[str] = None) -> PropertyValue:
        """Parse ``raw`` with ``descriptor``. Raises PropertyParseError when malformed."""
        typed = descriptor.parse(raw)
        return cls(
            code=descriptor.code,
            name=name or descriptor.name,
            raw=raw,
            typed=typed,
            file_value=descriptor.render(typed),
        )

    def __str__(self) -> str:
        return f"${self.code}: {self.name} = {self.raw} ({self.typed} => {self.file_value})"


@dataclass
class FileFacts:
    """Filesystem facts used for default properties."""

    accessed: datetime
    extension: str  # without the leading dot
    stem: str
    size: int

    @classmethod
    def from_path(cls, filepath: str) -> FileFacts:
        st = os.stat(filepath)
        stem, ext = os.path.splitext(os.path.basename(filepath))
        return cls(
            accessed=datetime.fromtimestamp(st.st_atime).replace(microsecond=0),
            extension=ext[1:],
            stem=stem,
            size=st.st_size,
        )

    def defaults(self) -> list[tuple[str, str]]:
        """(code, reported value) pairs, in injection order."""
        return [
            (DATE_CODE, self.accessed.strftime(FACTS_DATE_FORMAT)),
            ("ft", self.extension),
            ("fd", self.extension),
            ("ex", self.extension),
            ("fn", self.stem),
            ("sz", str(self.size)),
        ]


@dataclass
class MetadataRecord:
    """Everything known about one source file, plus its generated name."""

    source_path: str
    properties: dict[str, PropertyValue] = field(default_factory=dict)
    output_name: Optional[str] = None
    directories: list[str] = field(default_factory=list)
    dedup_key: Optional[str] = None

    def get(self, code: str) -> Optional[PropertyValue]:
        return self.properties.get(code)

    def file_value(self, code: str) -> str:
        """File-safe value for ``code``, or "" when the record lacks it."""
        prop = self.properties.get(code)
        return prop.file_value if prop is not None else ""

    def offer(self, value: PropertyValue) -> bool:
        """Add ``value`` unless a preferred value for its code is already held.

        Returns True if the record now holds ``value``.
        """
        existing = self.properties.get(value.code)
        if existing is None or value.typed.supersedes(existing.typed):
            self.properties[value.code] = value
            return True
        return False

    def __contains__(self, code: object) -> bool:
        return code in self.properties

    def __iter__(self) -> Iterator[PropertyValue]:
        return iter(self.properties.values())

    def __len__(self) -> int:
        return len(self.properties)

    def __str__(self) -> str:
        return "\n".join([self.source_path] + [str(p) for p in self])


class RecordBuilder:
    """Builds MetadataRecords from reader output using a PropertyRegistry."""

    def __init__(self, registry: PropertyRegistry):
        self.registry = registry

    def build(
        self,
        source_path: str,
        tag_groups: Iterable[TagGroup],
        facts: Optional[FileFacts] = None,
    ) -> MetadataRecord:
        """Build the record for one file.

        Args:
            source_path: Path of the source file
            tag_groups: Reader output for the file
            facts: Filesystem facts for defaults (default: stat ``source_path``)
        """
        record = MetadataRecord(source_path=source_path)
        unknown = 0
        malformed = 0

        for group in tag_groups:
            if group.is_thumbnail:
                continue
            for tag_name, raw in group.tags:
                descriptor = self.registry.lookup_by_name(tag_name)
                if descriptor is None:
                    unknown += 1
                    continue
                try:
                    value = PropertyValue.from_raw(descriptor, raw, descriptor.name)
                except PropertyParseError as e:
                    malformed += 1
                    logger.debug(f"{source_path}: {group.name} {tag_name} dropped ({e})")
                    continue
                record.offer(value)

        if facts is None:
            facts = FileFacts.from_path(source_path)
        self._inject_defaults(record, facts)

        logger.debug(
            f"{os.path.basename(source_path)}: {len(record)} properties "
            f"({unknown} unknown tags, {malformed} malformed values)"
        )
        return record

    def _inject_defaults(self, record: MetadataRecord, facts: FileFacts) -> None:
        for code, raw in facts.defaults():
            if code in record:
                continue
            descriptor = self.registry.lookup_by_code(code)
            if descriptor is None:
                continue
            try:
                record.properties[code] = PropertyValue.from_raw(descriptor, raw)
            except PropertyParseError as e:
                logger.debug(f"{record.source_path}: default ${code} dropped ({e})")
