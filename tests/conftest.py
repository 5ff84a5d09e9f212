from __future__ import annotations

from datetime import datetime

import pytest

from snapname.properties import build_registry
from snapname.record import FileFacts, MetadataRecord, PropertyValue, RecordBuilder, TagGroup


@pytest.fixture(scope="session")
def registry():
    return build_registry()


@pytest.fixture()
def builder(registry):
    return RecordBuilder(registry)


@pytest.fixture()
def facts():
    return FileFacts(accessed=datetime(2020, 1, 2, 3, 4, 5), extension="ARW", stem="DSC0001", size=24_000_000)


def make_record(registry, path="/photos/DSC0001.ARW", **raw_by_code) -> MetadataRecord:
    """Record holding exactly the given properties (no filesystem defaults)."""
    record = MetadataRecord(source_path=path)
    for code, raw in raw_by_code.items():
        descriptor = registry.lookup_by_code(code)
        record.properties[code] = PropertyValue.from_raw(descriptor, raw)
    return record


def exif_groups(**tags) -> list[TagGroup]:
    """A single "EXIF" group from keyword tags: exif_groups(Make="Sony")."""
    return [TagGroup("EXIF", list(tags.items()))]
