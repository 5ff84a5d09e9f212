"""
reader.py — EXIF tag reader built on exifread.

Reads every tag exifread reports and regroups them by IFD ("Image", "EXIF",
"Thumbnail", "MakerNote", ...). Values are reported as text in the form the
property catalog expects: exposure times carry a unit ("1/200 sec"), f-numbers
an "f/" prefix, focal lengths an "mm" suffix, CFA patterns color names.

Thumbnail groups are returned as-is; RecordBuilder skips them.
"""

from __future__ import annotations

import logging

import exifread

from . import PROJECT_NAME
from .properties import format_number
from .record import TagGroup

logger = logging.getLogger(f"{PROJECT_NAME.lower()}.reader")

CFA_COLORS = {0: "Red", 1: "Green", 2: "Blue", 3: "Cyan", 4: "Magenta", 5: "Yellow", 6: "White"}


def _ratio_value(tag) -> float:
    """First value of a ratio tag as a float."""
    value = tag.values[0]
    if hasattr(value, "num"):
        return float(value.num) / float(value.den)
    return float(value)


def _describe_exposure(tag) -> str:
    return f"{str(tag).strip()} sec"


def _describe_f_number(tag) -> str:
    return f"f/{format_number(_ratio_value(tag))}"


def _describe_focal_length(tag) -> str:
    return f"{format_number(_ratio_value(tag))} mm"


def _describe_cfa(tag) -> str:
    values = list(tag.values)
    # EXIF CFAPattern starts with the 2x2 repeat dimensions
    if len(values) > 4:
        values = values[4:]
    return ",".join(CFA_COLORS.get(v, str(v)) for v in values)


DESCRIBERS = {
    "ExposureTime": _describe_exposure,
    "FNumber": _describe_f_number,
    "FocalLength": _describe_focal_length,
    "CFAPattern": _describe_cfa,
}


def describe(tag_name: str, tag) -> str:
    """Text for one exifread tag, normalized for the property catalog."""
    describer = DESCRIBERS.get(tag_name)
    if describer is not None:
        try:
            return describer(tag)
        except (AttributeError, IndexError, TypeError, ValueError, ZeroDivisionError) as e:
            logger.debug(f"Cannot describe {tag_name}: {e}")
    return str(tag).strip()


def group_tags(tags: dict) -> list[TagGroup]:
    """Regroup an exifread tag dict ("EXIF ExposureTime" -> group "EXIF")."""
    groups: dict[str, TagGroup] = {}
    for key, tag in tags.items():
        if " " not in key:
            continue  # JPEGThumbnail / TIFFThumbnail payloads
        group_name, tag_name = key.split(" ", 1)
        group = groups.get(group_name)
        if group is None:
            group = groups[group_name] = TagGroup(group_name)
        group.tags.append((tag_name, describe(tag_name, tag)))
    return list(groups.values())


def read_tag_groups(filepath: str) -> list[TagGroup]:
    """Read all EXIF tags from ``filepath``. Returns [] for files without EXIF."""
    with open(filepath, "rb") as f:
        tags = exifread.process_file(f, details=False)
    if not tags:
        return []
    return group_tags(tags)
