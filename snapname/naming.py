"""
naming.py — Target name planning and file copy/move.

Planning (pure, no disk writes):
  1. Render the file pattern for each record; replace characters that are
     invalid in file names with "_"
  2. Keep a valid photo extension produced by the pattern, otherwise turn
     stray dots into "_" and append the source file's extension
  3. Render each directory pattern into one directory level; a level that
     renders empty, "." or ".." becomes "_"
  4. Group records by (directory, name) and number them _1, _2, ... in
     source-path order within each group

Applying:
  - create the planned directories
  - skip over existing files by inserting (01), (02), ... before the extension
  - copy (default) or move each file
"""

from __future__ import annotations

import logging
import os
import re
import shutil
from dataclasses import dataclass, field
from typing import Optional

from . import PROJECT_NAME, SOURCE_EXTS
from .compiler import CompiledPattern
from .errors import TargetCollisionError
from .record import MetadataRecord

logger = logging.getLogger(f"{PROJECT_NAME.lower()}.naming")

INVALID_CHARS = re.compile(r'[\x00-\x1f/\\:*?"<>|]')
MAX_COLLISION_SEQ = 99


def sanitize_component(text: str) -> str:
    """Replace every character that cannot appear in a file name with "_"."""
    return INVALID_CHARS.sub("_", text)


def directory_level(text: str) -> str:
    """One directory level: sanitized, and never empty, "." or ".."."""
    level = sanitize_component(text)
    if not level.strip(" ."):
        return "_"
    return level


def name_parts(record: MetadataRecord, pattern: CompiledPattern, valid_extensions=SOURCE_EXTS) -> tuple[str, str]:
    """(stem, extension) of the file name for ``record``, before numbering.

    A valid photo extension produced by the pattern is kept; otherwise dots
    become "_" and the source file's extension is used.
    """
    name = sanitize_component(pattern(record))
    stem, ext = os.path.splitext(name)
    if ext and ext.lower() in valid_extensions:
        return stem, ext
    return name.replace(".", "_"), os.path.splitext(record.source_path)[1]


def output_name(record: MetadataRecord, pattern: CompiledPattern, valid_extensions=SOURCE_EXTS) -> str:
    """File name (without sequence number) for ``record``."""
    return "".join(name_parts(record, pattern, valid_extensions))


def directory_segments(record: MetadataRecord, patterns: list[CompiledPattern]) -> list[str]:
    """Cumulative relative directories: ["2021/", "2021/Sony/", ...]."""
    segments = []
    path = ""
    for pattern in patterns:
        path += f"{directory_level(pattern(record))}/"
        segments.append(path)
    return segments


@dataclass
class PlannedFile:
    record: MetadataRecord
    target: str


@dataclass
class NamingPlan:
    target_dir: str
    files: list[PlannedFile] = field(default_factory=list)
    new_directories: list[str] = field(default_factory=list)


def plan_names(
    records: list[MetadataRecord],
    file_pattern: CompiledPattern,
    directory_patterns: Optional[list[CompiledPattern]] = None,
    target_dir: str = ".",
    valid_extensions=SOURCE_EXTS,
) -> NamingPlan:
    """Work out the target path of every record.

    Sets ``output_name``, ``directories`` and ``dedup_key`` on each record.
    Every target lies under ``target_dir``.
    """
    directory_patterns = directory_patterns or []
    plan = NamingPlan(target_dir=target_dir)
    seen_dirs = set()
    entries = []

    for record in records:
        stem, ext = name_parts(record, file_pattern, valid_extensions)
        entries.append((record, stem, ext))
        record.output_name = f"{stem}{ext}"
        record.directories = directory_segments(record, directory_patterns)
        for rel in record.directories:
            full = os.path.join(target_dir, rel)
            if full not in seen_dirs and not os.path.isdir(full):
                seen_dirs.add(full)
                plan.new_directories.append(full)
        last_dir = record.directories[-1] if record.directories else ""
        record.dedup_key = f"{last_dir}{record.output_name}"

    key = None
    count = 1
    for record, stem, ext in sorted(entries, key=lambda e: (e[0].dedup_key, e[0].source_path)):
        if record.dedup_key != key:
            key = record.dedup_key
            count = 1
        last_dir = record.directories[-1] if record.directories else ""
        target = os.path.join(target_dir, last_dir, f"{stem}_{count}{ext}")
        count += 1
        plan.files.append(PlannedFile(record, os.path.normpath(target)))

    if plan.new_directories:
        logger.info(f"{len(plan.new_directories)} new directories identified")
    return plan


def free_target(target: str) -> str:
    """First of target, stem(01)ext ... stem(99)ext that does not exist yet."""
    if not os.path.exists(target):
        return target
    stem, ext = os.path.splitext(target)
    for seq in range(1, MAX_COLLISION_SEQ + 1):
        candidate = f"{stem}({seq:02d}){ext}"
        if not os.path.exists(candidate):
            return candidate
    raise TargetCollisionError(f"Unable to find a free name for {target}")


def apply_plan(plan: NamingPlan, move: bool = False) -> list[tuple[str, str]]:
    """Create directories and copy or move every planned file.

    Returns (source, actual target) pairs. Any filesystem error aborts the run.
    """
    for directory in sorted(plan.new_directories):
        if not os.path.isdir(directory):
            os.makedirs(directory, exist_ok=True)
            logger.info(f"Created directory {directory}")

    action = shutil.move if move else shutil.copy2
    verb = "Moved" if move else "Copied"
    done = []
    for planned in plan.files:
        source = planned.record.source_path
        target = free_target(planned.target)
        try:
            action(source, target)
        except OSError as e:
            logger.error(f"Failed to write {target} from {source}: {e}")
            raise
        logger.debug(f"{verb} {source} => {target}")
        done.append((source, target))
    return done
