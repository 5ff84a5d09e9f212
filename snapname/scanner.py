"""
scanner.py — Source file discovery and per-file metadata scan.

Resolves the configured source (a single file or a directory tree) into a list
of photo paths, and turns each path into a MetadataRecord by reading its EXIF
tags and filling filesystem defaults.

Supported formats (default):
  ARW, RAW, JPG, JPEG, TIF, TIFF
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from . import PROJECT_NAME, SOURCE_EXTS
from .errors import SourceNotFoundError
from .reader import read_tag_groups
from .record import FileFacts, MetadataRecord, RecordBuilder

logger = logging.getLogger(f"{PROJECT_NAME.lower()}.scanner")

# Directories pruned from recursive walks by default (NAS thumbnails, recycle bins)
EXCLUDED_DIRS = frozenset({"@eaDir", "#recycle", ".git", "__pycache__"})


def normalize_extensions(extensions) -> set[str]:
    """Lower-case extensions with a leading dot: ["JPG", ".arw"] -> {".jpg", ".arw"}."""
    return {e.lower() if e.startswith(".") else f".{e.lower()}" for e in extensions}


def collect_source_paths(
    source: str,
    extensions: Optional[set] = None,
    recursive: bool = False,
    exclude_dirs: Optional[set] = None,
) -> list[str]:
    """Resolve ``source`` into the list of files to process.

    A file is returned as-is, whatever its extension. A directory is walked
    (top level only unless ``recursive``) for files with a matching extension.
    Directories named in ``exclude_dirs`` (default EXCLUDED_DIRS) are pruned.

    Raises:
        SourceNotFoundError: if ``source`` is neither a file nor a directory
    """
    if os.path.isfile(source):
        return [source]
    if not os.path.isdir(source):
        raise SourceNotFoundError(f"Source not found: {source}")

    if extensions is None:
        extensions = SOURCE_EXTS
    if exclude_dirs is None:
        exclude_dirs = EXCLUDED_DIRS

    paths = []
    dirs_walked = 0
    walker = os.walk(source) if recursive else [(source, [], os.listdir(source))]
    for root, dirs, files in walker:
        if recursive:
            dirs[:] = sorted(d for d in dirs if d not in exclude_dirs)
        else:
            files = [f for f in files if os.path.isfile(os.path.join(root, f))]

        dirs_walked += 1
        if dirs_walked % 200 == 0:
            logger.info(f"  Walking directories... {dirs_walked} visited, {len(paths)} photos found")

        for fname in sorted(files):
            if os.path.splitext(fname)[1].lower() in extensions:
                paths.append(os.path.join(root, fname))

    logger.debug(f"Collected {len(paths)} files from {dirs_walked} directories under {source}")
    return paths


def scan_file(filepath: str, builder: RecordBuilder) -> MetadataRecord:
    """Read one file's tags and build its record.

    Unreadable or unsupported EXIF data leaves a record with defaults only.
    A file that cannot be stat'ed raises OSError.
    """
    facts = FileFacts.from_path(filepath)
    try:
        groups = read_tag_groups(filepath)
    except Exception as e:
        logger.warning(f"Failed to read metadata from {filepath}: {e}")
        groups = []
    return builder.build(filepath, groups, facts)
