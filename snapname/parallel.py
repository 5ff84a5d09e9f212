"""
parallel.py — Multithreaded metadata scanning.

Fans scan_file() calls out to a ThreadPoolExecutor and collects the records:
  1. Submit every path to the pool
  2. As futures complete, fold each record into the statistics
  3. Return records in the original path order

Thread safety:
  - scan_file() is thread-safe (reads one file, returns a new record)
  - StatisticsAggregator is only touched from the main thread
  - tqdm progress bar is updated from the main thread (as_completed loop)
"""

from __future__ import annotations

import logging
import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

from tqdm import tqdm

from . import PROJECT_NAME
from .record import MetadataRecord, RecordBuilder
from .scanner import scan_file
from .statistics import StatisticsAggregator

logger = logging.getLogger(f"{PROJECT_NAME.lower()}.parallel")


def _is_tty() -> bool:
    """Check if stdout is a terminal (not piped/redirected)."""
    try:
        return sys.stdout.isatty()
    except AttributeError:
        return False


def scan_with_pool(
    paths: list,
    builder: RecordBuilder,
    statistics: Optional[StatisticsAggregator] = None,
    workers: int = 4,
) -> list[MetadataRecord]:
    """
    Build records for ``paths`` using a thread pool.

    Args:
        paths: Files to scan
        builder: RecordBuilder shared by all workers
        statistics: Aggregator to feed (None = no statistics)
        workers: Number of parallel scan threads

    Returns:
        One MetadataRecord per path, in the order of ``paths``

    Raises:
        OSError: if a source file disappears or cannot be stat'ed
    """
    if not paths:
        return []

    t0 = time.time()
    actual_workers = max(1, min(workers, len(paths)))
    logger.info(f"Parsing properties of {len(paths)} files with {actual_workers} threads...")

    records: list[Optional[MetadataRecord]] = [None] * len(paths)

    with tqdm(
        total=len(paths),
        desc="  Reading EXIF",
        unit=" files",
        disable=not _is_tty(),
        bar_format="  {desc}: {percentage:3.0f}%|{bar:30}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]",
    ) as pbar:
        with ThreadPoolExecutor(max_workers=actual_workers) as pool:
            futures = {pool.submit(scan_file, fp, builder): i for i, fp in enumerate(paths)}

            for future in as_completed(futures):
                i = futures[future]
                try:
                    record = future.result()
                except OSError as e:
                    logger.error(f"Scan failed for {paths[i]}: {e}")
                    for f in futures:
                        f.cancel()
                    raise

                records[i] = record
                if statistics is not None:
                    statistics.aggregate(record)
                pbar.update(1)

    logger.info(f"Done parsing: {len(records)} files in {time.time() - t0:.1f}s")
    return records
