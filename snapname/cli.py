#!/usr/bin/env python3
"""
SnapName — Rename and organize photos from their EXIF metadata

Builds new file names (and optionally a directory tree) from naming patterns
such as "$et_$is_$fl_Image" or "$dt[yyyy];$dt[yyyy-MM-dd]", then copies or
moves each photo to its new name. Can also report how often each camera
setting occurs across a collection.

Usage:
    snapname ~/Pictures/shoot -s -i               # Statistics only, no changes
    snapname ~/Pictures/shoot -s -p               # Show properties per file
    snapname ~/Pictures/shoot -m                  # Rename in place
    snapname ~/Pictures/shoot /mnt/library -d '$dt[yyyy-MM-dd];$et_$is'
    snapname --config snapname.yaml
    snapname --codes                              # List pattern codes
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time

import yaml

from . import DEFAULT_FILE_PATTERN, PROJECT_NAME, SOURCE_EXTS
from . import __version__ as VERSION
from .compiler import compile_directory_patterns, compile_pattern
from .errors import SnapNameError, SourceNotFoundError
from .naming import apply_plan, plan_names
from .parallel import scan_with_pool
from .properties import PropertyRegistry, build_registry
from .record import RecordBuilder
from .scanner import EXCLUDED_DIRS, collect_source_paths, normalize_extensions
from .statistics import StatisticsAggregator


def setup_logging(level: str = "INFO", log_file: str = None):
    """Configure logging with console and optional file output."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)-7s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )

    # Silence chatty libraries
    logging.getLogger("exifread").setLevel(logging.ERROR)


def apply_defaults(config: dict) -> dict:
    """Fill in missing configuration values."""
    config.setdefault("source", None)
    config.setdefault("target", None)
    config.setdefault("recursive", False)
    config.setdefault("scan_only", False)
    config.setdefault("move", False)
    config.setdefault("show_properties", False)
    config.setdefault("show_statistics", False)
    config.setdefault("file_pattern", DEFAULT_FILE_PATTERN)
    config.setdefault("directory_pattern", None)
    config.setdefault("workers", 4)
    config.setdefault("log_level", "INFO")
    config.setdefault("log_file", None)

    extensions = config.get("extensions") or list(SOURCE_EXTS)
    config["extensions"] = normalize_extensions(extensions)
    config["exclude_dirs"] = set(config.get("exclude_dirs") or EXCLUDED_DIRS)
    return config


def load_config(config_path: str) -> dict:
    """Load configuration from a YAML file and fill defaults."""
    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    return apply_defaults(config)


def resolve_target(config: dict) -> str:
    """Target directory: configured, else the source directory itself."""
    source = config["source"]
    target = config.get("target")
    if not target:
        if os.path.isdir(source):
            return source
        return os.path.dirname(os.path.abspath(source))
    if not os.path.isdir(target):
        raise SourceNotFoundError(f"Target directory not found: {target}")
    return target


def print_banner():
    """Print startup banner."""
    title = f"{PROJECT_NAME} v{VERSION}"
    inner_width = max(len(title) + 4, 41)
    print()
    print(f"  ┌{'─' * inner_width}┐")
    print(f"  │  {title:<{inner_width - 2}}│")
    print(f"  │  {'Photo naming from EXIF metadata':<{inner_width - 2}}│")
    print(f"  └{'─' * inner_width}┘")
    print()


def print_options(config: dict):
    """Print the options in effect, one per line."""
    print("  Running with options:")
    for key in (
        "scan_only",
        "recursive",
        "show_properties",
        "show_statistics",
        "move",
        "file_pattern",
        "directory_pattern",
        "source",
        "target",
    ):
        print(f"  {key + ':':<40}{config.get(key)}")
    print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snapname",
        description=f"{PROJECT_NAME} — Rename and organize photos from their EXIF metadata",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  snapname ~/shoot -s -i                     Grab statistics only
  snapname ~/shoot -s -p -i                  Show properties per file
  snapname ~/shoot/DSC0001.ARW -s -p         Show properties of a single file
  snapname ~/shoot -m                        Rename in place with defaults
  snapname ~/shoot /mnt/lib -d '$dt[yyyy-MM-dd];$et_$is'
                                             Copy into date / exposure folders
  snapname --codes                           List the pattern codes
        """,
    )
    parser.add_argument("source", nargs="?", default=None, help="File or directory to scan")
    parser.add_argument("target", nargs="?", default=None, help="Root of the target directory")
    parser.add_argument("--config", "-c", default=None, help="Path to a YAML config file")
    parser.add_argument(
        "--scan-only", "-s", action="store_true", default=None, help="Scan only. Do not move or copy files"
    )
    parser.add_argument(
        "--recurse-subdirectories", "-r", action="store_true", default=None, help="Recurse subdirectories"
    )
    parser.add_argument(
        "--properties-display", "-p", action="store_true", default=None, help="Show properties for each file"
    )
    parser.add_argument(
        "--move-file", "-m", action="store_true", default=None, help="Move the file instead of copying"
    )
    parser.add_argument("--info-statistics", "-i", action="store_true", default=None, help="Show statistics")
    parser.add_argument(
        "--directory-pattern", "-d", default=None, help="Directory naming patterns, one per level, separated by ';'"
    )
    parser.add_argument(
        "--file-pattern", "-f", default=None, help=f"File naming pattern (default: {DEFAULT_FILE_PATTERN})"
    )
    parser.add_argument("--workers", type=int, default=None, help="Number of parallel scan threads (default: 4)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose (DEBUG) logging")
    parser.add_argument("--codes", action="store_true", help="List the codes usable in naming patterns")
    parser.add_argument("--version", action="version", version=f"{PROJECT_NAME} {VERSION}")
    return parser


_OVERRIDES = {
    "source": "source",
    "target": "target",
    "scan_only": "scan_only",
    "recurse_subdirectories": "recursive",
    "properties_display": "show_properties",
    "move_file": "move",
    "info_statistics": "show_statistics",
    "directory_pattern": "directory_pattern",
    "file_pattern": "file_pattern",
    "workers": "workers",
}


def merge_args(config: dict, args: argparse.Namespace) -> dict:
    """CLI values override config values when given."""
    for arg_name, key in _OVERRIDES.items():
        value = getattr(args, arg_name, None)
        if value is not None:
            config[key] = value
    if args.verbose:
        config["log_level"] = "DEBUG"
    return config


def run(config: dict, registry: PropertyRegistry) -> int:
    """Scan, name, and copy/move according to ``config``. Returns an exit code."""
    logger = logging.getLogger(PROJECT_NAME.lower())

    if not config.get("source"):
        print("Error: No source given. Pass a file or directory, or set source in the config file.")
        return 1

    try:
        paths = collect_source_paths(
            config["source"], config["extensions"], config["recursive"], config["exclude_dirs"]
        )
        config["target"] = resolve_target(config)
    except SourceNotFoundError as e:
        print(f"Error: {e}")
        return 1

    file_pattern = compile_pattern(config["file_pattern"], registry)
    directory_patterns = compile_directory_patterns(config.get("directory_pattern"), registry)

    print_options(config)

    # ── Phase 1: Scan ──
    print(f"  Found {len(paths)} files to process. Parsing properties...")
    t0 = time.time()
    builder = RecordBuilder(registry)
    statistics = StatisticsAggregator(registry)
    records = scan_with_pool(paths, builder, statistics, workers=max(1, config.get("workers", 4)))
    if config["show_properties"]:
        for record in records:
            print(record)
    logger.info(f"Scan completed in {time.time() - t0:.1f}s")

    # ── Phase 2: Plan names ──
    print("  Building names...")
    plan = plan_names(
        records,
        file_pattern,
        directory_patterns,
        target_dir=config["target"],
        valid_extensions=config["extensions"],
    )

    # ── Phase 3: Copy / move ──
    if config["scan_only"]:
        for planned in plan.files:
            print(f"{planned.record.source_path} => {planned.target}")
    else:
        for source, target in apply_plan(plan, move=config["move"]):
            print(f"{source} => {target}")

    if config["show_statistics"]:
        print()
        print(statistics.report())

    return 0


def main():
    parser = build_parser()
    args = parser.parse_args()

    if args.config:
        config_path = args.config
        if not os.path.isabs(config_path):
            config_path = os.path.join(os.getcwd(), config_path)
        if not os.path.exists(config_path):
            print(f"Error: Config file not found: {config_path}")
            sys.exit(1)
        config = load_config(config_path)
    else:
        config = apply_defaults({})

    config = merge_args(config, args)
    setup_logging(config["log_level"], config.get("log_file"))

    registry = build_registry()
    if args.codes:
        print(registry.help_text())
        sys.exit(0)

    print_banner()

    try:
        code = run(config, registry)
    except KeyboardInterrupt:
        logging.getLogger(PROJECT_NAME.lower()).warning("Operation cancelled by user.")
        sys.exit(1)
    except (SnapNameError, OSError) as e:
        logging.getLogger(PROJECT_NAME.lower()).error(f"The program terminated unexpectedly: {e}")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
