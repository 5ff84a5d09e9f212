"""
errors.py — Exception hierarchy for SnapName.

Property parse failures are soft: RecordBuilder catches them and drops the
offending property. Source and collision errors abort the run.
"""

from __future__ import annotations


class SnapNameError(Exception):
    """Base exception for all SnapName errors."""


class PropertyParseError(SnapNameError, ValueError):
    """Raised when a raw tag value cannot be converted to its typed value."""

    def __init__(self, code: str, raw: str, reason: str = ""):
        self.code = code
        self.raw = raw
        detail = f": {reason}" if reason else ""
        super().__init__(f"Cannot parse ${code} from {raw!r}{detail}")


class SourceNotFoundError(SnapNameError, FileNotFoundError):
    """Raised when the configured source file or directory does not exist."""


class TargetCollisionError(SnapNameError):
    """Raised when no free target name can be found for a file."""
