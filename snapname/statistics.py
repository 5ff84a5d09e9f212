"""
statistics.py — Property value frequencies across a set of records.

Counts are keyed by property code and then by the value exactly as the
metadata reader reported it. Date, file name and size are never counted.

Report layout:

    Top 10:
    =========
    Property<TAB>Value<TAB>Count
    ...the ten most frequent (property, value) pairs
    =========
    Statistics:
    =========
    Property<TAB>Value<TAB>Count
    ...every value seen more than once, by property name then value
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass

from . import PROJECT_NAME
from .properties import PropertyRegistry
from .record import MetadataRecord

logger = logging.getLogger(f"{PROJECT_NAME.lower()}.statistics")

DIVIDER = "========="
HEADING = "Property\tValue\tCount"
TOP_COUNT = 10


@dataclass(frozen=True)
class StatRow:
    code: str
    name: str
    value: str
    count: int

    def line(self) -> str:
        return f"{self.name}\t{self.value}\t{self.count}"


class StatisticsAggregator:
    """
    Two-level frequency counter: code -> reported value -> count.

    Not thread-safe. Feed it from a single thread (the parallel scanner
    aggregates on the main thread), or aggregate per worker and merge().
    """

    def __init__(self, registry: PropertyRegistry):
        self.registry = registry
        self.counts: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self.records = 0

    def aggregate(self, record: MetadataRecord) -> None:
        """Count every non-excluded property value on ``record``."""
        for prop in record:
            if self.registry.is_excluded(prop.code):
                continue
            self.counts[prop.code][prop.raw] += 1
        self.records += 1

    def merge(self, other: StatisticsAggregator) -> None:
        """Fold another aggregator's counts into this one."""
        for code, values in other.counts.items():
            for value, count in values.items():
                self.counts[code][value] += count
        self.records += other.records

    def count(self, code: str, value: str) -> int:
        return self.counts.get(code, {}).get(value, 0)

    def _name(self, code: str) -> str:
        descriptor = self.registry.lookup_by_code(code)
        return descriptor.name if descriptor is not None else code

    def top(self, limit: int = TOP_COUNT) -> list[StatRow]:
        """Most frequent (property, value) pairs; ties go to the lower code."""
        rows = [
            StatRow(code, self._name(code), value, count)
            for code, values in self.counts.items()
            for value, count in values.items()
        ]
        rows.sort(key=lambda r: (-r.count, r.code))
        return rows[:limit]

    def listing(self) -> list[StatRow]:
        """Values seen more than once, by property name then value."""
        rows = []
        for code in sorted(self.counts, key=self._name):
            values = self.counts[code]
            for value in sorted(values):
                if values[value] > 1:
                    rows.append(StatRow(code, self._name(code), value, values[value]))
        return rows

    def report(self) -> str:
        lines = [f"Top {TOP_COUNT}:", DIVIDER, HEADING]
        lines.extend(row.line() for row in self.top())
        lines += [DIVIDER, "Statistics:", DIVIDER, HEADING]
        lines.extend(row.line() for row in self.listing())
        logger.debug(f"Statistics report over {self.records} records, {len(self.counts)} properties")
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.report()
