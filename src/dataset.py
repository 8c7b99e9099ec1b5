from collections.abc import Iterable, Iterator
from operator import attrgetter

import msgspec

from src.common.config import MAX_COUNT
from src.common.errors import MalformedRecord, TrafficCountError
from src.common.timestamps import parse_timestamp
from src.common.utils import drop_trailing_empty


# --- 1. MSGSPEC STRUCTS (immutable values shared by both strategies) ---


class Entry(msgspec.Struct, frozen=True):
    """One half-hour observation: vehicles counted from `timestamp` (epoch seconds, UTC)."""

    count: int
    timestamp: int


class DailyTotal(msgspec.Struct, frozen=True):
    day: str
    total: int


class Window(msgspec.Struct, frozen=True):
    """A contiguous span of buckets; `end` is exclusive."""

    start: int
    end: int
    total: int


class TrafficReport(msgspec.Struct, frozen=True):
    total: int
    daily_totals: list[DailyTotal]
    top_entries: list[Entry]
    lowest_window: Window | None = None
    lowest_windows: list[Window] = []


def report_metrics(report: TrafficReport) -> dict:
    """Domain fields attached to the wide event of every report run."""
    return {
        "total": report.total,
        "days": len(report.daily_totals),
        "top_entries": len(report.top_entries),
        "lowest_window_total": (
            report.lowest_window.total if report.lowest_window else None
        ),
        "output_rows": len(report.daily_totals)
        + len(report.top_entries)
        + len(report.lowest_windows),
    }


# --- 2. RECORD PARSING ---


def parse_count(token: str) -> int:
    # str.isdigit() also accepts non-ASCII digits such as '²'
    if not (token.isascii() and token.isdigit()):
        raise ValueError(f"Invalid count: {token!r}")
    count = int(token)
    if count > MAX_COUNT:
        raise ValueError(f"Count out of range: {token!r}")
    return count


def parse_record(line: str) -> Entry:
    """Parses a '<count> <timestamp>' line into an Entry."""
    tokens = line.split()
    if len(tokens) != 2:
        raise MalformedRecord(line)
    try:
        return Entry(count=parse_count(tokens[0]), timestamp=parse_timestamp(tokens[1]))
    except (ValueError, TrafficCountError) as e:
        raise MalformedRecord(line) from e


# --- 3. DATASET MODEL ---


class Dataset:
    """
    Ordered multiset of Entry values. The order is a mutable view: the two sort
    methods reorder in place and every query reads the current order.
    """

    def __init__(self, entries: Iterable[Entry] = ()):
        self.entries = list(entries)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "Dataset":
        """
        Builds a dataset from raw record lines. One trailing empty line is ignored;
        any other bad line raises MalformedRecord and no dataset is returned.
        """
        return cls(map(parse_record, drop_trailing_empty(list(lines))))

    def sort_by_timestamp(self) -> None:
        self.entries.sort(key=attrgetter("timestamp"))

    def sort_by_count(self) -> None:
        self.entries.sort(key=attrgetter("count"))

    def total_count(self) -> int:
        return sum(e.count for e in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __repr__(self) -> str:
        return f"Dataset({len(self.entries)} entries)"
