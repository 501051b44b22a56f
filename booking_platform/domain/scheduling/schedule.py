"""
Schedule Model

Pure interval arithmetic over a staff member's weekly schedule: working
windows minus breaks. No I/O; times are local wall-clock values and the
caller converts them to UTC.
"""

from dataclasses import dataclass
from datetime import time
from typing import Any, Iterable, Protocol


@dataclass(frozen=True, order=True)
class Interval:
    """Half-open ``[start, end)`` interval of comparable values (time or datetime)"""

    start: Any
    end: Any

    def __post_init__(self):
        if not self.start < self.end:
            raise ValueError(f"Interval start {self.start} must be before end {self.end}")

    def overlaps(self, other: "Interval") -> bool:
        # Touching intervals do not overlap
        return self.start < other.end and other.start < self.end


class WeeklyWindow(Protocol):
    day_of_week: int
    start_time: time
    end_time: time


def merge_intervals(intervals: Iterable[Interval]) -> list[Interval]:
    """
    Merge overlapping or touching intervals.

    Returns:
        Sorted, non-overlapping intervals
    """
    ordered = sorted(intervals)
    if not ordered:
        return []

    merged = [ordered[0]]
    for current in ordered[1:]:
        last = merged[-1]
        if current.start <= last.end:
            if current.end > last.end:
                merged[-1] = Interval(last.start, current.end)
        else:
            merged.append(current)
    return merged


def subtract_interval(interval: Interval, block: Interval) -> list[Interval]:
    """
    Remove ``block`` from ``interval``.

    Returns:
        Zero, one or two intervals left of ``interval`` after removing ``block``
    """
    if not interval.overlaps(block):
        return [interval]

    remaining = []
    if block.start > interval.start:
        remaining.append(Interval(interval.start, block.start))
    if block.end < interval.end:
        remaining.append(Interval(block.end, interval.end))
    return remaining


def subtract_all(intervals: Iterable[Interval], blocks: Iterable[Interval]) -> list[Interval]:
    """Remove every block from every interval"""
    result = list(intervals)
    for block in blocks:
        next_result = []
        for interval in result:
            next_result.extend(subtract_interval(interval, block))
        result = next_result
    return sorted(result)


def open_intervals(
    working_hours: Iterable[WeeklyWindow],
    breaks: Iterable[WeeklyWindow] = (),
) -> list[Interval]:
    """
    Open wall-clock intervals of one weekday.

    Args:
        working_hours: the weekday's working windows (usually one)
        breaks: the weekday's recurring breaks

    Returns:
        Working windows (merged) minus breaks, in order. No working hours
        means the staff member is off that day and nothing is returned.
    """
    windows = merge_intervals(
        Interval(row.start_time, row.end_time) for row in working_hours if row.start_time < row.end_time
    )
    if not windows:
        return []

    blocks = [Interval(row.start_time, row.end_time) for row in breaks if row.start_time < row.end_time]
    return subtract_all(windows, blocks)
