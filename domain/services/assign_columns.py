from __future__ import annotations

from collections.abc import Iterable
from typing import List, Tuple

from domain.models import ColumnAssignment, OverlapCluster, TimeInterval


def assign_columns(cluster: OverlapCluster) -> List[ColumnAssignment]:
    """First-fit column assignment over a start-sorted cluster.

    Earliest-start greedy partitioning opens a new column only when every
    existing column is still busy, so the column count equals the cluster's
    peak concurrency. That count is stamped on every member so siblings
    render with equal widths.
    """
    column_end_times: List[int] = []
    placed: List[Tuple[TimeInterval, int]] = []
    for interval in cluster.intervals:
        column = _first_free_column(column_end_times, interval.start_minute)
        if column is None:
            column = len(column_end_times)
            column_end_times.append(interval.end_minute)
        else:
            column_end_times[column] = interval.end_minute
        placed.append((interval, column))

    column_count = len(column_end_times)
    return [
        ColumnAssignment(interval=interval, column_index=column, column_count=column_count)
        for interval, column in placed
    ]


def _first_free_column(column_end_times: List[int], start_minute: int) -> int | None:
    for index, end_time in enumerate(column_end_times):
        if end_time <= start_minute:
            return index
    return None


def max_concurrency(intervals: Iterable[TimeInterval]) -> int:
    # Ends sort before starts at the same instant: touching shifts never coexist.
    events: List[Tuple[int, int]] = []
    for interval in intervals:
        events.append((interval.start_minute, 1))
        events.append((interval.end_minute, -1))
    events.sort()
    open_count = 0
    peak = 0
    for _minute, delta in events:
        open_count += delta
        peak = max(peak, open_count)
    return peak
