from __future__ import annotations

from collections.abc import Iterable
from typing import Dict, List

from domain.models import DAY_ORDER, OverlapCluster, TimeInterval


def sort_intervals(intervals: Iterable[TimeInterval]) -> List[TimeInterval]:
    return sorted(intervals, key=lambda interval: interval.sort_key())


def group_overlaps(intervals: Iterable[TimeInterval]) -> List[OverlapCluster]:
    """Split one day's intervals into maximal clusters of transitively overlapping shifts.

    A new cluster starts as soon as an interval begins at or after the latest
    end seen so far, so shifts that only touch (end == next start) land in
    separate clusters.
    """
    ordered = sort_intervals(intervals)
    if not ordered:
        return []
    days = {interval.day for interval in ordered}
    if len(days) > 1:
        msg = f"group_overlaps expects intervals of a single day, got {sorted(days)}"
        raise ValueError(msg)

    day = ordered[0].day
    clusters: List[OverlapCluster] = []
    current: List[TimeInterval] = []
    running_max_end = -1
    for interval in ordered:
        if current and interval.start_minute >= running_max_end:
            clusters.append(OverlapCluster(day=day, intervals=tuple(current)))
            current = []
        current.append(interval)
        running_max_end = (
            interval.end_minute
            if len(current) == 1
            else max(running_max_end, interval.end_minute)
        )
    clusters.append(OverlapCluster(day=day, intervals=tuple(current)))
    return clusters


def group_week(intervals: Iterable[TimeInterval]) -> Dict[str, List[OverlapCluster]]:
    by_day: Dict[str, List[TimeInterval]] = {day: [] for day in DAY_ORDER}
    for interval in intervals:
        by_day[interval.day].append(interval)
    return {day: group_overlaps(items) for day, items in by_day.items()}
