from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, List, Tuple

from adapters.layout.cache import LayoutCache, request_fingerprint
from domain.layout_config import LayoutConfig
from domain.models import (
    ALL_DAYS,
    DAY_ORDER,
    LayoutDiagnostics,
    PositionedEntry,
    TimeInterval,
    WeekLayout,
)
from domain.ports.layout import LayoutRequest, ScheduleLayoutEngine
from domain.services.assign_columns import assign_columns
from domain.services.group_overlaps import group_week
from domain.services.normalize_intervals import IntervalNormalizer
from domain.services.project_grid import project_rect
from domain.services.scale_density import (
    DensityScaler,
    hour_ticks,
    resolve_visible_window,
    within_window,
)

logger = logging.getLogger(__name__)


class WeeklyGridLayoutEngine(ScheduleLayoutEngine):
    def __init__(
        self,
        config: LayoutConfig | None = None,
        cache: LayoutCache[WeekLayout] | None = None,
    ) -> None:
        self.config = config or LayoutConfig()
        self.cache = cache
        self.normalizer = IntervalNormalizer()
        self.scaler = DensityScaler(self.config)

    def build_layout(self, request: LayoutRequest) -> WeekLayout:
        if self.cache is None:
            return self._build(request)
        key = request_fingerprint(request, self.config)
        return self.cache.get_or_compute(key, lambda: self._build(request))

    def _build(self, request: LayoutRequest) -> WeekLayout:
        normalized = self.normalizer.normalize(request.records)
        intervals = [
            interval for interval in normalized.intervals if request.filters.matches(interval)
        ]
        filtered_out = len(normalized.intervals) - len(intervals)

        if request.day_view != ALL_DAYS and request.day_view not in DAY_ORDER:
            logger.warning("Unknown day view %r, showing all days.", request.day_view)
        visible_days = request.visible_days()

        bounds = resolve_visible_window(intervals, self.config)
        visible_intervals: List[TimeInterval] = []
        hidden: List[TimeInterval] = []
        for interval in intervals:
            if interval.day not in visible_days:
                continue
            if within_window(interval, bounds):
                visible_intervals.append(interval)
            else:
                hidden.append(interval)

        scale = self.scaler.scale(bounds, visible_intervals, request.zoom)
        # Hidden intervals take no column.
        clusters_by_day = group_week(visible_intervals)

        days: Dict[str, Tuple[PositionedEntry, ...]] = {}
        daily_hours: Dict[str, float] = {}
        for day in visible_days:
            entries: List[PositionedEntry] = []
            minutes = 0
            for cluster in clusters_by_day[day]:
                for assignment in assign_columns(cluster):
                    interval = assignment.interval
                    rect = project_rect(assignment, scale, self.config)
                    if rect is None:
                        continue
                    minutes += interval.duration
                    height_px = interval.duration / 60 * scale.pixels_per_hour
                    entries.append(
                        PositionedEntry(
                            interval=interval,
                            column_index=assignment.column_index,
                            column_count=assignment.column_count,
                            rect=rect,
                            font_tier=self.scaler.font_tier_for_height(height_px),
                            height_px=height_px,
                            padding_px=self.scaler.padding_for_height(height_px),
                            show_job_title=bool(interval.label.job_title)
                            and height_px >= self.config.job_title_min_height_px,
                        )
                    )
            days[day] = tuple(entries)
            daily_hours[day] = round(minutes / 60, 2)

        diagnostics = LayoutDiagnostics(
            rejected=tuple(normalized.rejected),
            hidden=tuple(hidden),
            filtered_out=filtered_out,
        )
        logger.info(
            "Built layout: %d entries on %d day(s), %d rejected, %d hidden, %d px/hour.",
            sum(len(items) for items in days.values()),
            len(days),
            diagnostics.rejected_count,
            len(hidden),
            scale.pixels_per_hour,
        )
        # Read-only: cache hits hand the same layout to every caller.
        return WeekLayout(
            days=MappingProxyType(days),
            scale=scale,
            hour_ticks=tuple(hour_ticks(*bounds)),
            daily_hours=MappingProxyType(daily_hours),
            diagnostics=diagnostics,
        )
