from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import List, Tuple

from domain.layout_config import LayoutConfig
from domain.models import ScaleConfig, TimeInterval


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def clamp_zoom(zoom: float | None, config: LayoutConfig) -> float:
    if zoom is None or not math.isfinite(zoom):
        return 1.0
    return clamp(float(zoom), config.zoom_min, config.zoom_max)


def step_zoom(zoom: float, direction: int, config: LayoutConfig) -> float:
    """Move zoom one step in or out, snapped to one decimal place."""
    stepped = round(clamp_zoom(zoom, config) + direction * config.zoom_step, 1)
    return clamp_zoom(stepped, config)


def compute_visible_bounds(
    intervals: Iterable[TimeInterval], config: LayoutConfig
) -> Tuple[int, int]:
    min_start = config.default_start
    max_end = config.default_end
    for interval in intervals:
        min_start = min(min_start, interval.start_minute)
        max_end = max(max_end, interval.end_minute)
    min_start = int(clamp(min_start, config.earliest_start, config.latest_start))
    max_end = int(clamp(max_end, config.earliest_end, config.latest_end))
    if max_end - min_start < config.min_visible_minutes:
        max_end = min_start + config.min_visible_minutes
    return min_start, max_end


def within_window(interval: TimeInterval, bounds: Tuple[int, int]) -> bool:
    min_start, max_end = bounds
    return interval.end_minute > min_start and interval.start_minute < max_end


def resolve_visible_window(
    intervals: Iterable[TimeInterval], config: LayoutConfig
) -> Tuple[int, int]:
    """Visible bounds widened only by intervals that stay at least partly inside them.

    An interval clamped out of the window does not stretch it. Dropping one
    can narrow the window and push others out, so the set shrinks until it
    is stable; laying out the remaining intervals alone yields the same
    bounds.
    """
    shown = list(intervals)
    while True:
        bounds = compute_visible_bounds(shown, config)
        kept = [interval for interval in shown if within_window(interval, bounds)]
        if len(kept) == len(shown):
            return bounds
        shown = kept


def hour_ticks(min_start: int, max_end: int) -> List[int]:
    first = min_start // 60
    last = -(-max_end // 60)
    return [hour * 60 for hour in range(first, last + 1)]


class DensityScaler:
    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def scale(
        self,
        bounds: Tuple[int, int],
        visible: Sequence[TimeInterval],
        zoom: float | None = 1.0,
    ) -> ScaleConfig:
        effective_zoom = clamp_zoom(zoom, self.config)
        base = self.base_pixels_per_hour(visible)
        pixels_per_hour = self.apply_zoom(base, effective_zoom)
        shortest = min((max(1, interval.duration) for interval in visible), default=None)
        tier = (
            self.font_tier_for_height(shortest / 60 * pixels_per_hour)
            if shortest is not None
            else self.config.font_base_px
        )
        min_start, max_end = bounds
        return ScaleConfig(
            min_start=min_start,
            max_end=max_end,
            base_pixels_per_hour=base,
            pixels_per_hour=pixels_per_hour,
            zoom=effective_zoom,
            font_tier=tier,
        )

    def base_pixels_per_hour(self, visible: Sequence[TimeInterval]) -> int:
        if not visible:
            return self.config.base_px_per_hour
        shortest = min(max(1, interval.duration) for interval in visible)
        required = math.ceil(
            self.config.min_event_height_px * 60 / max(self.config.min_duration_floor, shortest)
        )
        return int(clamp(required, self.config.base_px_per_hour, self.config.max_px_per_hour))

    def apply_zoom(self, pixels_per_hour: int, zoom: float) -> int:
        scaled = round_half_up(pixels_per_hour * zoom)
        return int(
            clamp(
                scaled,
                self.config.base_px_per_hour // 2,
                self.config.max_px_per_hour * 2,
            )
        )

    def font_tier_for_height(self, height_px: float) -> int:
        size = self.config.font_base_px
        for threshold, step_size in self.config.font_steps:
            if height_px < threshold:
                size = step_size
        return max(self.config.font_floor_px, size)

    def padding_for_height(self, height_px: float) -> float:
        return clamp(height_px / 12, self.config.min_padding_px, self.config.max_padding_px)
