from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Tuple

# (height threshold in px, font size in px); a box shorter than the threshold
# drops to that size.
DEFAULT_FONT_STEPS: Tuple[Tuple[int, int], ...] = ((44, 11), (34, 10), (26, 9), (20, 8))


@dataclass(frozen=True)
class LayoutConfig:
    min_event_height_px: int = 44
    base_px_per_hour: int = 56
    max_px_per_hour: int = 220
    min_duration_floor: int = 15
    column_gap_px: float = 6.0
    min_height_pct: float = 3.0
    zoom_min: float = 0.5
    zoom_max: float = 2.5
    zoom_step: float = 0.1
    default_start: int = 8 * 60
    default_end: int = 18 * 60
    earliest_start: int = 6 * 60
    latest_start: int = 9 * 60
    earliest_end: int = 17 * 60
    latest_end: int = 22 * 60
    min_visible_minutes: int = 60
    font_base_px: int = 12
    font_floor_px: int = 10
    font_steps: Tuple[Tuple[int, int], ...] = DEFAULT_FONT_STEPS
    job_title_min_height_px: float = 52.0
    min_padding_px: float = 2.0
    max_padding_px: float = 4.0

    def __post_init__(self) -> None:
        if self.base_px_per_hour <= 0 or self.max_px_per_hour < self.base_px_per_hour:
            msg = "max_px_per_hour must be >= base_px_per_hour > 0"
            raise ValueError(msg)
        if not 0 < self.zoom_min <= 1.0 <= self.zoom_max:
            msg = "zoom bounds must satisfy 0 < zoom_min <= 1 <= zoom_max"
            raise ValueError(msg)
        if self.earliest_start > self.latest_start or self.earliest_end > self.latest_end:
            msg = "visible window clamps are inverted"
            raise ValueError(msg)
        if self.min_duration_floor <= 0 or self.min_visible_minutes <= 0:
            msg = "min_duration_floor and min_visible_minutes must be positive"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["font_steps"] = [list(step) for step in self.font_steps]
        return payload
