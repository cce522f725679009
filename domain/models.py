from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

DAY_ORDER: Tuple[str, ...] = ("M", "T", "W", "R", "F")
DAY_LABELS: Dict[str, str] = {
    "M": "Monday",
    "T": "Tuesday",
    "W": "Wednesday",
    "R": "Thursday",
    "F": "Friday",
}
ALL_DAYS = "All"
MINUTES_PER_DAY = 24 * 60


class ShiftLabel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    job_title: Optional[str] = Field(default=None, alias="jobTitle")
    buildings: Tuple[str, ...] = ()

    @field_validator("buildings", mode="before")
    @classmethod
    def normalize_buildings(cls, value: object) -> Tuple[str, ...]:
        if value is None or value == "":
            return ()
        if isinstance(value, str):
            return (value,)
        return tuple(str(item) for item in value if item)  # type: ignore[union-attr]

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name, "buildings": list(self.buildings)}
        if self.job_title is not None:
            payload["jobTitle"] = self.job_title
        return payload


class ShiftRecord(BaseModel):
    """Raw weekly shift entry as supplied by the directory/schedule data layer.

    Day and time fields stay plain strings here; their validity is decided by
    the normalizer so a bad value excludes one record instead of failing the
    whole payload.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    day: str = ""
    start: str = ""
    end: str = ""
    owner_id: str = Field(default="", alias="ownerId")
    label: ShiftLabel = Field(default_factory=ShiftLabel)

    @field_validator("day", "start", "end", "owner_id", mode="before")
    @classmethod
    def coerce_text(cls, value: object) -> str:
        return "" if value is None else str(value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day,
            "start": self.start,
            "end": self.end,
            "ownerId": self.owner_id,
            "label": self.label.to_dict(),
        }


class RejectionReason(str, Enum):
    UNKNOWN_DAY = "unknown_day"
    INVALID_START = "invalid_start"
    INVALID_END = "invalid_end"
    EMPTY_RANGE = "empty_range"


@dataclass(frozen=True)
class TimeInterval:
    day: str
    start_minute: int
    end_minute: int
    owner_id: str
    label: ShiftLabel

    def __post_init__(self) -> None:
        if self.day not in DAY_ORDER:
            msg = f"Unknown day code: {self.day!r}"
            raise ValueError(msg)
        if not 0 <= self.start_minute < self.end_minute < MINUTES_PER_DAY:
            msg = f"Invalid interval bounds: {self.start_minute}..{self.end_minute}"
            raise ValueError(msg)

    @property
    def duration(self) -> int:
        return self.end_minute - self.start_minute

    def overlaps(self, other: TimeInterval) -> bool:
        return self.start_minute < other.end_minute and other.start_minute < self.end_minute

    def sort_key(self) -> Tuple[int, int, str, str, str, Tuple[str, ...]]:
        return (
            self.start_minute,
            self.end_minute,
            self.owner_id,
            self.label.name,
            self.label.job_title or "",
            self.label.buildings,
        )


@dataclass(frozen=True)
class OverlapCluster:
    day: str
    intervals: Tuple[TimeInterval, ...]

    @property
    def start_minute(self) -> int:
        return self.intervals[0].start_minute

    @property
    def end_minute(self) -> int:
        return max(interval.end_minute for interval in self.intervals)


@dataclass(frozen=True)
class ColumnAssignment:
    interval: TimeInterval
    column_index: int
    column_count: int


@dataclass(frozen=True)
class ScaleConfig:
    min_start: int
    max_end: int
    base_pixels_per_hour: int
    pixels_per_hour: int
    zoom: float
    font_tier: int

    @property
    def total_minutes(self) -> int:
        return self.max_end - self.min_start

    @property
    def grid_height_px(self) -> float:
        return self.total_minutes / 60 * self.pixels_per_hour

    def to_dict(self) -> dict[str, Any]:
        return {
            "minStart": self.min_start,
            "maxEnd": self.max_end,
            "totalMinutes": self.total_minutes,
            "basePixelsPerHour": self.base_pixels_per_hour,
            "pixelsPerHour": self.pixels_per_hour,
            "zoom": self.zoom,
            "fontTier": self.font_tier,
            "gridHeightPx": self.grid_height_px,
        }


@dataclass(frozen=True)
class GridRect:
    top_pct: float
    height_pct: float
    left_pct: float
    left_offset_px: float
    width_pct: float
    width_offset_px: float

    def css_left(self) -> str:
        return f"calc({self.left_pct:g}% + {self.left_offset_px:g}px)"

    def css_width(self) -> str:
        return f"calc({self.width_pct:g}% - {self.width_offset_px:g}px)"


@dataclass(frozen=True)
class PositionedEntry:
    interval: TimeInterval
    column_index: int
    column_count: int
    rect: GridRect
    font_tier: int
    height_px: float
    padding_px: float
    show_job_title: bool

    @property
    def day(self) -> str:
        return self.interval.day

    @property
    def owner_id(self) -> str:
        return self.interval.owner_id

    def to_record(self) -> ShiftRecord:
        return ShiftRecord(
            day=self.interval.day,
            start=format_minutes(self.interval.start_minute),
            end=format_minutes(self.interval.end_minute),
            owner_id=self.interval.owner_id,
            label=self.interval.label,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "ownerId": self.interval.owner_id,
            "label": self.interval.label.to_dict(),
            "day": self.interval.day,
            "startMinute": self.interval.start_minute,
            "endMinute": self.interval.end_minute,
            "columnIndex": self.column_index,
            "columnCount": self.column_count,
            "top": self.rect.top_pct,
            "height": self.rect.height_pct,
            "left": self.rect.css_left(),
            "width": self.rect.css_width(),
            "fontTier": self.font_tier,
            "heightPx": self.height_px,
            "paddingPx": self.padding_px,
            "showJobTitle": self.show_job_title,
        }


@dataclass(frozen=True)
class RejectedRecord:
    index: int
    record: ShiftRecord
    reason: RejectionReason

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "reason": self.reason.value, "record": self.record.to_dict()}


@dataclass(frozen=True)
class LayoutDiagnostics:
    rejected: Tuple[RejectedRecord, ...] = ()
    hidden: Tuple[TimeInterval, ...] = ()
    filtered_out: int = 0

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rejectedCount": self.rejected_count,
            "rejected": [item.to_dict() for item in self.rejected],
            "hiddenCount": len(self.hidden),
            "filteredOut": self.filtered_out,
        }


@dataclass(frozen=True)
class WeekLayout:
    days: Mapping[str, Tuple[PositionedEntry, ...]]
    scale: ScaleConfig
    hour_ticks: Tuple[int, ...]
    daily_hours: Mapping[str, float]
    diagnostics: LayoutDiagnostics

    def entries(self) -> List[PositionedEntry]:
        return [entry for day in self.days for entry in self.days[day]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "days": {day: [entry.to_dict() for entry in items] for day, items in self.days.items()},
            "scale": self.scale.to_dict(),
            "hourTicks": list(self.hour_ticks),
            "dailyHours": dict(self.daily_hours),
            "diagnostics": self.diagnostics.to_dict(),
        }


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_minutes_label(minutes: int) -> str:
    hour24, minute = divmod(minutes, 60)
    suffix = "PM" if hour24 >= 12 else "AM"
    hour12 = ((hour24 + 11) % 12) + 1
    return f"{hour12}:{minute:02d} {suffix}"
