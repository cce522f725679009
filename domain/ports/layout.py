from __future__ import annotations

from typing import List, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.models import ALL_DAYS, DAY_ORDER, ShiftRecord, WeekLayout
from domain.services.filter_records import ScheduleFilter


class LayoutRequest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    records: List[ShiftRecord] = Field(default_factory=list)
    day_view: str = Field(default=ALL_DAYS, alias="dayView")
    zoom: float = 1.0
    filters: ScheduleFilter = Field(default_factory=ScheduleFilter)

    @field_validator("day_view", mode="before")
    @classmethod
    def normalize_day_view(cls, value: object) -> str:
        raw = str(value or "").strip()
        if raw.lower() == ALL_DAYS.lower() or not raw:
            return ALL_DAYS
        return raw.upper()

    def visible_days(self) -> List[str]:
        if self.day_view in DAY_ORDER:
            return [self.day_view]
        return list(DAY_ORDER)


class ScheduleLayoutEngine(Protocol):
    def build_layout(self, request: LayoutRequest) -> WeekLayout:
        ...
