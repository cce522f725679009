from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import List, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.models import ShiftRecord, TimeInterval


class ScheduleFilter(BaseModel):
    """Owner/building/job-title selection applied before layout.

    Empty sets match everything. A record passes only when every non-empty
    set matches it; buildings match on any overlap with the record's list.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    owner_ids: frozenset[str] = Field(default=frozenset(), alias="ownerIds")
    buildings: frozenset[str] = frozenset()
    job_titles: frozenset[str] = Field(default=frozenset(), alias="jobTitles")

    @field_validator("owner_ids", "buildings", "job_titles", mode="before")
    @classmethod
    def normalize_values(cls, value: object) -> frozenset[str]:
        if value is None or value == "":
            return frozenset()
        if isinstance(value, str):
            return frozenset(token.strip() for token in value.split(",") if token.strip())
        return frozenset(str(item) for item in value if item)  # type: ignore[union-attr]

    def is_empty(self) -> bool:
        return not (self.owner_ids or self.buildings or self.job_titles)

    def matches(self, record: ShiftRecord | TimeInterval) -> bool:
        if self.owner_ids and record.owner_id not in self.owner_ids:
            return False
        if self.job_titles and (record.label.job_title or "") not in self.job_titles:
            return False
        if self.buildings and not self.buildings.intersection(record.label.buildings):
            return False
        return True

    def canonical(self) -> dict[str, list[str]]:
        return {
            "owner_ids": sorted(self.owner_ids),
            "buildings": sorted(self.buildings),
            "job_titles": sorted(self.job_titles),
        }


def filter_records(
    records: Iterable[ShiftRecord], schedule_filter: ScheduleFilter | None
) -> List[ShiftRecord]:
    if schedule_filter is None or schedule_filter.is_empty():
        return list(records)
    return [record for record in records if schedule_filter.matches(record)]


def building_options(records: Sequence[ShiftRecord]) -> List[str]:
    found: Set[str] = set()
    for record in records:
        found.update(building for building in record.label.buildings if building)
    return sorted(found)


def job_title_options(records: Sequence[ShiftRecord]) -> List[str]:
    return sorted({record.label.job_title for record in records if record.label.job_title})


def owner_options(records: Sequence[ShiftRecord]) -> List[str]:
    return sorted({record.owner_id for record in records if record.owner_id})
