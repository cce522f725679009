from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import List

from domain.models import (
    DAY_ORDER,
    RejectedRecord,
    RejectionReason,
    ShiftRecord,
    TimeInterval,
)

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time_to_minutes(value: object) -> int | None:
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours >= 24 or minutes >= 60:
        return None
    return hours * 60 + minutes


def normalize_day_code(value: object) -> str | None:
    code = str(value or "").strip().upper()
    return code if code in DAY_ORDER else None


@dataclass(frozen=True)
class NormalizationResult:
    intervals: List[TimeInterval] = field(default_factory=list)
    rejected: List[RejectedRecord] = field(default_factory=list)


class IntervalNormalizer:
    def normalize(self, records: Iterable[ShiftRecord]) -> NormalizationResult:
        intervals: List[TimeInterval] = []
        rejected: List[RejectedRecord] = []
        for index, record in enumerate(records):
            outcome = self.normalize_one(record)
            if isinstance(outcome, RejectionReason):
                logger.debug(
                    "Rejected shift record #%d (%s): %s %s-%s",
                    index,
                    outcome.value,
                    record.day,
                    record.start,
                    record.end,
                )
                rejected.append(RejectedRecord(index=index, record=record, reason=outcome))
                continue
            intervals.append(outcome)
        return NormalizationResult(intervals=intervals, rejected=rejected)

    def normalize_one(self, record: ShiftRecord) -> TimeInterval | RejectionReason:
        day = normalize_day_code(record.day)
        if day is None:
            return RejectionReason.UNKNOWN_DAY
        start = parse_time_to_minutes(record.start)
        if start is None:
            return RejectionReason.INVALID_START
        end = parse_time_to_minutes(record.end)
        if end is None:
            return RejectionReason.INVALID_END
        if start >= end:
            return RejectionReason.EMPTY_RANGE
        return TimeInterval(
            day=day,
            start_minute=start,
            end_minute=end,
            owner_id=record.owner_id,
            label=record.label,
        )
