from __future__ import annotations

from domain.layout_config import LayoutConfig
from domain.models import ColumnAssignment, GridRect, ScaleConfig


def project_rect(
    assignment: ColumnAssignment, scale: ScaleConfig, config: LayoutConfig
) -> GridRect | None:
    interval = assignment.interval
    start = max(interval.start_minute, scale.min_start)
    end = min(interval.end_minute, scale.max_end)
    if end <= start:
        return None

    total = scale.total_minutes
    top_pct = (start - scale.min_start) / total * 100
    height_pct = max(config.min_height_pct, (end - start) / total * 100)

    columns = assignment.column_count
    column = assignment.column_index
    gap = config.column_gap_px
    return GridRect(
        top_pct=top_pct,
        height_pct=height_pct,
        left_pct=column * 100 / columns,
        left_offset_px=column * gap,
        width_pct=100 / columns,
        width_offset_px=(columns - 1) * gap / columns,
    )
