from __future__ import annotations

import random
from collections import defaultdict

import pytest

from adapters.layout.weekly_grid import WeeklyGridLayoutEngine
from domain.layout_config import LayoutConfig
from domain.models import DAY_ORDER, RejectionReason, WeekLayout
from domain.ports.layout import LayoutRequest
from domain.services.assign_columns import max_concurrency
from domain.services.filter_records import ScheduleFilter
from tests.helpers.shift_fixtures import load_shift_payload, random_records, record


def _layout(records: list, **kwargs: object) -> WeekLayout:
    return WeeklyGridLayoutEngine().build_layout(LayoutRequest(records=records, **kwargs))


def test_scenario_overlapping_monday_pair() -> None:
    week = _layout([record("M", "09:00", "10:00", "a"), record("M", "09:30", "10:30", "b")])

    monday = week.days["M"]
    assert [entry.column_count for entry in monday] == [2, 2]
    assert {entry.column_index for entry in monday} == {0, 1}


def test_scenario_back_to_back_shifts_stay_in_first_column() -> None:
    week = _layout(
        [
            record("T", "10:00", "11:00", "c"),
            record("T", "08:00", "09:00", "a"),
            record("T", "09:00", "10:00", "b"),
        ]
    )

    tuesday = week.days["T"]
    assert [entry.owner_id for entry in tuesday] == ["a", "b", "c"]
    assert all(entry.column_index == 0 and entry.column_count == 1 for entry in tuesday)
    assert all(entry.rect.width_pct == 100 for entry in tuesday)


def test_scenario_short_shift_raises_pixel_density() -> None:
    week = _layout(
        [
            record("W", "09:00", "10:00", "a"),
            record("W", "10:00", "10:15", "b"),
            record("R", "13:00", "14:00", "c"),
        ]
    )

    short = next(entry for entry in week.days["W"] if entry.owner_id == "b")
    assert week.scale.pixels_per_hour == 176
    assert short.height_px >= 44


def test_scenario_short_shift_density_is_capped() -> None:
    engine = WeeklyGridLayoutEngine(LayoutConfig(min_event_height_px=90))
    week = engine.build_layout(LayoutRequest(records=[record("W", "10:00", "10:15")]))

    assert week.scale.pixels_per_hour == 220


def test_scenario_empty_input_returns_empty_days_and_default_scale() -> None:
    week = _layout([])

    assert list(week.days) == list(DAY_ORDER)
    assert all(entries == () for entries in week.days.values())
    assert week.scale.pixels_per_hour == 56
    assert (week.scale.min_start, week.scale.max_end) == (480, 1080)
    assert week.diagnostics.rejected_count == 0


def test_scenario_malformed_record_is_counted_while_siblings_render() -> None:
    week = _layout(
        [
            record("F", "09:00", "10:00", "ok-1"),
            record("F", "25:99", "26:00", "broken"),
            record("F", "09:30", "11:00", "ok-2"),
        ]
    )

    assert [entry.owner_id for entry in week.days["F"]] == ["ok-1", "ok-2"]
    assert week.diagnostics.rejected_count == 1
    [rejected] = week.diagnostics.rejected
    assert (rejected.index, rejected.reason) == (1, RejectionReason.INVALID_START)


def test_day_view_limits_output_and_density_to_that_day() -> None:
    records = [record("M", "09:00", "09:15", "short"), record("T", "09:00", "11:00", "long")]

    week = _layout(records, day_view="t")

    assert list(week.days) == ["T"]
    assert week.scale.pixels_per_hour == 56
    assert _layout(records).scale.pixels_per_hour == 176


def test_unknown_day_view_falls_back_to_all_days(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING"):
        week = _layout([record("M", "09:00", "10:00")], day_view="Saturday")

    assert list(week.days) == list(DAY_ORDER)
    assert "Unknown day view" in caplog.text


def test_filters_drop_records_and_report_count() -> None:
    records = [
        record("M", "09:00", "10:00", "a", buildings=["Sid Rich"]),
        record("M", "09:30", "10:30", "b", buildings=["Moody Library"]),
    ]

    week = _layout(records, filters=ScheduleFilter(buildings=["Sid Rich"]))

    assert [entry.owner_id for entry in week.days["M"]] == ["a"]
    assert week.days["M"][0].column_count == 1
    assert week.diagnostics.filtered_out == 1


def test_entries_outside_the_visible_window_are_hidden_and_reported() -> None:
    week = _layout([record("M", "05:00", "05:45", "early"), record("M", "09:00", "10:00", "normal")])

    assert [entry.owner_id for entry in week.days["M"]] == ["normal"]
    assert [item.owner_id for item in week.diagnostics.hidden] == ["early"]
    # the early shift does not stretch the window it cannot appear in
    assert week.scale.min_start == 480


def test_hidden_shift_takes_no_column_from_visible_overlap() -> None:
    week = _layout([record("M", "05:00", "06:00", "hidden"), record("M", "05:30", "07:00", "shown")])

    [shown] = week.days["M"]
    assert shown.owner_id == "shown"
    assert (shown.column_index, shown.column_count) == (0, 1)
    assert shown.rect.width_pct == 100
    assert shown.rect.top_pct == 0
    assert [item.owner_id for item in week.diagnostics.hidden] == ["hidden"]
    assert week.daily_hours["M"] == 1.5


def test_job_title_visibility_and_font_follow_rendered_height() -> None:
    week = _layout(
        [
            record("M", "09:00", "10:00", "tall", job_title="Tutor"),
            record("R", "09:00", "09:30", "short", job_title="Tutor"),
        ],
        zoom=0.5,
    )

    tall = week.days["M"][0]
    short = week.days["R"][0]
    # 30 minute minimum -> 88 px/hour, halved by zoom
    assert week.scale.pixels_per_hour == 44
    assert tall.height_px == 44 and tall.show_job_title is False
    assert tall.font_tier == 12
    assert short.height_px == 22 and short.font_tier == 10
    assert week.scale.font_tier == 10


def test_daily_hours_and_ticks_describe_the_grid() -> None:
    week = _layout([record("M", "09:00", "10:30"), record("M", "09:00", "10:00", "other")])

    assert week.daily_hours["M"] == 2.5
    assert week.daily_hours["T"] == 0
    assert week.hour_ticks[0] == 480
    assert week.hour_ticks[-1] == 1080


def test_layout_of_sample_week_fixture() -> None:
    payload = load_shift_payload("week.json")
    week = _layout(payload["records"])

    assert week.diagnostics.rejected_count == 1
    assert [entry.column_count for entry in week.days["W"]] == [2, 2, 2]
    assert len(week.days["T"]) == 2
    assert week.scale.pixels_per_hour == 176


def test_layout_invariants_hold_on_random_weeks() -> None:
    rng = random.Random(42)
    for _ in range(25):
        records = random_records(rng, rng.randint(0, 60))
        week = _layout(records)

        assert len(week.entries()) + len(week.diagnostics.hidden) == len(records)
        for day, entries in week.days.items():
            assert all(entry.day == day for entry in entries)
            assert all(0 <= entry.column_index < entry.column_count for entry in entries)
            # Entries come out cluster by cluster; a new cluster starts when nothing is open.
            clusters: list[list] = []
            running_end = -1
            for entry in entries:
                if not clusters or entry.interval.start_minute >= running_end:
                    clusters.append([])
                    running_end = entry.interval.end_minute
                clusters[-1].append(entry)
                running_end = max(running_end, entry.interval.end_minute)

            groups: dict[tuple[int, int], list] = defaultdict(list)
            for cluster_index, members in enumerate(clusters):
                counts = {entry.column_count for entry in members}
                assert counts == {max_concurrency([entry.interval for entry in members])}
                for entry in members:
                    groups[(cluster_index, entry.column_index)].append(entry.interval)
            for same_column in groups.values():
                for index, first in enumerate(same_column):
                    for second in same_column[index + 1 :]:
                        assert not first.overlaps(second)


def test_layout_is_independent_of_input_order() -> None:
    rng = random.Random(7)
    records = random_records(rng, 40)
    shuffled = list(records)
    rng.shuffle(shuffled)

    assert _layout(records, zoom=1.3).to_dict() == _layout(shuffled, zoom=1.3).to_dict()


def test_round_tripped_output_lays_out_identically() -> None:
    rng = random.Random(99)
    week = _layout(random_records(rng, 30))

    replayed = _layout([entry.to_record() for entry in week.entries()])

    assert replayed.to_dict()["days"] == week.to_dict()["days"]
    assert replayed.scale == week.scale


def test_round_trip_is_stable_when_shifts_fall_outside_the_window() -> None:
    rng = random.Random(5)
    records = random_records(rng, 20) + [
        record("M", "05:00", "05:45", "early"),
        record("F", "22:30", "23:30", "late"),
    ]
    week = _layout(records)
    assert {item.owner_id for item in week.diagnostics.hidden} == {"early", "late"}

    replayed = _layout([entry.to_record() for entry in week.entries()])

    assert replayed.diagnostics.hidden == ()
    assert replayed.scale == week.scale
    assert replayed.to_dict()["days"] == week.to_dict()["days"]
