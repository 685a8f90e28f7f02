from datetime import datetime, timezone
from decimal import Decimal

from timesheet.models.entities import ActivityMaster, TimeEntry
from timesheet.services.aggregation import (
    aggregate_entries,
    elapsed_minutes,
    elapsed_quarter_hours,
    group_by_activity,
    hours_to_centi,
    monthly_user_summary,
    parse_timestamp,
    summarize_rows,
)

MASTER = [
    ActivityMaster(engagement="Acme", activity_id="A1", activity="Coding", budget_hours=10),
    ActivityMaster(engagement="Acme", activity_id="A2", activity="Review", budget_hours=2.5),
]


def _entry(start: str, end: str, *, engagement: str = "Acme", activity: str = "Coding", user: str = "u1") -> TimeEntry:
    return TimeEntry(
        id="1",
        user_id=user,
        user_name=user.upper(),
        start=start,
        end=end,
        engagement=engagement,
        activity=activity,
    )


def test_parse_timestamp_normalizes_to_utc() -> None:
    assert parse_timestamp("2025-05-01T09:00:00+09:00") == datetime(2025, 5, 1, 0, 0, tzinfo=timezone.utc)
    assert parse_timestamp("2025-05-01T00:00:00Z") == datetime(2025, 5, 1, tzinfo=timezone.utc)
    assert parse_timestamp("2025/05/01 09:30") == datetime(2025, 5, 1, 9, 30, tzinfo=timezone.utc)
    assert parse_timestamp("garbage") is None
    assert parse_timestamp("") is None


def test_elapsed_minutes_rounds_half_up_and_never_goes_negative() -> None:
    start = datetime(2025, 5, 1, tzinfo=timezone.utc)

    assert elapsed_minutes(start, start) == 0
    assert elapsed_minutes(start, start.replace(second=30)) == 1
    assert elapsed_minutes(start, start.replace(second=29)) == 0
    assert elapsed_minutes(start.replace(hour=2), start) == 0
    assert elapsed_minutes(None, start) == 0


def test_budget_centi_avoids_binary_float_artefacts() -> None:
    assert hours_to_centi(2.5) == 250
    assert hours_to_centi(1.005) == 101
    assert hours_to_centi(float("nan")) == 0


def test_reference_scenario() -> None:
    rows = aggregate_entries([_entry("2025-05-01T00:00:00Z", "2025-05-01T01:30:00Z")], MASTER)

    assert len(rows) == 1
    row = rows[0]
    assert row.month == "2025-05"
    assert row.activity_id == "A1"
    assert row.budget_centi == 1000
    assert row.actual_minutes == 90
    assert row.actual_centi == 150
    assert row.actual_hours == 1.5


def test_zero_length_entry() -> None:
    (row,) = aggregate_entries([_entry("2025-05-01T00:00:00Z", "2025-05-01T00:00:00Z")], MASTER)

    assert row.actual_minutes == 0
    assert row.actual_centi == 0


def test_missing_activity_degrades_to_zero_budget() -> None:
    (row,) = aggregate_entries(
        [_entry("2025-05-01T00:00:00Z", "2025-05-01T01:00:00Z", activity="Unknown")],
        MASTER,
    )

    assert row.budget_hours == 0
    assert row.budget_centi == 0
    assert row.activity_id == ""
    assert row.actual_centi == 100


def test_unparseable_start_keeps_row_with_empty_month() -> None:
    rows = aggregate_entries(
        [
            _entry("yesterday", "2025-05-01T01:00:00Z"),
            _entry("2025-05-01T02:00:00Z", "2025-05-01T01:00:00Z"),
        ],
        MASTER,
    )

    assert [row.month for row in rows] == ["", "2025-05"]
    assert [row.actual_minutes for row in rows] == [0, 0]


def test_one_row_per_entry_in_input_order() -> None:
    entries = [
        _entry("2025-05-02T00:00:00Z", "2025-05-02T00:10:00Z", activity="Review"),
        _entry("2025-05-01T00:00:00Z", "2025-05-01T00:10:00Z"),
        _entry("2025-05-01T00:00:00Z", "2025-05-01T00:10:00Z"),
    ]

    rows = aggregate_entries(entries, MASTER)

    assert [row.activity for row in rows] == ["Review", "Coding", "Coding"]


def test_first_matching_master_row_wins() -> None:
    master = MASTER + [ActivityMaster(engagement="Acme", activity_id="A9", activity="Coding", budget_hours=99)]

    (row,) = aggregate_entries([_entry("2025-05-01T00:00:00Z", "2025-05-01T00:10:00Z")], master)

    assert row.activity_id == "A1"


def test_totals_are_summed_in_minutes() -> None:
    entries = [_entry(f"2025-05-0{day}T00:00:00Z", f"2025-05-0{day}T00:20:00Z") for day in (1, 2, 3)]

    rows = aggregate_entries(entries, MASTER)
    total = summarize_rows(rows)

    assert [row.actual_centi for row in rows] == [33, 33, 33]
    assert total.actual_minutes == 60
    assert total.actual_centi == 100
    assert total.actual_hours == 1.0
    assert total.budget_centi == 1000
    assert total.variance_centi == -900


def test_centi_and_hour_sums_agree() -> None:
    entries = [
        _entry("2025-05-01T00:00:00Z", "2025-05-01T00:07:00Z"),
        _entry("2025-05-01T00:00:00Z", "2025-05-01T01:13:00Z"),
        _entry("2025-05-01T00:00:00Z", "2025-05-01T02:41:00Z", activity="Review"),
    ]

    rows = aggregate_entries(entries, MASTER)

    assert round(sum(row.actual_centi for row in rows) / 100, 2) == round(sum(row.actual_hours for row in rows), 2)


def test_group_by_activity_orders_ids_numerically() -> None:
    master = [
        ActivityMaster(engagement="Acme", activity_id="A10", activity="Deploy", budget_hours=1),
        ActivityMaster(engagement="Acme", activity_id="A2", activity="Review", budget_hours=2),
    ]
    entries = [
        _entry("2025-05-01T00:00:00Z", "2025-05-01T00:30:00Z", activity="Deploy"),
        _entry("2025-05-01T00:00:00Z", "2025-05-01T00:30:00Z", activity="Review"),
        _entry("2025-05-02T00:00:00Z", "2025-05-02T00:30:00Z", activity="Review"),
    ]

    groups = group_by_activity(aggregate_entries(entries, master))

    assert [group.activity_id for group in groups] == ["A2", "A10"]
    assert groups[0].total.actual_minutes == 60
    assert groups[0].total.budget_centi == 200


def test_monthly_user_summary_groups_and_sorts() -> None:
    entries = [
        _entry("2025-06-01T00:00:00Z", "2025-06-01T01:00:00Z", user="bo"),
        _entry("2025-05-01T00:00:00Z", "2025-05-01T00:20:00Z", user="cy"),
        _entry("2025-05-02T00:00:00Z", "2025-05-02T00:20:00Z", user="cy"),
        _entry("2025-05-03T00:00:00Z", "2025-05-03T00:20:00Z", user="cy"),
        _entry("2025-05-03T00:00:00Z", "2025-05-03T00:45:00Z", user="al"),
        _entry("bad", "2025-05-03T00:45:00Z", user="al"),
    ]

    summary = monthly_user_summary(entries)

    assert [(bucket.month, bucket.user_name) for bucket in summary] == [
        ("2025-05", "AL"),
        ("2025-05", "CY"),
        ("2025-06", "BO"),
    ]
    assert summary[0].total.actual_hours == 0.75
    assert summary[1].total.actual_hours == 1.0


def test_elapsed_quarter_hours_rounds_to_nearest_quarter() -> None:
    start = datetime(2025, 5, 1, tzinfo=timezone.utc)

    assert elapsed_quarter_hours(start, start.replace(minute=20)) == Decimal("0.25")
    assert elapsed_quarter_hours(start, start.replace(hour=1, minute=23)) == Decimal("1.50")
    assert elapsed_quarter_hours(start.replace(hour=3), start) == Decimal("0.00")
