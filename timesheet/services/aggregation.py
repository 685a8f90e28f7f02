"""Budget-vs-actual aggregation of timesheet entries.

Durations are rounded to whole minutes first and converted to centi-hours
(hours x 100, an integer) per row. Totals are summed in minute space and
converted once, so many short entries never drift by accumulated rounding.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from timesheet.models.entities import ActivityMaster, AggregatedRow, TimeEntry

log = logging.getLogger(__name__)

_ONE = Decimal("1")
_MICROSECONDS_PER_MINUTE = Decimal(60_000_000)
_MICROSECONDS_PER_QUARTER_HOUR = Decimal(900_000_000)
# Layouts the spreadsheet UI produces for USER_ENTERED date-time cells.
_SHEET_DATETIME_FORMATS = ("%Y/%m/%d %H:%M:%S", "%Y/%m/%d %H:%M", "%Y/%m/%d")


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(_ONE, rounding=ROUND_HALF_UP))


def parse_timestamp(raw: str | None) -> datetime | None:
    """Parse a sheet cell into an aware UTC datetime, or ``None`` if unparseable.

    Naive values are taken as UTC.
    """

    text = str(raw or "").strip()
    if not text:
        return None
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        for fmt in _SHEET_DATETIME_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def elapsed_minutes(start: datetime | None, end: datetime | None) -> int:
    """Whole minutes between ``start`` and ``end``, never negative."""

    if start is None or end is None:
        return 0
    micros = (end - start) // timedelta(microseconds=1)
    return max(0, _round_half_up(Decimal(micros) / _MICROSECONDS_PER_MINUTE))


def month_bucket(start: datetime | None) -> str:
    if start is None:
        return ""
    return f"{start.year:04d}-{start.month:02d}"


def hours_to_centi(hours: float | str | Decimal) -> int:
    try:
        value = Decimal(str(hours))
    except InvalidOperation:
        return 0
    if not value.is_finite():
        return 0
    return _round_half_up(value * 100)


def minutes_to_centi(minutes: int) -> int:
    return _round_half_up(Decimal(minutes * 100) / 60)


def activity_index(activities: Iterable[ActivityMaster]) -> dict[tuple[str, str], ActivityMaster]:
    """Key activity master rows by (engagement, activity); the first row wins."""

    index: dict[tuple[str, str], ActivityMaster] = {}
    for activity in activities:
        index.setdefault((activity.engagement, activity.activity), activity)
    return index


def aggregate_entry(entry: TimeEntry, index: dict[tuple[str, str], ActivityMaster]) -> AggregatedRow:
    start = parse_timestamp(entry.start)
    end = parse_timestamp(entry.end)
    if start is None or end is None:
        log.debug("Entry %s has an unparseable time range: %r - %r", entry.id, entry.start, entry.end)

    minutes = elapsed_minutes(start, end)
    master = index.get((entry.engagement, entry.activity))
    budget_hours = master.budget_hours if master is not None else 0.0

    return AggregatedRow(
        user_id=entry.user_id,
        user_name=entry.user_name,
        engagement=entry.engagement,
        activity=entry.activity,
        activity_id=master.activity_id if master is not None else "",
        month=month_bucket(start),
        budget_hours=budget_hours,
        budget_centi=hours_to_centi(budget_hours),
        actual_minutes=minutes,
        actual_centi=minutes_to_centi(minutes),
    )


def aggregate_entries(entries: Iterable[TimeEntry], activities: Iterable[ActivityMaster]) -> list[AggregatedRow]:
    """Produce one ``AggregatedRow`` per entry, in input order."""

    index = activity_index(activities)
    return [aggregate_entry(entry, index) for entry in entries]


@dataclass(slots=True)
class HoursTotal:
    actual_minutes: int = 0
    budget_centi: int = 0

    @property
    def actual_centi(self) -> int:
        return minutes_to_centi(self.actual_minutes)

    @property
    def actual_hours(self) -> float:
        return self.actual_centi / 100

    @property
    def budget_hours(self) -> float:
        return self.budget_centi / 100

    @property
    def variance_centi(self) -> int:
        return self.actual_centi - self.budget_centi


def summarize_rows(rows: Iterable[AggregatedRow]) -> HoursTotal:
    """Total actual time of ``rows`` in minute space.

    Budgets are counted once per (engagement, activity) pair since every row
    of an activity repeats the same planned allocation.
    """

    total = HoursTotal()
    seen: set[tuple[str, str]] = set()
    for row in rows:
        total.actual_minutes += row.actual_minutes
        key = (row.engagement, row.activity)
        if key not in seen:
            seen.add(key)
            total.budget_centi += row.budget_centi
    return total


@dataclass(slots=True)
class ActivitySummary:
    engagement: str
    activity_id: str
    activity: str
    total: HoursTotal


def _natural_key(text: str) -> list[tuple[int, int | str]]:
    return [(0, int(part)) if part.isdigit() else (1, part) for part in re.split(r"(\d+)", text) if part]


def group_by_activity(rows: Iterable[AggregatedRow]) -> list[ActivitySummary]:
    """Collapse rows per activity, ordered by activity id (numeric-aware)."""

    groups: dict[tuple[str, str, str], ActivitySummary] = {}
    for row in rows:
        key = (row.engagement, row.activity_id, row.activity)
        group = groups.get(key)
        if group is None:
            group = ActivitySummary(
                engagement=row.engagement,
                activity_id=row.activity_id,
                activity=row.activity,
                total=HoursTotal(budget_centi=row.budget_centi),
            )
            groups[key] = group
        group.total.actual_minutes += row.actual_minutes
    return sorted(groups.values(), key=lambda g: (_natural_key(g.activity_id), g.activity))


@dataclass(slots=True)
class MonthlyUserHours:
    user_name: str
    month: str
    total: HoursTotal


def monthly_user_summary(entries: Iterable[TimeEntry]) -> list[MonthlyUserHours]:
    """Hours per (user name, month); entries without a user name or a parseable range are skipped."""

    buckets: dict[tuple[str, str], MonthlyUserHours] = {}
    for entry in entries:
        start = parse_timestamp(entry.start)
        end = parse_timestamp(entry.end)
        if not entry.user_name or start is None or end is None:
            continue
        month = month_bucket(start)
        bucket = buckets.setdefault(
            (entry.user_name, month),
            MonthlyUserHours(user_name=entry.user_name, month=month, total=HoursTotal()),
        )
        bucket.total.actual_minutes += elapsed_minutes(start, end)
    return sorted(buckets.values(), key=lambda b: (b.month, b.user_name))


def elapsed_quarter_hours(start: datetime | None, end: datetime | None) -> Decimal:
    """Duration rounded to the nearest quarter hour, as used on exported timesheets."""

    if start is None or end is None:
        return Decimal("0.00")
    micros = (end - start) // timedelta(microseconds=1)
    quarters = max(0, _round_half_up(Decimal(micros) / _MICROSECONDS_PER_QUARTER_HOUR))
    return (Decimal(quarters) / 4).quantize(Decimal("0.01"))
