"""Typed records read from and derived from the timesheet spreadsheet."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class TimeEntry:
    """One row of the ``TimeSheet`` tab.

    ``start`` and ``end`` keep the raw cell text; parsing happens in the
    aggregator so malformed cells degrade a single row instead of the read.
    """

    id: str
    user_id: str
    user_name: str
    start: str
    end: str
    engagement: str
    activity: str
    location: str = ""
    details: str = ""
    created_at: str = ""
    # 1-based sheet row, 0 for entries that are not persisted yet.
    row_number: int = 0


@dataclass(slots=True)
class ActivityMaster:
    engagement: str
    activity_id: str
    activity: str
    budget_hours: float


@dataclass(slots=True)
class UserRecord:
    user_id: str
    email: str
    password: str
    role: str
    user_name: str
    engagements: list[str] = field(default_factory=list)
    can_export_all: bool = False
    can_view_report: bool = False
    can_view_user_report: bool = False
    can_view_dashboard: bool = False
    row_number: int = 0


@dataclass(slots=True)
class Engagement:
    name: str
    color: str


@dataclass(slots=True)
class Location:
    value: str
    label: str


@dataclass(slots=True)
class AggregatedRow:
    """Per-entry budget-vs-actual figures; computed per request, never stored."""

    user_id: str
    user_name: str
    engagement: str
    activity: str
    activity_id: str
    month: str
    budget_hours: float
    budget_centi: int
    actual_minutes: int
    actual_centi: int

    @property
    def actual_hours(self) -> float:
        return self.actual_centi / 100
