"""Record types package."""

from timesheet.models.entities import (
    ActivityMaster,
    AggregatedRow,
    Engagement,
    Location,
    TimeEntry,
    UserRecord,
)

__all__ = [
    "ActivityMaster",
    "AggregatedRow",
    "Engagement",
    "Location",
    "TimeEntry",
    "UserRecord",
]
