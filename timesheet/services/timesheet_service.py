"""Application service for time entries and master data."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import HTTPException, status

from timesheet.core.config import Settings
from timesheet.core.errors import ConfigurationError, NoDataError
from timesheet.db.row_store import RowStore
from timesheet.models.entities import ActivityMaster, Engagement, Location, TimeEntry
from timesheet.repositories.sheet_repository import (
    ENGAGEMENTS_TAB,
    LOCATIONS_TAB,
    USER_ENGAGEMENT_COLUMNS,
    USER_NAME_COLUMNS,
    SheetRepository,
)
from timesheet.services.aggregation import parse_timestamp

log = logging.getLogger(__name__)

UNKNOWN_USER_NAME = "Unknown"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(slots=True)
class EntryCreateData:
    user_id: str
    start: str
    end: str
    engagement: str
    activity: str
    location: str = ""
    details: str = ""


@dataclass(slots=True)
class EntryUpdateData:
    start: str | None = None
    end: str | None = None
    engagement: str | None = None
    activity: str | None = None
    location: str | None = None
    details: str | None = None


class TimesheetService:
    """Service implementing calendar entry maintenance and lookup lists."""

    def __init__(self, store: RowStore, settings: Settings) -> None:
        self.repo = SheetRepository(store)
        self.settings = settings

    # ---------- Serialization ----------
    @staticmethod
    def serialize_entry(entry: TimeEntry) -> dict[str, object]:
        return {
            "id": entry.id,
            "created_at": entry.created_at,
            "user_id": entry.user_id,
            "user_name": entry.user_name,
            "start": entry.start,
            "end": entry.end,
            "engagement": entry.engagement,
            "activity": entry.activity,
            "location": entry.location,
            "details": entry.details,
        }

    @staticmethod
    def serialize_activity(activity: ActivityMaster) -> dict[str, object]:
        return {
            "engagement": activity.engagement,
            "activity_id": activity.activity_id,
            "activity": activity.activity,
            "budget": activity.budget_hours,
        }

    @staticmethod
    def serialize_location(location: Location) -> dict[str, object]:
        return {"value": location.value, "label": location.label}

    @staticmethod
    def serialize_engagement(engagement: Engagement) -> dict[str, object]:
        return {"name": engagement.name, "color": engagement.color}

    # ---------- Helpers ----------
    def _now_text(self) -> str:
        try:
            zone = ZoneInfo(self.settings.entry_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigurationError(f"Unknown ENTRY_TIMEZONE: {self.settings.entry_timezone}") from exc
        return datetime.now(tz=zone).strftime(TIMESTAMP_FORMAT)

    def _user_name(self, user_id: str) -> str:
        user = self.repo.get_user(user_id, USER_NAME_COLUMNS)
        if user is None or not user.user_name:
            return UNKNOWN_USER_NAME
        return user.user_name

    def _require_entry(self, entry_id: str) -> TimeEntry:
        entry = self.repo.get_entry(entry_id)
        if entry is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found.")
        return entry

    # ---------- Entries ----------
    def list_entries(
        self,
        *,
        user_id: str | None = None,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> list[TimeEntry]:
        if from_date and to_date and to_date < from_date:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="to_date must be greater than or equal to from_date.",
            )

        items: list[TimeEntry] = []
        for entry in self.repo.list_entries():
            if user_id and entry.user_id != user_id:
                continue
            if from_date or to_date:
                start = parse_timestamp(entry.start)
                if start is None:
                    continue
                if from_date and start.date() < from_date:
                    continue
                if to_date and start.date() > to_date:
                    continue
            items.append(entry)
        return items

    def _insert(self, data: EntryCreateData, user_name: str) -> TimeEntry:
        entry = self.repo.insert_entry(
            TimeEntry(
                id="",
                created_at=self._now_text(),
                user_id=data.user_id,
                user_name=user_name,
                start=data.start,
                end=data.end,
                engagement=data.engagement,
                activity=data.activity,
                location=data.location,
                details=data.details,
            )
        )
        log.info("Created entry %s for user %s", entry.id, entry.user_id)
        return entry

    def create_entry(self, data: EntryCreateData) -> TimeEntry:
        return self._insert(data, self._user_name(data.user_id))

    def update_entry(self, entry_id: str, data: EntryUpdateData) -> TimeEntry:
        changes = {
            column: value
            for column, value in (
                ("Start", data.start),
                ("End", data.end),
                ("Engagement", data.engagement),
                ("Activity", data.activity),
                ("Location", data.location),
                ("Details", data.details),
            )
            if value is not None
        }
        updated = self.repo.update_entry(entry_id, changes)
        if updated is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found.")
        log.info("Updated entry %s (%s)", entry_id, ", ".join(sorted(changes)) or "no changes")
        return updated

    def duplicate_entry(self, entry_id: str) -> TimeEntry:
        source = self._require_entry(entry_id)
        return self._insert(
            EntryCreateData(
                user_id=source.user_id,
                start=source.start,
                end=source.end,
                engagement=source.engagement,
                activity=source.activity,
                location=source.location,
                details=source.details,
            ),
            source.user_name or UNKNOWN_USER_NAME,
        )

    def delete_entry(self, entry_id: str) -> TimeEntry:
        deleted = self.repo.delete_entry(entry_id)
        if deleted is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found.")
        log.info("Deleted entry %s (sheet row %s)", entry_id, deleted.row_number)
        return deleted

    # ---------- Master data ----------
    def list_activities(self) -> list[ActivityMaster]:
        return self.repo.list_activities()

    def list_locations(self) -> list[Location]:
        items = self.repo.list_locations()
        if not items:
            raise NoDataError(LOCATIONS_TAB)
        return items

    def list_user_engagements(self, user_id: str) -> list[Engagement]:
        """Engagements the user may book time on, in ``Engagements`` sheet order."""

        user = self.repo.get_user(user_id, USER_ENGAGEMENT_COLUMNS)
        if user is None:
            log.debug("No user %s in %s lookup; returning no engagements", user_id, ENGAGEMENTS_TAB)
            return []
        permitted = set(user.engagements)
        return [engagement for engagement in self.repo.list_engagements() if engagement.name in permitted]
