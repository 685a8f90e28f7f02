"""Repository helpers for the timesheet spreadsheet tabs."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping

from timesheet.core.columns import ColumnMap
from timesheet.core.errors import NoDataError
from timesheet.db.row_store import Row, RowStore
from timesheet.models.entities import ActivityMaster, Engagement, Location, TimeEntry, UserRecord

TIMESHEET_TAB = "TimeSheet"
USERS_TAB = "Users"
ACTIVITIES_TAB = "Activities"
ENGAGEMENTS_TAB = "Engagements"
LOCATIONS_TAB = "Locations"

SHEET_HEADERS: dict[str, tuple[str, ...]] = {
    TIMESHEET_TAB: (
        "DataID",
        "Timestamp",
        "UserID",
        "User_Name",
        "Start",
        "End",
        "Engagement",
        "Activity",
        "Location",
        "Details",
    ),
    USERS_TAB: (
        "UserID",
        "Email",
        "Password",
        "UserRole",
        "User_Name",
        "Engagements",
        "ExportAll",
        "ViewReport",
        "ViewUserReport",
        "ViewDashboard",
    ),
    ACTIVITIES_TAB: ("Engagement", "Activity_ID", "Activity", "Budget_Hours"),
    ENGAGEMENTS_TAB: ("Engagement", "Color"),
    LOCATIONS_TAB: ("Location",),
}

ENTRY_REPORT_COLUMNS = ("UserID", "User_Name", "Engagement", "Activity", "Start", "End")
ENTRY_SUMMARY_COLUMNS = ("User_Name", "Start", "End")

USER_AUTH_COLUMNS = ("UserID", "Email", "Password")
USER_ROLE_COLUMNS = ("UserID", "UserRole")
USER_NAME_COLUMNS = ("UserID", "User_Name")
USER_ENGAGEMENT_COLUMNS = ("UserID", "Engagements")
USER_PERMISSION_COLUMNS = ("UserID", "ExportAll", "ViewReport", "ViewUserReport", "ViewDashboard")

DEFAULT_ENGAGEMENT_COLOR = "#3788d8"


def _as_flag(value: str) -> bool:
    return value.strip().upper() == "TRUE"


def _as_hours(value: str) -> float:
    try:
        hours = float(value.strip())
    except ValueError:
        return 0.0
    return hours if math.isfinite(hours) else 0.0


def _is_blank(row: Row) -> bool:
    return not any(str(cell).strip() for cell in row)


class SheetRepository:
    """Typed reads and positional writes over the spreadsheet tabs."""

    def __init__(self, store: RowStore) -> None:
        self.store = store

    def _read(
        self,
        tab: str,
        required: Iterable[str],
        *,
        require_data: bool = False,
    ) -> tuple[ColumnMap, list[tuple[int, Row]]]:
        values = self.store.get_values(tab)
        if require_data and len(values) < 2:
            raise NoDataError(tab)
        required = tuple(required)
        optional = [name for name in SHEET_HEADERS.get(tab, ()) if name not in required]
        columns = ColumnMap.from_header(tab, values[0] if values else [], required, optional)
        rows = [(index + 1, row) for index, row in enumerate(values) if index > 0 and not _is_blank(row)]
        return columns, rows

    # ---------- Time entries ----------
    @staticmethod
    def _entry_from_row(columns: ColumnMap, row_number: int, row: Row) -> TimeEntry:
        return TimeEntry(
            id=columns.get(row, "DataID"),
            created_at=columns.get(row, "Timestamp"),
            user_id=columns.get(row, "UserID"),
            user_name=columns.get(row, "User_Name"),
            start=columns.get(row, "Start"),
            end=columns.get(row, "End"),
            engagement=columns.get(row, "Engagement"),
            activity=columns.get(row, "Activity"),
            location=columns.get(row, "Location"),
            details=columns.get(row, "Details"),
            row_number=row_number,
        )

    @staticmethod
    def _entry_values(entry: TimeEntry) -> dict[str, str]:
        return {
            "DataID": entry.id,
            "Timestamp": entry.created_at,
            "UserID": entry.user_id,
            "User_Name": entry.user_name,
            "Start": entry.start,
            "End": entry.end,
            "Engagement": entry.engagement,
            "Activity": entry.activity,
            "Location": entry.location,
            "Details": entry.details,
        }

    def list_entries(
        self,
        required: Iterable[str] = SHEET_HEADERS[TIMESHEET_TAB],
        *,
        require_data: bool = False,
    ) -> list[TimeEntry]:
        columns, rows = self._read(TIMESHEET_TAB, required, require_data=require_data)
        return [self._entry_from_row(columns, row_number, row) for row_number, row in rows]

    def raw_entry_rows(self) -> tuple[ColumnMap, list[Row]]:
        """Resolved ``TimeSheet`` layout plus raw data rows, for exports that keep sheet column order."""

        columns, rows = self._read(
            TIMESHEET_TAB,
            ("DataID", "Timestamp", "UserID", "Start", "End"),
            require_data=True,
        )
        return columns, [row for _, row in rows]

    def get_entry(self, entry_id: str) -> TimeEntry | None:
        for entry in self.list_entries():
            if entry.id == entry_id:
                return entry
        return None

    @staticmethod
    def _next_entry_id(columns: ColumnMap, rows: list[tuple[int, Row]]) -> str:
        ids: list[int] = []
        for _, row in rows:
            try:
                ids.append(int(columns.get(row, "DataID").strip()))
            except ValueError:
                continue
        return str(max(ids) + 1) if ids else "1"

    def insert_entry(self, entry: TimeEntry) -> TimeEntry:
        """Append ``entry`` under the next free numeric ``DataID``; one read and one write."""

        columns, rows = self._read(TIMESHEET_TAB, SHEET_HEADERS[TIMESHEET_TAB])
        entry.id = self._next_entry_id(columns, rows)
        self.store.append_row(TIMESHEET_TAB, columns.build_row(self._entry_values(entry)))
        return entry

    def update_entry(self, entry_id: str, changes: Mapping[str, str]) -> TimeEntry | None:
        """Overwrite ``changes`` on the first row whose ``DataID`` equals ``entry_id``."""

        columns, rows = self._read(TIMESHEET_TAB, SHEET_HEADERS[TIMESHEET_TAB])
        for row_number, row in rows:
            if columns.get(row, "DataID") != entry_id:
                continue
            self.store.update_cells(TIMESHEET_TAB, row_number, columns.cells(changes))
            return self._entry_from_row(columns, row_number, columns.build_row(changes, base=row))
        return None

    def delete_entry(self, entry_id: str) -> TimeEntry | None:
        columns, rows = self._read(TIMESHEET_TAB, ("DataID",))
        for row_number, row in rows:
            if columns.get(row, "DataID") != entry_id:
                continue
            entry = self._entry_from_row(columns, row_number, row)
            self.store.delete_row(TIMESHEET_TAB, row_number)
            return entry
        return None

    # ---------- Master data ----------
    def list_activities(self, *, require_data: bool = True) -> list[ActivityMaster]:
        columns, rows = self._read(ACTIVITIES_TAB, SHEET_HEADERS[ACTIVITIES_TAB], require_data=require_data)
        return [
            ActivityMaster(
                engagement=columns.get(row, "Engagement"),
                activity_id=columns.get(row, "Activity_ID"),
                activity=columns.get(row, "Activity"),
                budget_hours=_as_hours(columns.get(row, "Budget_Hours")),
            )
            for _, row in rows
        ]

    def list_locations(self) -> list[Location]:
        columns, rows = self._read(LOCATIONS_TAB, SHEET_HEADERS[LOCATIONS_TAB], require_data=True)
        items: list[Location] = []
        for _, row in rows:
            name = columns.get(row, "Location")
            if name:
                items.append(Location(value=name, label=name))
        return items

    def list_engagements(self) -> list[Engagement]:
        columns, rows = self._read(ENGAGEMENTS_TAB, ("Engagement",))
        items: list[Engagement] = []
        for _, row in rows:
            name = columns.get(row, "Engagement")
            if not name:
                continue
            items.append(Engagement(name=name, color=columns.get(row, "Color") or DEFAULT_ENGAGEMENT_COLOR))
        return items

    # ---------- Users ----------
    @staticmethod
    def _user_from_row(columns: ColumnMap, row_number: int, row: Row) -> UserRecord:
        engagements = [part.strip() for part in columns.get(row, "Engagements").split(",") if part.strip()]
        return UserRecord(
            user_id=columns.get(row, "UserID"),
            email=columns.get(row, "Email"),
            password=columns.get(row, "Password"),
            role=columns.get(row, "UserRole"),
            user_name=columns.get(row, "User_Name"),
            engagements=engagements,
            can_export_all=_as_flag(columns.get(row, "ExportAll")),
            can_view_report=_as_flag(columns.get(row, "ViewReport")),
            can_view_user_report=_as_flag(columns.get(row, "ViewUserReport")),
            can_view_dashboard=_as_flag(columns.get(row, "ViewDashboard")),
            row_number=row_number,
        )

    def list_users(self, required: Iterable[str] = ("UserID",)) -> list[UserRecord]:
        columns, rows = self._read(USERS_TAB, required)
        return [self._user_from_row(columns, row_number, row) for row_number, row in rows]

    def get_user(self, user_id: str, required: Iterable[str] = ("UserID",)) -> UserRecord | None:
        for user in self.list_users(required):
            if user.user_id == user_id:
                return user
        return None

    def set_user_password(self, user_id: str, stored_value: str) -> bool:
        columns, rows = self._read(USERS_TAB, USER_AUTH_COLUMNS)
        for row_number, row in rows:
            if columns.get(row, "UserID") != user_id:
                continue
            self.store.update_cells(USERS_TAB, row_number, columns.cells({"Password": stored_value}))
            return True
        return False
