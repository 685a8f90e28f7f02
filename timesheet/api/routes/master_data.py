"""Activity and location lookup lists."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from timesheet.core.config import Settings, get_settings
from timesheet.db.dependencies import get_read_store
from timesheet.db.row_store import RowStore
from timesheet.services.timesheet_service import TimesheetService

router = APIRouter(tags=["master-data"])


@router.get("/activities")
def list_activities(
    store: RowStore = Depends(get_read_store),
    settings: Settings = Depends(get_settings),
) -> dict[str, list[object]]:
    service = TimesheetService(store, settings)
    return {"items": [service.serialize_activity(activity) for activity in service.list_activities()]}


@router.get("/locations")
def list_locations(
    store: RowStore = Depends(get_read_store),
    settings: Settings = Depends(get_settings),
) -> dict[str, list[object]]:
    service = TimesheetService(store, settings)
    return {"items": [service.serialize_location(location) for location in service.list_locations()]}
