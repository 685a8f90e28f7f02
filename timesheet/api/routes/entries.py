"""Time entry endpoints backing the calendar view."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from timesheet.core.config import Settings, get_settings
from timesheet.db.dependencies import get_read_store, get_write_store
from timesheet.db.row_store import RowStore
from timesheet.services.timesheet_service import EntryCreateData, EntryUpdateData, TimesheetService

router = APIRouter(prefix="/entries", tags=["entries"])


class EntryCreatePayload(BaseModel):
    user_id: str = Field(min_length=1)
    start: str = Field(min_length=1)
    end: str = Field(min_length=1)
    engagement: str = Field(min_length=1)
    activity: str = Field(min_length=1)
    location: str = ""
    details: str = ""


class EntryUpdatePayload(BaseModel):
    start: str | None = Field(default=None, min_length=1)
    end: str | None = Field(default=None, min_length=1)
    engagement: str | None = Field(default=None, min_length=1)
    activity: str | None = Field(default=None, min_length=1)
    location: str | None = None
    details: str | None = None


def _service(store: RowStore, settings: Settings) -> TimesheetService:
    return TimesheetService(store, settings)


@router.get("")
def list_entries(
    user_id: str | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
    store: RowStore = Depends(get_read_store),
    settings: Settings = Depends(get_settings),
) -> dict[str, list[object]]:
    service = _service(store, settings)
    items = service.list_entries(user_id=user_id, from_date=from_date, to_date=to_date)
    return {"items": [service.serialize_entry(entry) for entry in items]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_entry(
    payload: EntryCreatePayload,
    store: RowStore = Depends(get_write_store),
    settings: Settings = Depends(get_settings),
) -> dict[str, object]:
    service = _service(store, settings)
    entry = service.create_entry(
        EntryCreateData(
            user_id=payload.user_id,
            start=payload.start,
            end=payload.end,
            engagement=payload.engagement,
            activity=payload.activity,
            location=payload.location,
            details=payload.details,
        )
    )
    return service.serialize_entry(entry)


@router.put("/{entry_id}")
def update_entry(
    entry_id: str,
    payload: EntryUpdatePayload,
    store: RowStore = Depends(get_write_store),
    settings: Settings = Depends(get_settings),
) -> dict[str, object]:
    service = _service(store, settings)
    entry = service.update_entry(
        entry_id,
        EntryUpdateData(
            start=payload.start,
            end=payload.end,
            engagement=payload.engagement,
            activity=payload.activity,
            location=payload.location,
            details=payload.details,
        ),
    )
    return service.serialize_entry(entry)


@router.post("/{entry_id}/duplicate", status_code=status.HTTP_201_CREATED)
def duplicate_entry(
    entry_id: str,
    store: RowStore = Depends(get_write_store),
    settings: Settings = Depends(get_settings),
) -> dict[str, object]:
    service = _service(store, settings)
    return service.serialize_entry(service.duplicate_entry(entry_id))


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(
    entry_id: str,
    store: RowStore = Depends(get_write_store),
    settings: Settings = Depends(get_settings),
) -> Response:
    _service(store, settings).delete_entry(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
