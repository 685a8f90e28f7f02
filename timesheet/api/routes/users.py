"""Per-user engagement, role and capability lookups."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from timesheet.core.config import Settings, get_settings
from timesheet.db.dependencies import get_read_store
from timesheet.db.row_store import RowStore
from timesheet.services.timesheet_service import TimesheetService
from timesheet.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}/engagements")
def list_user_engagements(
    user_id: str,
    store: RowStore = Depends(get_read_store),
    settings: Settings = Depends(get_settings),
) -> dict[str, list[object]]:
    service = TimesheetService(store, settings)
    items = service.list_user_engagements(user_id)
    return {"items": [service.serialize_engagement(engagement) for engagement in items]}


@router.get("/{user_id}/role")
def get_user_role(user_id: str, store: RowStore = Depends(get_read_store)) -> dict[str, str]:
    return {"user_id": user_id, "role": UserService(store).get_role(user_id)}


@router.get("/{user_id}/permissions")
def get_user_permissions(user_id: str, store: RowStore = Depends(get_read_store)) -> dict[str, object]:
    service = UserService(store)
    return {"user_id": user_id, **service.serialize_permissions(service.get_permissions(user_id))}
