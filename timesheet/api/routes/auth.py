"""Sign-in and password change endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from timesheet.db.dependencies import get_read_store, get_write_store
from timesheet.db.row_store import RowStore
from timesheet.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginPayload(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1)


class ChangePasswordPayload(BaseModel):
    user_id: str
    current_password: str
    new_password: str


@router.post("/login")
def login(payload: LoginPayload, store: RowStore = Depends(get_read_store)) -> dict[str, object]:
    user_id = UserService(store).authenticate(email=payload.email, password=payload.password)
    return {"success": True, "user_id": user_id}


@router.post("/change-password")
def change_password(
    payload: ChangePasswordPayload,
    store: RowStore = Depends(get_write_store),
) -> dict[str, object]:
    UserService(store).change_password(
        user_id=payload.user_id,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return {"success": True}
