"""Login, password change and per-user capability lookups."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from timesheet.core.security import hash_password, verify_password
from timesheet.db.row_store import RowStore
from timesheet.models.entities import UserRecord
from timesheet.repositories.sheet_repository import (
    USER_AUTH_COLUMNS,
    USER_PERMISSION_COLUMNS,
    USER_ROLE_COLUMNS,
    SheetRepository,
)

log = logging.getLogger(__name__)


class UserService:
    def __init__(self, store: RowStore) -> None:
        self.repo = SheetRepository(store)

    @staticmethod
    def serialize_permissions(user: UserRecord) -> dict[str, bool]:
        return {
            "can_export_all": user.can_export_all,
            "can_view_report": user.can_view_report,
            "can_view_user_report": user.can_view_user_report,
            "can_view_dashboard": user.can_view_dashboard,
        }

    def authenticate(self, *, email: str, password: str) -> str:
        """Return the user id whose email and password both match."""

        for user in self.repo.list_users(USER_AUTH_COLUMNS):
            if user.email == email and verify_password(password, user.password):
                log.info("User %s signed in", user.user_id)
                return user.user_id
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    def change_password(self, *, user_id: str, current_password: str, new_password: str) -> None:
        if not user_id or not current_password or not new_password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="user_id, current_password and new_password are required.",
            )

        user = self.repo.get_user(user_id, USER_AUTH_COLUMNS)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
        if not verify_password(current_password, user.password):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Current password is incorrect.")

        self.repo.set_user_password(user_id, hash_password(new_password))
        log.info("Password changed for user %s", user_id)

    def get_role(self, user_id: str) -> str:
        user = self.repo.get_user(user_id, USER_ROLE_COLUMNS)
        if user is None or not user.role:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
        return user.role

    def get_permissions(self, user_id: str) -> UserRecord:
        user = self.repo.get_user(user_id, USER_PERMISSION_COLUMNS)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
        return user
