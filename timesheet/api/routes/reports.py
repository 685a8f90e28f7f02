"""Budget-vs-actual and monthly hours reporting endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from timesheet.db.dependencies import get_read_store
from timesheet.db.row_store import RowStore
from timesheet.services.reporting_service import ReportingService

router = APIRouter(prefix="/reports", tags=["reports"])

MONTH_PATTERN = r"^\d{4}-\d{2}$"


def _service(store: RowStore) -> ReportingService:
    return ReportingService(store)


@router.get("/budget-actuals")
def report_budget_actuals(
    engagement: str | None = None,
    month: str | None = Query(default=None, pattern=MONTH_PATTERN),
    user_id: str | None = None,
    store: RowStore = Depends(get_read_store),
) -> dict[str, object]:
    return _service(store).budget_actuals(engagement=engagement, month=month, user_id=user_id)


@router.get("/users/{user_id}/budget-actuals")
def report_user_budget_actuals(
    user_id: str,
    engagement: str | None = None,
    month: str | None = Query(default=None, pattern=MONTH_PATTERN),
    store: RowStore = Depends(get_read_store),
) -> dict[str, object]:
    return _service(store).user_budget_actuals(user_id=user_id, engagement=engagement, month=month)


@router.get("/monthly-summary")
def report_monthly_summary(
    month: str | None = Query(default=None, pattern=MONTH_PATTERN),
    store: RowStore = Depends(get_read_store),
) -> dict[str, object]:
    return _service(store).monthly_summary(month=month)
