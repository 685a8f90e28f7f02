"""Export endpoint for timesheet entries."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from timesheet.db.dependencies import get_read_store
from timesheet.db.row_store import RowStore
from timesheet.services.reporting_service import ReportingService

router = APIRouter(prefix="/exports", tags=["exports"])


@router.get("/entries")
def export_entries(
    start_date: date = Query(...),
    end_date: date = Query(...),
    format: str = Query(default="csv"),
    user_id: str | None = Query(default=None),
    store: RowStore = Depends(get_read_store),
) -> Response:
    exported = ReportingService(store).export_entries(
        format_name=format,
        start_date=start_date,
        end_date=end_date,
        user_id=user_id,
    )
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
