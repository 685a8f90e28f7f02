"""Budget-vs-actual reporting and timesheet export service layer."""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from datetime import date

from fastapi import HTTPException, status

from timesheet.db.row_store import RowStore
from timesheet.models.entities import AggregatedRow
from timesheet.repositories.sheet_repository import (
    ENTRY_REPORT_COLUMNS,
    ENTRY_SUMMARY_COLUMNS,
    SheetRepository,
)
from timesheet.services.aggregation import (
    ActivitySummary,
    HoursTotal,
    aggregate_entries,
    elapsed_quarter_hours,
    group_by_activity,
    monthly_user_summary,
    parse_timestamp,
    summarize_rows,
)

log = logging.getLogger(__name__)

EXPORT_FORMATS = {"csv", "xlsx"}
# Sheet columns left out of exported files.
EXPORT_EXCLUDED_COLUMNS = {"Timestamp"}
EXPORT_DATE_COLUMN = "Date"
EXPORT_HOURS_COLUMN = "Hours"


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


def _serialize_total(total: HoursTotal) -> dict[str, object]:
    return {
        "budget_hours": total.budget_hours,
        "budget_centi": total.budget_centi,
        "actual_minutes": total.actual_minutes,
        "actual_hours": total.actual_hours,
        "actual_centi": total.actual_centi,
        "variance_centi": total.variance_centi,
    }


class ReportingService:
    """Service implementing budget-vs-actual, monthly summary and export contracts."""

    def __init__(self, store: RowStore) -> None:
        self.repo = SheetRepository(store)

    # ---------- Serialization ----------
    @staticmethod
    def serialize_row(row: AggregatedRow) -> dict[str, object]:
        return {
            "user_id": row.user_id,
            "user_name": row.user_name,
            "engagement": row.engagement,
            "activity": row.activity,
            "activity_id": row.activity_id,
            "month": row.month,
            "budget_hours": row.budget_hours,
            "budget_centi": row.budget_centi,
            "actual_minutes": row.actual_minutes,
            "actual_hours": row.actual_hours,
            "actual_centi": row.actual_centi,
        }

    @staticmethod
    def serialize_activity_summary(summary: ActivitySummary) -> dict[str, object]:
        return {
            "engagement": summary.engagement,
            "activity_id": summary.activity_id,
            "activity": summary.activity,
            **_serialize_total(summary.total),
        }

    # ---------- Reports ----------
    def _aggregated_rows(
        self,
        *,
        engagement: str | None,
        month: str | None,
        user_id: str | None,
    ) -> list[AggregatedRow]:
        entries = self.repo.list_entries(ENTRY_REPORT_COLUMNS, require_data=True)
        activities = self.repo.list_activities(require_data=False)
        rows = aggregate_entries(entries, activities)
        return [
            row
            for row in rows
            if (not engagement or row.engagement == engagement)
            and (not month or row.month == month)
            and (not user_id or row.user_id == user_id)
        ]

    def _budget_report(
        self,
        *,
        report_key: str,
        engagement: str | None,
        month: str | None,
        user_id: str | None,
    ) -> dict[str, object]:
        rows = self._aggregated_rows(engagement=engagement, month=month, user_id=user_id)
        return {
            "report_key": report_key,
            "filters": {"engagement": engagement, "month": month, "user_id": user_id},
            "rows": [self.serialize_row(row) for row in rows],
            "activities": [self.serialize_activity_summary(group) for group in group_by_activity(rows)],
            "totals": _serialize_total(summarize_rows(rows)),
        }

    def budget_actuals(
        self,
        *,
        engagement: str | None = None,
        month: str | None = None,
        user_id: str | None = None,
    ) -> dict[str, object]:
        return self._budget_report(
            report_key="budget-actuals",
            engagement=engagement,
            month=month,
            user_id=user_id,
        )

    def user_budget_actuals(
        self,
        *,
        user_id: str,
        engagement: str | None = None,
        month: str | None = None,
    ) -> dict[str, object]:
        return self._budget_report(
            report_key="user-budget-actuals",
            engagement=engagement,
            month=month,
            user_id=user_id,
        )

    def monthly_summary(self, *, month: str | None = None) -> dict[str, object]:
        entries = self.repo.list_entries(ENTRY_SUMMARY_COLUMNS)
        buckets = [bucket for bucket in monthly_user_summary(entries) if not month or bucket.month == month]
        return {
            "report_key": "monthly-summary",
            "rows": [
                {
                    "user_name": bucket.user_name,
                    "month": bucket.month,
                    "total_minutes": bucket.total.actual_minutes,
                    "total_hours": bucket.total.actual_hours,
                }
                for bucket in buckets
            ],
        }

    # ---------- Exports ----------
    def _export_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        user_id: str | None,
    ) -> tuple[list[str], list[list[str]]]:
        columns, raw_rows = self.repo.raw_entry_rows()
        kept = [index for index, header in enumerate(columns.headers) if header not in EXPORT_EXCLUDED_COLUMNS]
        headers = [columns.headers[index] for index in kept] + [EXPORT_DATE_COLUMN, EXPORT_HOURS_COLUMN]

        records: list[list[str]] = []
        skipped = 0
        for row in raw_rows:
            if user_id and columns.get(row, "UserID") != user_id:
                continue
            start = parse_timestamp(columns.get(row, "Start"))
            end = parse_timestamp(columns.get(row, "End"))
            if start is None or end is None:
                skipped += 1
                continue
            if start.date() < start_date or end.date() > end_date:
                continue
            record = [str(row[index]) if index < len(row) else "" for index in kept]
            record.append(start.date().isoformat())
            record.append(f"{elapsed_quarter_hours(start, end):.2f}")
            records.append(record)

        if skipped:
            log.warning("Export skipped %d entries with unparseable start/end", skipped)
        return headers, records

    def export_entries(
        self,
        *,
        format_name: str,
        start_date: date,
        end_date: date,
        user_id: str | None = None,
    ) -> ExportFilePayload:
        normalized_format = format_name.strip().lower()
        if normalized_format not in EXPORT_FORMATS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="format must be one of: csv, xlsx.",
            )
        if end_date < start_date:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="end_date must be greater than or equal to start_date.",
            )

        headers, records = self._export_rows(start_date=start_date, end_date=end_date, user_id=user_id)
        if not records:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No entries found for the requested period.",
            )

        base_filename = f"export_{start_date.isoformat()}_{end_date.isoformat()}"
        log.info("Exporting %d entries as %s (%s)", len(records), normalized_format, base_filename)
        if normalized_format == "csv":
            sio = io.StringIO()
            writer = csv.writer(sio, quoting=csv.QUOTE_ALL, lineterminator="\n")
            writer.writerow(headers)
            writer.writerows(records)
            return ExportFilePayload(
                media_type="text/csv; charset=utf-8",
                filename=f"{base_filename}.csv",
                content=sio.getvalue().encode("utf-8-sig"),
            )

        # XLSX
        from openpyxl import Workbook

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "timesheet"
        sheet.append(headers)
        for record in records:
            sheet.append(record)

        output = io.BytesIO()
        workbook.save(output)
        return ExportFilePayload(
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            filename=f"{base_filename}.xlsx",
            content=output.getvalue(),
        )
