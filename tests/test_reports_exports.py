import csv
import io

from fastapi.testclient import TestClient
from openpyxl import load_workbook

from timesheet.db.row_store import MemoryRowStore
from timesheet.repositories.sheet_repository import SHEET_HEADERS


def test_budget_actuals_rows_and_totals(client: TestClient) -> None:
    response = client.get("/api/v1/reports/budget-actuals")

    assert response.status_code == 200
    body = response.json()
    assert body["report_key"] == "budget-actuals"
    assert [row["actual_minutes"] for row in body["rows"]] == [90, 20, 120, 0]
    assert body["rows"][0] == {
        "user_id": "u1",
        "user_name": "Alice",
        "engagement": "Acme",
        "activity": "Coding",
        "activity_id": "A1",
        "month": "2025-05",
        "budget_hours": 10.0,
        "budget_centi": 1000,
        "actual_minutes": 90,
        "actual_hours": 1.5,
        "actual_centi": 150,
    }
    assert body["rows"][3]["month"] == ""
    assert body["totals"] == {
        "budget_hours": 16.5,
        "budget_centi": 1650,
        "actual_minutes": 230,
        "actual_hours": 3.83,
        "actual_centi": 383,
        "variance_centi": -1267,
    }
    assert [group["activity_id"] for group in body["activities"]] == ["A1", "A2", "G10"]
    assert body["activities"][0]["actual_minutes"] == 90


def test_budget_actuals_filters(client: TestClient) -> None:
    may = client.get("/api/v1/reports/budget-actuals", params={"month": "2025-05"}).json()
    assert [row["actual_minutes"] for row in may["rows"]] == [90, 20]

    globex = client.get("/api/v1/reports/budget-actuals", params={"engagement": "Globex"}).json()
    assert globex["totals"]["actual_centi"] == 200

    assert client.get("/api/v1/reports/budget-actuals", params={"month": "May"}).status_code == 400


def test_user_budget_actuals_is_restricted_to_one_user(client: TestClient) -> None:
    response = client.get("/api/v1/reports/users/u2/budget-actuals")

    assert response.status_code == 200
    body = response.json()
    assert body["report_key"] == "user-budget-actuals"
    assert {row["user_id"] for row in body["rows"]} == {"u2"}
    assert body["totals"]["actual_minutes"] == 120
    assert body["totals"]["budget_centi"] == 1400


def test_budget_actuals_without_entries_is_not_found(client: TestClient, store: MemoryRowStore) -> None:
    while len(store.get_values("TimeSheet")) > 1:
        store.delete_row("TimeSheet", 2)

    response = client.get("/api/v1/reports/budget-actuals")

    assert response.status_code == 404
    assert response.json() == {"detail": "No data found in sheet 'TimeSheet'."}


def test_missing_required_column_is_a_configuration_error(client: TestClient, store: MemoryRowStore) -> None:
    store.update_cells("TimeSheet", 1, {SHEET_HEADERS["TimeSheet"].index("End"): "Finish"})

    response = client.get("/api/v1/reports/budget-actuals")

    assert response.status_code == 500
    assert response.json() == {"detail": "Sheet 'TimeSheet' is missing required columns: End"}


def test_monthly_summary(client: TestClient) -> None:
    response = client.get("/api/v1/reports/monthly-summary")

    assert response.status_code == 200
    assert response.json()["rows"] == [
        {"user_name": "Alice", "month": "2025-05", "total_minutes": 110, "total_hours": 1.83},
        {"user_name": "Bob", "month": "2025-06", "total_minutes": 120, "total_hours": 2.0},
    ]
    june = client.get("/api/v1/reports/monthly-summary", params={"month": "2025-06"}).json()
    assert [row["user_name"] for row in june["rows"]] == ["Bob"]


def test_csv_export(client: TestClient) -> None:
    response = client.get(
        "/api/v1/exports/entries",
        params={"format": "csv", "start_date": "2025-05-01", "end_date": "2025-05-31"},
    )

    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="export_2025-05-01_2025-05-31.csv"'
    assert response.content.startswith(b"\xef\xbb\xbf")
    text = response.content.decode("utf-8-sig")
    assert text.startswith('"DataID","UserID","User_Name"')
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[0] == [
        "DataID",
        "UserID",
        "User_Name",
        "Start",
        "End",
        "Engagement",
        "Activity",
        "Location",
        "Details",
        "Date",
        "Hours",
    ]
    assert [(row[0], row[-2], row[-1]) for row in rows[1:]] == [
        ("1", "2025-05-01", "1.50"),
        ("2", "2025-05-02", "0.25"),
    ]


def test_xlsx_export_for_one_user(client: TestClient) -> None:
    response = client.get(
        "/api/v1/exports/entries",
        params={"format": "xlsx", "start_date": "2025-06-01", "end_date": "2025-06-30", "user_id": "u2"},
    )

    assert response.status_code == 200
    assert response.headers["content-disposition"].endswith('filename="export_2025-06-01_2025-06-30.xlsx"')
    sheet = load_workbook(io.BytesIO(response.content)).active
    values = [list(row) for row in sheet.iter_rows(values_only=True)]
    assert values[0][-2:] == ["Date", "Hours"]
    assert len(values) == 2
    assert values[1][0] == "3"
    assert values[1][-1] == "2.00"


def test_export_failures(client: TestClient) -> None:
    empty = client.get(
        "/api/v1/exports/entries",
        params={"start_date": "2025-05-01", "end_date": "2025-05-31", "user_id": "u2"},
    )
    assert empty.status_code == 404

    bad_format = client.get(
        "/api/v1/exports/entries",
        params={"format": "pdf", "start_date": "2025-05-01", "end_date": "2025-05-31"},
    )
    assert bad_format.status_code == 400

    missing_dates = client.get("/api/v1/exports/entries", params={"format": "csv"})
    assert missing_dates.status_code == 400
