"""Row store adapters: positional row access to spreadsheet tabs."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, Sequence

import google.auth.exceptions
import gspread
import requests
from gspread.utils import rowcol_to_a1

from timesheet.core.config import Settings
from timesheet.core.errors import ConfigurationError, RowStoreError

log = logging.getLogger(__name__)

READ_ONLY_SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]
READ_WRITE_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

# Failures raised by gspread, its HTTP transport, or the service-account token refresh.
SHEETS_ERRORS = (
    gspread.exceptions.GSpreadException,
    requests.RequestException,
    google.auth.exceptions.GoogleAuthError,
)

Row = list[str]


class RowStore:
    """Rectangular access to named tabs.

    Row numbers are 1-based sheet positions, so the header row is row 1 and
    the first data row is row 2. Column indexes passed to ``update_cells`` are
    0-based header positions.
    """

    def get_values(self, tab: str) -> list[Row]:  # pragma: no cover - interface
        raise NotImplementedError

    def append_row(self, tab: str, values: Sequence[str]) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def update_cells(self, tab: str, row_number: int, cells: Mapping[int, str]) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def delete_row(self, tab: str, row_number: int) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class MemoryRowStore(RowStore):
    """In-process tabs for tests and the ``memory`` backend.

    One instance is shared by every request of the ``memory`` backend, and sync
    endpoints run in a threadpool, so all access goes through one lock.
    """

    def __init__(self, tabs: Mapping[str, Sequence[Sequence[str]]] | None = None) -> None:
        self._lock = threading.RLock()
        self._tabs: dict[str, list[Row]] = {
            name: [[str(cell) for cell in row] for row in rows] for name, rows in (tabs or {}).items()
        }

    def _tab(self, tab: str) -> list[Row]:
        if tab not in self._tabs:
            raise RowStoreError(f"Unable to parse range: {tab}")
        return self._tabs[tab]

    def _row_in_range(self, tab: str, rows: list[Row], row_number: int) -> None:
        if row_number < 1 or row_number > len(rows):
            raise RowStoreError(f"Row {row_number} is outside of sheet '{tab}'.")

    def get_values(self, tab: str) -> list[Row]:
        with self._lock:
            return [list(row) for row in self._tab(tab)]

    def append_row(self, tab: str, values: Sequence[str]) -> None:
        with self._lock:
            self._tab(tab).append([str(v) for v in values])

    def update_cells(self, tab: str, row_number: int, cells: Mapping[int, str]) -> None:
        with self._lock:
            rows = self._tab(tab)
            self._row_in_range(tab, rows, row_number)
            row = rows[row_number - 1]
            for column, value in cells.items():
                if column >= len(row):
                    row.extend([""] * (column + 1 - len(row)))
                row[column] = str(value)

    def delete_row(self, tab: str, row_number: int) -> None:
        with self._lock:
            rows = self._tab(tab)
            self._row_in_range(tab, rows, row_number)
            del rows[row_number - 1]


class GoogleSheetsRowStore(RowStore):
    def __init__(self, settings: Settings, *, writable: bool = False) -> None:
        missing = settings.missing_sheet_settings()
        if missing:
            raise ConfigurationError(f"Missing environment configuration: {', '.join(missing)}")

        credentials = {
            "type": "service_account",
            "project_id": settings.google_project_id,
            "private_key": settings.google_private_key,
            "client_email": settings.google_client_email,
            "token_uri": "https://oauth2.googleapis.com/token",
        }
        scopes = READ_WRITE_SCOPES if writable else READ_ONLY_SCOPES
        try:
            self._client = gspread.service_account_from_dict(credentials, scopes=scopes)
            self._book = self._client.open_by_key(settings.sheet_id)
        except (*SHEETS_ERRORS, ValueError) as exc:
            raise RowStoreError(f"Failed to open spreadsheet: {exc}") from exc

    def _ws(self, tab: str):
        try:
            return self._book.worksheet(tab)
        except gspread.exceptions.WorksheetNotFound as exc:
            raise RowStoreError(f"Worksheet not found: {tab}") from exc
        except SHEETS_ERRORS as exc:
            raise RowStoreError(str(exc)) from exc

    def get_values(self, tab: str) -> list[Row]:
        try:
            values = self._ws(tab).get_all_values()
        except SHEETS_ERRORS as exc:
            raise RowStoreError(str(exc)) from exc
        return [[str(cell) for cell in row] for row in values]

    def append_row(self, tab: str, values: Sequence[str]) -> None:
        try:
            self._ws(tab).append_row([str(v) for v in values], value_input_option="USER_ENTERED")
        except SHEETS_ERRORS as exc:
            raise RowStoreError(str(exc)) from exc

    def update_cells(self, tab: str, row_number: int, cells: Mapping[int, str]) -> None:
        if not cells:
            return
        data = [
            {"range": rowcol_to_a1(row_number, column + 1), "values": [[str(value)]]}
            for column, value in sorted(cells.items())
        ]
        log.debug("Updating %s!%s", tab, ",".join(item["range"] for item in data))
        try:
            self._ws(tab).batch_update(data, value_input_option="USER_ENTERED")
        except SHEETS_ERRORS as exc:
            raise RowStoreError(str(exc)) from exc

    def delete_row(self, tab: str, row_number: int) -> None:
        try:
            self._ws(tab).delete_rows(row_number)
        except SHEETS_ERRORS as exc:
            raise RowStoreError(str(exc)) from exc
