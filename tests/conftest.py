from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from timesheet.db.dependencies import get_read_store, get_write_store
from timesheet.db.row_store import MemoryRowStore
from timesheet.main import create_app
from timesheet.repositories.sheet_repository import SHEET_HEADERS

TIMESHEET_ROWS = [
    ["1", "2025-05-01 09:00:00", "u1", "Alice", "2025-05-01T00:00:00Z", "2025-05-01T01:30:00Z", "Acme", "Coding", "Office", "Sprint work"],
    ["2", "2025-05-02 09:00:00", "u1", "Alice", "2025-05-02T00:00:00Z", "2025-05-02T00:20:00Z", "Acme", "Review", "Remote", ""],
    ["3", "2025-06-03 18:00:00", "u2", "Bob", "2025-06-03T09:00:00Z", "2025-06-03T11:00:00Z", "Globex", "Design", "Office", "Mockups"],
    ["4", "2025-05-04 19:00:00", "u2", "Bob", "not a date", "2025-05-04T10:00:00Z", "Acme", "Coding", "", ""],
]

USER_ROWS = [
    ["u1", "alice@example.com", "secret", "admin", "Alice", "Globex, Acme", "TRUE", "TRUE", "FALSE", "true"],
    ["u2", "bob@example.com", "hunter2", "", "Bob", "Globex", "FALSE", "FALSE", "FALSE", "FALSE"],
]

ACTIVITY_ROWS = [
    ["Acme", "A1", "Coding", "10"],
    ["Acme", "A2", "Review", "2.5"],
    ["Globex", "G10", "Design", "4"],
]

ENGAGEMENT_ROWS = [["Acme", "#ff0000"], ["Globex", ""], ["Initech", "#00ff00"]]

LOCATION_ROWS = [["Office"], ["Remote"]]


def seed_tabs() -> dict[str, list[list[str]]]:
    data = {
        "TimeSheet": TIMESHEET_ROWS,
        "Users": USER_ROWS,
        "Activities": ACTIVITY_ROWS,
        "Engagements": ENGAGEMENT_ROWS,
        "Locations": LOCATION_ROWS,
    }
    return {tab: [list(SHEET_HEADERS[tab]), *(list(row) for row in rows)] for tab, rows in data.items()}


@pytest.fixture()
def store() -> MemoryRowStore:
    return MemoryRowStore(seed_tabs())


@pytest.fixture()
def client(store: MemoryRowStore) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_store() -> MemoryRowStore:
        return store

    app.dependency_overrides[get_read_store] = override_store
    app.dependency_overrides[get_write_store] = override_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
