"""Row store dependencies for FastAPI endpoints."""

from functools import lru_cache

from fastapi import Depends

from timesheet.core.config import Settings, get_settings
from timesheet.db.row_store import GoogleSheetsRowStore, MemoryRowStore, RowStore
from timesheet.repositories.sheet_repository import SHEET_HEADERS


@lru_cache
def _memory_store() -> MemoryRowStore:
    return MemoryRowStore({tab: [list(headers)] for tab, headers in SHEET_HEADERS.items()})


def build_row_store(settings: Settings, *, writable: bool) -> RowStore:
    """Construct the configured row store with read-only or read-write scope."""

    backend = settings.row_store_backend.strip().lower()
    if backend in {"memory", "inmemory"}:
        return _memory_store()
    return GoogleSheetsRowStore(settings, writable=writable)


def get_read_store(settings: Settings = Depends(get_settings)) -> RowStore:
    """Yield a row store authorized for reads only."""

    return build_row_store(settings, writable=False)


def get_write_store(settings: Settings = Depends(get_settings)) -> RowStore:
    """Yield a row store authorized for reads and writes."""

    return build_row_store(settings, writable=True)
