"""Domain exceptions raised below the HTTP layer.

Entity lookups that fail inside services raise ``HTTPException`` directly;
the classes here cover failures that originate in configuration, the sheet
layout or the external row store, and are converted to JSON responses by the
handlers registered in ``timesheet.main``.
"""

from __future__ import annotations


class TimesheetError(Exception):
    """Base class for application errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(TimesheetError):
    """Required environment configuration is missing or invalid."""


class SheetSchemaError(ConfigurationError):
    """A sheet no longer has the columns the application expects."""

    def __init__(self, tab: str, missing: list[str]) -> None:
        self.tab = tab
        self.missing = list(missing)
        super().__init__(f"Sheet '{tab}' is missing required columns: {', '.join(self.missing)}")


class NoDataError(TimesheetError):
    """The requested range holds no data rows beyond its header."""

    status_code = 404

    def __init__(self, tab: str) -> None:
        self.tab = tab
        super().__init__(f"No data found in sheet '{tab}'.")


class RowStoreError(TimesheetError):
    """The external row store call failed or returned malformed data."""
