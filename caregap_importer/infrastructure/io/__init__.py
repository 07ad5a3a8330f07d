"""File input and infrastructure error types."""

from .exceptions import (
    DataParseError,
    DataSourceError,
    DataSourceNotFoundError,
    ImporterInfrastructureError,
    StoreError,
)
from .spreadsheet_reader import SpreadsheetReader, SpreadsheetReadOptions

__all__ = [
    "DataParseError",
    "DataSourceError",
    "DataSourceNotFoundError",
    "ImporterInfrastructureError",
    "SpreadsheetReadOptions",
    "SpreadsheetReader",
    "StoreError",
]
