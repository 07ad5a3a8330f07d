"""Port interfaces the application layer depends on."""

from .repositories import (
    CareGapStorePort,
    ExistingRecordSourcePort,
    PreviewCachePort,
    SpreadsheetReaderPort,
    SystemConfigRepositoryPort,
    UnitOfWorkPort,
)
from .services import DueDateCalculatorPort, LoggerPort

__all__ = [
    "CareGapStorePort",
    "DueDateCalculatorPort",
    "ExistingRecordSourcePort",
    "LoggerPort",
    "PreviewCachePort",
    "SpreadsheetReaderPort",
    "SystemConfigRepositoryPort",
    "UnitOfWorkPort",
]
