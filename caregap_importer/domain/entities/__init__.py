"""Domain entities for the care-gap import pipeline."""

from .column_mapping import (
    ColumnRole,
    MappedColumn,
    MappingResult,
    MappingStats,
    MeasureGroup,
    MeasureRole,
)
from .diff import (
    DiffAction,
    DiffChange,
    DiffResult,
    DiffSummary,
    ImportMode,
    PatientReassignment,
)
from .records import (
    DuplicateGroup,
    ExistingRecord,
    PatientWithNoMeasures,
    Severity,
    TransformedRow,
    TransformError,
    TransformResult,
    TransformStats,
    ValidationIssue,
    ValidationResult,
    ValidationStats,
)
from .system_config import (
    MeasureColumn,
    StatusMapping,
    SystemConfig,
    SystemEntry,
    SystemInfo,
    SystemsRegistry,
)

__all__ = [
    "ColumnRole",
    "DiffAction",
    "DiffChange",
    "DiffResult",
    "DiffSummary",
    "DuplicateGroup",
    "ExistingRecord",
    "ImportMode",
    "MappedColumn",
    "MappingResult",
    "MappingStats",
    "MeasureColumn",
    "MeasureGroup",
    "MeasureRole",
    "PatientReassignment",
    "PatientWithNoMeasures",
    "Severity",
    "StatusMapping",
    "SystemConfig",
    "SystemEntry",
    "SystemInfo",
    "SystemsRegistry",
    "TransformError",
    "TransformResult",
    "TransformStats",
    "TransformedRow",
    "ValidationIssue",
    "ValidationResult",
    "ValidationStats",
]
