from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..domain.entities.diff import ImportMode

if TYPE_CHECKING:
    from datetime import date, datetime
    from pathlib import Path

    import pandas as pd

    from ..domain.entities.diff import DiffResult, PatientReassignment
    from ..domain.entities.records import (
        TransformedRow,
        TransformResult,
        ValidationResult,
    )
    from ..domain.services.error_reporter import ErrorReport


def _empty_str_list() -> list[str]:
    return []


def _empty_reassignments() -> list[PatientReassignment]:
    return []


def _empty_execution_errors() -> list[ExecutionError]:
    return []


@dataclass(frozen=True, slots=True)
class DueDateResult:
    due_date: date | None = None
    time_interval_days: int | None = None


@dataclass(frozen=True, slots=True)
class PatientDraft:
    member_name: str
    member_dob: str
    member_telephone: str | None = None
    member_address: str | None = None
    owner_id: int | None = None


@dataclass(frozen=True, slots=True)
class MeasureDraft:
    patient_id: int
    request_type: str
    quality_measure: str
    measure_status: str | None
    status_date: date | None
    due_date: date | None
    time_interval_days: int | None
    row_order: int
    is_duplicate: bool = False


@dataclass(frozen=True, slots=True)
class MeasureUpdate:
    measure_status: str | None
    status_date: date | None
    due_date: date | None
    time_interval_days: int | None


@dataclass(slots=True)
class PreviewEntry:
    id: str
    system_id: str
    mode: ImportMode
    diff: DiffResult
    rows: list[TransformedRow]
    validation: ValidationResult
    created_at: datetime
    expires_at: datetime
    file_name: str | None = None
    warnings: list[str] = field(default_factory=_empty_str_list)
    reassignments: list[PatientReassignment] = field(
        default_factory=_empty_reassignments
    )
    target_owner_id: int | None = None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(slots=True)
class ExecutionStats:
    inserted: int = 0
    updated: int = 0
    deleted: int = 0
    skipped: int = 0
    both_kept: int = 0


@dataclass(frozen=True, slots=True)
class ExecutionError:
    message: str
    member_name: str | None = None
    quality_measure: str | None = None
    source_row_index: int | None = None


@dataclass(slots=True)
class ExecutionResult:
    success: bool
    mode: ImportMode
    stats: ExecutionStats = field(default_factory=ExecutionStats)
    errors: list[ExecutionError] = field(default_factory=_empty_execution_errors)
    duration_ms: float = 0.0

    @property
    def has_partial_failures(self) -> bool:
        return self.success and bool(self.errors)


@dataclass(slots=True)
class PreviewRequest:
    system_id: str | None = None
    mode: ImportMode = ImportMode.MERGE
    file_path: Path | None = None
    data: pd.DataFrame | None = None
    file_name: str | None = None
    target_owner_id: int | None = None
    data_start_row: int = 2
    validate_only: bool = False


@dataclass(slots=True)
class PreviewResponse:
    success: bool
    system_id: str
    mode: ImportMode
    transform: TransformResult | None = None
    validation: ValidationResult | None = None
    report: ErrorReport | None = None
    diff: DiffResult | None = None
    preview_id: str | None = None
    expires_at: datetime | None = None
    warnings: list[str] = field(default_factory=_empty_str_list)
    reassignments: list[PatientReassignment] = field(
        default_factory=_empty_reassignments
    )


@dataclass(slots=True)
class ParsedSheet:
    headers: list[str]
    data: pd.DataFrame
    data_start_row: int = 2
