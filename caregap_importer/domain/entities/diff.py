from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class ImportMode(StrEnum):
    REPLACE = "replace"
    MERGE = "merge"


class DiffAction(StrEnum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    SKIP = "SKIP"
    BOTH = "BOTH"
    DELETE = "DELETE"


@dataclass(frozen=True, slots=True)
class DiffChange:
    action: DiffAction
    member_name: str
    member_dob: str | None
    request_type: str
    quality_measure: str
    old_status: str | None
    new_status: str | None
    reason: str
    member_telephone: str | None = None
    member_address: str | None = None
    existing_patient_id: int | None = None
    existing_measure_id: int | None = None
    source_row_index: int | None = None


@dataclass(frozen=True, slots=True)
class DiffSummary:
    inserts: int = 0
    updates: int = 0
    skips: int = 0
    duplicates: int = 0
    deletes: int = 0

    @property
    def total(self) -> int:
        return self.inserts + self.updates + self.skips + self.duplicates + self.deletes


@dataclass(frozen=True, slots=True)
class DiffResult:
    mode: ImportMode
    changes: tuple[DiffChange, ...]
    summary: DiffSummary
    new_patients: int
    existing_patients: int
    generated_at: datetime


@dataclass(frozen=True, slots=True)
class PatientReassignment:
    patient_id: int
    member_name: str
    member_dob: str
    current_owner_id: int | None
    target_owner_id: int | None
