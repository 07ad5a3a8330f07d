from dataclasses import dataclass, field
from enum import StrEnum


def _empty_int_list() -> list[int]:
    return []


@dataclass(frozen=True, slots=True)
class TransformedRow:
    """One (patient, quality measure) fact in long format."""

    member_name: str
    member_dob: str | None
    member_telephone: str | None
    member_address: str | None
    request_type: str
    quality_measure: str
    measure_status: str | None
    status_date: str | None
    source_row_index: int
    source_measure_column: str

    @property
    def patient_key(self) -> tuple[str, str | None]:
        return (self.member_name, self.member_dob)

    @property
    def measure_key(self) -> tuple[str, str | None, str, str]:
        return (
            self.member_name,
            self.member_dob,
            self.request_type,
            self.quality_measure,
        )


@dataclass(frozen=True, slots=True)
class TransformError:
    row_index: int
    column: str
    message: str
    value: str | None = None


@dataclass(frozen=True, slots=True)
class PatientWithNoMeasures:
    row_index: int
    member_name: str


@dataclass(frozen=True, slots=True)
class TransformStats:
    input_rows: int
    output_rows: int
    error_count: int
    measures_per_patient: float
    patients_with_no_measures: int


@dataclass(slots=True)
class TransformResult:
    rows: list[TransformedRow]
    errors: list[TransformError]
    patients_with_no_measures: list[PatientWithNoMeasures]
    stats: TransformStats
    data_start_row: int = 2


@dataclass(frozen=True, slots=True)
class ExistingRecord:
    """A (patient, measure) fact already present in the persisted store."""

    patient_id: int
    measure_id: int
    member_name: str
    member_dob: str
    request_type: str
    quality_measure: str
    measure_status: str | None
    owner_id: int | None = None

    @property
    def measure_key(self) -> tuple[str, str | None, str, str]:
        return (
            self.member_name,
            self.member_dob,
            self.request_type,
            self.quality_measure,
        )


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    row_index: int
    field: str
    message: str
    severity: Severity
    member_name: str | None = None


@dataclass(frozen=True, slots=True)
class DuplicateGroup:
    member_name: str
    member_dob: str | None
    request_type: str
    quality_measure: str
    row_indices: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class ValidationStats:
    total_rows: int
    valid_rows: int
    error_rows: int
    warning_rows: int
    duplicate_groups: int


@dataclass(slots=True)
class ValidationResult:
    errors: list[ValidationIssue]
    warnings: list[ValidationIssue]
    duplicates: list[DuplicateGroup]
    stats: ValidationStats
    error_row_indices: list[int] = field(default_factory=_empty_int_list)

    @property
    def is_valid(self) -> bool:
        return not self.errors
