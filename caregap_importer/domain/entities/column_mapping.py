from dataclasses import dataclass, field
from enum import StrEnum


class ColumnRole(StrEnum):
    PATIENT = "patient-field"
    MEASURE = "measure-field"
    SKIP = "skip"
    UNMAPPED = "unmapped"


class MeasureRole(StrEnum):
    TRACKING = "tracking"
    STATUS = "status"


def _empty_str_list() -> list[str]:
    return []


@dataclass(frozen=True, slots=True)
class MappedColumn:
    source_column: str
    role: ColumnRole
    target_field: str | None = None
    request_type: str | None = None
    quality_measure: str | None = None
    measure_role: MeasureRole | None = None


@dataclass(slots=True)
class MeasureGroup:
    """All columns that feed one (request type, quality measure) fact."""

    request_type: str
    quality_measure: str
    tracking_columns: list[str] = field(default_factory=_empty_str_list)
    status_columns: list[str] = field(default_factory=_empty_str_list)

    @property
    def key(self) -> tuple[str, str]:
        return (self.request_type, self.quality_measure)


@dataclass(frozen=True, slots=True)
class MappingStats:
    total: int
    mapped: int
    skipped: int
    unmapped: int


@dataclass(slots=True)
class MappingResult:
    system_id: str
    columns: list[MappedColumn]
    measure_groups: list[MeasureGroup]
    missing_required: list[str]

    @property
    def patient_columns(self) -> list[MappedColumn]:
        return [c for c in self.columns if c.role is ColumnRole.PATIENT]

    @property
    def measure_columns(self) -> list[MappedColumn]:
        return [c for c in self.columns if c.role is ColumnRole.MEASURE]

    @property
    def skipped(self) -> list[str]:
        return [c.source_column for c in self.columns if c.role is ColumnRole.SKIP]

    @property
    def unmapped(self) -> list[str]:
        return [
            c.source_column for c in self.columns if c.role is ColumnRole.UNMAPPED
        ]

    @property
    def stats(self) -> MappingStats:
        skipped = len(self.skipped)
        unmapped = len(self.unmapped)
        return MappingStats(
            total=len(self.columns),
            mapped=len(self.columns) - skipped - unmapped,
            skipped=skipped,
            unmapped=unmapped,
        )

    def patient_field_map(self) -> dict[str, str]:
        """Target field name to source column, first header wins."""
        result: dict[str, str] = {}
        for column in self.patient_columns:
            if column.target_field is not None:
                result.setdefault(column.target_field, column.source_column)
        return result
