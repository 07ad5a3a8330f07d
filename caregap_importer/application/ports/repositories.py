from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from datetime import timedelta
    from pathlib import Path

    from ...domain.entities.diff import (
        DiffResult,
        ImportMode,
        PatientReassignment,
    )
    from ...domain.entities.records import (
        ExistingRecord,
        TransformedRow,
        ValidationResult,
    )
    from ...domain.entities.system_config import SystemConfig, SystemInfo
    from ..models import (
        MeasureDraft,
        MeasureUpdate,
        ParsedSheet,
        PatientDraft,
        PreviewEntry,
    )


@runtime_checkable
class SystemConfigRepositoryPort(Protocol):
    pass

    def list_systems(self) -> list[SystemInfo]: ...

    def get_default_system_id(self) -> str: ...

    def load(self, system_id: str) -> SystemConfig: ...

    def is_valid_system(self, system_id: str) -> bool: ...


@runtime_checkable
class ExistingRecordSourcePort(Protocol):
    pass

    def load_existing_records(self) -> list[ExistingRecord]: ...


@runtime_checkable
class UnitOfWorkPort(Protocol):
    """Write operations available inside one open transaction."""

    def find_patient(self, member_name: str, member_dob: str) -> int | None: ...

    def create_patient(self, patient: PatientDraft) -> int: ...

    def create_measure(self, measure: MeasureDraft) -> int: ...

    def update_measure(self, measure_id: int, update: MeasureUpdate) -> None: ...

    def delete_measures(self, measure_ids: list[int]) -> int: ...

    def max_row_order(self) -> int: ...


@runtime_checkable
class CareGapStorePort(ExistingRecordSourcePort, Protocol):
    pass

    def transaction(self) -> AbstractContextManager[UnitOfWorkPort]: ...

    def sync_duplicate_flags(self) -> int: ...


@runtime_checkable
class PreviewCachePort(Protocol):
    pass

    def store(
        self,
        *,
        system_id: str,
        mode: ImportMode,
        diff: DiffResult,
        rows: list[TransformedRow],
        validation: ValidationResult,
        warnings: list[str] | None = None,
        file_name: str | None = None,
        reassignments: list[PatientReassignment] | None = None,
        target_owner_id: int | None = None,
        ttl: timedelta | None = None,
    ) -> str: ...

    def get(self, preview_id: str) -> PreviewEntry | None: ...

    def delete(self, preview_id: str) -> bool: ...


@runtime_checkable
class SpreadsheetReaderPort(Protocol):
    pass

    def read(self, path: Path) -> ParsedSheet: ...
