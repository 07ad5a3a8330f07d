from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ...constants import ChangeReasons
from ..entities.diff import (
    DiffAction,
    DiffChange,
    DiffResult,
    DiffSummary,
    ImportMode,
    PatientReassignment,
)
from .merge_logic import decide_merge

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from ...application.ports.repositories import ExistingRecordSourcePort
    from ..entities.records import ExistingRecord, TransformedRow


def _utc_now() -> datetime:
    return datetime.now(UTC)


class DiffCalculator:
    """Reconcile imported rows with a fresh snapshot of the persisted store.

    The calculator never writes. A failure while loading existing records
    propagates to the caller unchanged.
    """

    def __init__(
        self,
        records: ExistingRecordSourcePort,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        super().__init__()
        self._records = records
        self._clock = clock

    def calculate(self, rows: Sequence[TransformedRow], mode: ImportMode) -> DiffResult:
        existing = self._records.load_existing_records()
        return calculate_diff(rows, existing, mode, generated_at=self._clock())

    def reassignments(
        self, rows: Sequence[TransformedRow], target_owner_id: int | None
    ) -> list[PatientReassignment]:
        existing = self._records.load_existing_records()
        return detect_reassignments(rows, existing, target_owner_id)


def calculate_diff(
    rows: Sequence[TransformedRow],
    existing: Sequence[ExistingRecord],
    mode: ImportMode,
    *,
    generated_at: datetime | None = None,
) -> DiffResult:
    if mode is ImportMode.REPLACE:
        changes = replace_changes(rows, existing)
    else:
        changes = merge_changes(rows, existing)

    existing_patients = {(r.member_name, r.member_dob) for r in existing}
    import_patients = {row.patient_key for row in rows}
    known = len(import_patients & existing_patients)
    return DiffResult(
        mode=mode,
        changes=tuple(changes),
        summary=summarize(changes),
        new_patients=len(import_patients) - known,
        existing_patients=known,
        generated_at=generated_at or _utc_now(),
    )


def replace_changes(
    rows: Iterable[TransformedRow], existing: Iterable[ExistingRecord]
) -> list[DiffChange]:
    changes = [
        DiffChange(
            action=DiffAction.DELETE,
            member_name=record.member_name,
            member_dob=record.member_dob,
            request_type=record.request_type,
            quality_measure=record.quality_measure,
            old_status=record.measure_status,
            new_status=None,
            reason=ChangeReasons.REPLACE_DELETE,
            existing_patient_id=record.patient_id,
            existing_measure_id=record.measure_id,
        )
        for record in existing
    ]
    changes.extend(
        _insert_change(row, ChangeReasons.REPLACE_INSERT) for row in rows
    )
    return changes


def merge_changes(
    rows: Iterable[TransformedRow], existing: Iterable[ExistingRecord]
) -> list[DiffChange]:
    by_key = {record.measure_key: record for record in existing}
    changes: list[DiffChange] = []
    for row in rows:
        record = by_key.get(row.measure_key)
        if record is None:
            changes.append(_insert_change(row, ChangeReasons.NEW_COMBINATION))
            continue
        decision = decide_merge(record.measure_status, row.measure_status)
        changes.append(
            DiffChange(
                action=decision.action,
                member_name=row.member_name,
                member_dob=row.member_dob,
                request_type=row.request_type,
                quality_measure=row.quality_measure,
                old_status=record.measure_status,
                new_status=row.measure_status,
                reason=decision.reason,
                member_telephone=row.member_telephone,
                member_address=row.member_address,
                existing_patient_id=record.patient_id,
                existing_measure_id=record.measure_id,
                source_row_index=row.source_row_index,
            )
        )
    return changes


def _insert_change(row: TransformedRow, reason: str) -> DiffChange:
    return DiffChange(
        action=DiffAction.INSERT,
        member_name=row.member_name,
        member_dob=row.member_dob,
        request_type=row.request_type,
        quality_measure=row.quality_measure,
        old_status=None,
        new_status=row.measure_status,
        reason=reason,
        member_telephone=row.member_telephone,
        member_address=row.member_address,
        source_row_index=row.source_row_index,
    )


def summarize(changes: Iterable[DiffChange]) -> DiffSummary:
    counts = dict.fromkeys(DiffAction, 0)
    for change in changes:
        counts[change.action] += 1
    return DiffSummary(
        inserts=counts[DiffAction.INSERT],
        updates=counts[DiffAction.UPDATE],
        skips=counts[DiffAction.SKIP],
        duplicates=counts[DiffAction.BOTH],
        deletes=counts[DiffAction.DELETE],
    )


def diff_summary_text(diff: DiffResult) -> str:
    summary = diff.summary
    return "\n".join(
        [
            f"Import Mode: {diff.mode.value.upper()}",
            f"Generated: {diff.generated_at.isoformat()}",
            "",
            "Summary:",
            f"  Inserts: {summary.inserts}",
            f"  Updates: {summary.updates}",
            f"  Skips: {summary.skips}",
            f"  Duplicates (BOTH): {summary.duplicates}",
            f"  Deletes: {summary.deletes}",
            "",
            "Patients:",
            f"  New: {diff.new_patients}",
            f"  Existing: {diff.existing_patients}",
        ]
    )


def filter_changes_by_action(
    changes: Iterable[DiffChange], action: DiffAction
) -> list[DiffChange]:
    return [change for change in changes if change.action is action]


def modifying_changes(changes: Iterable[DiffChange]) -> list[DiffChange]:
    return [change for change in changes if change.action is not DiffAction.SKIP]


def detect_reassignments(
    rows: Iterable[TransformedRow],
    existing: Iterable[ExistingRecord],
    target_owner_id: int | None,
) -> list[PatientReassignment]:
    """List already-stored patients in this import owned by someone else."""
    import_patients = {row.patient_key for row in rows if row.member_dob}
    if not import_patients:
        return []
    seen: set[int] = set()
    reassignments: list[PatientReassignment] = []
    for record in existing:
        if record.patient_id in seen:
            continue
        if (record.member_name, record.member_dob) not in import_patients:
            continue
        seen.add(record.patient_id)
        if record.owner_id == target_owner_id:
            continue
        reassignments.append(
            PatientReassignment(
                patient_id=record.patient_id,
                member_name=record.member_name,
                member_dob=record.member_dob,
                current_owner_id=record.owner_id,
                target_owner_id=target_owner_id,
            )
        )
    return reassignments
