"""Replay a reviewed preview against the persisted store.

All writes for one execution happen inside a single unit of work. Two
failure classes are kept apart:

* a change that cannot be applied on its own (no date of birth, no
  existing measure id) raises :class:`ChangeExecutionError`; it is recorded
  in ``ExecutionResult.errors`` and the remaining changes still commit
* anything else raised inside the transaction rolls the whole execution
  back and is reported as one ``Transaction failed`` error with zero stats

Once the transaction commits the preview is consumed. A failure while
resyncing duplicate flags afterwards is reported as an error on the
successful result.
"""

from __future__ import annotations

from datetime import date
import time
from typing import TYPE_CHECKING

from ..domain.entities.diff import DiffAction, ImportMode
from ..domain.services.errors import ChangeExecutionError, PreviewNotFoundError
from .models import (
    ExecutionError,
    ExecutionResult,
    ExecutionStats,
    MeasureDraft,
    MeasureUpdate,
    PatientDraft,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ..domain.entities.diff import DiffChange
    from .models import PreviewEntry
    from .ports.repositories import CareGapStorePort, PreviewCachePort, UnitOfWorkPort
    from .ports.services import DueDateCalculatorPort, LoggerPort


class ImportExecutor:
    pass

    def __init__(
        self,
        *,
        store: CareGapStorePort,
        previews: PreviewCachePort,
        due_dates: DueDateCalculatorPort,
        logger: LoggerPort,
        today: Callable[[], date] = date.today,
    ) -> None:
        super().__init__()
        self._store = store
        self._previews = previews
        self._due_dates = due_dates
        self._logger = logger
        self._today = today

    def execute(self, preview_id: str) -> ExecutionResult:
        started = time.perf_counter()
        preview = self._previews.get(preview_id)
        if preview is None:
            raise PreviewNotFoundError(preview_id)

        stats = ExecutionStats()
        errors: list[ExecutionError] = []
        self._logger.verbose(
            f"Executing preview {preview_id} ({preview.mode.value}, "
            f"{len(preview.diff.changes)} changes)"
        )
        try:
            with self._store.transaction() as uow:
                if preview.mode is ImportMode.REPLACE:
                    self._execute_replace(preview, uow, stats, errors)
                else:
                    self._execute_merge(preview, uow, stats, errors)
        except Exception as exc:
            self._logger.error(f"Transaction failed: {exc}")
            return ExecutionResult(
                success=False,
                mode=preview.mode,
                stats=ExecutionStats(),
                errors=[ExecutionError(message=f"Transaction failed: {exc}")],
                duration_ms=_elapsed_ms(started),
            )

        self._previews.delete(preview_id)
        try:
            flagged = self._store.sync_duplicate_flags()
        except Exception as exc:
            self._logger.warning(f"Duplicate flag sync failed: {exc}")
            errors.append(
                ExecutionError(message=f"Duplicate flag sync failed: {exc}")
            )
        else:
            self._logger.debug(f"Duplicate flags recalculated: {flagged} flagged")

        result = ExecutionResult(
            success=True,
            mode=preview.mode,
            stats=stats,
            errors=errors,
            duration_ms=_elapsed_ms(started),
        )
        self._logger.log_execution_result(result)
        return result

    def _execute_replace(
        self,
        preview: PreviewEntry,
        uow: UnitOfWorkPort,
        stats: ExecutionStats,
        errors: list[ExecutionError],
    ) -> None:
        changes = preview.diff.changes
        delete_ids = [
            change.existing_measure_id
            for change in changes
            if change.action is DiffAction.DELETE
            and change.existing_measure_id is not None
        ]
        if delete_ids:
            uow.delete_measures(delete_ids)
            stats.deleted = len(delete_ids)
        for change in _only(changes, DiffAction.INSERT):
            try:
                self._insert_measure(change, uow, preview.target_owner_id)
            except ChangeExecutionError as exc:
                errors.append(_execution_error(change, exc))
                continue
            stats.inserted += 1

    def _execute_merge(
        self,
        preview: PreviewEntry,
        uow: UnitOfWorkPort,
        stats: ExecutionStats,
        errors: list[ExecutionError],
    ) -> None:
        for change in preview.diff.changes:
            try:
                match change.action:
                    case DiffAction.INSERT:
                        self._insert_measure(change, uow, preview.target_owner_id)
                        stats.inserted += 1
                    case DiffAction.UPDATE:
                        self._update_measure(change, uow)
                        stats.updated += 1
                    case DiffAction.BOTH:
                        self._insert_measure(change, uow, preview.target_owner_id)
                        stats.both_kept += 1
                    case DiffAction.SKIP | DiffAction.DELETE:
                        stats.skipped += 1
            except ChangeExecutionError as exc:
                errors.append(_execution_error(change, exc))

    def _insert_measure(
        self, change: DiffChange, uow: UnitOfWorkPort, owner_id: int | None
    ) -> int:
        if not change.member_dob:
            raise ChangeExecutionError(
                f"Cannot insert measure for {change.member_name}: DOB is required"
            )
        patient_id = None
        if change.action is DiffAction.BOTH:
            patient_id = change.existing_patient_id
        if patient_id is None:
            patient_id = uow.find_patient(change.member_name, change.member_dob)
        if patient_id is None:
            patient_id = uow.create_patient(
                PatientDraft(
                    member_name=change.member_name,
                    member_dob=change.member_dob,
                    member_telephone=change.member_telephone,
                    member_address=change.member_address,
                    owner_id=owner_id,
                )
            )
        status_date = self._today()
        due = self._due_dates.calculate_due_date(
            status_date, change.new_status, None, None
        )
        return uow.create_measure(
            MeasureDraft(
                patient_id=patient_id,
                request_type=change.request_type,
                quality_measure=change.quality_measure,
                measure_status=change.new_status,
                status_date=status_date,
                due_date=due.due_date,
                time_interval_days=due.time_interval_days,
                row_order=uow.max_row_order() + 1,
                is_duplicate=False,
            )
        )

    def _update_measure(self, change: DiffChange, uow: UnitOfWorkPort) -> None:
        if change.existing_measure_id is None:
            raise ChangeExecutionError(
                f"Cannot update measure for {change.member_name}: no existing measure ID"
            )
        status_date = self._today()
        due = self._due_dates.calculate_due_date(
            status_date, change.new_status, None, None
        )
        uow.update_measure(
            change.existing_measure_id,
            MeasureUpdate(
                measure_status=change.new_status,
                status_date=status_date,
                due_date=due.due_date,
                time_interval_days=due.time_interval_days,
            ),
        )


def _only(changes: Sequence[DiffChange], action: DiffAction) -> list[DiffChange]:
    return [change for change in changes if change.action is action]


def _execution_error(change: DiffChange, exc: ChangeExecutionError) -> ExecutionError:
    return ExecutionError(
        message=str(exc),
        member_name=change.member_name,
        quality_measure=change.quality_measure,
        source_row_index=change.source_row_index,
    )


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
