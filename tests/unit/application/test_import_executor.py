"""Tests for ImportExecutor against a real SQLite store."""

from __future__ import annotations

from datetime import date, timedelta
from unittest.mock import Mock

import pytest

from caregap_importer.application.import_executor import ImportExecutor
from caregap_importer.application.models import DueDateResult, MeasureDraft, PatientDraft
from caregap_importer.domain.entities.diff import (
    DiffAction,
    DiffChange,
    DiffResult,
    ImportMode,
)
from caregap_importer.domain.services.diff_calculator import calculate_diff, summarize
from caregap_importer.domain.services.errors import PreviewNotFoundError
from caregap_importer.domain.services.validator import RowValidator
from caregap_importer.infrastructure.caching import PreviewCache
from caregap_importer.infrastructure.logging import NullLogger
from caregap_importer.infrastructure.services import RuleBasedDueDateCalculator

TODAY = date(2026, 3, 1)


def _seed(store, *measures, owner_id=None):
    """Insert (name, dob, request_type, quality_measure, status) tuples."""
    with store.transaction() as uow:
        for order, (name, dob, request_type, measure, status) in enumerate(measures):
            patient_id = uow.find_patient(name, dob) or uow.create_patient(
                PatientDraft(member_name=name, member_dob=dob, owner_id=owner_id)
            )
            uow.create_measure(
                MeasureDraft(
                    patient_id=patient_id,
                    request_type=request_type,
                    quality_measure=measure,
                    measure_status=status,
                    status_date=TODAY - timedelta(days=30),
                    due_date=None,
                    time_interval_days=None,
                    row_order=order,
                )
            )


@pytest.fixture
def previews(fake_clock):
    return PreviewCache(clock=fake_clock)


def _executor(store, previews, due_dates=None):
    return ImportExecutor(
        store=store,
        previews=previews,
        due_dates=due_dates or RuleBasedDueDateCalculator(),
        logger=NullLogger(),
        today=lambda: TODAY,
    )


def _stage(store, previews, rows, mode, target_owner_id=None):
    diff = calculate_diff(rows, store.load_existing_records(), mode)
    return previews.store(
        system_id="hill",
        mode=mode,
        diff=diff,
        rows=rows,
        validation=RowValidator().validate(rows),
        target_owner_id=target_owner_id,
    )


class TestReplaceExecution:
    def test_replace_deletes_then_inserts(self, store, previews, make_row):
        _seed(
            store,
            ("Smith, John", "1960-01-15", "Quality", "Diabetic Eye Exam", "Not Addressed"),
            ("Old, Olga", "1950-05-05", "AWV", "Annual Wellness Visit", "AWV completed"),
        )
        rows = [
            make_row(),
            make_row(quality_measure="Diabetes Control", measure_status="HgbA1c at goal"),
            make_row(member_name="New, Nina", source_row_index=1),
        ]
        preview_id = _stage(store, previews, rows, ImportMode.REPLACE)

        result = _executor(store, previews).execute(preview_id)

        assert result.success
        assert result.stats.deleted == 2
        assert result.stats.inserted == 3
        assert store.count_measures() == 3
        statuses = {m["quality_measure"]: m["measure_status"] for m in store.list_measures()}
        assert statuses["Diabetes Control"] == "HgbA1c at goal"


class TestMergeExecution:
    def test_merge_applies_each_action(self, store, previews, make_row):
        _seed(
            store,
            ("Smith, John", "1960-01-15", "Quality", "Diabetic Eye Exam", "Not Addressed"),
            ("Smith, John", "1960-01-15", "AWV", "Annual Wellness Visit", "AWV completed"),
            ("Smith, John", "1960-01-15", "Quality", "Vaccination", "Vaccination completed"),
        )
        rows = [
            make_row(measure_status="Diabetic eye exam completed"),
            make_row(request_type="AWV", quality_measure="Annual Wellness Visit", measure_status="Not Addressed"),
            make_row(quality_measure="Vaccination", measure_status="Vaccination completed"),
            make_row(quality_measure="Diabetes Control", measure_status="HgbA1c at goal"),
        ]
        preview_id = _stage(store, previews, rows, ImportMode.MERGE)

        result = _executor(store, previews).execute(preview_id)

        assert result.success
        assert result.errors == []
        stats = result.stats
        assert (stats.updated, stats.both_kept, stats.skipped, stats.inserted) == (1, 1, 1, 1)
        assert store.count_measures() == 5

        measures = store.list_measures()
        eye = next(m for m in measures if m["quality_measure"] == "Diabetic Eye Exam")
        assert eye["measure_status"] == "Diabetic eye exam completed"
        assert eye["status_date"] == "2026-03-01"
        assert eye["due_date"] == "2027-03-01"
        assert eye["time_interval_days"] == 365

        awv = [m for m in measures if m["quality_measure"] == "Annual Wellness Visit"]
        assert sorted(m["measure_status"] for m in awv) == ["AWV completed", "Not Addressed"]
        assert all(m["is_duplicate"] == 1 for m in awv)
        assert len({m["patient_id"] for m in measures}) == 1

    def test_new_patient_gets_target_owner_and_next_row_order(self, store, previews, make_row):
        _seed(store, ("Smith, John", "1960-01-15", "Quality", "Diabetic Eye Exam", "Not Addressed"))
        preview_id = _stage(
            store, previews, [make_row(member_name="New, Nina")], ImportMode.MERGE, target_owner_id=42
        )

        _executor(store, previews).execute(preview_id)

        nina = next(m for m in store.list_measures() if m["member_name"] == "New, Nina")
        assert nina["owner_id"] == 42
        assert nina["row_order"] == 1

    def test_existing_patient_owner_is_left_alone(self, store, previews, make_row):
        _seed(
            store,
            ("Smith, John", "1960-01-15", "Quality", "Diabetic Eye Exam", "Not Addressed"),
            owner_id=7,
        )
        preview_id = _stage(
            store, previews, [make_row(quality_measure="Vaccination")], ImportMode.MERGE, target_owner_id=42
        )

        _executor(store, previews).execute(preview_id)

        assert {m["owner_id"] for m in store.list_measures()} == {7}

    def test_change_without_dob_is_reported_and_others_commit(self, store, previews, make_row):
        rows = [make_row(member_dob=None, source_row_index=4), make_row(member_name="New, Nina")]
        preview_id = _stage(store, previews, rows, ImportMode.MERGE)

        result = _executor(store, previews).execute(preview_id)

        assert result.success
        assert result.has_partial_failures
        assert result.stats.inserted == 1
        assert result.errors[0].source_row_index == 4
        assert "DOB is required" in result.errors[0].message
        assert store.count_measures() == 1

    def test_update_without_measure_id_is_reported(self, store, previews, make_row, fake_clock):
        change = DiffChange(
            action=DiffAction.UPDATE,
            member_name="Smith, John",
            member_dob="1960-01-15",
            request_type="Quality",
            quality_measure="Diabetic Eye Exam",
            old_status="Not Addressed",
            new_status="Diabetic eye exam completed",
            reason="Upgrading from non-compliant to compliant",
        )
        diff = DiffResult(
            mode=ImportMode.MERGE,
            changes=(change,),
            summary=summarize([change]),
            new_patients=0,
            existing_patients=1,
            generated_at=fake_clock(),
        )
        preview_id = previews.store(
            system_id="hill",
            mode=ImportMode.MERGE,
            diff=diff,
            rows=[make_row()],
            validation=RowValidator().validate([make_row()]),
        )

        result = _executor(store, previews).execute(preview_id)

        assert result.success
        assert result.stats.updated == 0
        assert "no existing measure ID" in result.errors[0].message


class TestTransactionBoundaries:
    def test_failure_mid_import_rolls_everything_back(self, store, previews, make_row):
        due_dates = Mock()
        due_dates.calculate_due_date.side_effect = [
            DueDateResult(),
            DueDateResult(),
            RuntimeError("disk full"),
        ]
        rows = [
            make_row(member_name=f"Patient {i}", source_row_index=i) for i in range(4)
        ]
        preview_id = _stage(store, previews, rows, ImportMode.MERGE)

        result = _executor(store, previews, due_dates=due_dates).execute(preview_id)

        assert not result.success
        assert result.stats.inserted == 0
        assert [e.message for e in result.errors] == ["Transaction failed: disk full"]
        assert store.count_measures() == 0
        assert store.query("SELECT COUNT(*) AS n FROM patients") == [{"n": 0}]

    def test_failed_execution_keeps_the_preview(self, store, previews, make_row):
        due_dates = Mock()
        due_dates.calculate_due_date.side_effect = RuntimeError("boom")
        preview_id = _stage(store, previews, [make_row()], ImportMode.MERGE)

        _executor(store, previews, due_dates=due_dates).execute(preview_id)

        assert previews.get(preview_id) is not None

    def test_preview_is_consumed_on_success(self, store, previews, make_row):
        preview_id = _stage(store, previews, [make_row()], ImportMode.MERGE)
        executor = _executor(store, previews)

        executor.execute(preview_id)

        with pytest.raises(PreviewNotFoundError):
            executor.execute(preview_id)

    def test_flag_sync_failure_after_commit_consumes_the_preview(
        self, store, previews, make_row, monkeypatch
    ):
        monkeypatch.setattr(
            store,
            "sync_duplicate_flags",
            Mock(side_effect=RuntimeError("database is locked")),
        )
        preview_id = _stage(store, previews, [make_row()], ImportMode.MERGE)
        executor = _executor(store, previews)

        result = executor.execute(preview_id)

        assert result.success
        assert result.has_partial_failures
        assert result.stats.inserted == 1
        assert [e.message for e in result.errors] == [
            "Duplicate flag sync failed: database is locked"
        ]
        assert previews.get(preview_id) is None
        with pytest.raises(PreviewNotFoundError):
            executor.execute(preview_id)
        assert store.count_measures() == 1

    def test_unknown_preview(self, store, previews):
        with pytest.raises(PreviewNotFoundError, match="Preview not found or expired: nope"):
            _executor(store, previews).execute("nope")

    def test_expired_preview(self, store, previews, make_row, fake_clock):
        preview_id = _stage(store, previews, [make_row()], ImportMode.MERGE)
        fake_clock.advance(minutes=31)

        with pytest.raises(PreviewNotFoundError):
            _executor(store, previews).execute(preview_id)
        assert store.count_measures() == 0
