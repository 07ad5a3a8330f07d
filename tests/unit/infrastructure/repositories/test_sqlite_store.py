"""Tests for the SQLite care-gap store."""

from datetime import date

import pytest

from caregap_importer.application.models import MeasureDraft, MeasureUpdate, PatientDraft
from caregap_importer.infrastructure.io import StoreError
from caregap_importer.infrastructure.repositories import SqliteCareGapStore


def _measure(patient_id, quality_measure="Diabetic Eye Exam", status="Not Addressed", order=0):
    return MeasureDraft(
        patient_id=patient_id,
        request_type="Quality",
        quality_measure=quality_measure,
        measure_status=status,
        status_date=date(2026, 3, 1),
        due_date=date(2026, 4, 12),
        time_interval_days=42,
        row_order=order,
    )


class TestUnitOfWork:
    def test_create_and_find_patient(self, store):
        with store.transaction() as uow:
            patient_id = uow.create_patient(
                PatientDraft(member_name="Smith, John", member_dob="1960-01-15", owner_id=3)
            )
            assert uow.find_patient("Smith, John", "1960-01-15") == patient_id
            assert uow.find_patient("Smith, John", "1961-01-15") is None

    def test_measure_round_trip_and_row_order(self, store):
        with store.transaction() as uow:
            assert uow.max_row_order() == -1
            patient_id = uow.create_patient(PatientDraft("Smith, John", "1960-01-15"))
            uow.create_measure(_measure(patient_id, order=4))
            assert uow.max_row_order() == 4

        [measure] = store.list_measures()
        assert measure["status_date"] == "2026-03-01"
        assert measure["due_date"] == "2026-04-12"
        assert measure["is_duplicate"] == 0

    def test_update_measure(self, store):
        with store.transaction() as uow:
            patient_id = uow.create_patient(PatientDraft("Smith, John", "1960-01-15"))
            measure_id = uow.create_measure(_measure(patient_id))
            uow.update_measure(
                measure_id,
                MeasureUpdate(
                    measure_status="Diabetic eye exam completed",
                    status_date=date(2026, 3, 2),
                    due_date=None,
                    time_interval_days=None,
                ),
            )

        [measure] = store.list_measures()
        assert measure["measure_status"] == "Diabetic eye exam completed"
        assert measure["due_date"] is None

    def test_update_missing_measure_raises(self, store):
        with pytest.raises(StoreError, match="does not exist"):
            with store.transaction() as uow:
                uow.update_measure(999, MeasureUpdate("x", None, None, None))

    def test_delete_measures(self, store):
        with store.transaction() as uow:
            patient_id = uow.create_patient(PatientDraft("Smith, John", "1960-01-15"))
            ids = [uow.create_measure(_measure(patient_id, f"M{i}")) for i in range(3)]
            assert uow.delete_measures(ids[:2]) == 2
            assert uow.delete_measures([]) == 0

        assert store.count_measures() == 1


class TestTransactions:
    def test_exception_rolls_back(self, store):
        with pytest.raises(RuntimeError):
            with store.transaction() as uow:
                uow.create_patient(PatientDraft("Smith, John", "1960-01-15"))
                raise RuntimeError("boom")

        assert store.query("SELECT COUNT(*) AS n FROM patients") == [{"n": 0}]

    def test_nested_transaction_is_refused(self, store):
        with store.transaction():
            with pytest.raises(StoreError, match="already open"):
                with store.transaction():
                    pass

    def test_store_usable_after_rollback(self, store):
        with pytest.raises(RuntimeError):
            with store.transaction():
                raise RuntimeError("boom")

        with store.transaction() as uow:
            uow.create_patient(PatientDraft("Smith, John", "1960-01-15"))

        assert store.query("SELECT COUNT(*) AS n FROM patients") == [{"n": 1}]


class TestReads:
    def test_load_existing_records(self, store):
        with store.transaction() as uow:
            patient_id = uow.create_patient(PatientDraft("Smith, John", "1960-01-15", owner_id=7))
            uow.create_measure(_measure(patient_id))

        [record] = store.load_existing_records()

        assert record.patient_id == patient_id
        assert record.member_dob == "1960-01-15"
        assert record.measure_status == "Not Addressed"
        assert record.owner_id == 7

    def test_sync_duplicate_flags(self, store):
        with store.transaction() as uow:
            smith = uow.create_patient(PatientDraft("Smith, John", "1960-01-15"))
            doe = uow.create_patient(PatientDraft("Doe, Jane", "1970-06-02"))
            uow.create_measure(_measure(smith, status="Diabetic eye exam completed"))
            uow.create_measure(_measure(smith, status="Not Addressed"))
            uow.create_measure(_measure(smith, quality_measure="Vaccination"))
            uow.create_measure(_measure(doe))

        assert store.sync_duplicate_flags() == 2
        flags = {
            (m["member_name"], m["quality_measure"], m["measure_status"]): m["is_duplicate"]
            for m in store.list_measures()
        }
        assert flags[("Smith, John", "Diabetic Eye Exam", "Not Addressed")] == 1
        assert flags[("Smith, John", "Vaccination", "Not Addressed")] == 0
        assert flags[("Doe, Jane", "Diabetic Eye Exam", "Not Addressed")] == 0

    def test_context_manager_closes(self, tmp_path):
        with SqliteCareGapStore(tmp_path / "ctx.db") as db:
            db.init_schema()
            assert db.count_measures() == 0
