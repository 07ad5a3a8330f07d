"""SQLite persistence for patients and their care-gap measures.

The store exposes read helpers for diffing, a ``transaction()`` unit of
work for the executor and the post-commit duplicate flag pass.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
import sqlite3
from typing import TYPE_CHECKING, override

from ...application.ports.repositories import UnitOfWorkPort
from ...domain.entities.records import ExistingRecord
from ..io.exceptions import StoreError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import date

    from ...application.models import MeasureDraft, MeasureUpdate, PatientDraft


def _get_schema_sql() -> str:
    return (Path(__file__).parent / "schema.sql").read_text(encoding="utf-8")


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


class _SqliteUnitOfWork(UnitOfWorkPort):
    pass

    def __init__(self, conn: sqlite3.Connection) -> None:
        super().__init__()
        self._conn = conn

    @override
    def find_patient(self, member_name: str, member_dob: str) -> int | None:
        row = self._conn.execute(
            "SELECT id FROM patients WHERE member_name = ? AND member_dob = ?",
            (member_name, member_dob),
        ).fetchone()
        return int(row["id"]) if row is not None else None

    @override
    def create_patient(self, patient: PatientDraft) -> int:
        cursor = self._conn.execute(
            "INSERT INTO patients (member_name, member_dob, member_telephone,"
            " member_address, owner_id) VALUES (?, ?, ?, ?, ?)",
            (
                patient.member_name,
                patient.member_dob,
                patient.member_telephone,
                patient.member_address,
                patient.owner_id,
            ),
        )
        return int(cursor.lastrowid or 0)

    @override
    def create_measure(self, measure: MeasureDraft) -> int:
        cursor = self._conn.execute(
            "INSERT INTO patient_measures (patient_id, request_type,"
            " quality_measure, measure_status, status_date, due_date,"
            " time_interval_days, row_order, is_duplicate)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                measure.patient_id,
                measure.request_type,
                measure.quality_measure,
                measure.measure_status,
                _iso(measure.status_date),
                _iso(measure.due_date),
                measure.time_interval_days,
                measure.row_order,
                int(measure.is_duplicate),
            ),
        )
        return int(cursor.lastrowid or 0)

    @override
    def update_measure(self, measure_id: int, update: MeasureUpdate) -> None:
        cursor = self._conn.execute(
            "UPDATE patient_measures SET measure_status = ?, status_date = ?,"
            " due_date = ?, time_interval_days = ?, updated_at = datetime('now')"
            " WHERE id = ?",
            (
                update.measure_status,
                _iso(update.status_date),
                _iso(update.due_date),
                update.time_interval_days,
                measure_id,
            ),
        )
        if cursor.rowcount == 0:
            raise StoreError(f"Measure {measure_id} does not exist")

    @override
    def delete_measures(self, measure_ids: list[int]) -> int:
        if not measure_ids:
            return 0
        placeholders = ", ".join("?" for _ in measure_ids)
        cursor = self._conn.execute(
            f"DELETE FROM patient_measures WHERE id IN ({placeholders})",
            tuple(measure_ids),
        )
        return cursor.rowcount

    @override
    def max_row_order(self) -> int:
        row = self._conn.execute(
            "SELECT MAX(row_order) AS max_order FROM patient_measures"
        ).fetchone()
        if row is None or row["max_order"] is None:
            return -1
        return int(row["max_order"])


class SqliteCareGapStore:
    pass

    def __init__(self, db_path: str | Path = "caregap.db") -> None:
        super().__init__()
        self.db_path = str(db_path)
        self.conn = sqlite3.connect(self.db_path, isolation_level=None)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys=ON")
        self._in_transaction = False

    def init_schema(self) -> None:
        self.conn.executescript(_get_schema_sql())

    @contextmanager
    def transaction(self) -> Iterator[UnitOfWorkPort]:
        if self._in_transaction:
            raise StoreError("A transaction is already open on this store")
        self._in_transaction = True
        self.conn.execute("BEGIN")
        try:
            yield _SqliteUnitOfWork(self.conn)
        except BaseException:
            self.conn.execute("ROLLBACK")
            raise
        else:
            self.conn.execute("COMMIT")
        finally:
            self._in_transaction = False

    def load_existing_records(self) -> list[ExistingRecord]:
        rows = self.conn.execute(
            "SELECT m.id AS measure_id, m.patient_id, p.member_name, p.member_dob,"
            " p.owner_id, m.request_type, m.quality_measure, m.measure_status"
            " FROM patient_measures m JOIN patients p ON p.id = m.patient_id"
            " ORDER BY m.id"
        ).fetchall()
        return [
            ExistingRecord(
                patient_id=row["patient_id"],
                measure_id=row["measure_id"],
                member_name=row["member_name"],
                member_dob=row["member_dob"],
                request_type=row["request_type"],
                quality_measure=row["quality_measure"],
                measure_status=row["measure_status"],
                owner_id=row["owner_id"],
            )
            for row in rows
        ]

    def sync_duplicate_flags(self) -> int:
        """Flag every measure sharing (patient, request type, measure) with another."""
        with self.transaction():
            self.conn.execute(
                "UPDATE patient_measures SET is_duplicate = CASE WHEN ("
                " SELECT COUNT(*) FROM patient_measures other"
                " WHERE other.patient_id = patient_measures.patient_id"
                " AND other.request_type = patient_measures.request_type"
                " AND other.quality_measure = patient_measures.quality_measure"
                ") > 1 THEN 1 ELSE 0 END"
            )
        row = self.conn.execute(
            "SELECT COUNT(*) AS flagged FROM patient_measures WHERE is_duplicate = 1"
        ).fetchone()
        return int(row["flagged"])

    def query(self, sql: str, params: tuple[object, ...] = ()) -> list[dict[str, object]]:
        return [dict(row) for row in self.conn.execute(sql, params).fetchall()]

    def count_measures(self) -> int:
        row = self.conn.execute("SELECT COUNT(*) AS n FROM patient_measures").fetchone()
        return int(row["n"])

    def list_measures(self) -> list[dict[str, object]]:
        return self.query(
            "SELECT m.*, p.member_name, p.member_dob, p.owner_id"
            " FROM patient_measures m JOIN patients p ON p.id = m.patient_id"
            " ORDER BY m.row_order, m.id"
        )

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> SqliteCareGapStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
