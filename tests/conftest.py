from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
import os
from pathlib import Path

import pandas as pd
import pytest

from caregap_importer.domain.entities.system_config import SystemConfig
from caregap_importer.infrastructure.repositories import (
    SqliteCareGapStore,
    SystemConfigRepository,
)

SYSTEMS_DIR = (
    Path(__file__).parent.parent
    / "caregap_importer"
    / "infrastructure"
    / "repositories"
    / "systems"
)


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep CAREGAP_* variables and a stray ./caregap_importer.toml out of tests."""
    for name in list(os.environ):
        if name.startswith("CAREGAP_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def systems_dir() -> Path:
    return SYSTEMS_DIR


@pytest.fixture
def system_configs(systems_dir: Path) -> SystemConfigRepository:
    return SystemConfigRepository(systems_dir)


@pytest.fixture
def hill_config(system_configs: SystemConfigRepository) -> SystemConfig:
    return system_configs.load("hill")


@pytest.fixture
def store(tmp_path: Path):
    db = SqliteCareGapStore(tmp_path / "caregap-test.db")
    db.init_schema()
    yield db
    db.close()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fixed_today() -> date:
    return date(2026, 3, 1)


@pytest.fixture
def hill_frame() -> pd.DataFrame:
    """Two patients in the Hill wide layout."""
    return pd.DataFrame(
        [
            {
                "Patient": "Smith, John",
                "DOB": "01/15/1960",
                "Phone": "555-123-4567",
                "Address": "1 Main St",
                "Sex": "M",
                "Annual Wellness Visit Q1": "2/10/2026",
                "Annual Wellness Visit Q2": "Compliant",
                "Eye Exam Q2": "NC",
                "HbA1c Control Q2": "",
            },
            {
                "Patient": "Doe, Jane",
                "DOB": "1970-06-02",
                "Phone": "",
                "Address": "",
                "Sex": "F",
                "Annual Wellness Visit Q1": "",
                "Annual Wellness Visit Q2": "",
                "Eye Exam Q2": "",
                "HbA1c Control Q2": "Compliant",
            },
        ]
    )


@pytest.fixture
def make_row():
    """Build a TransformedRow with sensible defaults."""
    from caregap_importer.domain.entities.records import TransformedRow

    def _make(**overrides: object) -> TransformedRow:
        values: dict[str, object] = {
            "member_name": "Smith, John",
            "member_dob": "1960-01-15",
            "member_telephone": "(555) 123-4567",
            "member_address": "1 Main St",
            "request_type": "Quality",
            "quality_measure": "Diabetic Eye Exam",
            "measure_status": "Diabetic eye exam completed",
            "status_date": "2026-03-01",
            "source_row_index": 0,
            "source_measure_column": "Eye Exam Q2",
        }
        values.update(overrides)
        return TransformedRow(**values)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def make_record():
    """Build an ExistingRecord matching ``make_row`` defaults."""
    from caregap_importer.domain.entities.records import ExistingRecord

    def _make(**overrides: object) -> ExistingRecord:
        values: dict[str, object] = {
            "patient_id": 1,
            "measure_id": 10,
            "member_name": "Smith, John",
            "member_dob": "1960-01-15",
            "request_type": "Quality",
            "quality_measure": "Diabetic Eye Exam",
            "measure_status": "Not Addressed",
            "owner_id": None,
        }
        values.update(overrides)
        return ExistingRecord(**values)  # type: ignore[arg-type]

    return _make
