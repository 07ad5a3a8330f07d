"""Tests for header-to-field column mapping."""

from unittest.mock import Mock

import pytest

from caregap_importer.domain.entities.column_mapping import ColumnRole, MeasureRole
from caregap_importer.domain.services.column_mapper import ColumnMapper, map_columns
from caregap_importer.domain.services.errors import UnknownSystemError


class TestMapColumns:
    def test_patient_skip_measure_and_unmapped(self, hill_config):
        result = map_columns(
            ["Patient", "DOB", "Sex", "Eye Exam Q2", "Favorite Color"],
            hill_config,
            system_id="hill",
        )

        roles = {c.source_column: c.role for c in result.columns}
        assert roles == {
            "Patient": ColumnRole.PATIENT,
            "DOB": ColumnRole.PATIENT,
            "Sex": ColumnRole.SKIP,
            "Eye Exam Q2": ColumnRole.MEASURE,
            "Favorite Color": ColumnRole.UNMAPPED,
        }
        assert result.skipped == ["Sex"]
        assert result.unmapped == ["Favorite Color"]
        assert result.stats.total == 5
        assert result.stats.mapped == 3

    def test_suffixes_select_measure_role(self, hill_config):
        result = map_columns(
            ["Eye Exam Q1", "Eye Exam Q2", "Eye Exam"], hill_config
        )

        measure_roles = [c.measure_role for c in result.measure_columns]
        assert measure_roles == [
            MeasureRole.TRACKING,
            MeasureRole.STATUS,
            MeasureRole.STATUS,
        ]
        assert all(c.quality_measure == "Diabetic Eye Exam" for c in result.measure_columns)

    def test_headers_are_trimmed_and_blanks_ignored(self, hill_config):
        result = map_columns(["  Patient ", "", "DOB"], hill_config)

        assert [c.source_column for c in result.columns] == ["Patient", "DOB"]
        assert result.missing_required == []

    def test_missing_required_columns(self, hill_config):
        result = map_columns(["Patient", "Eye Exam Q2"], hill_config)

        assert result.missing_required == ["DOB"]

    def test_variant_headers_share_one_group(self, hill_config):
        result = map_columns(
            [
                "Breast Cancer Screening E Q1",
                "Breast Cancer Screening E 50-74 Q2",
                "Eye Exam Q2",
                "Breast Cancer Screening E 40-49 Q2",
            ],
            hill_config,
        )

        assert [g.key for g in result.measure_groups] == [
            ("Screening", "Breast Cancer Screening"),
            ("Quality", "Diabetic Eye Exam"),
        ]
        breast = result.measure_groups[0]
        assert breast.tracking_columns == ["Breast Cancer Screening E Q1"]
        assert breast.status_columns == [
            "Breast Cancer Screening E 50-74 Q2",
            "Breast Cancer Screening E 40-49 Q2",
        ]

    def test_patient_field_map(self, hill_config):
        result = map_columns(["Patient", "DOB", "Phone"], hill_config)

        assert result.patient_field_map() == {
            "memberName": "Patient",
            "memberDob": "DOB",
            "memberTelephone": "Phone",
        }


class TestColumnMapper:
    def test_loads_config_from_repository(self, hill_config):
        repository = Mock()
        repository.load.return_value = hill_config

        result = ColumnMapper(repository).map_columns(["Patient"], "hill")

        repository.load.assert_called_once_with("hill")
        assert result.system_id == "hill"

    def test_unknown_system_propagates(self, system_configs):
        with pytest.raises(UnknownSystemError, match="System not found: acme"):
            ColumnMapper(system_configs).map_columns(["Patient"], "acme")
