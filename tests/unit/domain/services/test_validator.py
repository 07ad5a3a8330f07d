"""Tests for row validation and duplicate detection."""

from caregap_importer.domain.entities.records import Severity
from caregap_importer.domain.services.validator import (
    RowValidator,
    find_duplicates,
    validation_summary_text,
)


class TestValidateRow:
    def test_clean_row_has_no_issues(self, make_row):
        assert RowValidator().validate_row(make_row()) == []

    def test_missing_name_and_dob_are_errors(self, make_row):
        issues = RowValidator().validate_row(make_row(member_name=" ", member_dob=None))

        errors = {(i.field, i.message) for i in issues if i.severity is Severity.ERROR}
        assert errors == {
            ("memberName", "Member name is required"),
            ("memberDob", "Date of birth is required"),
        }
        assert {i.member_name for i in issues} == {"Unknown"}

    def test_malformed_dob_is_an_error(self, make_row):
        issues = RowValidator().validate_row(make_row(member_dob="01/15/1960"))

        assert [(i.field, i.message) for i in issues] == [
            ("memberDob", "Invalid date of birth format")
        ]

    def test_unknown_request_type_is_an_error(self, make_row):
        issues = RowValidator().validate_row(make_row(request_type="Dental"))

        assert [(i.field, i.severity) for i in issues] == [
            ("requestType", Severity.ERROR)
        ]
        assert issues[0].message == "Invalid request type: Dental"

    def test_measure_outside_request_type_is_a_warning(self, make_row):
        issues = RowValidator().validate_row(
            make_row(request_type="AWV", quality_measure="Diabetic Eye Exam")
        )

        assert [(i.field, i.severity) for i in issues] == [
            ("qualityMeasure", Severity.WARNING)
        ]

    def test_empty_status_and_phone_are_warnings(self, make_row):
        issues = RowValidator().validate_row(
            make_row(measure_status=None, member_telephone=None)
        )

        assert {i.field for i in issues} == {"measureStatus", "memberTelephone"}
        assert all(i.severity is Severity.WARNING for i in issues)

    def test_custom_vocabulary(self, make_row):
        validator = RowValidator(
            request_types=["Dental"], quality_measures={"Dental": ["Cleaning"]}
        )

        issues = validator.validate_row(
            make_row(request_type="Dental", quality_measure="Cleaning")
        )

        assert issues == []


class TestValidate:
    def test_issues_are_reported_once_per_source_row(self, make_row):
        rows = [
            make_row(member_dob=None, quality_measure="Diabetic Eye Exam"),
            make_row(member_dob=None, quality_measure="Diabetes Control"),
        ]

        result = RowValidator().validate(rows)

        assert len(result.errors) == 1
        assert result.stats.error_rows == 1
        assert result.stats.valid_rows == 1
        assert result.error_row_indices == [0]
        assert not result.is_valid

    def test_duplicates_warn_on_every_row_but_the_first(self, make_row):
        rows = [
            make_row(source_row_index=0),
            make_row(source_row_index=3),
            make_row(source_row_index=5),
            make_row(source_row_index=4, member_name="Doe, Jane"),
            make_row(source_row_index=6, quality_measure="Diabetes Control"),
        ]

        result = RowValidator().validate(rows)

        assert len(result.duplicates) == 1
        assert result.duplicates[0].row_indices == (0, 3, 5)
        assert result.duplicates[0].quality_measure == "Diabetic Eye Exam"
        duplicate_rows = [w.row_index for w in result.warnings if w.field == "duplicate"]
        assert duplicate_rows == [3, 5]
        assert result.is_valid
        assert result.stats.duplicate_groups == 1

    def test_summary_text(self, make_row):
        result = RowValidator().validate([make_row(member_dob=None)])

        text = validation_summary_text(result)

        assert text.splitlines()[0] == "Validation FAILED"
        assert "Rows with errors: 1" in text


class TestFindDuplicates:
    def test_same_source_row_is_not_a_duplicate(self, make_row):
        rows = [make_row(source_row_index=2), make_row(source_row_index=2)]

        assert find_duplicates(rows) == []

    def test_distinct_dob_is_not_a_duplicate(self, make_row):
        rows = [
            make_row(source_row_index=0),
            make_row(source_row_index=1, member_dob="1961-01-15"),
        ]

        assert find_duplicates(rows) == []
