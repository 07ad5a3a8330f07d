from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from ...constants import RequestTypes, ValidationMessages
from ..entities.records import (
    DuplicateGroup,
    Severity,
    ValidationIssue,
    ValidationResult,
    ValidationStats,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from ..entities.records import TransformedRow


class RowValidator:
    pass

    def __init__(
        self,
        request_types: Iterable[str] = RequestTypes.VALID,
        quality_measures: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        super().__init__()
        self._request_types = frozenset(request_types)
        measures = quality_measures or RequestTypes.QUALITY_MEASURES
        self._quality_measures = {
            request_type: frozenset(values) for request_type, values in measures.items()
        }

    def validate(self, rows: Sequence[TransformedRow]) -> ValidationResult:
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []
        error_rows: set[int] = set()
        warning_rows: set[int] = set()
        reported_errors: set[tuple[int, str]] = set()
        reported_warnings: set[tuple[int, str]] = set()

        for row in rows:
            for issue in self.validate_row(row):
                key = (issue.row_index, issue.field)
                if issue.severity is Severity.ERROR:
                    if key in reported_errors:
                        continue
                    reported_errors.add(key)
                    errors.append(issue)
                    error_rows.add(issue.row_index)
                else:
                    if key in reported_warnings:
                        continue
                    reported_warnings.add(key)
                    warnings.append(issue)
                    warning_rows.add(issue.row_index)

        duplicates = find_duplicates(rows)
        for group in duplicates:
            for row_index in group.row_indices[1:]:
                key = (row_index, f"duplicate|{group.quality_measure}")
                if key in reported_warnings:
                    continue
                reported_warnings.add(key)
                warnings.append(
                    ValidationIssue(
                        row_index=row_index,
                        field="duplicate",
                        message=ValidationMessages.DUPLICATE,
                        severity=Severity.WARNING,
                        member_name=group.member_name,
                    )
                )
                warning_rows.add(row_index)

        stats = ValidationStats(
            total_rows=len(rows),
            valid_rows=len(rows) - len(error_rows),
            error_rows=len(error_rows),
            warning_rows=len(warning_rows),
            duplicate_groups=len(duplicates),
        )
        return ValidationResult(
            errors=errors,
            warnings=warnings,
            duplicates=duplicates,
            stats=stats,
            error_row_indices=sorted(error_rows),
        )

    def validate_row(self, row: TransformedRow) -> list[ValidationIssue]:
        index = row.source_row_index
        name = row.member_name.strip() if row.member_name else ""
        display_name = name or "Unknown"
        issues: list[ValidationIssue] = []

        def add(field: str, message: str, severity: Severity = Severity.ERROR) -> None:
            issues.append(
                ValidationIssue(
                    row_index=index,
                    field=field,
                    message=message,
                    severity=severity,
                    member_name=display_name,
                )
            )

        if not name:
            add("memberName", ValidationMessages.NAME_REQUIRED)
        if not row.member_dob:
            add("memberDob", ValidationMessages.DOB_REQUIRED)
        elif not _is_iso_date(row.member_dob):
            add("memberDob", ValidationMessages.DOB_INVALID)

        request_type = (row.request_type or "").strip()
        if not request_type:
            add("requestType", ValidationMessages.REQUEST_TYPE_REQUIRED)
        elif request_type not in self._request_types:
            add("requestType", f"Invalid request type: {request_type}")

        if not (row.quality_measure or "").strip():
            add("qualityMeasure", ValidationMessages.QUALITY_MEASURE_REQUIRED)
        elif request_type in self._request_types:
            allowed = self._quality_measures.get(request_type, frozenset())
            if row.quality_measure not in allowed:
                add(
                    "qualityMeasure",
                    f'Invalid quality measure "{row.quality_measure}" '
                    f'for request type "{request_type}"',
                    Severity.WARNING,
                )

        if not row.measure_status:
            add("measureStatus", ValidationMessages.STATUS_EMPTY, Severity.WARNING)
        if not row.member_telephone:
            add("memberTelephone", ValidationMessages.PHONE_MISSING, Severity.WARNING)
        return issues


def _is_iso_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return len(value) == 10


def find_duplicates(rows: Iterable[TransformedRow]) -> list[DuplicateGroup]:
    """Group rows sharing name, DOB, request type and measure across source rows."""
    groups: dict[tuple[str, str | None, str, str], list[int]] = {}
    for row in rows:
        indices = groups.setdefault(row.measure_key, [])
        if row.source_row_index not in indices:
            indices.append(row.source_row_index)
    return [
        DuplicateGroup(
            member_name=key[0],
            member_dob=key[1],
            request_type=key[2],
            quality_measure=key[3],
            row_indices=tuple(indices),
        )
        for key, indices in groups.items()
        if len(indices) > 1
    ]


def validation_summary_text(result: ValidationResult) -> str:
    stats = result.stats
    lines = [
        f"Validation {'PASSED' if result.is_valid else 'FAILED'}",
        f"Total rows: {stats.total_rows}",
        f"Valid rows: {stats.valid_rows}",
    ]
    if stats.error_rows:
        lines.append(f"Rows with errors: {stats.error_rows}")
    if stats.warning_rows:
        lines.append(f"Rows with warnings: {stats.warning_rows}")
    if stats.duplicate_groups:
        lines.append(f"Duplicate groups: {stats.duplicate_groups}")
    return "\n".join(lines)
