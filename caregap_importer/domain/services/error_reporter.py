"""Human-facing reports built from validation and transform results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from ...constants import Defaults
from ..entities.records import Severity

if TYPE_CHECKING:
    from ..entities.records import (
        DuplicateGroup,
        TransformError,
        TransformResult,
        ValidationIssue,
        ValidationResult,
    )

_BANNER = "=" * 60
_RULE = "-" * 60


class ReportStatus(StrEnum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


def _empty_issues() -> list[ValidationIssue]:
    return []


@dataclass(frozen=True, slots=True)
class ReportSummary:
    status: ReportStatus
    message: str
    total_rows: int
    valid_rows: int
    error_count: int
    warning_count: int
    can_proceed: bool


@dataclass(slots=True)
class FieldIssueSummary:
    field: str
    error_count: int = 0
    warning_count: int = 0
    samples: list[ValidationIssue] = field(default_factory=_empty_issues)


@dataclass(slots=True)
class RowIssueSummary:
    row_index: int
    member_name: str
    errors: list[ValidationIssue] = field(default_factory=_empty_issues)
    warnings: list[ValidationIssue] = field(default_factory=_empty_issues)


@dataclass(frozen=True, slots=True)
class DuplicateReport:
    total_groups: int
    total_duplicate_rows: int
    groups: tuple[DuplicateGroup, ...]


@dataclass(slots=True)
class ErrorReport:
    summary: ReportSummary
    by_field: dict[str, FieldIssueSummary]
    by_row: dict[int, RowIssueSummary]
    duplicates: DuplicateReport
    transform_errors: tuple[TransformError, ...] = ()
    data_start_row: int = 2

    def sheet_row(self, row_index: int) -> int:
        """Spreadsheet line number of a zero-based data row."""
        return row_index + self.data_start_row


@dataclass(frozen=True, slots=True)
class CondensedReport:
    summary: ReportSummary
    top_errors: tuple[ValidationIssue, ...]
    top_warnings: tuple[ValidationIssue, ...]
    duplicate_count: int
    duplicate_groups: tuple[DuplicateGroup, ...]


def build_error_report(
    validation: ValidationResult, transform: TransformResult | None = None
) -> ErrorReport:
    issues = [*validation.errors, *validation.warnings]
    by_field: dict[str, FieldIssueSummary] = {}
    by_row: dict[int, RowIssueSummary] = {}
    for issue in issues:
        field_summary = by_field.setdefault(issue.field, FieldIssueSummary(issue.field))
        row_summary = by_row.setdefault(
            issue.row_index,
            RowIssueSummary(issue.row_index, issue.member_name or "Unknown"),
        )
        if issue.severity is Severity.ERROR:
            field_summary.error_count += 1
            row_summary.errors.append(issue)
        else:
            field_summary.warning_count += 1
            row_summary.warnings.append(issue)
        if len(field_summary.samples) < Defaults.REPORT_FIELD_SAMPLES:
            field_summary.samples.append(issue)

    groups = tuple(validation.duplicates)
    return ErrorReport(
        summary=_summarize(validation),
        by_field=by_field,
        by_row=by_row,
        duplicates=DuplicateReport(
            total_groups=len(groups),
            total_duplicate_rows=sum(len(g.row_indices) - 1 for g in groups),
            groups=groups,
        ),
        transform_errors=tuple(transform.errors) if transform is not None else (),
        data_start_row=transform.data_start_row if transform is not None else 2,
    )


def _summarize(validation: ValidationResult) -> ReportSummary:
    stats = validation.stats
    errors = len(validation.errors)
    warnings = len(validation.warnings)
    if errors == 0 and warnings == 0:
        status = ReportStatus.SUCCESS
        message = f"All {stats.total_rows} rows passed validation."
    elif errors == 0:
        status = ReportStatus.WARNING
        message = (
            f"{stats.total_rows} rows validated with {warnings} warning(s). "
            "Import can proceed."
        )
    else:
        status = ReportStatus.ERROR
        message = (
            f"Validation failed: {errors} error(s) in {stats.error_rows} row(s). "
            "Please fix errors before importing."
        )
    return ReportSummary(
        status=status,
        message=message,
        total_rows=stats.total_rows,
        valid_rows=stats.valid_rows,
        error_count=errors,
        warning_count=warnings,
        can_proceed=errors == 0,
    )


def format_report_as_text(report: ErrorReport) -> str:
    summary = report.summary
    lines = [
        _BANNER,
        "IMPORT VALIDATION REPORT",
        _BANNER,
        "",
        f"Status: {summary.status.value.upper()}",
        summary.message,
        "",
        f"Total Rows: {summary.total_rows}",
        f"Valid Rows: {summary.valid_rows}",
        f"Errors: {summary.error_count}",
        f"Warnings: {summary.warning_count}",
        f"Can Proceed: {'Yes' if summary.can_proceed else 'No'}",
        "",
    ]
    if report.transform_errors:
        lines.extend([_RULE, "TRANSFORM ERRORS", _RULE])
        for error in report.transform_errors:
            row = report.sheet_row(error.row_index)
            lines.append(f"  - Row {row} [{error.column}]: {error.message}")
        lines.append("")
    if report.by_field:
        lines.extend([_RULE, "ERRORS BY FIELD", _RULE])
        for name, field_summary in report.by_field.items():
            lines.append(f"\n{name}:")
            lines.append(
                f"  Errors: {field_summary.error_count}, "
                f"Warnings: {field_summary.warning_count}"
            )
            lines.extend(
                f"  - Row {report.sheet_row(issue.row_index)}: {issue.message}"
                for issue in field_summary.samples
            )
        lines.append("")
    if report.duplicates.total_groups:
        lines.extend([_RULE, "DUPLICATE ROWS", _RULE])
        lines.append(f"Found {report.duplicates.total_groups} duplicate group(s)")
        lines.append(
            f"{report.duplicates.total_duplicate_rows} row(s) are duplicates"
        )
        for group in report.duplicates.groups:
            lines.append(f"\n  {group.member_name} - {group.quality_measure}")
            lines.append(
                "  Rows: "
                + ", ".join(str(report.sheet_row(i)) for i in group.row_indices)
            )
        lines.append("")
    lines.append(_BANNER)
    return "\n".join(lines)


def condensed_report(report: ErrorReport) -> CondensedReport:
    samples = [s for f in report.by_field.values() for s in f.samples]
    errors = [s for s in samples if s.severity is Severity.ERROR]
    warnings = [s for s in samples if s.severity is Severity.WARNING]
    return CondensedReport(
        summary=report.summary,
        top_errors=tuple(errors[: Defaults.CONDENSED_ISSUES]),
        top_warnings=tuple(warnings[: Defaults.CONDENSED_ISSUES]),
        duplicate_count=report.duplicates.total_groups,
        duplicate_groups=report.duplicates.groups[: Defaults.CONDENSED_DUPLICATE_GROUPS],
    )
