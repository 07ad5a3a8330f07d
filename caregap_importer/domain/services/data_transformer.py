"""Wide-to-long transformation of care-gap spreadsheets.

A source system exports one row per patient with every quality measure
side by side. Each measure is described by up to two kinds of columns:

* tracking columns (header suffix `` Q1``) carrying dates or free text
* status columns (suffix `` Q2`` or the bare measure name) carrying a
  compliance value such as ``Compliant`` or ``NC``

This module turns every (patient, measure group) pair that has data into a
single :class:`TransformedRow`. When several status columns feed the same
measure, any non-compliant value wins over compliant ones.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
import re
from typing import TYPE_CHECKING

import pandas as pd

from ...constants import Defaults, TransformMessages
from ..entities.records import (
    PatientWithNoMeasures,
    TransformedRow,
    TransformError,
    TransformResult,
    TransformStats,
)
from .compliance import ComplianceCategory, classify_compliance_value
from .dates import parse_date, to_iso_date

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from ..entities.column_mapping import MappingResult, MeasureGroup
    from ..entities.system_config import SystemConfig

_NON_DIGITS = re.compile(r"\D")

type RawRow = Mapping[str, object]


def normalize_phone(value: object) -> str | None:
    """Format 10/11 digit numbers as ``(XXX) XXX-XXXX``; pass others through."""
    text = _cell_text(value)
    if not text:
        return None
    digits = _NON_DIGITS.sub("", text)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return text


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    if not isinstance(value, str) and pd.isna(value):
        return ""
    return str(value).strip()


def _iter_rows(data: pd.DataFrame | Sequence[RawRow]) -> list[dict[str, object]]:
    if isinstance(data, pd.DataFrame):
        records = data.to_dict(orient="records")
    else:
        records = [dict(row) for row in data]
    return [{str(key).strip(): value for key, value in row.items()} for row in records]


class DataTransformer:
    pass

    def __init__(
        self, config: SystemConfig, *, today: Callable[[], date] | None = None
    ) -> None:
        super().__init__()
        self._config = config
        self._today = today or date.today

    def transform(
        self,
        data: pd.DataFrame | Sequence[RawRow],
        mapping: MappingResult,
        *,
        data_start_row: int = 2,
    ) -> TransformResult:
        rows = _iter_rows(data)
        patient_fields = mapping.patient_field_map()
        today_iso = to_iso_date(self._today())

        transformed: list[TransformedRow] = []
        errors: list[TransformError] = []
        no_measures: list[PatientWithNoMeasures] = []

        for row_index, row in enumerate(rows):
            patient = self._extract_patient(row, patient_fields, row_index, errors)
            if not patient["member_name"]:
                errors.append(
                    TransformError(
                        row_index=row_index,
                        column=patient_fields.get("memberName", "Patient"),
                        message=TransformMessages.MISSING_NAME,
                    )
                )
                continue

            emitted = 0
            for group in mapping.measure_groups:
                measure_row = self._transform_measure(
                    row, patient, group, row_index, today_iso
                )
                if measure_row is not None:
                    transformed.append(measure_row)
                    emitted += 1
            if emitted == 0:
                no_measures.append(
                    PatientWithNoMeasures(
                        row_index=row_index, member_name=patient["member_name"] or ""
                    )
                )

        stats = TransformStats(
            input_rows=len(rows),
            output_rows=len(transformed),
            error_count=len(errors),
            measures_per_patient=len(mapping.measure_groups),
            patients_with_no_measures=len(no_measures),
        )
        return TransformResult(
            rows=transformed,
            errors=errors,
            patients_with_no_measures=no_measures,
            stats=stats,
            data_start_row=data_start_row,
        )

    def _extract_patient(
        self,
        row: RawRow,
        patient_fields: Mapping[str, str],
        row_index: int,
        errors: list[TransformError],
    ) -> dict[str, str | None]:
        patient: dict[str, str | None] = {
            "member_name": "",
            "member_dob": None,
            "member_telephone": None,
            "member_address": None,
        }
        for target_field, column in patient_fields.items():
            raw = row.get(column)
            if target_field == "memberDob":
                text = _cell_text(raw)
                parsed = parse_date(text)
                if parsed is not None:
                    patient["member_dob"] = to_iso_date(parsed)
                elif text:
                    errors.append(
                        TransformError(
                            row_index=row_index,
                            column=column,
                            message=TransformMessages.INVALID_DATE.format(value=text),
                            value=text,
                        )
                    )
            elif target_field == "memberTelephone":
                patient["member_telephone"] = normalize_phone(raw)
            elif target_field == "memberName":
                patient["member_name"] = _cell_text(raw)
            elif target_field == "memberAddress":
                patient["member_address"] = _cell_text(raw) or None
        return patient

    def _transform_measure(
        self,
        row: RawRow,
        patient: Mapping[str, str | None],
        group: MeasureGroup,
        row_index: int,
        today_iso: str | None,
    ) -> TransformedRow | None:
        status_values: list[str] = []
        primary_status_column: str | None = None
        for column in group.status_columns:
            text = _cell_text(row.get(column))
            if text:
                status_values.append(text)
                if primary_status_column is None:
                    primary_status_column = column

        tracking_column = _first_filled(row, group.tracking_columns)
        if tracking_column is None and not status_values:
            return None

        measure_status = self._resolve_status(group.quality_measure, status_values)
        source_column = (
            primary_status_column
            or tracking_column
            or (group.tracking_columns[0] if group.tracking_columns else "")
        )
        return TransformedRow(
            member_name=patient["member_name"] or "",
            member_dob=patient["member_dob"],
            member_telephone=patient["member_telephone"],
            member_address=patient["member_address"],
            request_type=group.request_type,
            quality_measure=group.quality_measure,
            measure_status=measure_status,
            status_date=today_iso if measure_status else None,
            source_row_index=row_index,
            source_measure_column=source_column,
        )

    def _resolve_status(
        self, quality_measure: str, values: Iterable[str]
    ) -> str | None:
        values = list(values)
        categories = {classify_compliance_value(value) for value in values}
        mapping = self._config.status_for(quality_measure)
        if ComplianceCategory.NON_COMPLIANT in categories:
            if mapping is not None and mapping.non_compliant:
                return mapping.non_compliant
            return Defaults.NOT_ADDRESSED
        if ComplianceCategory.COMPLIANT in categories:
            if mapping is not None and mapping.compliant:
                return mapping.compliant
            return None
        return values[0] if values else None


def _first_filled(row: RawRow, columns: Iterable[str]) -> str | None:
    for column in columns:
        if _cell_text(row.get(column)):
            return column
    return None
