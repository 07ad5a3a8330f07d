from __future__ import annotations

from typing import TYPE_CHECKING

from ...constants import ColumnSuffixes
from ..entities.column_mapping import (
    ColumnRole,
    MappedColumn,
    MappingResult,
    MeasureGroup,
    MeasureRole,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ...application.ports.repositories import SystemConfigRepositoryPort
    from ..entities.system_config import MeasureColumn, SystemConfig


class ColumnMapper:
    """Resolve raw spreadsheet headers against one system's configuration."""

    def __init__(self, config_repository: SystemConfigRepositoryPort) -> None:
        super().__init__()
        self._config_repository = config_repository

    def map_columns(self, headers: Iterable[str], system_id: str) -> MappingResult:
        config = self._config_repository.load(system_id)
        return map_columns(headers, config, system_id=system_id)


def map_columns(
    headers: Iterable[str], config: SystemConfig, *, system_id: str = ""
) -> MappingResult:
    columns: list[MappedColumn] = []
    found_patient_columns: set[str] = set()
    skip = set(config.skip_columns)

    for header in headers:
        name = str(header).strip()
        if not name:
            continue
        target_field = config.patient_columns.get(name)
        if target_field:
            columns.append(
                MappedColumn(
                    source_column=name,
                    role=ColumnRole.PATIENT,
                    target_field=target_field,
                )
            )
            found_patient_columns.add(name)
            continue
        if name in skip:
            columns.append(MappedColumn(source_column=name, role=ColumnRole.SKIP))
            continue
        resolved = _resolve_measure_column(name, config)
        if resolved is None:
            columns.append(MappedColumn(source_column=name, role=ColumnRole.UNMAPPED))
            continue
        measure, measure_role = resolved
        columns.append(
            MappedColumn(
                source_column=name,
                role=ColumnRole.MEASURE,
                target_field=measure_role.value,
                request_type=measure.request_type,
                quality_measure=measure.quality_measure,
                measure_role=measure_role,
            )
        )

    missing_required = [
        required
        for required in config.required_patient_columns
        if required in config.patient_columns and required not in found_patient_columns
    ]
    return MappingResult(
        system_id=system_id,
        columns=columns,
        measure_groups=group_measure_columns(columns),
        missing_required=missing_required,
    )


def _resolve_measure_column(
    header: str, config: SystemConfig
) -> tuple[MeasureColumn, MeasureRole] | None:
    suffix_len = len(ColumnSuffixes.TRACKING)
    if header.endswith(ColumnSuffixes.TRACKING):
        measure = config.measure_columns.get(header[:-suffix_len])
        if measure is not None:
            return measure, MeasureRole.TRACKING
    if header.endswith(ColumnSuffixes.STATUS):
        measure = config.measure_columns.get(header[:-suffix_len])
        if measure is not None:
            return measure, MeasureRole.STATUS
    measure = config.measure_columns.get(header)
    if measure is not None:
        return measure, MeasureRole.STATUS
    return None


def group_measure_columns(columns: Iterable[MappedColumn]) -> list[MeasureGroup]:
    """Merge every column of one quality measure into a single group.

    Several headers (age-bracket variants, for instance) may map onto the
    same (request type, quality measure); each contributes its tracking or
    status column to the shared group. Groups keep first-seen order.
    """
    groups: dict[tuple[str, str], MeasureGroup] = {}
    for column in columns:
        if column.role is not ColumnRole.MEASURE:
            continue
        if column.request_type is None or column.quality_measure is None:
            continue
        key = (column.request_type, column.quality_measure)
        group = groups.get(key)
        if group is None:
            group = MeasureGroup(
                request_type=column.request_type,
                quality_measure=column.quality_measure,
            )
            groups[key] = group
        if column.measure_role is MeasureRole.TRACKING:
            group.tracking_columns.append(column.source_column)
        else:
            group.status_columns.append(column.source_column)
    return list(groups.values())
