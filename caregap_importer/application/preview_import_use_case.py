"""Preview import use case.

Runs the read-only half of an import: map the sheet's headers, reshape the
rows into care-gap facts, validate them, reconcile them against the store
and park the resulting diff in the preview cache for human review.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from ..domain.services.column_mapper import map_columns
from ..domain.services.data_transformer import DataTransformer
from ..domain.services.diff_calculator import DiffCalculator
from ..domain.services.error_reporter import build_error_report
from ..domain.services.validator import RowValidator
from .models import ParsedSheet, PreviewResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..domain.entities.column_mapping import MappingResult
    from ..domain.entities.records import TransformResult
    from .models import PreviewRequest
    from .ports.repositories import (
        ExistingRecordSourcePort,
        PreviewCachePort,
        SpreadsheetReaderPort,
        SystemConfigRepositoryPort,
    )
    from .ports.services import LoggerPort


@dataclass(slots=True)
class PreviewImportDependencies:
    logger: LoggerPort
    system_configs: SystemConfigRepositoryPort
    records: ExistingRecordSourcePort
    previews: PreviewCachePort
    reader: SpreadsheetReaderPort | None = None
    validator: RowValidator | None = None
    today: Callable[[], date] = date.today


class PreviewImportUseCase:
    pass

    def __init__(self, dependencies: PreviewImportDependencies) -> None:
        super().__init__()
        self._deps = dependencies
        self._logger = dependencies.logger
        self._validator = dependencies.validator or RowValidator()
        self._diff_calculator = DiffCalculator(dependencies.records)

    def execute(self, request: PreviewRequest) -> PreviewResponse:
        system_id = request.system_id or self._deps.system_configs.get_default_system_id()
        config = self._deps.system_configs.load(system_id)
        sheet = self._load_sheet(request)

        mapping = map_columns(sheet.headers, config, system_id=system_id)
        self._logger.log_mapping_stats(
            system_id, mapping.stats, mapping.missing_required
        )

        transform = DataTransformer(config, today=self._deps.today).transform(
            sheet.data, mapping, data_start_row=sheet.data_start_row
        )
        self._logger.log_transform_stats(transform.stats)

        validation = self._validator.validate(transform.rows)
        self._logger.log_validation_stats(validation.stats)
        report = build_error_report(validation, transform)
        warnings = _collect_warnings(mapping, transform)
        for message in warnings:
            self._logger.warning(message)

        response = PreviewResponse(
            success=validation.is_valid,
            system_id=system_id,
            mode=request.mode,
            transform=transform,
            validation=validation,
            report=report,
            warnings=warnings,
        )
        if request.validate_only:
            return response

        diff = self._diff_calculator.calculate(transform.rows, request.mode)
        self._logger.log_diff_summary(diff)
        reassignments = self._diff_calculator.reassignments(
            transform.rows, request.target_owner_id
        )
        if reassignments:
            self._logger.warning(
                f"{len(reassignments)} existing patient(s) are owned by a "
                "different provider"
            )

        preview_id = self._deps.previews.store(
            system_id=system_id,
            mode=request.mode,
            diff=diff,
            rows=transform.rows,
            validation=validation,
            warnings=warnings,
            file_name=request.file_name or _file_name(request),
            reassignments=reassignments,
            target_owner_id=request.target_owner_id,
        )
        entry = self._deps.previews.get(preview_id)
        response.diff = diff
        response.preview_id = preview_id
        response.expires_at = entry.expires_at if entry is not None else None
        response.reassignments = reassignments
        self._logger.verbose(f"Stored preview {preview_id}")
        return response

    def _load_sheet(self, request: PreviewRequest) -> ParsedSheet:
        if request.data is not None:
            return ParsedSheet(
                headers=[str(column) for column in request.data.columns],
                data=request.data,
                data_start_row=request.data_start_row,
            )
        if request.file_path is None:
            raise ValueError("PreviewRequest needs either file_path or data")
        if self._deps.reader is None:
            raise ValueError("No spreadsheet reader configured")
        sheet = self._deps.reader.read(request.file_path)
        self._logger.verbose(
            f"Loaded {len(sheet.data):,} rows from {request.file_path.name}"
        )
        return sheet


def _file_name(request: PreviewRequest) -> str | None:
    return request.file_path.name if request.file_path is not None else None


def _collect_warnings(mapping: MappingResult, transform: TransformResult) -> list[str]:
    warnings: list[str] = []
    if mapping.missing_required:
        warnings.append(
            "Missing required columns: " + ", ".join(mapping.missing_required)
        )
    if mapping.unmapped:
        warnings.append(
            f"{len(mapping.unmapped)} column(s) not recognized: "
            + ", ".join(mapping.unmapped)
        )
    if transform.patients_with_no_measures:
        warnings.append(
            f"{len(transform.patients_with_no_measures)} patient(s) had no "
            "measure data and were not imported"
        )
    return warnings
