from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import date

    from ...domain.entities.column_mapping import MappingStats
    from ...domain.entities.diff import DiffResult
    from ...domain.entities.records import TransformStats, ValidationStats
    from ..models import DueDateResult, ExecutionResult


@runtime_checkable
class LoggerPort(Protocol):
    pass

    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def debug(self, message: str) -> None: ...

    def verbose(self, message: str) -> None: ...

    def log_mapping_stats(
        self, system_id: str, stats: MappingStats, missing_required: list[str]
    ) -> None: ...

    def log_transform_stats(self, stats: TransformStats) -> None: ...

    def log_validation_stats(self, stats: ValidationStats) -> None: ...

    def log_diff_summary(self, diff: DiffResult) -> None: ...

    def log_execution_result(self, result: ExecutionResult) -> None: ...


@runtime_checkable
class DueDateCalculatorPort(Protocol):
    pass

    def calculate_due_date(
        self,
        status_date: date | None,
        measure_status: str | None,
        tracking1: str | None,
        tracking2: str | None,
    ) -> DueDateResult: ...
