from __future__ import annotations

from typing import TYPE_CHECKING, override

from ...application.ports.services import LoggerPort

if TYPE_CHECKING:
    from ...application.models import ExecutionResult
    from ...domain.entities.column_mapping import MappingStats
    from ...domain.entities.diff import DiffResult
    from ...domain.entities.records import TransformStats, ValidationStats


class NullLogger(LoggerPort):
    pass

    @override
    def info(self, message: str) -> None:
        return

    @override
    def success(self, message: str) -> None:
        return

    @override
    def warning(self, message: str) -> None:
        return

    @override
    def error(self, message: str) -> None:
        return

    @override
    def debug(self, message: str) -> None:
        return

    @override
    def verbose(self, message: str) -> None:
        return

    @override
    def log_mapping_stats(
        self, system_id: str, stats: MappingStats, missing_required: list[str]
    ) -> None:
        return None

    @override
    def log_transform_stats(self, stats: TransformStats) -> None:
        return None

    @override
    def log_validation_stats(self, stats: ValidationStats) -> None:
        return None

    @override
    def log_diff_summary(self, diff: DiffResult) -> None:
        return None

    @override
    def log_execution_result(self, result: ExecutionResult) -> None:
        return None
