from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import TYPE_CHECKING, override

from rich.console import Console
from rich.markup import escape

from ...application.ports.services import LoggerPort

if TYPE_CHECKING:
    from ...application.models import ExecutionResult
    from ...domain.entities.column_mapping import MappingStats
    from ...domain.entities.diff import DiffResult
    from ...domain.entities.records import TransformStats, ValidationStats


class LogLevel(IntEnum):
    QUIET = -1
    NORMAL = 0
    VERBOSE = 1
    DEBUG = 2


@dataclass(slots=True)
class LogContext:
    system_id: str = ""
    file_name: str = ""
    start_time: datetime = field(default_factory=datetime.now)

    def elapsed_ms(self) -> float:
        return (datetime.now() - self.start_time).total_seconds() * 1000

    def prefix(self) -> str:
        parts = [p for p in (self.system_id, self.file_name) if p]
        return f"[{'/'.join(parts)}] " if parts else ""


class ConsoleLogger(LoggerPort):
    pass

    def __init__(self, console: Console | None = None, verbosity: int = 0) -> None:
        super().__init__()
        self.console = console or Console()
        self.verbosity = verbosity
        self._context: LogContext | None = None
        self._stats: dict[str, int] = {"warnings": 0, "errors": 0}

    def set_context(self, **kwargs: str) -> None:
        if self._context is None:
            self._context = LogContext()
        for key, value in kwargs.items():
            if hasattr(self._context, key):
                setattr(self._context, key, value)

    def clear_context(self) -> None:
        self._context = None

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)

    def _get_prefix(self) -> str:
        if self._context is None or self.verbosity < LogLevel.DEBUG:
            return ""
        return escape(self._context.prefix())

    @override
    def info(self, message: str, *, level: int = LogLevel.NORMAL) -> None:
        if self.verbosity >= level:
            self.console.print(f"{self._get_prefix()}{message}")

    @override
    def verbose(self, message: str) -> None:
        if self.verbosity >= LogLevel.VERBOSE:
            self.console.print(f"[dim]{self._get_prefix()}{message}[/dim]")

    @override
    def debug(self, message: str) -> None:
        if self.verbosity >= LogLevel.DEBUG:
            self.console.print(f"[dim cyan]{self._get_prefix()}{message}[/dim cyan]")

    @override
    def success(self, message: str) -> None:
        if self.verbosity > LogLevel.QUIET:
            self.console.print(f"[green]✓[/green] {message}")

    @override
    def warning(self, message: str) -> None:
        self._stats["warnings"] += 1
        if self.verbosity > LogLevel.QUIET:
            self.console.print(f"[yellow]⚠[/yellow] {message}")

    @override
    def error(self, message: str) -> None:
        self._stats["errors"] += 1
        self.console.print(f"[red]✗[/red] {message}")

    @override
    def log_mapping_stats(
        self, system_id: str, stats: MappingStats, missing_required: list[str]
    ) -> None:
        self.set_context(system_id=system_id)
        self.verbose(
            f"Mapped {stats.mapped}/{stats.total} columns for {system_id} "
            f"({stats.skipped} skipped, {stats.unmapped} unmapped)"
        )
        if missing_required:
            self.error(f"Missing required columns: {', '.join(missing_required)}")

    @override
    def log_transform_stats(self, stats: TransformStats) -> None:
        self.verbose(
            f"Transformed {stats.input_rows:,} rows → {stats.output_rows:,} measure rows"
        )
        if self.verbosity >= LogLevel.DEBUG and stats.input_rows:
            ratio = stats.output_rows / stats.input_rows
            self.debug(f"  Expansion ratio: {ratio:.2f}x")
        if stats.patients_with_no_measures:
            self.verbose(
                f"  {stats.patients_with_no_measures} patient(s) without measure data"
            )
        if stats.error_count:
            self.warning(f"{stats.error_count} row-level transform error(s)")

    @override
    def log_validation_stats(self, stats: ValidationStats) -> None:
        self.verbose(
            f"Validated {stats.total_rows:,} rows: {stats.valid_rows:,} valid, "
            f"{stats.error_rows:,} with errors, {stats.warning_rows:,} with warnings"
        )
        if stats.duplicate_groups:
            self.verbose(f"  {stats.duplicate_groups} duplicate group(s) in file")

    @override
    def log_diff_summary(self, diff: DiffResult) -> None:
        summary = diff.summary
        self.info(
            f"Diff ({diff.mode.value}): {summary.inserts} insert, "
            f"{summary.updates} update, {summary.skips} skip, "
            f"{summary.duplicates} both, {summary.deletes} delete"
        )
        self.debug(
            f"  Patients: {diff.new_patients} new, {diff.existing_patients} existing"
        )

    @override
    def log_execution_result(self, result: ExecutionResult) -> None:
        stats = result.stats
        message = (
            f"Import {result.mode.value} committed: {stats.inserted} inserted, "
            f"{stats.updated} updated, {stats.deleted} deleted, "
            f"{stats.both_kept} kept both, {stats.skipped} skipped "
            f"({result.duration_ms:.0f} ms)"
        )
        if result.errors:
            self.warning(f"{message}; {len(result.errors)} change(s) failed")
        else:
            self.success(message)
