from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from rich.console import Console

from ..application.import_executor import ImportExecutor
from ..application.preview_import_use_case import (
    PreviewImportDependencies,
    PreviewImportUseCase,
)
from ..config import ConfigLoader, ImporterConfig
from .caching.preview_cache import PreviewCache
from .io.spreadsheet_reader import SpreadsheetReader
from .logging.console_logger import ConsoleLogger
from .logging.null_logger import NullLogger
from .repositories.sqlite_store import SqliteCareGapStore
from .repositories.system_config_repository import SystemConfigRepository
from .services.due_date_calculator import RuleBasedDueDateCalculator

if TYPE_CHECKING:
    from ..application.ports.services import DueDateCalculatorPort, LoggerPort


class DependencyContainer:
    pass

    def __init__(
        self,
        config: ImporterConfig | None = None,
        verbose: int = 0,
        console: Console | None = None,
        use_null_logger: bool = False,
    ) -> None:
        super().__init__()
        self.config = config or ConfigLoader.load()
        self.verbose = verbose
        self.console = console or Console()
        self.use_null_logger = use_null_logger
        self._logger_instance: LoggerPort | None = None
        self._system_config_repository_instance: SystemConfigRepository | None = None
        self._store_instance: SqliteCareGapStore | None = None
        self._preview_cache_instance: PreviewCache | None = None
        self._spreadsheet_reader_instance: SpreadsheetReader | None = None
        self._due_date_calculator_instance: DueDateCalculatorPort | None = None

    def create_logger(self) -> LoggerPort:
        if self._logger_instance is None:
            if self.use_null_logger:
                self._logger_instance = NullLogger()
            else:
                self._logger_instance = ConsoleLogger(
                    console=self.console, verbosity=self.verbose
                )
        return self._logger_instance

    def create_system_config_repository(self) -> SystemConfigRepository:
        if self._system_config_repository_instance is None:
            self._system_config_repository_instance = SystemConfigRepository(
                self.config.systems_dir, default_system=self.config.default_system
            )
        return self._system_config_repository_instance

    def create_store(self) -> SqliteCareGapStore:
        if self._store_instance is None:
            store = SqliteCareGapStore(self.config.database_path)
            store.init_schema()
            self._store_instance = store
        return self._store_instance

    def create_preview_cache(self) -> PreviewCache:
        if self._preview_cache_instance is None:
            cache = PreviewCache(
                default_ttl=timedelta(seconds=self.config.preview_ttl_seconds),
                sweep_interval=timedelta(seconds=self.config.sweep_interval_seconds),
                logger=self.create_logger(),
            )
            cache.start_cleanup()
            self._preview_cache_instance = cache
        return self._preview_cache_instance

    def create_spreadsheet_reader(self) -> SpreadsheetReader:
        if self._spreadsheet_reader_instance is None:
            self._spreadsheet_reader_instance = SpreadsheetReader()
        return self._spreadsheet_reader_instance

    def create_due_date_calculator(self) -> DueDateCalculatorPort:
        if self._due_date_calculator_instance is None:
            self._due_date_calculator_instance = RuleBasedDueDateCalculator()
        return self._due_date_calculator_instance

    def create_preview_use_case(self) -> PreviewImportUseCase:
        dependencies = PreviewImportDependencies(
            logger=self.create_logger(),
            system_configs=self.create_system_config_repository(),
            records=self.create_store(),
            previews=self.create_preview_cache(),
            reader=self.create_spreadsheet_reader(),
        )
        return PreviewImportUseCase(dependencies)

    def create_import_executor(self) -> ImportExecutor:
        return ImportExecutor(
            store=self.create_store(),
            previews=self.create_preview_cache(),
            due_dates=self.create_due_date_calculator(),
            logger=self.create_logger(),
        )

    def close(self) -> None:
        if self._preview_cache_instance is not None:
            self._preview_cache_instance.stop_cleanup()
            self._preview_cache_instance.clear()
            self._preview_cache_instance = None
        if self._store_instance is not None:
            self._store_instance.close()
            self._store_instance = None


def create_default_container(
    verbose: int = 0, config: ImporterConfig | None = None
) -> DependencyContainer:
    return DependencyContainer(config=config, verbose=verbose)
