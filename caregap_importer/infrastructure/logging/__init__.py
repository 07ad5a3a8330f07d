"""Logging adapters for the import pipeline."""

from .console_logger import ConsoleLogger, LogContext, LogLevel
from .null_logger import NullLogger

__all__ = [
    "ConsoleLogger",
    "LogContext",
    "LogLevel",
    "NullLogger",
]
