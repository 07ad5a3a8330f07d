"""Service adapters used by the import executor."""

from .due_date_calculator import RuleBasedDueDateCalculator

__all__ = ["RuleBasedDueDateCalculator"]
