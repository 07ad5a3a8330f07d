"""Infrastructure layer for the care-gap importer.

Adapters for spreadsheets, SQLite storage, the preview cache and console
output. They implement the ports defined in the application layer.
"""

__all__ = []
