"""Care-gap spreadsheet import pipeline.

Maps a source system's wide spreadsheet export onto care-gap facts,
validates them, reconciles them against the persisted store and commits
the reviewed result in one transaction.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("caregap-importer")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = ["__version__"]
