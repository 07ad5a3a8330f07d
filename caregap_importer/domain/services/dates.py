"""Lenient date parsing for spreadsheet cells.

Source systems export dates in whatever shape the user's spreadsheet tool
produced: US slash dates, two-digit years, ISO strings or raw Excel serial
numbers. ``parse_date`` tries each known shape in turn and only then falls
back to pandas' own parser.
"""

from datetime import date, timedelta
import re
import warnings

import pandas as pd

_EXCEL_EPOCH = date(1899, 12, 30)
_SERIAL_PATTERN = re.compile(r"^\d+$")

_US_SLASH = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_US_SLASH_SHORT = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2})$")
_ISO = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DOTTED = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")
_US_DASH = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
_ISO_SLASH = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$")


def _month_first(match: re.Match[str]) -> tuple[int, int, int]:
    return int(match.group(3)), int(match.group(1)), int(match.group(2))


def _year_first(match: re.Match[str]) -> tuple[int, int, int]:
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def _short_year(match: re.Match[str]) -> tuple[int, int, int]:
    year = int(match.group(3))
    year = 2000 + year if year < 50 else 1900 + year
    return year, int(match.group(1)), int(match.group(2))


_FORMATS = (
    (_US_SLASH, _month_first),
    (_US_SLASH_SHORT, _short_year),
    (_ISO, _year_first),
    (_DOTTED, _month_first),
    (_US_DASH, _month_first),
    (_ISO_SLASH, _year_first),
)


def is_excel_serial(value: str) -> bool:
    if not _SERIAL_PATTERN.match(value):
        return False
    return 1 < int(value) < 100000


def parse_date(value: object) -> date | None:
    """Parse a spreadsheet cell into a date, or ``None`` when impossible."""
    if value is None:
        return None
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    if is_excel_serial(text):
        return _EXCEL_EPOCH + timedelta(days=int(text))
    for pattern, extract in _FORMATS:
        match = pattern.match(text)
        if match is None:
            continue
        year, month, day = extract(match)
        try:
            return date(year, month, day)
        except ValueError:
            continue
    return _parse_with_pandas(text)


def _parse_with_pandas(text: str) -> date | None:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce")
        except (ValueError, OverflowError, TypeError):
            return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()


def to_iso_date(value: date | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()
