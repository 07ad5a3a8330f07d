from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import pandas as pd

from ...application.models import ParsedSheet
from ...constants import TitleRowMarkers
from .exceptions import DataParseError, DataSourceNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

EXCEL_SUFFIXES = frozenset({".xlsx", ".xlsm", ".xls"})


@dataclass(slots=True)
class SpreadsheetReadOptions:
    encoding: str = "utf-8"
    detect_title_row: bool = True


def is_title_row(cells: Sequence[object]) -> bool:
    """Report banners ("Report generated ...") sit above the real header."""
    if not cells:
        return False
    first = str(cells[0] or "").lower()
    if any(marker in first for marker in TitleRowMarkers.FIRST_CELL):
        return True
    filled = [c for c in cells if c is not None and str(c).strip() != ""]
    return (
        len(filled) <= TitleRowMarkers.MAX_FILLED_CELLS
        and len(cells) > TitleRowMarkers.MIN_WIDE_ROW
    )


class SpreadsheetReader:
    pass

    def __init__(self, options: SpreadsheetReadOptions | None = None) -> None:
        super().__init__()
        self._options = options or SpreadsheetReadOptions()

    def read(self, path: Path) -> ParsedSheet:
        if not path.exists():
            raise DataSourceNotFoundError(f"File not found: {path}")
        if not path.is_file():
            raise DataSourceNotFoundError(f"Not a file: {path}")
        try:
            if path.suffix.lower() in EXCEL_SUFFIXES:
                frame, skipped = self._read_excel(path)
            else:
                frame, skipped = self._read_csv(path)
        except FileNotFoundError as e:
            raise DataSourceNotFoundError(f"File not found: {path}") from e
        except pd.errors.ParserError as e:
            raise DataParseError(f"Failed to parse {path}: {e}") from e
        except pd.errors.EmptyDataError as e:
            raise DataParseError(f"File is empty: {path}") from e
        except UnicodeDecodeError as e:
            raise DataParseError(
                f"Encoding error reading {path}. Try a different encoding: {e}"
            ) from e
        except (ImportError, ValueError) as e:
            raise DataParseError(f"Unable to read {path}: {e}") from e
        if frame.shape[1] == 0:
            raise DataParseError(f"File has no columns: {path}")
        frame = _normalize_headers(frame)
        return ParsedSheet(
            headers=list(frame.columns),
            data=frame,
            data_start_row=skipped + 2,
        )

    def _read_csv(self, path: Path) -> tuple[pd.DataFrame, int]:
        skipped = 0
        if self._options.detect_title_row:
            first = pd.read_csv(
                path,
                header=None,
                nrows=1,
                dtype=str,
                keep_default_na=False,
                encoding=self._options.encoding,
            )
            if not first.empty and is_title_row(first.iloc[0].tolist()):
                skipped = 1
        frame = pd.read_csv(
            path,
            header=0,
            skiprows=range(skipped),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding=self._options.encoding,
        )
        return frame, skipped

    def _read_excel(self, path: Path) -> tuple[pd.DataFrame, int]:
        grid = pd.read_excel(path, header=None, dtype=str, sheet_name=0)
        grid = grid.fillna("")
        grid = grid[grid.apply(lambda r: any(str(v).strip() for v in r), axis=1)]
        if grid.empty:
            raise pd.errors.EmptyDataError("no rows")
        skipped = 0
        if self._options.detect_title_row and is_title_row(grid.iloc[0].tolist()):
            skipped = 1
        header = [str(v) for v in grid.iloc[skipped].tolist()]
        frame = grid.iloc[skipped + 1 :].reset_index(drop=True)
        frame.columns = header
        return frame, skipped


def _normalize_headers(frame: pd.DataFrame) -> pd.DataFrame:
    keep = [
        column
        for column in frame.columns
        if not (
            str(column).startswith("Unnamed:")
            and not (frame[column].astype(str).str.strip() != "").any()
        )
    ]
    frame = frame.loc[:, keep]
    frame.columns = [str(column).strip() for column in frame.columns]
    return frame
