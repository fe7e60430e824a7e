"""
Sales file reader — loads an uploaded CSV or Excel file into table rows.

Guards the contract the column engine relies on: every row shares one
header set, headers are non-blank and unique.  Files that break it are
reported through FileReadResult.errors; nothing here raises for a bad file.

  - .csv            read with pandas, every cell as text
  - .xlsx / .xlsm   read with openpyxl (first worksheet, cached values)

Fully empty rows are dropped.  Columns with a blank header and no data
(trailing formatting in Excel) are dropped; a blank header with data is an
error.

Public API:
    read_sales_file(source, filename=None) → FileReadResult
    dataframe_to_rows(dataframe) → list[Row]
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

import openpyxl
import pandas as pd

from processing.column_classifier import Row

logger = logging.getLogger(__name__)

CSV_EXTENSIONS: set[str] = {".csv"}
EXCEL_EXTENSIONS: set[str] = {".xlsx", ".xlsm"}


# ═══════════════════════════════════════════════════════════════════════════
# Data class
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class FileReadResult:
    """Complete result of reading one uploaded file."""

    dataframe: pd.DataFrame = field(default_factory=pd.DataFrame)
    rows: list[Row] = field(default_factory=list)
    filename: str = ""
    sheet_name: str = ""
    total_rows_read: int = 0
    empty_rows_skipped: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def headers(self) -> list[str]:
        return [str(column) for column in self.dataframe.columns]


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def read_sales_file(
    source: Path | str | BinaryIO,
    filename: str | None = None,
) -> FileReadResult:
    """
    Read an uploaded sales file.

    Args:
        source: Path to the file, or a binary file object (e.g. a Streamlit
                upload).
        filename: Name used to pick the format when *source* is a file
                  object without a usable name.

    Returns:
        FileReadResult with the DataFrame, the engine rows and any errors.
    """
    name = filename or _source_name(source)
    result = FileReadResult(filename=name)
    extension = Path(name).suffix.lower()

    try:
        if extension in CSV_EXTENSIONS:
            grid = _read_csv_grid(source)
        elif extension in EXCEL_EXTENSIONS:
            grid, result.sheet_name = _read_excel_grid(source)
        else:
            result.errors.append(
                f"Unsupported file type '{extension or name}'. "
                "Upload a .csv or .xlsx file."
            )
            logger.error(result.errors[-1])
            return result
    except Exception as exc:
        error_message = f"Cannot read file '{name}': {exc}"
        logger.error(error_message)
        result.errors.append(error_message)
        return result

    dataframe, skipped, errors = _grid_to_dataframe(grid)
    result.errors.extend(errors)
    if errors:
        for error in errors:
            logger.error(f"'{name}': {error}")
        return result

    result.dataframe = dataframe
    result.rows = dataframe_to_rows(dataframe)
    result.total_rows_read = len(dataframe)
    result.empty_rows_skipped = skipped

    logger.info(
        f"Finished reading '{name}': {result.total_rows_read} data rows, "
        f"{len(dataframe.columns)} columns, {skipped} empty rows skipped"
    )
    return result


def dataframe_to_rows(dataframe: pd.DataFrame) -> list[Row]:
    """
    Convert a DataFrame into engine rows (header → cell value).

    Missing values become "" so every row carries every header.
    """
    if dataframe.empty:
        return []
    cleaned = dataframe.astype(object).where(pd.notna(dataframe), "")
    cleaned.columns = [str(column) for column in cleaned.columns]
    return cleaned.to_dict(orient="records")


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _source_name(source: Path | str | BinaryIO) -> str:
    if isinstance(source, (str, Path)):
        return Path(source).name
    return str(getattr(source, "name", ""))


def _read_csv_grid(source: Path | str | BinaryIO) -> list[list[str]]:
    """All CSV cells as stripped strings, header row included."""
    frame = pd.read_csv(
        source,
        header=None,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )
    return [[_cell_text(value) for value in row] for row in frame.itertuples(index=False)]


def _read_excel_grid(source: Path | str | BinaryIO) -> tuple[list[list[str]], str]:
    """All cells of the first worksheet as stripped strings."""
    workbook = openpyxl.load_workbook(source, read_only=True, data_only=True)
    try:
        sheet_name = workbook.sheetnames[0]
        worksheet = workbook[sheet_name]
        grid = [
            [_cell_text(value) for value in row]
            for row in worksheet.iter_rows(values_only=True)
        ]
    finally:
        workbook.close()
    logger.info(f"Reading sheet '{sheet_name}'")
    return grid, sheet_name


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _grid_to_dataframe(
    grid: list[list[str]],
) -> tuple[pd.DataFrame, int, list[str]]:
    """
    Split a cell grid into headers and data rows and validate the headers.

    Returns:
        (dataframe, empty_rows_skipped, errors)
    """
    header_index = next(
        (index for index, row in enumerate(grid) if any(cell for cell in row)),
        None,
    )
    if header_index is None:
        return pd.DataFrame(), 0, ["File contains no data"]

    width = max(len(row) for row in grid)
    grid = [row + [""] * (width - len(row)) for row in grid[header_index:]]
    headers, body = grid[0], grid[1:]

    keep = [
        index for index, header in enumerate(headers)
        if header or any(row[index] for row in body)
    ]
    headers = [headers[index] for index in keep]
    body = [[row[index] for index in keep] for row in body]

    if any(header == "" for header in headers):
        return pd.DataFrame(), 0, [
            "File contains blank column headers. Please fix and re-upload."
        ]
    if len(set(headers)) != len(headers):
        return pd.DataFrame(), 0, [
            "File contains duplicate column headers. Please fix and re-upload."
        ]

    data_rows = [row for row in body if any(cell for cell in row)]
    skipped = len(body) - len(data_rows)
    if not data_rows:
        return pd.DataFrame(columns=headers), skipped, [
            "File must contain at least a header row and one data row"
        ]

    return pd.DataFrame(data_rows, columns=headers), skipped, []
