"""
Tests for processing/file_reader.py

Files are written to pytest's tmp_path with pandas / openpyxl, so no
fixture files are needed.

Covers: CSV and Excel reading, file objects, empty row skipping, leading
blank rows, blank and duplicate header rejection, header-only and empty
files, unsupported extensions, and dataframe_to_rows().
"""

import io
from datetime import datetime
from pathlib import Path

import openpyxl
import pandas as pd
import pytest

from processing.file_reader import (
    FileReadResult,
    dataframe_to_rows,
    read_sales_file,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _write_csv(tmp_path: Path, text: str, name: str = "sales.csv") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def _write_xlsx(tmp_path: Path, rows: list[list], name: str = "sales.xlsx") -> Path:
    workbook = openpyxl.Workbook()
    worksheet = workbook.active
    worksheet.title = "Sales"
    for row in rows:
        worksheet.append(row)
    path = tmp_path / name
    workbook.save(path)
    return path


# ═══════════════════════════════════════════════════════════════════════════
# CSV
# ═══════════════════════════════════════════════════════════════════════════

class TestCsv:
    def test_basic_read(self, tmp_path):
        path = _write_csv(tmp_path, "Item,Total\nLatte,3.50\nTea,2.00\n")
        result = read_sales_file(path)

        assert isinstance(result, FileReadResult)
        assert result.errors == []
        assert result.filename == "sales.csv"
        assert result.headers == ["Item", "Total"]
        assert result.rows == [
            {"Item": "Latte", "Total": "3.50"},
            {"Item": "Tea", "Total": "2.00"},
        ]
        assert result.total_rows_read == 2

    def test_cells_kept_as_text(self, tmp_path):
        path = _write_csv(tmp_path, "Code,Date\n007,1718000000\n")
        row = read_sales_file(path).rows[0]
        assert row == {"Code": "007", "Date": "1718000000"}

    def test_empty_rows_skipped(self, tmp_path):
        path = _write_csv(tmp_path, "Item,Total\nLatte,3.50\n,\nTea,2.00\n")
        result = read_sales_file(path)
        assert result.total_rows_read == 2
        assert result.empty_rows_skipped == 1

    def test_leading_blank_row(self, tmp_path):
        path = _write_csv(tmp_path, ",\nItem,Total\nLatte,3.50\n")
        result = read_sales_file(path)
        assert result.headers == ["Item", "Total"]
        assert result.total_rows_read == 1

    def test_values_stripped(self, tmp_path):
        path = _write_csv(tmp_path, " Item , Total \n Latte ,3.50\n")
        result = read_sales_file(path)
        assert result.rows == [{"Item": "Latte", "Total": "3.50"}]

    def test_file_object_with_filename(self):
        buffer = io.BytesIO(b"Item,Total\nLatte,3\n")
        result = read_sales_file(buffer, filename="upload.csv")
        assert result.errors == []
        assert result.rows == [{"Item": "Latte", "Total": "3"}]


# ═══════════════════════════════════════════════════════════════════════════
# Excel
# ═══════════════════════════════════════════════════════════════════════════

class TestExcel:
    def test_basic_read(self, tmp_path):
        path = _write_xlsx(tmp_path, [
            ["Item", "Total", "Date"],
            ["Latte", 3.5, datetime(2024, 3, 1)],
            ["Tea", 2, None],
        ])
        result = read_sales_file(path)

        assert result.errors == []
        assert result.sheet_name == "Sales"
        assert result.rows[0] == {
            "Item": "Latte", "Total": "3.5", "Date": "2024-03-01 00:00:00",
        }
        assert result.rows[1] == {"Item": "Tea", "Total": "2", "Date": ""}

    def test_integral_float_written_without_decimal(self, tmp_path):
        path = _write_xlsx(tmp_path, [["Stamp"], [1718000000.0]])
        assert read_sales_file(path).rows == [{"Stamp": "1718000000"}]

    def test_empty_rows_skipped(self, tmp_path):
        path = _write_xlsx(tmp_path, [
            ["Item", "Total"],
            ["Latte", 3.5],
            [None, None],
            ["Tea", 2],
        ])
        result = read_sales_file(path)
        assert result.total_rows_read == 2
        assert result.empty_rows_skipped == 1

    def test_trailing_empty_header_column_dropped(self, tmp_path):
        path = _write_xlsx(tmp_path, [["Item", "Total", None], ["Latte", 3.5, None]])
        assert read_sales_file(path).headers == ["Item", "Total"]


# ═══════════════════════════════════════════════════════════════════════════
# Rejected files
# ═══════════════════════════════════════════════════════════════════════════

class TestRejectedFiles:
    def test_blank_header_with_data(self, tmp_path):
        path = _write_csv(tmp_path, "Item,\nLatte,3.50\n")
        result = read_sales_file(path)
        assert result.errors == [
            "File contains blank column headers. Please fix and re-upload."
        ]
        assert result.rows == []

    def test_duplicate_headers(self, tmp_path):
        path = _write_csv(tmp_path, "Item,Item\nLatte,Tea\n")
        result = read_sales_file(path)
        assert result.errors == [
            "File contains duplicate column headers. Please fix and re-upload."
        ]

    def test_header_only(self, tmp_path):
        path = _write_csv(tmp_path, "Item,Total\n")
        result = read_sales_file(path)
        assert result.errors == [
            "File must contain at least a header row and one data row"
        ]

    def test_empty_file(self, tmp_path):
        path = _write_csv(tmp_path, "")
        result = read_sales_file(path)
        assert len(result.errors) == 1
        assert result.dataframe.empty

    def test_unsupported_extension(self, tmp_path):
        path = _write_csv(tmp_path, "Item\nLatte\n", name="sales.txt")
        result = read_sales_file(path)
        assert "Unsupported file type" in result.errors[0]

    def test_missing_file(self, tmp_path):
        result = read_sales_file(tmp_path / "missing.csv")
        assert result.errors
        assert "Cannot read file" in result.errors[0]


# ═══════════════════════════════════════════════════════════════════════════
# dataframe_to_rows()
# ═══════════════════════════════════════════════════════════════════════════

class TestDataframeToRows:
    def test_missing_values_become_empty_strings(self):
        df = pd.DataFrame({"Item": ["Latte", None], "Total": [3.5, float("nan")]})
        assert dataframe_to_rows(df) == [
            {"Item": "Latte", "Total": 3.5},
            {"Item": "", "Total": ""},
        ]

    def test_empty_dataframe(self):
        assert dataframe_to_rows(pd.DataFrame()) == []
