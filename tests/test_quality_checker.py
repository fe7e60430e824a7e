"""
Tests for processing/quality_checker.py

Covers: clean table detection, missing required roles, missing values
and their severity, invalid revenue numbers, duplicate rows, the health
score and its labels, the upload-time score and the empty table.
"""

import pandas as pd
import pytest

from config.schema import Role
from processing.mapping import ColumnMapping
from processing.quality_checker import (
    QualityReport,
    check_quality,
    health_label,
    missing_required_roles,
    upload_health_score,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

MAPPING = ColumnMapping(
    product="Pizza Name", revenue="Total Price", date="Order Date", quantity="Qty",
)


def _make_clean_df(rows: int = 20) -> pd.DataFrame:
    """A table that passes every quality check."""
    return pd.DataFrame({
        "Pizza Name": [f"Pizza {i}" for i in range(rows)],
        "Total Price": [f"{10 + i}.50" for i in range(rows)],
        "Order Date": ["2024-03-01"] * rows,
        "Qty": ["1"] * rows,
    })


def _issue_types(report: QualityReport) -> list[str]:
    return [issue.type for issue in report.issues]


# ═══════════════════════════════════════════════════════════════════════════
# Clean table
# ═══════════════════════════════════════════════════════════════════════════

class TestCleanTable:
    def test_is_clean(self):
        report = check_quality(_make_clean_df(), MAPPING)
        assert report.is_clean is True
        assert report.issues == []
        assert report.health_score == 100
        assert report.health_label == "Excellent"

    def test_total_rows(self):
        assert check_quality(_make_clean_df(rows=5), MAPPING).total_rows == 5

    def test_currency_symbols_are_valid_numbers(self):
        df = _make_clean_df(rows=2)
        df["Total Price"] = ["$12.50", "€1,200"]
        report = check_quality(df, MAPPING)
        assert "invalid_numbers" not in _issue_types(report)


# ═══════════════════════════════════════════════════════════════════════════
# Individual checks
# ═══════════════════════════════════════════════════════════════════════════

class TestMissingHeaders:
    def test_unmapped_date(self):
        mapping = ColumnMapping(product="Pizza Name", revenue="Total Price")
        report = check_quality(_make_clean_df(), mapping)
        assert report.missing_roles == [Role.DATE]
        issue = report.issues[0]
        assert issue.type == "missing_headers"
        assert issue.severity == "high"

    def test_mapped_to_absent_header(self):
        mapping = ColumnMapping(product="Pizza Name", revenue="Sales", date="Order Date")
        report = check_quality(_make_clean_df(), mapping)
        assert report.missing_roles == [Role.REVENUE]

    def test_product_detail_satisfies_product(self):
        headers = ["Item Name", "Total", "Date"]
        mapping = ColumnMapping(product_detail="Item Name", revenue="Total", date="Date")
        assert missing_required_roles(mapping, headers) == []


class TestMissingValues:
    def test_few_missing_is_low(self):
        df = _make_clean_df(rows=20)
        df.at[3, "Qty"] = ""
        report = check_quality(df, MAPPING)
        issue = next(i for i in report.issues if i.type == "missing_values")
        assert issue.severity == "low"
        assert issue.count == 1
        assert issue.row_indexes == [3]
        assert report.null_counts["Qty"] == 1

    def test_many_missing_is_medium(self):
        df = _make_clean_df(rows=10)
        df.loc[0:4, "Qty"] = None
        report = check_quality(df, MAPPING)
        issue = next(i for i in report.issues if i.type == "missing_values")
        assert issue.severity == "medium"
        assert issue.count == 5

    def test_whitespace_counts_as_missing(self):
        df = _make_clean_df(rows=20)
        df.at[0, "Pizza Name"] = "   "
        report = check_quality(df, MAPPING)
        assert report.null_counts["Pizza Name"] == 1


class TestInvalidNumbers:
    def test_text_revenue(self):
        df = _make_clean_df(rows=20)
        df.at[2, "Total Price"] = "twelve"
        report = check_quality(df, MAPPING)
        issue = next(i for i in report.issues if i.type == "invalid_numbers")
        assert issue.count == 1
        assert issue.row_indexes == [2]
        assert issue.column == "Total Price"
        assert issue.severity == "medium"


class TestDuplicateRows:
    def test_duplicates_detected(self):
        df = pd.concat([_make_clean_df(rows=3), _make_clean_df(rows=1)], ignore_index=True)
        report = check_quality(df, MAPPING)
        assert report.duplicate_rows == 1
        assert "duplicate_rows" in _issue_types(report)
        assert report.health_score == 95
        assert report.health_label == "Excellent"


# ═══════════════════════════════════════════════════════════════════════════
# Score and labels
# ═══════════════════════════════════════════════════════════════════════════

class TestHealthScore:
    def test_deductions_add_up(self):
        df = _make_clean_df(rows=10)
        df.loc[0:4, "Qty"] = None           # medium: -15
        df.at[6, "Total Price"] = "n/a"     # medium: -15
        mapping = ColumnMapping(product="Pizza Name", revenue="Total Price", quantity="Qty")
        report = check_quality(df, mapping)  # missing date, high: -30
        assert report.health_score == 40
        assert report.health_label == "Needs Attention"
        assert report.is_clean is False

    @pytest.mark.parametrize("score, label", [
        (100, "Excellent"),
        (90, "Excellent"),
        (89, "Good"),
        (85, "Good"),
        (84, "Fair"),
        (70, "Fair"),
        (69, "Needs Attention"),
        (0, "Needs Attention"),
    ])
    def test_labels(self, score, label):
        assert health_label(score) == label


class TestUploadHealthScore:
    def test_complete_table(self):
        assert upload_health_score(_make_clean_df(), MAPPING) == 100

    def test_missing_roles_lower_score(self):
        mapping = ColumnMapping(product="Pizza Name", revenue="Total Price")
        assert upload_health_score(_make_clean_df(), mapping) == 60

    def test_empty_table(self):
        assert upload_health_score(pd.DataFrame(), MAPPING) == 0


class TestEmptyTable:
    def test_empty_dataframe(self):
        report = check_quality(pd.DataFrame(), MAPPING)
        assert report.total_rows == 0
        assert report.is_clean is True
