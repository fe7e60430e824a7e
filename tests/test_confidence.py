"""
Tests for processing/confidence.py

Covers: required-role share, optional-role bonuses, readable product
bonus, clamping, monotonicity and the manual-mapping threshold.
"""

import pytest

from processing.confidence import needs_manual_mapping, score_mapping
from processing.mapping import ColumnMapping


SAMPLE = {
    "Pizza Name": "Margherita",
    "Product Code": "101",
    "Total Price": "12.50",
    "Quantity": "2",
    "Order Date": "2024-03-01",
}


# ═══════════════════════════════════════════════════════════════════════════
# Scoring
# ═══════════════════════════════════════════════════════════════════════════

class TestScoreMapping:
    def test_empty_mapping_scores_zero(self):
        assert score_mapping(ColumnMapping(), SAMPLE) == 0.0

    def test_revenue_only(self):
        mapping = ColumnMapping(revenue="Total Price")
        assert score_mapping(mapping, SAMPLE) == pytest.approx(0.5)

    def test_product_and_revenue_with_code_product(self):
        mapping = ColumnMapping(product="Product Code", revenue="Total Price")
        assert score_mapping(mapping, SAMPLE) == pytest.approx(1.0)

    def test_product_detail_counts_as_product(self):
        mapping = ColumnMapping(product_detail="Product Code")
        assert score_mapping(mapping, SAMPLE) == pytest.approx(0.5)

    def test_product_detail_does_not_count_as_revenue(self):
        mapping = ColumnMapping(product_detail="Product Code", product="Pizza Name")
        assert score_mapping(mapping, SAMPLE) == pytest.approx(0.5)

    def test_quantity_and_date_bonus(self):
        mapping = ColumnMapping(revenue="Total Price", quantity="Quantity", date="Order Date")
        assert score_mapping(mapping, SAMPLE) == pytest.approx(0.8)

    def test_readable_product_bonus(self):
        mapping = ColumnMapping(product="Pizza Name")
        assert score_mapping(mapping, SAMPLE) == pytest.approx(0.7)

    def test_numeric_product_no_bonus(self):
        mapping = ColumnMapping(product="Product Code")
        assert score_mapping(mapping, SAMPLE) == pytest.approx(0.5)

    def test_clamped_to_one(self):
        mapping = ColumnMapping(
            product="Pizza Name", revenue="Total Price",
            quantity="Quantity", date="Order Date",
        )
        assert score_mapping(mapping, SAMPLE) == 1.0

    def test_no_sample_row(self):
        mapping = ColumnMapping(product="Pizza Name")
        assert score_mapping(mapping, None) == pytest.approx(0.5)

    def test_adding_roles_never_lowers_score(self):
        steps = [
            ColumnMapping(),
            ColumnMapping(date="Order Date"),
            ColumnMapping(date="Order Date", quantity="Quantity"),
            ColumnMapping(date="Order Date", quantity="Quantity", revenue="Total Price"),
            ColumnMapping(
                date="Order Date", quantity="Quantity",
                revenue="Total Price", product="Pizza Name",
            ),
        ]
        scores = [score_mapping(mapping, SAMPLE) for mapping in steps]
        assert scores == sorted(scores)
        assert all(0.0 <= score <= 1.0 for score in scores)


# ═══════════════════════════════════════════════════════════════════════════
# Threshold
# ═══════════════════════════════════════════════════════════════════════════

class TestNeedsManualMapping:
    @pytest.mark.parametrize("score, expected", [
        (0.0, True),
        (0.69, True),
        (0.7, False),
        (1.0, False),
    ])
    def test_default_threshold(self, score, expected):
        assert needs_manual_mapping(score) is expected

    def test_custom_threshold(self):
        assert needs_manual_mapping(0.8, threshold=0.9) is True
