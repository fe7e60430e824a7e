"""
Tests for processing/column_mapper.py

Covers:
  - Keyword mapping on typical restaurant and coffee shop exports
  - Time detected before date so both keep their own column
  - Generic product scoring (readable names beat codes)
  - Fuzzy match fallback for misspelled headers
  - Region only for online sellers
  - Confidence gate and unmapped headers
"""

import pytest

from processing.column_mapper import ColumnMappingResult, map_columns


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _pizza_rows() -> list[dict]:
    return [{
        "Pizza Name": "Margherita",
        "Pizza Size": "Large",
        "Order Date": "2024-03-01",
        "Total Price": "12.50",
    }]


def _coffee_rows() -> list[dict]:
    return [{
        "transaction_date": "2023-01-01",
        "transaction_time": "07:06:11",
        "transaction_qty": "2",
        "product_detail": "Ethiopia Rg",
        "product_category": "Coffee",
        "unit_price": "3.0",
    }]


# ═══════════════════════════════════════════════════════════════════════════
# Keyword mapping
# ═══════════════════════════════════════════════════════════════════════════

class TestKeywordMapping:
    def test_pizza_export(self):
        result = map_columns(_pizza_rows(), "restaurant")
        assert isinstance(result, ColumnMappingResult)
        assert result.mapping.product == "Pizza Name"
        assert result.mapping.revenue == "Total Price"
        assert result.mapping.date == "Order Date"
        assert result.unmapped_headers == ["Pizza Size"]

    def test_coffee_export(self):
        mapping = map_columns(_coffee_rows()).mapping
        assert mapping.time == "transaction_time"
        assert mapping.product_detail == "product_detail"
        assert mapping.product == "product_category"
        assert mapping.revenue == "unit_price"
        assert mapping.quantity == "transaction_qty"
        assert mapping.date == "transaction_date"

    def test_keyword_scores_are_100(self):
        result = map_columns(_pizza_rows())
        assert result.match_scores["Total Price"] == 100

    def test_mapping_is_injective(self):
        for rows in (_pizza_rows(), _coffee_rows()):
            assert map_columns(rows).mapping.is_injective()


class TestTimeDetection:
    def test_time_before_date(self):
        rows = [{"order_time": "11:38:36", "order_date": "2015-01-01", "pizza": "Hawaiian"}]
        mapping = map_columns(rows).mapping
        assert mapping.time == "order_time"
        assert mapping.date == "order_date"

    def test_time_found_by_value(self):
        rows = [{"Hour": "10:15", "Item": "Latte"}]
        assert map_columns(rows).mapping.time == "Hour"


class TestGenericProduct:
    def test_readable_beats_code(self):
        rows = [{"product_id": "A12", "product": "Latte", "sales": "3.5"}]
        assert map_columns(rows).mapping.product == "product"

    def test_no_product_header(self):
        rows = [{"Amount": "10", "When": "2024-01-01"}]
        assert map_columns(rows).mapping.product is None


# ═══════════════════════════════════════════════════════════════════════════
# Fuzzy fallback
# ═══════════════════════════════════════════════════════════════════════════

class TestFuzzyFallback:
    def test_misspelled_revenue(self):
        rows = [{"Item": "Latte", "Revnue": "3.50"}]
        result = map_columns(rows)
        assert result.mapping.revenue == "Revnue"
        assert 90 <= result.match_scores["Revnue"] < 100

    def test_unrelated_header_not_matched(self):
        rows = [{"Item": "Latte", "Colour": "Brown"}]
        assert map_columns(rows).mapping.revenue is None


# ═══════════════════════════════════════════════════════════════════════════
# Business type specifics
# ═══════════════════════════════════════════════════════════════════════════

class TestRegion:
    def _rows(self) -> list[dict]:
        return [{"Product Name": "Shirt", "Price": "20", "Region": "North"}]

    def test_online_seller_gets_region(self):
        result = map_columns(self._rows(), "online_seller")
        assert result.mapping.region == "Region"
        assert result.business_type == "online_seller"

    def test_retail_has_no_region(self):
        assert map_columns(self._rows(), "retail").mapping.region is None


# ═══════════════════════════════════════════════════════════════════════════
# Confidence gate
# ═══════════════════════════════════════════════════════════════════════════

class TestConfidenceGate:
    def test_good_mapping_skips_manual(self):
        result = map_columns(_pizza_rows())
        assert result.confidence == pytest.approx(1.0)
        assert result.needs_manual_mapping is False

    def test_unrecognised_headers_need_manual(self):
        result = map_columns([{"A": "1", "B": "2"}])
        assert result.confidence == 0.0
        assert result.needs_manual_mapping is True
        assert result.unmapped_headers == ["A", "B"]

    def test_no_rows(self):
        result = map_columns([])
        assert result.mapping.headers() == []
        assert result.needs_manual_mapping is True
