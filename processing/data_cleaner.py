"""
Data cleaner — one-click clean-up of an uploaded table.

Steps, in order:
  1. Drop duplicate rows.
  2. Standardize categorical values with the lookup tables in
     config/normalization_rules.py (e.g. "LF" → "Low Fat").
  3. Parse revenue and quantity as numbers; unparsable or empty cells get
     the column median, then rows with |z-score| >= 3 are dropped.
  4. Fill empty product cells with the most common product.
  5. Rewrite the date column as ISO "YYYY-MM-DD"; unparsable dates become
     blank so time-based analysis skips them.
  6. Trim whitespace in every text cell.
  7. Drop rows with non-positive revenue or no product.

The input DataFrame is never modified.

Public API:
    clean_data(dataframe, mapping) → CleaningResult
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field

import pandas as pd

from config.normalization_rules import (
    COLUMN_PATTERN_TO_RULE_MAP,
    DEFAULT_NUMERIC_FILL,
    OUTLIER_Z_SCORE,
    UNNAMED_PRODUCT,
)
from config.schema import NUMERIC_ROLES, PRODUCT_ROLES, TEMPORAL_ROLES
from processing.column_classifier import is_blank
from processing.date_parser import normalize_row_date
from processing.file_reader import dataframe_to_rows
from processing.mapping import ColumnMapping

logger = logging.getLogger(__name__)

_NON_NUMERIC_PATTERN = re.compile(r"[^0-9.\-]")


# ═══════════════════════════════════════════════════════════════════════════
# Data class
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class CleaningResult:
    """Output of the clean_data() function."""

    dataframe: pd.DataFrame = field(default_factory=pd.DataFrame)
    changes_log: list[dict] = field(default_factory=list)
    rows_removed: int = 0


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def clean_data(dataframe: pd.DataFrame, mapping: ColumnMapping) -> CleaningResult:
    """
    Clean a table using its column mapping.

    Args:
        dataframe: The uploaded table.
        mapping: The role → header mapping; unmapped roles are skipped.

    Returns:
        CleaningResult with the cleaned copy, a log of every step and the
        number of rows removed.
    """
    if dataframe.empty:
        return CleaningResult(dataframe=dataframe.copy())

    result_df = dataframe.copy()
    changes: list[dict] = []
    original_rows = len(result_df)

    result_df = _drop_duplicates(result_df, changes)
    _standardize_categoricals(result_df, mapping, changes)
    result_df = _clean_numeric_columns(result_df, mapping, changes)
    _fill_missing_products(result_df, mapping, changes)
    _normalize_dates(result_df, mapping, changes)
    result_df = _trim_text(result_df)
    result_df = _drop_incomplete_rows(result_df, mapping, changes)

    rows_removed = original_rows - len(result_df)
    logger.info(
        f"Cleaning complete: {original_rows} rows in, {len(result_df)} rows out, "
        f"{len(changes)} changes logged"
    )
    return CleaningResult(
        dataframe=result_df,
        changes_log=changes,
        rows_removed=rows_removed,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _mapped_column(dataframe: pd.DataFrame, header: str | None) -> str | None:
    if header and header in dataframe.columns:
        return header
    return None


def _drop_duplicates(dataframe: pd.DataFrame, changes: list[dict]) -> pd.DataFrame:
    deduplicated = dataframe.drop_duplicates().reset_index(drop=True)
    removed = len(dataframe) - len(deduplicated)
    if removed:
        changes.append({"step": "drop_duplicates", "rows_removed": removed})
    return deduplicated


def _standardize_categoricals(
    dataframe: pd.DataFrame,
    mapping: ColumnMapping,
    changes: list[dict],
) -> None:
    """Apply lookup tables IN PLACE to mapped columns whose header matches."""
    for pattern, lookup_table in COLUMN_PATTERN_TO_RULE_MAP.items():
        for header in mapping.headers():
            if header not in dataframe.columns:
                continue
            if not re.search(pattern, header, flags=re.IGNORECASE):
                continue

            changed = 0
            for idx in dataframe.index:
                value = dataframe.at[idx, header]
                if is_blank(value):
                    continue
                key = re.sub(r"\s+", "", str(value)).lower()
                canonical = lookup_table.get(key, key.title())
                if canonical != value:
                    dataframe.at[idx, header] = canonical
                    changed += 1
            if changed:
                changes.append({
                    "step": "standardize", "column": header, "cells_changed": changed,
                })


def _parse_number(value: object) -> float | None:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return None if pd.isna(value) else float(value)
    cleaned = _NON_NUMERIC_PATTERN.sub("", str(value if value is not None else ""))
    if cleaned == "":
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def _clean_numeric_columns(
    dataframe: pd.DataFrame,
    mapping: ColumnMapping,
    changes: list[dict],
) -> pd.DataFrame:
    """Parse, median-fill and outlier-filter each numeric role's column."""
    for role in NUMERIC_ROLES:
        column = _mapped_column(dataframe, mapping.get(role))
        if column is None:
            continue

        parsed = pd.Series(
            [_parse_number(value) for value in dataframe[column]],
            index=dataframe.index,
            dtype="float64",
        )
        numbers = parsed.dropna().sort_values(ignore_index=True)
        # Upper median: the middle element of the sorted values.
        median = numbers.iloc[len(numbers) // 2] if len(numbers) else DEFAULT_NUMERIC_FILL
        fill = float(median) or DEFAULT_NUMERIC_FILL

        filled = int(parsed.isna().sum())
        dataframe[column] = parsed.fillna(fill)
        if filled:
            changes.append({
                "step": "fill_numeric", "column": column,
                "cells_filled": filled, "fill_value": fill,
            })

        if numbers.empty:
            continue
        std = numbers.std(ddof=0)
        z_scores = (dataframe[column] - numbers.mean()).abs() / (std or 1)
        keep = z_scores < OUTLIER_Z_SCORE
        outliers = int((~keep).sum())
        if outliers:
            dataframe = dataframe[keep].reset_index(drop=True)
            changes.append({
                "step": "drop_outliers", "column": column, "rows_removed": outliers,
            })

    return dataframe


def _fill_missing_products(
    dataframe: pd.DataFrame,
    mapping: ColumnMapping,
    changes: list[dict],
) -> None:
    """Fill empty product cells IN PLACE with the column's most common value."""
    for role in PRODUCT_ROLES:
        column = _mapped_column(dataframe, mapping.get(role))
        if column is None:
            continue

        present = [value for value in dataframe[column] if not is_blank(value)]
        mode = Counter(present).most_common(1)[0][0] if present else UNNAMED_PRODUCT

        blank_index = [idx for idx in dataframe.index if is_blank(dataframe.at[idx, column])]
        for idx in blank_index:
            dataframe.at[idx, column] = mode
        if blank_index:
            changes.append({
                "step": "fill_product", "column": column,
                "cells_filled": len(blank_index), "fill_value": mode,
            })


def _normalize_dates(
    dataframe: pd.DataFrame,
    mapping: ColumnMapping,
    changes: list[dict],
) -> None:
    """Rewrite the first mapped temporal column IN PLACE as ISO dates."""
    target = next(
        (
            column for column in (
                _mapped_column(dataframe, mapping.get(role)) for role in TEMPORAL_ROLES
            )
            if column is not None
        ),
        None,
    )
    if target is None:
        return

    dates = [normalize_row_date(row, mapping) for row in dataframe_to_rows(dataframe)]
    dataframe[target] = [value.isoformat() if value else "" for value in dates]

    unparsable = sum(1 for value in dates if value is None)
    changes.append({
        "step": "normalize_dates", "column": target, "unparsable": unparsable,
    })
    if unparsable:
        logger.warning(f"{unparsable} rows have no parsable date in '{target}'")


def _trim_text(dataframe: pd.DataFrame) -> pd.DataFrame:
    for column in dataframe.columns:
        dataframe[column] = [
            value.strip() if isinstance(value, str) else value
            for value in dataframe[column]
        ]
    return dataframe


def _drop_incomplete_rows(
    dataframe: pd.DataFrame,
    mapping: ColumnMapping,
    changes: list[dict],
) -> pd.DataFrame:
    """Drop rows whose revenue is not positive or whose product is empty."""
    keep = pd.Series(True, index=dataframe.index)

    revenue = _mapped_column(dataframe, mapping.revenue)
    if revenue is not None:
        values = pd.to_numeric(dataframe[revenue], errors="coerce")
        keep &= values.notna() & (values > 0)

    product = _mapped_column(dataframe, mapping.product)
    if product is not None:
        keep &= ~dataframe[product].map(is_blank).astype(bool)

    removed = int((~keep).sum())
    if removed:
        changes.append({"step": "drop_incomplete", "rows_removed": removed})
    return dataframe[keep].reset_index(drop=True)
