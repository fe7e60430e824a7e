"""
Column classifier — name and value-shape checks on individual headers.

Name checks compare normalized headers against the candidate tables in
config/column_candidates.py.  Value checks sample the column's non-empty
cells and look only at their shape (date-like, numeric, cardinality), never
at their meaning.

Public API:
    normalize_header(value) → str
    is_id_column(header) → bool
    is_product_candidate(header) → bool
    is_forbidden_product_column(header) → bool
    is_bad_breakdown_column(header) → bool
    looks_like_date_column(header, rows) → bool
    looks_like_name(value) → bool
    plausible_location_column(header, rows) → bool
"""

import logging
import re
from typing import Any

import pandas as pd

from config.column_candidates import (
    BAD_BREAKDOWN_REGEX,
    FORBIDDEN_BREAKDOWN_PATTERNS,
    FORBIDDEN_PRODUCT_EXTRAS,
    ID_TOKEN_REGEX,
    PRODUCT_CANDIDATES,
    ROLE_CANDIDATES,
)
from config.schema import Role

logger = logging.getLogger(__name__)

# One table row: header → raw cell value.
Row = dict[str, Any]

_SEPARATOR_PATTERN = re.compile(r"[\s_]")
_ID_TOKEN_PATTERN = re.compile(ID_TOKEN_REGEX)
_BAD_BREAKDOWN_PATTERN = re.compile(BAD_BREAKDOWN_REGEX)
_DATE_SHAPE_PATTERN = re.compile(r"^\d{1,4}[-/]\d{1,2}[-/]\d{1,4}")
_DIGITS_PATTERN = re.compile(r"^\d+$")

# Share of sampled values that must be date-shaped for a date column.
DATE_COLUMN_RATIO: float = 0.6

# A location column has at most this many distinct values per row ...
LOCATION_MAX_UNIQUE_RATIO: float = 0.5
# ... and at most this share of pure-digit values.
LOCATION_MAX_NUMERIC_RATIO: float = 0.5


# ═══════════════════════════════════════════════════════════════════════════
# Normalization
# ═══════════════════════════════════════════════════════════════════════════

def normalize_header(value: object) -> str:
    """
    Canonicalize a header (or candidate fragment) for comparison.

    Removes whitespace and underscores and lower-cases the rest, so
    "Store Location", "store_location" and "storelocation" compare equal.
    None and empty input give "".
    """
    if value is None:
        return ""
    return _SEPARATOR_PATTERN.sub("", str(value)).lower()


def is_blank(value: object) -> bool:
    """True for None, NaN and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def column_values(header: str, rows: list[Row]) -> list[Any]:
    """Non-blank cell values of *header*, in row order."""
    return [row.get(header) for row in rows if not is_blank(row.get(header))]


def table_headers(rows: list[Row]) -> list[str]:
    """Headers of the table, taken from the first row."""
    if not rows:
        return []
    return list(rows[0].keys())


# ═══════════════════════════════════════════════════════════════════════════
# Name checks
# ═══════════════════════════════════════════════════════════════════════════

def is_id_column(header: str) -> bool:
    """
    True if the header denotes an identifier.

    Matches "id" itself, headers starting or ending with "id", and "id" as a
    separate token.  "guide" is not an id column; "product_id" is.
    """
    normalized = normalize_header(header)
    return (
        normalized == "id"
        or normalized.endswith("id")
        or normalized.startswith("id")
        or _ID_TOKEN_PATTERN.search(normalized) is not None
    )


def is_product_candidate(header: str) -> bool:
    """True if the header equals one of the product candidates exactly."""
    normalized = normalize_header(header)
    return any(normalized == normalize_header(c) for c in PRODUCT_CANDIDATES)


def _contains_any(normalized: str, fragments: tuple[str, ...]) -> bool:
    return any(normalize_header(fragment) in normalized for fragment in fragments)


def is_forbidden_product_column(header: str) -> bool:
    """
    True if the header must never be chosen as the product column.

    Blocks headers containing any non-product role's candidates (category,
    type, size, store location, payment type), id columns and forbidden
    breakdown patterns.  Product candidates themselves stay eligible.
    """
    normalized = normalize_header(header)
    other_role_fragments = tuple(
        fragment
        for role, candidates in ROLE_CANDIDATES.items()
        if role is not Role.PRODUCT
        for fragment in candidates
    )
    return (
        _contains_any(normalized, other_role_fragments + FORBIDDEN_PRODUCT_EXTRAS)
        or is_id_column(header)
        or _contains_any(normalized, FORBIDDEN_BREAKDOWN_PATTERNS)
    )


def is_bad_breakdown_column(header: str) -> bool:
    """
    True if the header must never be chosen as a breakdown column.

    Blocks exact product candidates, id columns, forbidden breakdown
    patterns and monetary / quantity-like fragments.
    """
    normalized = normalize_header(header)
    if is_product_candidate(header):
        return True
    if is_id_column(header):
        return True
    if _contains_any(normalized, FORBIDDEN_BREAKDOWN_PATTERNS):
        return True
    return _BAD_BREAKDOWN_PATTERN.search(normalized) is not None


# ═══════════════════════════════════════════════════════════════════════════
# Value-shape checks
# ═══════════════════════════════════════════════════════════════════════════

def looks_like_date_column(header: str, rows: list[Row]) -> bool:
    """
    True if more than 60% of the column's non-empty values are date-shaped.

    Date-shaped means digits, a "-" or "/" separator, digits, separator,
    digits at the start of a string value ("2024-03-01", "01/03/2024 10:00").
    """
    if not rows:
        return False
    values = column_values(header, rows)
    if not values:
        return False

    date_like = sum(
        1 for value in values
        if isinstance(value, str) and _DATE_SHAPE_PATTERN.match(value)
    )
    return date_like / len(values) > DATE_COLUMN_RATIO


def plausible_location_column(header: str, rows: list[Row]) -> bool:
    """
    True if the column's values could name a store location.

    Rejects columns whose distinct values exceed half the row count (too
    unique, e.g. free-text notes) and columns that are mostly pure digits
    (codes or ids).
    """
    if not rows:
        return False
    values = column_values(header, rows)
    if not values:
        return False

    unique_values = {str(value) for value in values}
    if len(unique_values) / len(rows) > LOCATION_MAX_UNIQUE_RATIO:
        logger.debug(
            f"'{header}' rejected as location: {len(unique_values)} distinct "
            f"values in {len(rows)} rows"
        )
        return False

    numeric_count = sum(1 for value in values if _DIGITS_PATTERN.match(str(value)))
    if numeric_count / len(values) > LOCATION_MAX_NUMERIC_RATIO:
        logger.debug(f"'{header}' rejected as location: mostly numeric")
        return False

    return True


def looks_like_name(value: object) -> bool:
    """True for non-numeric text longer than 2 characters ("Margherita", not "101")."""
    if not isinstance(value, str):
        return False
    text = value.strip()
    if len(text) <= 2:
        return False
    try:
        float(text)
    except ValueError:
        return True
    return False
