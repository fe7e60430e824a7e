"""
Role allocator — assigns product and breakdown columns for one table.

Breakdown roles are resolved in a fixed order (size → category → type →
store location).  Each winner is added to a claimed set before the next
role runs, so no header is ever assigned two roles: the first role to claim
a header keeps it and later roles must find another column or stay None.
Only category and type may fall back to a leftover text column; size and
store location must be found by name.

The claimed set starts with every header already mapped to a non-breakdown
role (product, revenue, date, ...) plus the resolved product column, so
product columns never double as breakdowns.

Public API:
    resolve_product_column(mapping, rows) → str | None
    resolve_category_column / resolve_type_column / resolve_size_column /
        resolve_store_location_column(mapping, rows) → str | None
    allocate_breakdown_roles(mapping, rows) → BreakdownColumns
    best_breakdown_column(mapping, rows) → (str | None, str | None)
    complete_mapping(mapping, rows) → ColumnMapping
"""

import logging
from dataclasses import dataclass

from config.column_candidates import (
    CATEGORY_CANDIDATES,
    PAYMENT_TYPE_CANDIDATES,
    PRODUCT_CANDIDATES,
    SIZE_CANDIDATES,
    STORE_LOCATION_CANDIDATES,
    TYPE_CANDIDATES,
)
from config.schema import BREAKDOWN_ROLES, Role
from processing.column_classifier import (
    Row,
    column_values,
    is_bad_breakdown_column,
    is_forbidden_product_column,
    is_id_column,
    is_product_candidate,
    looks_like_date_column,
    normalize_header,
    plausible_location_column,
    table_headers,
)
from processing.column_resolver import ExcludePredicate, resolve_column
from processing.mapping import ColumnMapping

logger = logging.getLogger(__name__)

# Distinct-value bounds for the last-resort breakdown column.
FALLBACK_BREAKDOWN_MIN_VALUES: int = 2
FALLBACK_BREAKDOWN_MAX_VALUES: int = 8

# Roles that may fall back to any leftover text column.
FALLBACK_BREAKDOWN_ROLES: tuple[Role, ...] = (Role.CATEGORY, Role.TYPE)


# ═══════════════════════════════════════════════════════════════════════════
# Data class
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BreakdownColumns:
    """Headers chosen for the breakdown roles.  None = role unavailable."""

    category: str | None = None
    type: str | None = None
    size: str | None = None
    store_location: str | None = None

    def get(self, role: Role) -> str | None:
        return {
            Role.CATEGORY: self.category,
            Role.TYPE: self.type,
            Role.SIZE: self.size,
            Role.STORE_LOCATION: self.store_location,
        }[role]


# ═══════════════════════════════════════════════════════════════════════════
# Single-role resolution
# ═══════════════════════════════════════════════════════════════════════════

def _breakdown_excluded(header: str) -> bool:
    return is_id_column(header) or is_bad_breakdown_column(header)


def resolve_product_column(
    mapping: ColumnMapping | None,
    rows: list[Row],
) -> str | None:
    """
    Best-matching product column.

    Product is the only role allowed to match its own candidates ("name",
    "item", "sku", ...).  Headers that look like another role, id columns
    and forbidden patterns are excluded.
    """
    return resolve_column(
        mapping,
        rows,
        PRODUCT_CANDIDATES,
        allow_string_fallback=True,
        exclude=is_forbidden_product_column,
    )


def resolve_category_column(mapping: ColumnMapping | None, rows: list[Row]) -> str | None:
    return resolve_column(
        mapping, rows, CATEGORY_CANDIDATES, exclude=_breakdown_excluded,
    )


def resolve_type_column(mapping: ColumnMapping | None, rows: list[Row]) -> str | None:
    return resolve_column(
        mapping, rows, TYPE_CANDIDATES, exclude=_breakdown_excluded,
    )


def resolve_size_column(mapping: ColumnMapping | None, rows: list[Row]) -> str | None:
    return resolve_column(
        mapping, rows, SIZE_CANDIDATES, exclude=_breakdown_excluded,
    )


def resolve_store_location_column(
    mapping: ColumnMapping | None,
    rows: list[Row],
) -> str | None:
    """Store location: name match plus plausibility check, no text fallback."""
    return resolve_column(
        mapping,
        rows,
        STORE_LOCATION_CANDIDATES,
        validator=plausible_location_column,
        allow_string_fallback=False,
        exclude=_breakdown_excluded,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Allocation
# ═══════════════════════════════════════════════════════════════════════════

def allocate_breakdown_roles(
    mapping: ColumnMapping | None,
    rows: list[Row],
) -> BreakdownColumns:
    """
    Resolve size, category, type and store location without collisions.

    An explicit breakdown mapping is kept when it is not a product candidate
    and not already claimed; an explicit size mapping is taken without any
    name check.  Otherwise the role is resolved from the table, skipping
    headers claimed by earlier roles and product-like headers.  Only
    category and type may fall back to a leftover text column.

    Args:
        mapping: Existing role → header mapping (may be empty).
        rows: Table rows.

    Returns:
        BreakdownColumns with one header (or None) per breakdown role.
    """
    mapping = mapping or ColumnMapping()
    claimed: list[str] = _initial_claims(mapping, rows)

    def excluded(header: str) -> bool:
        return (
            _breakdown_excluded(header)
            or is_product_candidate(header)
            or header in claimed
        )

    chosen: dict[Role, str | None] = {}
    for role in BREAKDOWN_ROLES:
        explicit = mapping.get(role)
        header: str | None = None

        if explicit and explicit not in claimed:
            if role is Role.SIZE or not is_product_candidate(explicit):
                header = explicit
        elif explicit:
            logger.debug(
                f"Explicit {role.value} '{explicit}' already claimed; resolving"
            )

        if header is None:
            header = _resolve_breakdown(role, mapping, rows, claimed, excluded)

        chosen[role] = header
        if header:
            claimed.append(header)

    result = BreakdownColumns(
        category=chosen[Role.CATEGORY],
        type=chosen[Role.TYPE],
        size=chosen[Role.SIZE],
        store_location=chosen[Role.STORE_LOCATION],
    )
    logger.info(
        f"Breakdown allocation: size={result.size!r}, "
        f"category={result.category!r}, type={result.type!r}, "
        f"store_location={result.store_location!r}"
    )
    return result


def complete_mapping(
    mapping: ColumnMapping | None,
    rows: list[Row],
) -> ColumnMapping:
    """
    Return a new mapping with product and breakdown roles filled in.

    A missing product role is resolved from the table.  Breakdown roles
    take the allocator's result, which keeps valid explicit choices.
    """
    result = mapping or ColumnMapping()

    if not result.product_header():
        product = resolve_product_column(result, rows)
        if product:
            result = result.with_role(Role.PRODUCT, product)

    breakdowns = allocate_breakdown_roles(result, rows)
    for role in BREAKDOWN_ROLES:
        result = result.with_role(role, breakdowns.get(role))

    return result


def best_breakdown_column(
    mapping: ColumnMapping | None,
    rows: list[Row],
) -> tuple[str | None, str | None]:
    """
    The single most useful breakdown column and its kind.

    Tries category, type, size, payment type, then any text column with
    2-8 distinct values that is not a product, id, date or monetary column.

    Returns:
        (header, kind) with kind one of "category", "type", "size",
        "payment", "other"; (None, None) if nothing qualifies.
    """
    if not rows:
        return None, None

    for kind, resolver in (
        ("category", resolve_category_column),
        ("type", resolve_type_column),
        ("size", resolve_size_column),
    ):
        header = resolver(mapping, rows)
        if header and not is_product_candidate(header):
            return header, kind

    headers = table_headers(rows)
    for candidate in PAYMENT_TYPE_CANDIDATES:
        normalized_candidate = normalize_header(candidate)
        for header in headers:
            if (
                normalized_candidate in normalize_header(header)
                and not _breakdown_excluded(header)
            ):
                return header, "payment"

    first_row = rows[0]
    for header in headers:
        if is_bad_breakdown_column(header):
            continue
        if looks_like_date_column(header, rows):
            continue
        value = first_row.get(header)
        if not isinstance(value, str) or not value:
            continue
        distinct = {str(v) for v in column_values(header, rows)}
        if FALLBACK_BREAKDOWN_MIN_VALUES <= len(distinct) <= FALLBACK_BREAKDOWN_MAX_VALUES:
            return header, "other"

    return None, None


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _initial_claims(mapping: ColumnMapping, rows: list[Row]) -> list[str]:
    """Headers held by non-breakdown roles, plus the product column."""
    claimed = [
        header for role, header in mapping.items()
        if role not in BREAKDOWN_ROLES
    ]
    if not mapping.product_header():
        product = resolve_product_column(mapping, rows)
        if product:
            claimed.append(product)
    return claimed


def _resolve_breakdown(
    role: Role,
    mapping: ColumnMapping,
    rows: list[Row],
    claimed: list[str],
    excluded: ExcludePredicate,
) -> str | None:
    if role is Role.STORE_LOCATION:
        return resolve_column(
            mapping,
            rows,
            STORE_LOCATION_CANDIDATES,
            claimed=claimed,
            validator=plausible_location_column,
            allow_string_fallback=False,
            exclude=excluded,
        )

    candidates = {
        Role.SIZE: SIZE_CANDIDATES,
        Role.CATEGORY: CATEGORY_CANDIDATES,
        Role.TYPE: TYPE_CANDIDATES,
    }[role]
    return resolve_column(
        mapping,
        rows,
        candidates,
        claimed=claimed,
        allow_string_fallback=role in FALLBACK_BREAKDOWN_ROLES,
        exclude=excluded,
    )
