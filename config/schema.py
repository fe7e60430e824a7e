"""
Semantic field definitions for uploaded sales tables.

Defines the closed set of roles a column can be assigned, the role groups
used by the resolver and the health checker, and the thresholds that gate
the upload flow.
"""

from enum import Enum


class Role(str, Enum):
    """Semantic meaning assigned to at most one header per table."""

    PRODUCT = "product"
    PRODUCT_DETAIL = "product_detail"
    REVENUE = "revenue"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"
    QUANTITY = "quantity"
    CATEGORY = "category"
    TYPE = "type"
    SIZE = "size"
    STORE_LOCATION = "storeLocation"
    PAYMENT_TYPE = "paymentType"
    REGION = "region"


# Breakdown roles in allocation order. Earlier roles claim headers first.
BREAKDOWN_ROLES: tuple[Role, ...] = (
    Role.SIZE,
    Role.CATEGORY,
    Role.TYPE,
    Role.STORE_LOCATION,
)

# Roles that identify the product sold. Either one satisfies "product".
PRODUCT_ROLES: tuple[Role, ...] = (Role.PRODUCT_DETAIL, Role.PRODUCT)

# Roles the confidence scorer treats as strictly required.
CONFIDENCE_REQUIRED_ROLES: tuple[Role, ...] = (Role.PRODUCT, Role.REVENUE)

# Roles the data health check requires before a dashboard can be built.
HEALTH_REQUIRED_ROLES: tuple[Role, ...] = (Role.PRODUCT, Role.REVENUE, Role.DATE)

# Roles whose cells are parsed as numbers during cleaning.
NUMERIC_ROLES: tuple[Role, ...] = (Role.REVENUE, Role.QUANTITY)

# Temporal sources in the order the health-path date normalizer reads them.
TEMPORAL_ROLES: tuple[Role, ...] = (Role.DATE, Role.DATETIME, Role.TIMESTAMP)

# Below this score the upload flow asks the user to map columns by hand.
CONFIDENCE_THRESHOLD: float = 0.7

# Confidence bonuses for optional roles and a readable product sample.
QUANTITY_BONUS: float = 0.2
DATE_BONUS: float = 0.1
PRODUCT_NAME_BONUS: float = 0.2

# Health score deductions per issue severity.
SEVERITY_DEDUCTIONS: dict[str, int] = {
    "high": 30,
    "medium": 15,
    "low": 5,
}

# Health score label thresholds, checked top-down.
HEALTH_LABELS: list[tuple[int, str]] = [
    (90, "Excellent"),
    (85, "Good"),
    (70, "Fair"),
]
DEFAULT_HEALTH_LABEL: str = "Needs Attention"


def role_from_name(name: "str | Role") -> Role:
    """
    Look up a Role by its value ("storeLocation") or member name ("STORE_LOCATION").

    Raises:
        ValueError: If *name* does not denote a known role.
    """
    if isinstance(name, Role):
        return name
    try:
        return Role(name)
    except ValueError:
        pass
    try:
        return Role[name.upper()]
    except KeyError:
        raise ValueError(f"Unknown role: '{name}'") from None
