"""
Header-name candidate tables.

Ordered name fragments per role, plus the exclusion patterns that keep
identifier, temporal, personal and monetary columns out of the breakdown
roles.  Fragments are compared after header normalization (lower-case,
spaces and underscores removed), so "pizza_name" and "pizza name" are the
same fragment; both spellings are kept so the tables read like the headers
they are meant to catch.

Order encodes precedence: more specific fragments come first.

These tables are data.  Extend them here; the resolver never hard-codes a
fragment.
"""

from config.schema import Role

# ---------------------------------------------------------------------------
# Role candidates used by the column resolver
# ---------------------------------------------------------------------------
PRODUCT_CANDIDATES: tuple[str, ...] = (
    "pizza_name", "pizza name", "product_detail", "product details",
    "item_detail", "item details", "item_name", "item name",
    "product_name", "product name", "description",
    "sku", "coffee_name", "coffee name", "blend", "variety",
    "menu_item", "menu item",
    "name", "product", "item", "menu", "food",
)

CATEGORY_CANDIDATES: tuple[str, ...] = (
    "product_category", "product category", "category",
    "menu_category", "menu category", "department", "segment", "division",
)

TYPE_CANDIDATES: tuple[str, ...] = (
    "product_type", "product type", "type", "group", "item_group",
    "item group", "style", "pizza_style", "pizza style", "variety",
    "crust", "crust_type", "blend",
)

SIZE_CANDIDATES: tuple[str, ...] = (
    "size", "pizza_size", "pizza size", "drink_size", "drink size",
    "portion", "portion size",
)

STORE_LOCATION_CANDIDATES: tuple[str, ...] = (
    "store_location", "store location", "location", "branch", "shop",
    "store", "region", "area",
)

PAYMENT_TYPE_CANDIDATES: tuple[str, ...] = (
    "cash_type", "cashtype", "payment_type", "paymenttype", "pay_type",
    "paytype", "tender_type", "tendertype",
)

ROLE_CANDIDATES: dict[Role, tuple[str, ...]] = {
    Role.PRODUCT: PRODUCT_CANDIDATES,
    Role.CATEGORY: CATEGORY_CANDIDATES,
    Role.TYPE: TYPE_CANDIDATES,
    Role.SIZE: SIZE_CANDIDATES,
    Role.STORE_LOCATION: STORE_LOCATION_CANDIDATES,
    Role.PAYMENT_TYPE: PAYMENT_TYPE_CANDIDATES,
}

# ---------------------------------------------------------------------------
# Exclusion patterns
# ---------------------------------------------------------------------------

# A header containing any of these can never be a breakdown (or the product).
FORBIDDEN_BREAKDOWN_PATTERNS: tuple[str, ...] = (
    # Quantities, temporal and personal fields
    "quantity", "qty", "date", "time", "timestamp",
    "firstname", "first name", "lastname", "last name",
    "email", "phone", "address", "transaction", "order", "dob", "birth",
    "customername", "customer name",
    # Monetary fields
    "price", "unit_price", "unit price", "amount", "cost", "total", "revenue",
    # Ingredient-like fields
    "ingredient", "ingredients", "topping", "toppings", "component",
    "components", "add-on", "addon", "modification", "modifications",
)

# Extra fragments that disqualify a header from the product role on top of
# every non-product role's candidates.
FORBIDDEN_PRODUCT_EXTRAS: tuple[str, ...] = (
    "customer", "order", "segment", "division",
)

# Monetary / quantity-like fragments, matched as a regex against the
# normalized header, that disqualify a breakdown.
BAD_BREAKDOWN_REGEX: str = r"quantity|order|sku|price|amount|cost|total|revenue"

# Whole-token "id" inside a normalized header.
ID_TOKEN_REGEX: str = r"(^|[^a-z])id([^a-z]|$)"

# ---------------------------------------------------------------------------
# Upload-time keyword tables used by the automatic column mapper.
# Compared against lower-cased headers (not normalized), by substring.
# ---------------------------------------------------------------------------
PRODUCT_DETAIL_KEYS: tuple[str, ...] = (
    "product detail", "product_detail", "menu item", "item detail",
    "item_description", "product name", "item name", "dish", "drink",
    "coffee", "tea", "bakery",
)

PRODUCT_CATEGORY_KEYS: tuple[str, ...] = (
    "product category", "product_category", "category", "type",
    "classification", "group",
)

GENERIC_PRODUCT_KEYS: tuple[str, ...] = (
    "item", "menu item", "pizza name", "product", "dish", "type",
    "description", "name", "pizza", "menu", "product name", "item name",
    "product_name", "item_name", "title", "service", "material", "sku",
)

REVENUE_KEYS: tuple[str, ...] = (
    "revenue", "amount", "total_price", "price", "sales", "total", "cost",
    "total_amount", "grand_total", "net_amount", "gross_amount", "value",
    "total price", "unit price", "line total",
)

QUANTITY_KEYS: tuple[str, ...] = (
    "qty", "quantity", "units_sold", "count", "items", "units", "pieces",
    "amount", "number", "sold", "ordered",
)

DATE_KEYS: tuple[str, ...] = (
    "date", "time", "invoice_date", "order_date", "transaction_date",
    "invoicedate", "created", "timestamp", "when", "order date",
    "transaction date",
)

REGION_KEYS: tuple[str, ...] = (
    "region", "country", "state", "location", "city",
)

# Headers ending in one of these look like codes, not product names.
CODE_HEADER_REGEX: str = r"(_?id|code|sku|number)$"

# Minimum thefuzz score for the typo-tolerant keyword fallback.
FUZZY_KEY_THRESHOLD: int = 90

# Keys shorter than this are too short for fuzzy matching ("qty", "item").
FUZZY_KEY_MIN_LENGTH: int = 5
