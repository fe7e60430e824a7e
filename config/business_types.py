"""
Business type detection keywords.

Filename keywords are checked before header keywords; within each table the
first business type with a matching keyword wins.
"""

DEFAULT_BUSINESS_TYPE: str = "retail"

BUSINESS_TYPES: list[str] = [
    "restaurant",
    "online_seller",
    "retail",
    "construction",
    "other",
]

# Ordered: business type → keywords looked for in the lower-cased filename.
FILENAME_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("restaurant", ("pizza", "restaurant", "cafe", "menu")),
    ("online_seller", ("shop", "fashion", "store", "online")),
    ("construction", ("construction", "building", "contractor")),
    ("retail", ("retail",)),
]

# Ordered: business type → keywords looked for in lower-cased headers.
HEADER_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("restaurant", ("pizza", "menu", "dish", "order")),
    ("online_seller", (
        "shipping", "category", "sku", "variant", "shopify", "shopee",
    )),
    ("construction", ("construction", "material", "contractor", "project")),
]
