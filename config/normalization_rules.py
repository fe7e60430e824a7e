"""
Cleaning lookup tables.

Each table maps a raw value (lower-cased, whitespace removed) to its
canonical form.  Values not found in a table are title-cased.

COLUMN_PATTERN_TO_RULE_MAP keys are regexes matched (case-insensitive)
against mapped header names; a table applies to every mapped column whose
header matches.
"""

# ---------------------------------------------------------------------------
# Fat content ("LF", "low fat", "reg", ...)
# ---------------------------------------------------------------------------
FAT_CONTENT_MAP: dict[str, str] = {
    "lf": "Low Fat",
    "lowfat": "Low Fat",
    "reg": "Regular",
    "regular": "Regular",
    "fullfat": "Regular",
    "ff": "Regular",
}

COLUMN_PATTERN_TO_RULE_MAP: dict[str, dict[str, str]] = {
    r"fat_content": FAT_CONTENT_MAP,
}

# Used when a product column has no values to take the mode from.
UNNAMED_PRODUCT: str = "Unnamed"

# Rows further than this many standard deviations from the mean are outliers.
OUTLIER_Z_SCORE: float = 3.0

# Median stand-in when a numeric column has no parsable values.
DEFAULT_NUMERIC_FILL: float = 1.0
