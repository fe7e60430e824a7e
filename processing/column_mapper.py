"""
Column mapper — proposes a role → header mapping when a file is uploaded.

Looks only at header names and the first data row.  Roles are detected in
this order, each one skipping headers an earlier role already took:

  1. time            — header named "...time..." holding "HH:MM[:SS]", else
                       any header holding such a value
  2. product_detail  — fine-grained item names ("Product Name", "Dish")
  3. product         — category-like product field ("Product Category");
                       if neither product role was found, the best-scoring
                       generic product header
  4. revenue, quantity, date — keyword match, then a fuzzy match against
                       the same keywords (thefuzz, threshold 90)
  5. region          — online sellers only

The mapping is rated by processing.confidence; below the threshold the
upload flow asks the user to map columns by hand.

Public API:
    map_columns(rows, business_type) → ColumnMappingResult
"""

import logging
import re
from dataclasses import dataclass, field

from config.business_types import DEFAULT_BUSINESS_TYPE
from config.column_candidates import (
    CODE_HEADER_REGEX,
    DATE_KEYS,
    FUZZY_KEY_MIN_LENGTH,
    FUZZY_KEY_THRESHOLD,
    GENERIC_PRODUCT_KEYS,
    PRODUCT_CATEGORY_KEYS,
    PRODUCT_DETAIL_KEYS,
    QUANTITY_KEYS,
    REGION_KEYS,
    REVENUE_KEYS,
)
from config.schema import Role
from processing.column_classifier import Row, is_blank, looks_like_name
from processing.confidence import needs_manual_mapping, score_mapping
from processing.date_parser import looks_like_time, parse_date_time
from processing.mapping import ColumnMapping
from utils.fuzzy_match import best_header_for_keys

logger = logging.getLogger(__name__)

_CODE_HEADER_PATTERN = re.compile(CODE_HEADER_REGEX, re.IGNORECASE)
_SEPARATORS_PATTERN = re.compile(r"[_\s]+")

# Keyword matches are exact evidence; fuzzy matches carry their own score.
KEYWORD_MATCH_SCORE: int = 100


# ═══════════════════════════════════════════════════════════════════════════
# Data class
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class ColumnMappingResult:
    """Result of the automatic mapping of one uploaded table."""

    mapping: ColumnMapping = field(default_factory=ColumnMapping)
    """Proposed role → header assignment."""

    confidence: float = 0.0
    """Mapping confidence in [0, 1]."""

    needs_manual_mapping: bool = True
    """True when confidence is below the threshold."""

    business_type: str = DEFAULT_BUSINESS_TYPE

    match_scores: dict[str, int] = field(default_factory=dict)
    """header → match score (100 = keyword match, 90-99 = fuzzy)."""

    unmapped_headers: list[str] = field(default_factory=list)
    """Headers not assigned to any role."""


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def map_columns(
    rows: list[Row],
    business_type: str = DEFAULT_BUSINESS_TYPE,
) -> ColumnMappingResult:
    """
    Propose a mapping for an uploaded table.

    Args:
        rows: Table rows as parsed from the file.
        business_type: Detected or user-selected business type; only
                       "online_seller" changes the result (region role).

    Returns:
        ColumnMappingResult with the mapping, its confidence and whether
        the manual mapping form should be shown.
    """
    sample: Row = rows[0] if rows else {}
    headers = list(sample.keys())

    detector = _RoleDetector(headers, sample)
    detector.detect_time()
    detector.detect_products()
    detector.detect_keyword_role(Role.REVENUE, REVENUE_KEYS)
    detector.detect_keyword_role(Role.QUANTITY, QUANTITY_KEYS)
    detector.detect_date()
    if business_type == "online_seller":
        detector.detect_keyword_role(Role.REGION, REGION_KEYS, allow_fuzzy=False)

    mapping = ColumnMapping.from_dict(detector.assigned)
    confidence = score_mapping(mapping, sample)

    result = ColumnMappingResult(
        mapping=mapping,
        confidence=confidence,
        needs_manual_mapping=needs_manual_mapping(confidence),
        business_type=business_type,
        match_scores=detector.scores,
        unmapped_headers=[h for h in headers if h not in mapping.headers()],
    )

    logger.info(
        f"Column mapping complete: {len(headers)} headers, "
        f"{len(mapping.headers())} mapped, confidence={confidence:.2f}, "
        f"manual mapping {'required' if result.needs_manual_mapping else 'skipped'}"
    )
    return result


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

class _RoleDetector:
    """Assigns roles one at a time, never reusing a header."""

    def __init__(self, headers: list[str], sample: Row):
        self.headers = headers
        self.sample = sample
        self.assigned: dict[Role, str] = {}
        self.scores: dict[str, int] = {}

    def available(self) -> list[str]:
        taken = set(self.assigned.values())
        return [h for h in self.headers if h not in taken]

    def assign(self, role: Role, header: str | None, score: int = KEYWORD_MATCH_SCORE) -> None:
        if header is None:
            return
        self.assigned[role] = header
        self.scores[header] = score
        logger.debug(f"Mapped '{header}' → {role.value} (score={score})")

    # -------------------------------------------------------------------

    def detect_time(self) -> None:
        headers = self.available()
        named = [h for h in headers if "time" in h.lower()]
        for pool in (named, headers):
            for header in pool:
                if looks_like_time(self.sample.get(header)):
                    self.assign(Role.TIME, header)
                    return

    def detect_products(self) -> None:
        self.assign(
            Role.PRODUCT_DETAIL,
            _first_header_with_key(self.available(), PRODUCT_DETAIL_KEYS, fold=True),
        )
        self.assign(
            Role.PRODUCT,
            _first_header_with_key(self.available(), PRODUCT_CATEGORY_KEYS, fold=True),
        )
        if Role.PRODUCT_DETAIL not in self.assigned and Role.PRODUCT not in self.assigned:
            self.assign(Role.PRODUCT, self._best_generic_product())

    def detect_keyword_role(
        self,
        role: Role,
        keys: tuple[str, ...],
        allow_fuzzy: bool = True,
    ) -> None:
        header = _first_header_with_key(self.available(), keys)
        if header is not None:
            self.assign(role, header)
            return
        if allow_fuzzy:
            fuzzy_header, score = best_header_for_keys(
                self.available(), keys, FUZZY_KEY_THRESHOLD, FUZZY_KEY_MIN_LENGTH,
            )
            self.assign(role, fuzzy_header, score)

    def detect_date(self) -> None:
        header = _first_header_with_key(self.available(), DATE_KEYS)
        if header is None:
            header = next(
                (
                    h for h in self.available()
                    if isinstance(self.sample.get(h), str)
                    and ":" in self.sample[h]
                    and parse_date_time(self.sample[h]) is not None
                ),
                None,
            )
        if header is not None:
            self.assign(Role.DATE, header)
            return
        self.detect_keyword_role(Role.DATE, DATE_KEYS)

    def _best_generic_product(self) -> str | None:
        """
        Highest-scoring header containing a generic product key.

        +1 for containing a key, +2 for a readable sample value, +3 more when
        the header also does not end in id/code/sku/number, +1 for an exact
        key match.  The first header reaching the top score wins.
        """
        best_header: str | None = None
        best_score = 0
        for header in self.available():
            lowered = header.lower()
            readable = not is_blank(self.sample.get(header)) and looks_like_name(
                self.sample.get(header)
            )
            for key in GENERIC_PRODUCT_KEYS:
                if key not in lowered:
                    continue
                score = 1
                if readable:
                    score += 2
                    if not _CODE_HEADER_PATTERN.search(lowered):
                        score += 3
                if lowered == key:
                    score += 1
                if score > best_score:
                    best_header, best_score = header, score
        return best_header


def _first_header_with_key(
    headers: list[str],
    keys: tuple[str, ...],
    fold: bool = False,
) -> str | None:
    """
    First header (in table order) whose lower-cased name contains a key.

    With fold=True, runs of underscores and whitespace count as one space.
    """
    for header in headers:
        text = header.lower()
        if fold:
            text = _SEPARATORS_PATTERN.sub(" ", text)
        if any(key in text for key in keys):
            return header
    return None
