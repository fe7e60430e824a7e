"""
Mapping confidence — rates how far an automatic mapping can be trusted.

The score is a cheap, explainable heuristic in [0, 1]:
  - share of required roles (product or product_detail, revenue) mapped
  - +0.2 if quantity is mapped
  - +0.1 if date is mapped
  - +0.2 if the sampled product value is text longer than 2 characters
    (a real name rather than a numeric code)
clamped to 1.0.  Adding a mapping never lowers the score.

The upload flow shows the manual mapping form when the score is below
CONFIDENCE_THRESHOLD.

Public API:
    score_mapping(mapping, sample_row) → float
    needs_manual_mapping(score) → bool
"""

import logging

from config.schema import (
    CONFIDENCE_REQUIRED_ROLES,
    CONFIDENCE_THRESHOLD,
    DATE_BONUS,
    PRODUCT_NAME_BONUS,
    QUANTITY_BONUS,
    Role,
)
from processing.column_classifier import Row, looks_like_name
from processing.mapping import ColumnMapping

logger = logging.getLogger(__name__)


def score_mapping(mapping: ColumnMapping, sample_row: Row | None) -> float:
    """
    Score a product/revenue mapping against one sample row.

    Args:
        mapping: The role → header mapping to rate.
        sample_row: Usually the first data row; may be None.

    Returns:
        Confidence in [0, 1].
    """
    mapped_required = [
        role for role in CONFIDENCE_REQUIRED_ROLES if _is_mapped(mapping, role)
    ]
    confidence = len(mapped_required) / len(CONFIDENCE_REQUIRED_ROLES)

    if mapping.quantity:
        confidence += QUANTITY_BONUS
    if mapping.date:
        confidence += DATE_BONUS

    product_header = mapping.product_header()
    if product_header and sample_row is not None:
        if looks_like_name(sample_row.get(product_header)):
            confidence += PRODUCT_NAME_BONUS

    confidence = min(confidence, 1.0)
    logger.debug(f"Mapping confidence {confidence:.2f} for {mapping.as_dict()}")
    return confidence


def needs_manual_mapping(
    score: float,
    threshold: float = CONFIDENCE_THRESHOLD,
) -> bool:
    """True when the score is too low to trust the automatic mapping."""
    return score < threshold


def _is_mapped(mapping: ColumnMapping, role: Role) -> bool:
    """product_detail stands in for product."""
    if role is Role.PRODUCT:
        return bool(mapping.product_header())
    return bool(mapping.get(role))

