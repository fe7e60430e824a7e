"""
Business type detection from the uploaded filename and headers.

Public API:
    detect_business_type(filename, headers) → str
"""

import logging

from config.business_types import (
    DEFAULT_BUSINESS_TYPE,
    FILENAME_KEYWORDS,
    HEADER_KEYWORDS,
)

logger = logging.getLogger(__name__)


def detect_business_type(filename: str | None, headers: list[str]) -> str:
    """
    Guess the business type behind a sales file.

    Filename keywords win over header keywords ("pizza_sales.csv" is a
    restaurant whatever its columns).  Falls back to "retail".

    Args:
        filename: Uploaded file name; may be None or empty.
        headers: Column headers of the table.

    Returns:
        One of the business types in config.business_types.
    """
    lower_filename = (filename or "").lower()
    for business_type, keywords in FILENAME_KEYWORDS:
        if any(keyword in lower_filename for keyword in keywords):
            logger.info(f"Business type '{business_type}' detected from filename")
            return business_type

    lower_headers = [str(header).lower() for header in headers]
    for business_type, keywords in HEADER_KEYWORDS:
        if any(keyword in header for header in lower_headers for keyword in keywords):
            logger.info(f"Business type '{business_type}' detected from headers")
            return business_type

    logger.info(f"No business type signal; defaulting to '{DEFAULT_BUSINESS_TYPE}'")
    return DEFAULT_BUSINESS_TYPE
