"""
Fuzzy header matching.

Wraps the thefuzz library to catch misspelled headers ("Revnue",
"Quantitiy") that plain substring matching misses.  Used by the automatic
column mapper as its last resort for revenue, quantity and date.

token_sort_ratio ignores word order and punctuation, so "Price Total" and
"total_price" both score 100 against the key "total price".
"""

import logging

from thefuzz import fuzz

logger = logging.getLogger(__name__)


def best_header_for_keys(
    headers: list[str],
    keys: tuple[str, ...],
    threshold: int,
    min_key_length: int = 0,
) -> tuple[str | None, int]:
    """
    Pick the header that most closely resembles any of *keys*.

    Args:
        headers: Header names to consider, in table order.
        keys: Lower-case keywords for one role.
        threshold: Minimum token_sort_ratio score (0-100) to accept.
        min_key_length: Keys shorter than this are ignored; short keys
                        like "qty" match too many unrelated headers.

    Returns:
        (header, score) of the highest-scoring header (first one on ties),
        or (None, 0) if none reaches the threshold.
    """
    usable_keys = [key for key in keys if len(key) >= min_key_length]
    if not headers or not usable_keys:
        return None, 0

    best_header: str | None = None
    best_key: str | None = None
    best_score = 0
    for header in headers:
        if not header or not header.strip():
            continue
        key, score = _closest_key(header, usable_keys)
        if score > best_score:
            best_header, best_key, best_score = header, key, score

    if best_header is None or best_score < threshold:
        return None, 0

    logger.debug(
        f"Fuzzy matched header '{best_header}' to key '{best_key}' "
        f"(score={best_score})"
    )
    return best_header, best_score


def _closest_key(header: str, keys: list[str]) -> tuple[str | None, int]:
    """Highest-scoring key for one header; first key wins on ties."""
    lowered = header.strip().lower()
    closest: str | None = None
    closest_score = 0
    for key in keys:
        score = fuzz.token_sort_ratio(lowered, key)
        if score > closest_score:
            closest, closest_score = key, score
    return closest, closest_score
