"""
Column resolver — finds the header that best matches one role.

Resolution runs an ordered pipeline of named stages; the first header that
a stage proposes and that passes the acceptance check wins:

  1. mapped_exact      — explicit mapping headers equal to a candidate
  2. mapped_substring  — explicit mapping headers containing a candidate
  3. header_exact      — table headers equal to a candidate
  4. header_substring  — table headers containing a candidate
  5. string_fallback   — any text column with a value that is not
                         date-shaped (only when the caller allows it)

Every proposal is checked against the already-claimed set, the caller's
exclude predicate and the optional value validator.  A header that fails
the check is skipped and resolution carries on; nothing here raises for
unmatched data.  "No match" is None.

Public API:
    resolve_column(mapping, rows, candidates, ...) → str | None
    RESOLUTION_STAGES
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator

from processing.column_classifier import (
    Row,
    looks_like_date_column,
    normalize_header,
    table_headers,
)
from processing.mapping import ColumnMapping

logger = logging.getLogger(__name__)

Validator = Callable[[str, list[Row]], bool]
ExcludePredicate = Callable[[str], bool]


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ResolutionRequest:
    """Everything a stage needs to propose headers for one role."""

    mapping: ColumnMapping
    rows: list[Row]
    candidates: tuple[str, ...]
    claimed: frozenset[str] = field(default_factory=frozenset)
    validator: Validator | None = None
    allow_string_fallback: bool = True
    exclude: ExcludePredicate | None = None

    def accepts(self, header: str) -> bool:
        """Acceptance check shared by every stage."""
        if not header or header in self.claimed:
            return False
        if self.exclude is not None and self.exclude(header):
            return False
        if self.validator is not None and not self.validator(header, self.rows):
            return False
        return True


@dataclass(frozen=True)
class ResolutionStage:
    """A named strategy proposing headers in its own precedence order."""

    name: str
    propose: Callable[[ResolutionRequest], Iterator[str]]


# ═══════════════════════════════════════════════════════════════════════════
# Stages
# ═══════════════════════════════════════════════════════════════════════════

def _normalized_candidates(request: ResolutionRequest) -> list[str]:
    return [normalize_header(c) for c in request.candidates]


def mapped_exact(request: ResolutionRequest) -> Iterator[str]:
    """Explicit mapping headers whose normalized name equals a candidate."""
    candidates = _normalized_candidates(request)
    for header in request.mapping.headers():
        if normalize_header(header) in candidates:
            yield header


def mapped_substring(request: ResolutionRequest) -> Iterator[str]:
    """Explicit mapping headers whose normalized name contains a candidate."""
    candidates = _normalized_candidates(request)
    for header in request.mapping.headers():
        normalized = normalize_header(header)
        if any(c in normalized for c in candidates):
            yield header


def header_exact(request: ResolutionRequest) -> Iterator[str]:
    """Table headers equal to a candidate, candidates in precedence order."""
    headers = table_headers(request.rows)
    for candidate in _normalized_candidates(request):
        for header in headers:
            if normalize_header(header) == candidate:
                yield header


def header_substring(request: ResolutionRequest) -> Iterator[str]:
    """Table headers containing a candidate, candidates in precedence order."""
    headers = table_headers(request.rows)
    for candidate in _normalized_candidates(request):
        for header in headers:
            if candidate in normalize_header(header):
                yield header


def string_fallback(request: ResolutionRequest) -> Iterator[str]:
    """
    Leftover text columns: first-row value is a non-empty string and the
    column is not date-shaped.
    """
    if not request.allow_string_fallback or not request.rows:
        return
    first_row = request.rows[0]
    for header in table_headers(request.rows):
        value = first_row.get(header)
        if not isinstance(value, str) or len(value) == 0:
            continue
        if looks_like_date_column(header, request.rows):
            continue
        yield header


RESOLUTION_STAGES: tuple[ResolutionStage, ...] = (
    ResolutionStage("mapped_exact", mapped_exact),
    ResolutionStage("mapped_substring", mapped_substring),
    ResolutionStage("header_exact", header_exact),
    ResolutionStage("header_substring", header_substring),
    ResolutionStage("string_fallback", string_fallback),
)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def resolve_column(
    mapping: ColumnMapping | None,
    rows: list[Row] | None,
    candidates: Iterable[str],
    claimed: Iterable[str] = (),
    validator: Validator | None = None,
    allow_string_fallback: bool = True,
    exclude: ExcludePredicate | None = None,
    stages: tuple[ResolutionStage, ...] = RESOLUTION_STAGES,
) -> str | None:
    """
    Find the best-matching header for one role.

    Args:
        mapping: Explicit role → header mapping (user input or an earlier
                 automatic pass).  Its headers are searched first.
        rows: Table rows; headers are read from the first row.
        candidates: The role's candidate fragments, most specific first.
        claimed: Headers already assigned to other roles in this pass.
        validator: Optional value-shape check, called as
                   validator(header, rows).
        allow_string_fallback: Whether the leftover-text-column stage runs.
        exclude: Predicate returning True for headers this role must skip.
        stages: Resolution pipeline, RESOLUTION_STAGES by default.

    Returns:
        The chosen header, or None if no stage produced an acceptable one.
    """
    request = ResolutionRequest(
        mapping=mapping or ColumnMapping(),
        rows=rows or [],
        candidates=tuple(candidates),
        claimed=frozenset(claimed),
        validator=validator,
        allow_string_fallback=allow_string_fallback,
        exclude=exclude,
    )

    for stage in stages:
        for header in stage.propose(request):
            if request.accepts(header):
                logger.debug(f"Resolved '{header}' at stage {stage.name}")
                return header

    logger.debug(f"No column resolved for candidates {request.candidates[:3]}...")
    return None
