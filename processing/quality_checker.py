"""
Quality checker — rates how ready an uploaded table is for the dashboard.

Runs four checks against the mapped columns:
  1. Required roles: product, revenue and date are mapped to real headers.
  2. Missing values: empty cells in any mapped column.
  3. Invalid numbers: revenue cells that are not numbers once currency
     symbols and separators are stripped.
  4. Duplicate rows.

Each finding is a DataIssue with a severity; the health score starts at
100 and loses 30 / 15 / 5 points per high / medium / low issue.

Public API:
    check_quality(dataframe, mapping) → QualityReport
    upload_health_score(dataframe, mapping) → int
    missing_required_roles(mapping, headers) → list[Role]
    health_label(score) → str
"""

import logging
from dataclasses import dataclass, field

import pandas as pd

from config.schema import (
    DEFAULT_HEALTH_LABEL,
    HEALTH_LABELS,
    HEALTH_REQUIRED_ROLES,
    SEVERITY_DEDUCTIONS,
    Role,
)
from processing.mapping import ColumnMapping

logger = logging.getLogger(__name__)

# Missing values above this share of the row count are a medium issue.
MISSING_VALUES_MEDIUM_RATIO: float = 0.1

# Rows sampled for the upload-time completeness score.
UPLOAD_SAMPLE_SIZE: int = 100

_NON_NUMERIC_PATTERN = r"[^0-9.\-]"


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class DataIssue:
    """One problem found in the table."""

    type: str
    severity: str
    count: int
    description: str
    row_indexes: list[int] = field(default_factory=list)
    column: str | None = None


@dataclass
class QualityReport:
    """Health report for one uploaded table."""

    total_rows: int = 0
    issues: list[DataIssue] = field(default_factory=list)
    missing_roles: list[Role] = field(default_factory=list)
    null_counts: dict[str, int] = field(default_factory=dict)
    duplicate_rows: int = 0
    health_score: int = 100
    health_label: str = "Excellent"
    is_clean: bool = True


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def check_quality(dataframe: pd.DataFrame, mapping: ColumnMapping) -> QualityReport:
    """
    Validate a table against its mapping and build a health report.

    Args:
        dataframe: The uploaded table.
        mapping: The role → header mapping in use.

    Returns:
        QualityReport with every issue found and the resulting score.
    """
    report = QualityReport(total_rows=len(dataframe))
    if dataframe.empty:
        logger.info("Quality check skipped: empty table")
        return report

    headers = [str(column) for column in dataframe.columns]
    report.missing_roles = missing_required_roles(mapping, headers)
    if report.missing_roles:
        names = ", ".join(role.value for role in report.missing_roles)
        report.issues.append(DataIssue(
            type="missing_headers",
            severity="high",
            count=len(report.missing_roles),
            description=f"Missing important columns: {names}",
        ))

    missing_issue, report.null_counts = _check_missing_values(dataframe, mapping)
    if missing_issue is not None:
        report.issues.append(missing_issue)

    invalid_issue = _check_invalid_revenue(dataframe, mapping)
    if invalid_issue is not None:
        report.issues.append(invalid_issue)

    report.duplicate_rows = int(dataframe.duplicated().sum())
    if report.duplicate_rows > 0:
        report.issues.append(DataIssue(
            type="duplicate_rows",
            severity="low",
            count=report.duplicate_rows,
            description=f"{report.duplicate_rows} duplicate rows found",
        ))

    report.health_score = _score_issues(report.issues)
    report.health_label = health_label(report.health_score)
    report.is_clean = not report.issues

    logger.info(
        f"Quality check complete: {report.total_rows} rows, "
        f"{len(report.issues)} issues, health score {report.health_score} "
        f"({report.health_label})"
    )
    return report


def upload_health_score(dataframe: pd.DataFrame, mapping: ColumnMapping) -> int:
    """
    Quick score shown right after upload, as a percentage.

    One point each for a mapped revenue, quantity, product and date column,
    plus the average share of filled cells per row over the first 100 rows.
    """
    if dataframe.empty:
        return 0

    score = 0.0
    score += 1 if mapping.revenue else 0
    score += 1 if mapping.quantity else 0
    score += 1 if mapping.product_header() else 0
    score += 1 if mapping.date else 0

    sample = dataframe.head(UPLOAD_SAMPLE_SIZE)
    filled = ~_blank_mask_frame(sample)
    score += float(filled.mean(axis=1).mean())

    return round(score / 5 * 100)


def missing_required_roles(mapping: ColumnMapping, headers: list[str]) -> list[Role]:
    """
    Required roles that are unmapped or mapped to a header not in the table.

    product_detail satisfies the product role.
    """
    missing: list[Role] = []
    for role in HEALTH_REQUIRED_ROLES:
        header = mapping.product_header() if role is Role.PRODUCT else mapping.get(role)
        if not header or header not in headers:
            missing.append(role)
    return missing


def health_label(score: int) -> str:
    for threshold, label in HEALTH_LABELS:
        if score >= threshold:
            return label
    return DEFAULT_HEALTH_LABEL


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _blank_mask(series: pd.Series) -> pd.Series:
    """True where a cell is NaN/None or whitespace-only text."""
    return series.isna() | (series.astype(str).str.strip() == "")


def _blank_mask_frame(dataframe: pd.DataFrame) -> pd.DataFrame:
    return dataframe.apply(_blank_mask)


def _check_missing_values(
    dataframe: pd.DataFrame,
    mapping: ColumnMapping,
) -> tuple[DataIssue | None, dict[str, int]]:
    """
    Count empty cells in mapped columns.

    A mapped header absent from the table counts as empty in every row.

    Returns:
        (issue or None, header → empty cell count)
    """
    null_counts: dict[str, int] = {}
    affected_rows: set[int] = set()
    total_rows = len(dataframe)

    for _, header in mapping.items():
        if header in null_counts:
            continue
        if header not in dataframe.columns:
            null_counts[header] = total_rows
            affected_rows.update(range(total_rows))
            continue
        mask = _blank_mask(dataframe[header])
        null_counts[header] = int(mask.sum())
        affected_rows.update(int(position) for position in mask.to_numpy().nonzero()[0])

    missing_count = sum(null_counts.values())
    if missing_count == 0:
        return None, null_counts

    severity = (
        "medium" if missing_count > total_rows * MISSING_VALUES_MEDIUM_RATIO else "low"
    )
    issue = DataIssue(
        type="missing_values",
        severity=severity,
        count=missing_count,
        description=f"{missing_count} missing values found in important columns",
        row_indexes=sorted(affected_rows),
    )
    return issue, null_counts


def _check_invalid_revenue(
    dataframe: pd.DataFrame,
    mapping: ColumnMapping,
) -> DataIssue | None:
    """Revenue cells that stay non-numeric after stripping symbols."""
    column = mapping.revenue
    if not column or column not in dataframe.columns:
        return None

    series = dataframe[column]
    present = ~_blank_mask(series)
    cleaned = series.astype(str).str.replace(_NON_NUMERIC_PATTERN, "", regex=True)
    numeric = pd.to_numeric(cleaned, errors="coerce")
    invalid = present & numeric.isna()

    invalid_count = int(invalid.sum())
    if invalid_count == 0:
        return None

    return DataIssue(
        type="invalid_numbers",
        severity="medium",
        count=invalid_count,
        description=f"{invalid_count} rows with invalid revenue numbers",
        row_indexes=[int(position) for position in invalid.to_numpy().nonzero()[0]],
        column=column,
    )


def _score_issues(issues: list[DataIssue]) -> int:
    deductions = sum(SEVERITY_DEDUCTIONS.get(issue.severity, 0) for issue in issues)
    return max(0, 100 - deductions)
