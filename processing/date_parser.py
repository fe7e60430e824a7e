"""
Date/time parser — turns heterogeneous date and time cells into datetimes.

Formats are tried in this order:
  a) one field holding date and time in ISO-like shape ("2024-03-01 10:15:50",
     "2024-03-01T10:15:50.123"), retried once without fractional seconds
  b) separate date + time fields joined into an ISO string, same retry
  c) bare ISO date "YYYY-MM-DD" (optional "T..." suffix)
  d) "YYYY/MM/DD" or "YYYY.MM.DD"
  e) "DD-MM-YYYY", "DD/MM/YYYY", "DD.MM.YYYY" — always day-first
  f) pandas' general-purpose parser

Nothing here raises for bad input: unparsable values give None, and callers
drop None rows from time-based analysis.  Timezone-aware results are
converted to naive UTC so every returned value compares with every other.

Public API:
    parse_date_time(date_part, time_part=None) → datetime | None
    build_date(year, month, day, time_part=None) → datetime | None
    looks_like_time(value) → bool
    normalize_row_date(row, mapping) → date | None
"""

import logging
import re
from datetime import date, datetime, timezone

import pandas as pd

from processing.column_classifier import Row, is_blank
from processing.mapping import ColumnMapping

logger = logging.getLogger(__name__)

_COMBINED_DATETIME_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}[\sT]\d{2}:\d{2}:\d{2}(\.\d+)?"
)
_ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(T.*)?$")
_YEAR_FIRST_PATTERN = re.compile(r"^(\d{4})[/.](\d{2})[/.](\d{2})$")
_DAY_FIRST_PATTERN = re.compile(r"^(\d{2})[/\-.](\d{2})[/\-.](\d{4})$")
_FRACTIONAL_SECONDS_PATTERN = re.compile(r"\.\d+")
_TIME_PATTERN = re.compile(r"^(?:[01]?\d|2[0-3]):[0-5]\d(?::[0-5]\d)?$")
_UNIX_SECONDS_PATTERN = re.compile(r"^\d{10}$")
_UNIX_MILLISECONDS_PATTERN = re.compile(r"^\d{13}$")


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def parse_date_time(
    date_part: object,
    time_part: object = None,
) -> datetime | None:
    """
    Parse a date cell, optionally combined with a separate time cell.

    Args:
        date_part: The date (or combined date-time) cell value.
        time_part: Optional time cell value ("10:15", "10:15:50.123").

    Returns:
        A naive datetime, or None if the value cannot be parsed.
    """
    if isinstance(date_part, datetime):
        return _to_naive_utc(date_part)
    if not isinstance(date_part, str) or not date_part.strip():
        return None

    trimmed = date_part.strip()
    time_text = _time_text(time_part)

    # a) Date and time already in one field
    if _COMBINED_DATETIME_PATTERN.search(trimmed):
        parsed = _parse_iso_with_retry(trimmed.replace(" ", "T", 1))
        if parsed is not None:
            return parsed

    # b) Separate date + time fields
    if time_text:
        parsed = _parse_iso_with_retry(f"{trimmed}T{time_text}")
        if parsed is not None:
            return parsed

    # c) Bare ISO date; shapes fromisoformat rejects go on to (f)
    if _ISO_DATE_PATTERN.match(trimmed):
        parsed = _parse_iso(f"{trimmed}T{time_text}" if time_text else trimmed)
        if parsed is not None:
            return parsed

    # d) YYYY/MM/DD or YYYY.MM.DD
    match = _YEAR_FIRST_PATTERN.match(trimmed)
    if match:
        year, month, day = match.groups()
        return build_date(year, month, day, time_text)

    # e) DD-MM-YYYY, day-first only
    match = _DAY_FIRST_PATTERN.match(trimmed)
    if match:
        day, month, year = match.groups()
        return build_date(year, month, day, time_text)

    # f) General-purpose parser
    return _parse_native(f"{trimmed}T{time_text}" if time_text else trimmed)


def build_date(
    year: str | int,
    month: str | int,
    day: str | int,
    time_part: object = None,
) -> datetime | None:
    """
    Compose a datetime from date components and an optional time fragment.

    The time fragment is "HH:MM[:SS[.fff]]"; each component that is missing
    or not a number counts as 0.  An impossible date (Feb 30, month 13)
    gives None.
    """
    hour = minute = second = microsecond = 0

    time_text = _time_text(time_part)
    if time_text:
        parts = time_text.split(":")
        hour = _int_or_zero(parts[0])
        if len(parts) > 1:
            minute = _int_or_zero(parts[1])
        if len(parts) > 2 and parts[2]:
            seconds, _, fraction = parts[2].partition(".")
            second = _int_or_zero(seconds)
            microsecond = _fraction_to_microseconds(fraction)

    try:
        return datetime(
            int(year), int(month), int(day), hour, minute, second, microsecond
        )
    except (TypeError, ValueError):
        logger.debug(f"Invalid date {year}-{month}-{day} {time_text or ''}")
        return None


def looks_like_time(value: object) -> bool:
    """True for "H:MM", "HH:MM" and "HH:MM:SS" strings (24-hour clock)."""
    return isinstance(value, str) and _TIME_PATTERN.match(value.strip()) is not None


def normalize_row_date(row: Row, mapping: ColumnMapping) -> date | None:
    """
    Calendar date of one row, for cleaning and health checks.

    Reads the date column (joined with the time column when both exist),
    else the datetime column, else the timestamp column.  10-digit values
    are Unix seconds, 13-digit values Unix milliseconds (UTC).  Anything
    else goes through parse_date_time, then through its date-only prefix.

    Returns:
        The date, or None when the row has no parsable temporal value.
    """
    date_text = ""
    time_text = ""
    if mapping.date and not is_blank(row.get(mapping.date)):
        date_text = _cell_text(row.get(mapping.date))
        if mapping.time and not is_blank(row.get(mapping.time)):
            time_text = _cell_text(row.get(mapping.time))
    elif mapping.datetime and not is_blank(row.get(mapping.datetime)):
        date_text = _cell_text(row.get(mapping.datetime))
    elif mapping.timestamp and not is_blank(row.get(mapping.timestamp)):
        date_text = _cell_text(row.get(mapping.timestamp))

    if not date_text:
        return None

    if _UNIX_SECONDS_PATTERN.match(date_text):
        return datetime.fromtimestamp(int(date_text), tz=timezone.utc).date()
    if _UNIX_MILLISECONDS_PATTERN.match(date_text):
        return datetime.fromtimestamp(int(date_text) / 1000, tz=timezone.utc).date()

    head, _, tail = date_text.partition(" ")
    attempts = [
        (head, time_text or tail or None),
        (f"{date_text} {time_text}".strip(), None),
        (head, None),
    ]
    for date_part, time_part in attempts:
        parsed = parse_date_time(date_part, time_part)
        if parsed is not None:
            return parsed.date()

    logger.debug(f"Unparsable date value '{date_text}'")
    return None


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _parse_iso(text: str) -> datetime | None:
    try:
        return _to_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def _parse_iso_with_retry(text: str) -> datetime | None:
    """ISO parse, retried once with fractional seconds removed."""
    parsed = _parse_iso(text)
    if parsed is not None:
        return parsed
    without_fraction = _FRACTIONAL_SECONDS_PATTERN.sub("", text, count=1)
    if without_fraction != text:
        return _parse_iso(without_fraction)
    return None


def _parse_native(text: str) -> datetime | None:
    try:
        parsed = pd.to_datetime(text, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    return _to_naive_utc(parsed.to_pydatetime())


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _time_text(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _cell_text(value: object) -> str:
    # Spreadsheet readers turn 1718000000 into 1718000000.0
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _int_or_zero(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


def _fraction_to_microseconds(fraction: str) -> int:
    if not fraction.isdigit():
        return 0
    return int(fraction[:6].ljust(6, "0"))
