"""
Value transforms for spreadsheet cells.

Spreadsheet exports mix real date cells, spreadsheet serial numbers and
free text such as "15-03-2024", "2024/03/15" or "20240315". Everything here
is lenient: unparseable input yields None (or the original text for display),
never an exception.
"""

import logging
import math
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# Day zero of spreadsheet serial dates (accounts for the 1900 leap-year bug)
EXCEL_EPOCH = datetime(1899, 12, 30)

DATE_SEPARATORS = re.compile(r"[/\-.]")
COMPACT_DATE = re.compile(r"^[0-9]{8}$")
DATE_PART = re.compile(r"^[0-9]+$")


def _build_date(year: int, month: int, day: int) -> Optional[datetime]:
    try:
        return datetime(year, month, day)
    except (ValueError, OverflowError):
        return None


def _parse_serial(value: float) -> Optional[datetime]:
    """Convert a spreadsheet serial day count to a date, rounded to the nearest day."""
    if math.isnan(value) or math.isinf(value):
        return None
    try:
        return EXCEL_EPOCH + timedelta(days=math.floor(value + 0.5))
    except (OverflowError, ValueError):
        logger.debug(f"[Dates] Serial {value} out of range")
        return None


def parse_parts(text: str) -> Optional[datetime]:
    """
    Parse a three-part numeric date separated by '/', '-' or '.'.

    The magnitude of the leading component decides the order: above 1000 it
    is read as year-month-day, otherwise as day-month-year. Two-digit years
    are placed in the 2000s.

    Args:
        text: Trimmed date text

    Returns:
        datetime at midnight, or None if the text is not a valid three-part date
    """
    parts = DATE_SEPARATORS.split(text)
    if len(parts) != 3 or not all(DATE_PART.match(p.strip()) for p in parts):
        return None

    first, second, third = (int(p) for p in parts)
    if first > 1000:
        year, month, day = first, second, third
    else:
        day, month, year = first, second, third

    if year < 100:
        year += 2000

    return _build_date(year, month, day)


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse a heterogeneous date value into a datetime.

    Handles:
        - datetime objects (returned unchanged) and date objects (midnight)
        - spreadsheet serial numbers (days since 1899-12-30)
        - "DD-MM-YYYY", "YYYY/MM/DD", "D.M.YY" and similar three-part text
        - "YYYYMMDD"
        - anything else dateutil understands

    Args:
        value: Cell value (string, number, date or None)

    Returns:
        Parsed datetime or None when the value cannot be interpreted
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    if isinstance(value, (int, float)):
        return _parse_serial(float(value))

    s = str(value).strip()
    if not s:
        return None

    parsed = parse_parts(s)
    if parsed:
        return parsed

    if COMPACT_DATE.match(s):
        return _build_date(int(s[:4]), int(s[4:6]), int(s[6:]))

    try:
        return date_parser.parse(s, dayfirst=True)
    except (ValueError, OverflowError):
        logger.debug(f"[Dates] Could not parse date value '{s}'")

    return None


def format_date(value: Any) -> str:
    """
    Format a date value for display as DD-MM-YYYY.

    Returns the original value as text when it cannot be parsed, or "-"
    when it is empty.
    """
    parsed = parse_date(value)
    if parsed:
        return f"{parsed.day:02d}-{parsed.month:02d}-{parsed.year:04d}"

    if value is None or str(value).strip() == "":
        return "-"
    return str(value)


def parse_number(value: Any) -> Optional[float]:
    """Normalize numeric cells: accepts numbers and numeric text with a decimal comma."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)

    str_value = str(value).strip().replace(",", ".")
    if not str_value:
        return None
    try:
        number = float(str_value)
    except (ValueError, TypeError, OverflowError):
        return None
    return None if math.isnan(number) else number
