"""
Filtering of the canonical damage records by the dashboard's search fields.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, List, Optional, Sequence

from schema import DamageRecord
from transforms import parse_date, parse_parts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterCriteria:
    """
    Current state of the dashboard filters.

    Attributes:
        id_substring: Part of a personnel number (case-insensitive)
        vehicle_substring: Part of a bus/tram number (case-insensitive)
        exact_type: Vehicle category that must match exactly
        start_date: First day to include (date, datetime or "YYYY-MM-DD")
        end_date: Last day to include (date, datetime or "YYYY-MM-DD")
    """
    id_substring: Optional[str] = None
    vehicle_substring: Optional[str] = None
    exact_type: Optional[str] = None
    start_date: Any = None
    end_date: Any = None

    def has_date_range(self) -> bool:
        return bool(self.start_date) or bool(self.end_date)


def _bound(value: Any, at: time) -> Optional[datetime]:
    parsed = parse_date(value)
    if parsed is None:
        if value:
            logger.warning(f"[Filters] Ignoring unparseable date bound '{value}'")
        return None
    return datetime.combine(parsed.date(), at)


def record_date(record: DamageRecord) -> Optional[datetime]:
    """
    Re-read a record's displayed date.

    The display text is split into day-month-year or year-month-day first;
    when that fails the whole text goes through the generic date parser.
    """
    text = record.raw_date_text or ""
    parsed = parse_parts(text.strip()) or parse_date(text)
    if parsed is not None and parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None)
    return parsed


def _contains(haystack: str, needle: Optional[str]) -> bool:
    if not needle:
        return True
    return needle.lower() in (haystack or "").lower()


def filter_records(records: Sequence[DamageRecord], criteria: Optional[FilterCriteria] = None) -> List[DamageRecord]:
    """
    Select the records that satisfy every active criterion.

    Order is preserved. Records whose date cannot be read are never
    excluded by the date range.

    Args:
        records: Canonical damage records
        criteria: Active filters; None or an empty FilterCriteria keeps everything

    Returns:
        List of matching records
    """
    if criteria is None:
        return list(records)

    start = end = None
    if criteria.has_date_range():
        start = _bound(criteria.start_date, time.min) if criteria.start_date else None
        end = _bound(criteria.end_date, time.max) if criteria.end_date else None

    selected = []
    for record in records:
        if not _contains(record.personnel_id, criteria.id_substring):
            continue
        if not _contains(record.vehicle_mode, criteria.vehicle_substring):
            continue
        if criteria.exact_type and record.vehicle_category != criteria.exact_type:
            continue

        if start or end:
            item_date = record_date(record)
            if item_date is not None:
                if start and item_date < start:
                    continue
                if end and item_date > end:
                    continue

        selected.append(record)

    return selected


def unique_types(records: Sequence[DamageRecord]) -> List[str]:
    """Sorted vehicle categories present in the records, for the type dropdown."""
    return sorted({record.vehicle_category for record in records if record.vehicle_category})
