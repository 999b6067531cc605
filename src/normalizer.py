"""
Damage log normalizer.

Turns raw BRON rows into canonical damage records. Two mapping policies are
supported:

    LENIENT  header inference with exact and substring matching; a row is kept
             as soon as any identifying field resolves (reference behavior)
    STRICT   fixed header spellings only; rows without a personnel id are
             dropped (behavior of older dashboard builds)
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from external_tables import clean_text, is_empty
from inference import classify_vehicle_category, find_value
from mappings import (
    DEFAULT_DAMAGE_MAPPING_ID,
    EXCLUDED_HEADERS,
    SENIORITY_DAMAGE_KEYS,
    SENIORITY_YEARS_KEYS,
    get_field_mapping,
    get_mapping_by_id,
)
from schema import DamageRecord, SenioritySample
from transforms import format_date, parse_date, parse_number

logger = logging.getLogger(__name__)


class NormalizationError(Exception):
    """Raised when a mapping configuration cannot be used."""
    pass


class MappingPolicy(Enum):
    LENIENT = "lenient"
    STRICT = "strict"


def _first_truthy(row: Dict[str, Any], keys: List[str]) -> Any:
    for key in keys:
        value = row.get(key)
        if value:
            return value
    return None


class RecordMapper:
    """
    Maps raw rows onto DamageRecord.

    The mapper remembers the headers of the first row it sees in a batch so
    the presentation layer can show the remaining columns verbatim.
    """

    def __init__(
        self,
        policy: MappingPolicy = MappingPolicy.LENIENT,
        mapping_id: str = DEFAULT_DAMAGE_MAPPING_ID,
    ):
        mapping = get_mapping_by_id(mapping_id)
        if mapping is None:
            raise NormalizationError(f"Mapping '{mapping_id}' not found.")

        self.policy = policy
        self.mapping = mapping
        self.extra_headers: List[str] = []
        self._excluded = {h.lower().strip() for h in EXCLUDED_HEADERS}

    def _lookup(self, row: Dict[str, Any], target_field: str) -> Any:
        if self.policy is MappingPolicy.STRICT:
            return _first_truthy(row, self.mapping["strict_keys"][target_field])

        entry = get_field_mapping(self.mapping, target_field)
        return find_value(row, entry["candidates"], aggressive=entry.get("aggressive", False))

    def _text(self, row: Dict[str, Any], target_field: str) -> str:
        text = clean_text(self._lookup(row, target_field))
        return text or get_field_mapping(self.mapping, target_field).get("default") or ""

    def map_row(self, row: Dict[str, Any]) -> Optional[DamageRecord]:
        """
        Map one raw row.

        Args:
            row: Mapping of column header to cell value

        Returns:
            DamageRecord, or None when the row should be dropped
        """
        raw_date = self._lookup(row, "date")

        record = DamageRecord(
            personnel_id=self._text(row, "personnel_id"),
            full_name=self._text(row, "full_name"),
            location=self._text(row, "location"),
            raw_date_text=format_date(raw_date),
            parsed_date=parse_date(raw_date),
            link=self._text(row, "link"),
            vehicle_category=classify_vehicle_category(self._lookup(row, "vehicle_category")),
            damage_kind=self._text(row, "damage_kind"),
            vehicle_mode=self._text(row, "vehicle_mode"),
            source_row=dict(row),
        )

        if self.policy is MappingPolicy.STRICT:
            return record if record.personnel_id else None

        return record if record.has_content() else None

    def map_rows(self, rows: List[Dict[str, Any]]) -> List[DamageRecord]:
        """
        Map a batch of rows, dropping noise rows.

        Also records the headers of the first row as ``extra_headers``.
        """
        self.extra_headers = list(rows[0].keys()) if rows else []

        records = []
        dropped = 0
        for row in rows:
            record = self.map_row(row)
            if record is None:
                dropped += 1
                continue
            records.append(record)

        logger.info(
            f"[Mapper] {len(records)} records kept, {dropped} rows dropped "
            f"(policy={self.policy.value})"
        )
        return records

    def display_headers(self) -> List[str]:
        """Headers of the current batch that have no dedicated record field."""
        return [h for h in self.extra_headers if h.lower().strip() not in self._excluded]


def normalize_records(
    rows: List[Dict[str, Any]],
    policy: MappingPolicy = MappingPolicy.LENIENT,
) -> List[DamageRecord]:
    """Convenience wrapper: map a batch with a fresh RecordMapper."""
    return RecordMapper(policy).map_rows(rows)


def normalize_seniority_rows(rows: List[Dict[str, Any]]) -> List[SenioritySample]:
    """
    Convert rows of the seniority sheet into samples.

    Header spellings are matched lower-cased and trimmed. Rows without a
    numeric years-of-service value or a numeric damage count are discarded.
    """
    samples = []
    for row in rows:
        years = None
        damages = None
        for key, value in row.items():
            lower_key = str(key).lower().strip()
            if lower_key in SENIORITY_YEARS_KEYS:
                years = value
            elif lower_key in SENIORITY_DAMAGE_KEYS:
                damages = value

        years_value = parse_number(years)
        if years_value is None:
            if not is_empty(years):
                logger.debug(f"[Seniority] Skipping row with non-numeric years '{years}'")
            continue

        damage_value = parse_number(damages)
        if damage_value is None:
            continue

        samples.append(SenioritySample(years_of_service=years_value, damage_count=damage_value))

    return samples
