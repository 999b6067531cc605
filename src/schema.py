"""
Canonical record types.

Defines the normalized damage record and the derived aggregate shapes
handed to the presentation layer, plus the field order used when records
are serialized.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


UNKNOWN = "Onbekend"
OTHER_CATEGORY = "Overig"


# Serialization order for damage records
DAMAGE_RECORD_SCHEMA_ORDER = [
    "personnel_id",
    "full_name",
    "location",
    "raw_date_text",
    "parsed_date",
    "link",
    "vehicle_category",
    "damage_kind",
    "vehicle_mode",
    "source_row",
]


def reorder_record(row: Dict[str, Any], order: List[str]) -> Dict[str, Any]:
    """
    Reorder a row dict to follow a schema order.

    Keys listed in ``order`` come first; anything else is appended in its
    original position so no data is lost.

    Args:
        row: Row dictionary
        order: Desired key order

    Returns:
        New dictionary with keys reordered
    """
    ordered = {key: row.get(key) for key in order}
    for key, value in row.items():
        if key not in ordered:
            ordered[key] = value
    return ordered


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


@dataclass
class DamageRecord:
    """
    One normalized incident row.

    Attributes:
        personnel_id: Driver identifier, trimmed; may be empty
        full_name: Driver name, ``Onbekend`` when unresolved
        location: Incident location
        raw_date_text: Date as shown to users (DD-MM-YYYY when parseable)
        parsed_date: Calendar date used for filtering and binning
        link: External reference URL, empty when absent
        vehicle_category: Coarse vehicle class (Standaard, Gelede, ...)
        damage_kind: Free text description of the damage
        vehicle_mode: Bus/tram number or identifier
        source_row: The raw row, kept for rendering extra columns
    """
    personnel_id: str = ""
    full_name: str = UNKNOWN
    location: str = ""
    raw_date_text: str = ""
    parsed_date: Optional[datetime] = None
    link: str = ""
    vehicle_category: str = OTHER_CATEGORY
    damage_kind: str = UNKNOWN
    vehicle_mode: str = UNKNOWN
    source_row: Dict[str, Any] = field(default_factory=dict)

    def has_content(self) -> bool:
        """True when at least one identifying field was resolved."""
        return bool(
            self.parsed_date is not None
            or self.personnel_id
            or (self.full_name and self.full_name != UNKNOWN)
            or self.location
            or (self.damage_kind and self.damage_kind != UNKNOWN)
        )

    def to_dict(self) -> Dict[str, Any]:
        row = {
            "personnel_id": self.personnel_id,
            "full_name": self.full_name,
            "location": self.location,
            "raw_date_text": self.raw_date_text,
            "parsed_date": _jsonable(self.parsed_date),
            "link": self.link,
            "vehicle_category": self.vehicle_category,
            "damage_kind": self.damage_kind,
            "vehicle_mode": self.vehicle_mode,
            "source_row": {k: _jsonable(v) for k, v in self.source_row.items()},
        }
        return reorder_record(row, DAMAGE_RECORD_SCHEMA_ORDER)


@dataclass
class SenioritySample:
    """One employee row from the seniority sheet."""
    years_of_service: float
    damage_count: float


@dataclass
class SeniorityBin:
    label: str
    average_damages: float
    person_count: int
    sort_key: int


@dataclass
class CountEntry:
    name: str
    value: int


@dataclass
class DashboardStats:
    total_incidents: int
    by_type: List[CountEntry]
    by_vehicle: List[CountEntry]
    by_location: List[CountEntry]


@dataclass
class CoachingCandidate:
    """A driver eligible for remedial coaching."""
    personnel_id: str
    full_name: str
    count: int
    is_planned: bool = False


@dataclass
class VehicleUsage:
    vehicle: str
    category: str
    count: int
