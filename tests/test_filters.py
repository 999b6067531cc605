"""
Tests for the record filter.
"""

import sys
from datetime import date, datetime
from pathlib import Path

# Add src to path
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from filters import FilterCriteria, filter_records, record_date, unique_types
from schema import DamageRecord


def make_record(pid, vehicle="4321", category="Standaard", date_text="-"):
    return DamageRecord(
        personnel_id=pid,
        full_name=f"Chauffeur {pid}",
        vehicle_mode=vehicle,
        vehicle_category=category,
        raw_date_text=date_text,
    )


RECORDS = [
    make_record("1001", "4321", "Standaard", "05-01-2024"),
    make_record("1002", "7100", "Gelede", "20-02-2024"),
    make_record("2001", "6300", "Flexity", "31-03-2024"),
    make_record("2002", "4322", "Standaard", "ergens in april"),
]


def ids(records):
    return [r.personnel_id for r in records]


def test_no_criteria_keeps_everything():
    assert ids(filter_records(RECORDS)) == ["1001", "1002", "2001", "2002"]
    assert ids(filter_records(RECORDS, FilterCriteria())) == ["1001", "1002", "2001", "2002"]


def test_id_substring():
    assert ids(filter_records(RECORDS, FilterCriteria(id_substring="100"))) == ["1001", "1002"]


def test_vehicle_substring_is_case_insensitive():
    records = RECORDS + [make_record("3001", "T-63ab", "Flexity", "01-01-2024")]
    assert ids(filter_records(records, FilterCriteria(vehicle_substring="432"))) == ["1001", "2002"]
    assert ids(filter_records(records, FilterCriteria(vehicle_substring="63AB"))) == ["3001"]


def test_exact_type():
    assert ids(filter_records(RECORDS, FilterCriteria(exact_type="Standaard"))) == ["1001", "2002"]
    assert ids(filter_records(RECORDS, FilterCriteria(exact_type="Stand"))) == []


def test_date_range_inclusive():
    criteria = FilterCriteria(start_date="2024-01-05", end_date="2024-02-20")
    assert ids(filter_records(RECORDS, criteria)) == ["1001", "1002", "2002"]


def test_date_bounds_accept_date_objects():
    criteria = FilterCriteria(start_date=date(2024, 2, 1))
    assert ids(filter_records(RECORDS, criteria)) == ["1002", "2001", "2002"]

    criteria = FilterCriteria(end_date=datetime(2024, 1, 31))
    assert ids(filter_records(RECORDS, criteria)) == ["1001", "2002"]


def test_unparseable_record_date_is_never_excluded():
    criteria = FilterCriteria(start_date="2030-01-01", end_date="2030-12-31")
    assert ids(filter_records(RECORDS, criteria)) == ["2002"]


def test_combined_criteria():
    criteria = FilterCriteria(id_substring="2", exact_type="Standaard", start_date="2024-01-01")
    assert ids(filter_records(RECORDS, criteria)) == ["2002"]


def test_record_date():
    assert record_date(RECORDS[0]) == datetime(2024, 1, 5)
    assert record_date(RECORDS[3]) is None
    assert record_date(make_record("x", date_text="2024-03-15T08:00:00+01:00")).tzinfo is None


def test_unique_types():
    records = RECORDS + [make_record("9", category="")]
    assert unique_types(records) == ["Flexity", "Gelede", "Standaard"]
