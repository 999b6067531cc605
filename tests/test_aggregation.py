"""
Tests for the dashboard statistics.
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add src to path
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from aggregation import (
    bin_seniority,
    coaching_eligibility,
    compute_stats,
    count_by,
    location_table,
    monthly_matrix,
    seniority_label,
    top_crashers,
    unique_driver_count,
    unique_location_count,
    unique_vehicle_count,
    vehicle_table,
)
from filters import filter_records
from normalizer import normalize_records
from schema import DamageRecord, SenioritySample


def incidents(pid, count, name=None, **fields):
    return [DamageRecord(personnel_id=pid, full_name=name or f"Chauffeur {pid}", **fields) for _ in range(count)]


def test_end_to_end_pipeline():
    rows = [
        {"ID": "1", "Naam": "A", "Datum": "01-01-2024", "Type": "standaard bus"},
        {"ID": "1", "Naam": "A", "Datum": "02-01-2024", "Type": "gelede bus"},
        {"ID": "1", "Naam": "A", "Datum": "03-01-2024", "Type": "flexity"},
    ]
    records = filter_records(normalize_records(rows))
    assert len(records) == 3

    stats = compute_stats(records)
    assert stats.total_incidents == 3
    assert sorted((e.name, e.value) for e in stats.by_vehicle) == [
        ("Flexity", 1), ("Gelede", 1), ("Standaard", 1),
    ]

    eligible = coaching_eligibility(records, [], [])
    assert len(eligible) == 1
    assert eligible[0].personnel_id == "1"
    assert eligible[0].count == 3
    assert eligible[0].is_planned is False


def test_count_by_orders_by_frequency_then_first_seen():
    records = (
        incidents("1", 1, location="Gent")
        + incidents("2", 2, location="Brugge")
        + incidents("3", 1, location="")
        + incidents("4", 1, location="Gent")
    )
    assert [(e.name, e.value) for e in count_by(records, "location")] == [
        ("Gent", 2), ("Brugge", 2), ("Onbekend", 1),
    ]


def test_compute_stats_truncates_to_top_ten():
    records = []
    for i in range(12):
        records += incidents(str(i), 1, location=f"Halte {i}", damage_kind=f"Soort {i}",
                             vehicle_category=f"Cat {i}")
    stats = compute_stats(records)

    assert len(stats.by_type) == 10
    assert len(stats.by_location) == 10
    assert len(stats.by_vehicle) == 12
    assert len(location_table(records)) == 12


def test_monthly_matrix():
    records = (
        incidents("1", 2, parsed_date=datetime(2023, 3, 4))
        + incidents("2", 1, parsed_date=datetime(2024, 3, 9))
        + incidents("3", 1, parsed_date=datetime(2024, 12, 1))
        + incidents("4", 1)
    )
    matrix = monthly_matrix(records)

    assert len(matrix) == 12
    assert matrix[0] == {"month": "januari", "2023": 0, "2024": 0}
    assert matrix[2] == {"month": "maart", "2023": 2, "2024": 1}
    assert matrix[11] == {"month": "december", "2023": 0, "2024": 1}


def test_monthly_matrix_without_dates():
    matrix = monthly_matrix(incidents("1", 3))
    assert matrix[0] == {"month": "januari"}


@pytest.mark.parametrize("years,label", [
    (0, "0 tot 5"), (5, "0 tot 5"), (6, "6 tot 10"), (10, "6 tot 10"),
    (11, "11 tot 15"), (23, "21 tot 25"),
])
def test_seniority_label(years, label):
    assert seniority_label(years) == label


def test_bin_seniority():
    samples = [
        SenioritySample(12, 1),
        SenioritySample(2, 1),
        SenioritySample(4.9, 2),
        SenioritySample(5.7, 0),
        SenioritySample(7, 3),
        SenioritySample(14, 2),
        SenioritySample(6, 2),
    ]
    bins = bin_seniority(samples)

    assert [(b.label, b.average_damages, b.person_count) for b in bins] == [
        ("0 tot 5", 1.0, 3),
        ("6 tot 10", 2.5, 2),
        ("11 tot 15", 1.5, 2),
    ]


def test_bin_seniority_rounds_to_two_decimals():
    bins = bin_seniority([SenioritySample(1, 1), SenioritySample(2, 1), SenioritySample(3, 0)])
    assert bins[0].average_damages == 0.67


def test_coaching_threshold():
    records = incidents("10", 2) + incidents("11", 3) + incidents("12", 3) + incidents("13", 4)
    completed = [{"P-nr": "012"}]
    requested = [{"P-nr": "0013"}]

    eligible = coaching_eligibility(records, completed, requested)

    assert [(c.personnel_id, c.count, c.is_planned) for c in eligible] == [
        ("13", 4, True),
        ("11", 3, False),
    ]


def test_coaching_ignores_records_without_personnel_id():
    records = incidents("", 5)
    assert coaching_eligibility(records, [], []) == []


def test_top_crashers_and_unique_drivers():
    records = incidents("1", 1, name="An") + incidents("2", 3, name="Bo") + incidents("1", 1, name="An V.")
    crashers = top_crashers(records)

    assert [(c.personnel_id, c.full_name, c.count) for c in crashers] == [
        ("2", "Bo", 3),
        ("1", "An V.", 2),
    ]
    assert unique_driver_count(records) == 2


def test_unique_counts_skip_unresolved_values():
    records = normalize_records([
        {"ID": "1", "Naam": "A", "Bus/Tram": "4321"},
        {"Locatie": "Gent"},
        {"ID": "1", "Naam": "A", "Locatie": "Gent", "Bus/Tram": "4321"},
        {"ID": "2", "Naam": "B", "Locatie": "Brugge"},
    ])

    assert len(records) == 4
    assert unique_driver_count(records) == len(top_crashers(records)) == 2
    assert unique_vehicle_count(records) == 1
    assert unique_location_count(records) == 2


def test_vehicle_table():
    records = (
        incidents("1", 1, vehicle_mode="4321", vehicle_category="Standaard")
        + incidents("2", 2, vehicle_mode="7100", vehicle_category="Gelede")
        + incidents("3", 1, vehicle_mode="4321", vehicle_category="Gelede")
        + incidents("4", 1, vehicle_mode="")
    )
    table = vehicle_table(records)

    assert [(v.vehicle, v.category, v.count) for v in table] == [
        ("4321", "Standaard", 2),
        ("7100", "Gelede", 2),
        ("Onbekend", "Overig", 1),
    ]
