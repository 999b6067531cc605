"""
Dashboard statistics over the filtered damage records.

Every function here is pure: it takes the already-filtered records (and,
where needed, auxiliary rows) and returns plain dataclasses or dicts for the
presentation layer.
"""

import logging
import math
from collections import OrderedDict, defaultdict
from typing import Any, Dict, List, Sequence

from cross_reference import coaching_ids
from schema import (
    UNKNOWN,
    CoachingCandidate,
    CountEntry,
    DamageRecord,
    DashboardStats,
    SeniorityBin,
    SenioritySample,
    VehicleUsage,
)

logger = logging.getLogger(__name__)

TOP_N = 10

# Drivers need strictly more incidents than this to be proposed for coaching
COACHING_THRESHOLD = 2

MONTH_NAMES = [
    "januari", "februari", "maart", "april", "mei", "juni",
    "juli", "augustus", "september", "oktober", "november", "december",
]


def count_by(records: Sequence[DamageRecord], attribute: str) -> List[CountEntry]:
    """
    Group-count records on one attribute, most frequent first.

    Empty values are counted as "Onbekend". Ties keep first-seen order.
    """
    counts: Dict[str, int] = OrderedDict()
    for record in records:
        key = getattr(record, attribute) or UNKNOWN
        counts[key] = counts.get(key, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [CountEntry(name=name, value=value) for name, value in ranked]


def compute_stats(records: Sequence[DamageRecord]) -> DashboardStats:
    """
    Headline statistics for the dashboard page.

    Args:
        records: Filtered damage records

    Returns:
        DashboardStats with damage kinds and locations cut to the top 10 and
        every vehicle category
    """
    return DashboardStats(
        total_incidents=len(records),
        by_type=count_by(records, "damage_kind")[:TOP_N],
        by_vehicle=count_by(records, "vehicle_category"),
        by_location=count_by(records, "location")[:TOP_N],
    )


def monthly_matrix(records: Sequence[DamageRecord]) -> List[Dict[str, Any]]:
    """
    Incident counts per calendar month and year.

    Returns:
        Twelve rows in calendar order, each {"month": name, "<year>": count, ...}
        with a column for every year present in the data. Records without a
        parsed date are left out.
    """
    counts: Dict[int, Dict[int, int]] = defaultdict(lambda: defaultdict(int))
    years = set()
    for record in records:
        if record.parsed_date is None:
            continue
        year = record.parsed_date.year
        years.add(year)
        counts[record.parsed_date.month][year] += 1

    matrix = []
    for month_index, name in enumerate(MONTH_NAMES, start=1):
        row: Dict[str, Any] = {"month": name}
        for year in sorted(years):
            row[str(year)] = counts[month_index][year]
        matrix.append(row)
    return matrix


def seniority_label(years: int) -> str:
    """Label of the 5-year bin a years-of-service value falls in."""
    if years <= 5:
        return "0 tot 5"
    bin_index = math.ceil((years - 5) / 5)
    start = 5 + (bin_index - 1) * 5 + 1
    end = 5 + bin_index * 5
    return f"{start} tot {end}"


def bin_seniority(samples: Sequence[SenioritySample]) -> List[SeniorityBin]:
    """
    Average damages per person for each seniority bin.

    Years of service are truncated to whole years before binning. Bins are
    sorted by their first year; averages are rounded to two decimals.
    """
    totals: Dict[str, List[float]] = OrderedDict()
    for sample in samples:
        label = seniority_label(int(sample.years_of_service))
        bucket = totals.setdefault(label, [0.0, 0])
        bucket[0] += sample.damage_count
        bucket[1] += 1

    bins = [
        SeniorityBin(
            label=label,
            average_damages=round(total / count, 2),
            person_count=int(count),
            sort_key=0 if label == "0 tot 5" else int(label.split(" ")[0]),
        )
        for label, (total, count) in totals.items()
    ]
    return sorted(bins, key=lambda b: b.sort_key)


def _driver_counts(records: Sequence[DamageRecord]) -> "OrderedDict[str, List]":
    """Incidents per personnel id with the most recently seen name."""
    drivers: "OrderedDict[str, List]" = OrderedDict()
    for record in records:
        if not record.personnel_id:
            continue
        entry = drivers.setdefault(record.personnel_id, [record.full_name, 0])
        entry[0] = record.full_name
        entry[1] += 1
    return drivers


def coaching_eligibility(
    records: Sequence[DamageRecord],
    completed_rows: Sequence[Dict[str, Any]],
    requested_rows: Sequence[Dict[str, Any]],
) -> List[CoachingCandidate]:
    """
    Drivers that should be scheduled for coaching.

    A driver qualifies with more than two incidents in the filtered records,
    unless the completed-coachings list already has them. Drivers on the
    requested list are flagged as planned.

    Args:
        records: Filtered damage records
        completed_rows: Rows of the "Voltooide coachings" sheet
        requested_rows: Rows of the "Coaching" sheet

    Returns:
        Candidates, most incidents first
    """
    completed = coaching_ids(list(completed_rows))
    requested = coaching_ids(list(requested_rows))

    candidates = []
    for personnel_id, (full_name, count) in _driver_counts(records).items():
        if count <= COACHING_THRESHOLD:
            continue
        if personnel_id in completed:
            continue
        candidates.append(CoachingCandidate(
            personnel_id=personnel_id,
            full_name=full_name,
            count=count,
            is_planned=personnel_id in requested,
        ))

    logger.debug(
        f"[Coaching] {len(candidates)} eligible drivers "
        f"({len(completed)} completed, {len(requested)} requested)"
    )
    return sorted(candidates, key=lambda c: c.count, reverse=True)


def top_crashers(records: Sequence[DamageRecord]) -> List[CoachingCandidate]:
    """Every driver with their incident count, most incidents first."""
    drivers = [
        CoachingCandidate(personnel_id=pid, full_name=name, count=count)
        for pid, (name, count) in _driver_counts(records).items()
    ]
    return sorted(drivers, key=lambda c: c.count, reverse=True)


def _distinct(records: Sequence[DamageRecord], attribute: str) -> int:
    values = {getattr(record, attribute) for record in records}
    return len(values - {"", UNKNOWN})


def unique_driver_count(records: Sequence[DamageRecord]) -> int:
    # Rows without a personnel id are not a driver
    return _distinct(records, "personnel_id")


def unique_vehicle_count(records: Sequence[DamageRecord]) -> int:
    return _distinct(records, "vehicle_mode")


def unique_location_count(records: Sequence[DamageRecord]) -> int:
    return _distinct(records, "location")


def location_table(records: Sequence[DamageRecord]) -> List[CountEntry]:
    # Full list for the location page; the dashboard chart shows the top 10
    return count_by(records, "location")


def vehicle_table(records: Sequence[DamageRecord]) -> List[VehicleUsage]:
    """
    Incidents per vehicle number.

    The category shown is the one of the first incident seen for the vehicle.
    """
    vehicles: Dict[str, VehicleUsage] = OrderedDict()
    for record in records:
        key = record.vehicle_mode or UNKNOWN
        if key not in vehicles:
            vehicles[key] = VehicleUsage(vehicle=key, category=record.vehicle_category, count=0)
        vehicles[key].count += 1

    return sorted(vehicles.values(), key=lambda v: v.count, reverse=True)
