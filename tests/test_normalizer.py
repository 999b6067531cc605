"""
Tests for the damage record mapper.
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add src to path
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from normalizer import (
    MappingPolicy,
    NormalizationError,
    RecordMapper,
    normalize_records,
    normalize_seniority_rows,
)


SAMPLE_ROW = {
    "Personeelsnr": 1234.0,
    "Volledige Naam": " Jan Peeters ",
    "Datum": datetime(2024, 3, 15),
    "Type": "Gelede bus",
    "Bus/Tram": 4321,
    "Schade": "Spiegel",
    "Locatie": "Gent Zuid",
    "link": "https://example.org/dossier/1",
    "Opmerking": "geen letsel",
}


def test_map_full_row():
    record = RecordMapper().map_row(SAMPLE_ROW)

    assert record.personnel_id == "1234"
    assert record.full_name == "Jan Peeters"
    assert record.parsed_date == datetime(2024, 3, 15)
    assert record.raw_date_text == "15-03-2024"
    assert record.vehicle_category == "Gelede"
    assert record.vehicle_mode == "4321"
    assert record.damage_kind == "Spiegel"
    assert record.location == "Gent Zuid"
    assert record.link == "https://example.org/dossier/1"
    assert record.source_row["Opmerking"] == "geen letsel"


def test_defaults_for_missing_fields():
    record = RecordMapper().map_row({"Locatie": "Brugge"})

    assert record is not None
    assert record.location == "Brugge"
    assert record.full_name == "Onbekend"
    assert record.damage_kind == "Onbekend"
    assert record.vehicle_mode == "Onbekend"
    assert record.vehicle_category == "Overig"
    assert record.raw_date_text == "-"
    assert record.parsed_date is None


def test_rows_without_identifying_fields_are_dropped():
    mapper = RecordMapper()
    assert mapper.map_row({}) is None
    assert mapper.map_row({"Opmerking": "x", "Bus/Tram": "4321"}) is None


def test_unparseable_date_keeps_text():
    record = RecordMapper().map_row({"Datum": "ergens in maart", "Naam": "An"})
    assert record.parsed_date is None
    assert record.raw_date_text == "ergens in maart"


def test_teamcoach_is_name_fallback():
    record = RecordMapper().map_row({"TEAMCOACH": "Els", "ID": "5"})
    assert record.full_name == "Els"


def test_lenient_keeps_row_without_personnel_id():
    rows = [{"Naam": "An", "Datum": "01-02-2024"}]
    assert len(normalize_records(rows)) == 1


def test_strict_drops_row_without_personnel_id():
    rows = [
        {"Naam": "An", "Datum": "01-02-2024"},
        {"personeelsnr": "12", "Naam": "Bo", "Datum": "02-02-2024"},
    ]
    records = normalize_records(rows, MappingPolicy.STRICT)
    assert [r.personnel_id for r in records] == ["12"]


def test_strict_uses_fixed_spellings_only():
    record = RecordMapper(MappingPolicy.STRICT).map_row({"ID": "7", "BestuurderNaam": "Jan"})
    assert record.full_name == "Onbekend"

    lenient = RecordMapper().map_row({"ID": "7", "BestuurderNaam": "Jan"})
    assert lenient.full_name == "Jan"


def test_display_headers_hide_mapped_columns():
    mapper = RecordMapper()
    mapper.map_rows([SAMPLE_ROW])
    assert mapper.display_headers() == ["Schade", "Locatie", "Opmerking"]


def test_unknown_mapping_id():
    with pytest.raises(NormalizationError):
        RecordMapper(mapping_id="does_not_exist")


def test_normalize_seniority_rows():
    rows = [
        {"Dienstjaren": 3, "Schades": 2},
        {" dienstjaar ": "7,5", "aantal": "1"},
        {"Dienstjaren": "n.v.t.", "Schades": 4},
        {"Dienstjaren": 12, "Schades": "geen"},
        {"Naam": "An"},
    ]
    samples = normalize_seniority_rows(rows)

    assert [(s.years_of_service, s.damage_count) for s in samples] == [(3.0, 2.0), (7.5, 1.0)]
