"""
Damage log mappings from the BRON sheet to the canonical damage record.
Each entry lists the column spellings seen across versions of the workbook
"""

DAMAGE_MAPPINGS = [
    {
        "id": "source_bron_damage_log",
        "metadata": {
            "source_name": "Schadeboek BRON",
            "source_type": "xlsx_file",
            "connection_type": "ftp",
            "notes": "Damage log maintained by the back office, one row per incident",
            "connection_config": {
                "sheet_name": "BRON",
            }
        },
        "mappings": [
            {
                "target_field": "vehicle_category",
                "candidates": ["Type"],
                "aggressive": True,
                "default": "",
            },
            {
                "target_field": "vehicle_mode",
                "candidates": [
                    "bus/tram", "Bus/Tram", "Voertuig", "Voertuignr",
                    "Voertuignummer", "Busnr", "Tramnr",
                ],
                "aggressive": False,
                "default": "Onbekend",
            },
            {
                "target_field": "damage_kind",
                "candidates": [
                    "Schade", "Soort", "Type Schade", "Schade Type",
                    "Soort schade", "Omschrijving",
                ],
                "aggressive": False,
                "default": "Onbekend",
            },
            {
                "target_field": "location",
                "candidates": ["Locatie", "Plaats"],
                "aggressive": True,
                "default": "",
            },
            {
                "target_field": "personnel_id",
                "candidates": [
                    "personeelsnr", "Personeelsnummer", "PersoneelsNr", "ID",
                    "stamnr", "Stamnummer", "P-nr",
                ],
                "aggressive": False,
                "default": "",
            },
            {
                "target_field": "full_name",
                # TEAMCOACH is the fallback some exports carry instead of a driver name
                "candidates": [
                    "Volledige Naam", "Naam", "Chauffeur", "Bestuurder",
                    "TEAMCOACH",
                ],
                "aggressive": True,
                "default": "Onbekend",
            },
            {
                "target_field": "link",
                "candidates": ["link", "Hyperlink", "URL"],
                "aggressive": False,
                "default": "",
            },
            {
                "target_field": "date",
                "candidates": ["Datum", "Date"],
                "aggressive": True,
                "default": None,
            },
        ],
        # Legacy fixed-key chains, first truthy key wins
        "strict_keys": {
            "vehicle_category": ["Type", "type"],
            "vehicle_mode": ["bus/tram", "Bus/Tram", "Voertuig", "voertuig"],
            "damage_kind": [
                "Schade", "schade", "Soort", "soort", "Type Schade",
                "Schade Type", "Omschrijving",
            ],
            "location": ["locatie", "Locatie", "Plaats"],
            "personnel_id": ["personeelsnr", "Personeelsnr", "ID", "stamnr"],
            "full_name": [
                "Volledige Naam", "volledige naam", "Volledige naam",
                "VOLLEDIGE NAAM", "Naam", "naam", "Chauffeur", "Bestuurder",
                "bestuurder", "TEAMCOACH", "Teamcoach",
            ],
            "link": ["link", "Link"],
            "date": ["Datum", "datum"],
        },
    },
]

# Columns already shown as dedicated fields, hidden from the passthrough columns
EXCLUDED_HEADERS = [
    "personeelsnr", "Personeelsnr", "ID", "stamnr",
    "Naam", "naam", "Chauffeur", "Bestuurder", "Volledige Naam",
    "datum", "Datum",
    "bus/tram", "Bus/Tram", "Voertuig", "voertuig",
    "Type", "type",
    "link", "Link",
    "TEAMCOACH", "Teamcoach", "teamcoach",
]

VEHICLE_CATEGORY_KEYWORDS = [
    ("standaard", "Standaard"),
    ("gelede", "Gelede"),
    ("flexity", "Flexity"),
    ("hermelijn", "Hermelijn"),
]
