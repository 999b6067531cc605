"""
Key spellings for the auxiliary datasets: personnel directory, coaching
lists, conversation log, authorized users and the seniority sheet.
"""

# Known identifier keys in personeelsficheGB.json, checked in order
PERSONNEL_ID_KEYS = [
    "PersoneelsNr", "personeelsnr", "Personeelsnr", "ID", "id",
    "Stamnummer", "stamnummer", "Personeels Nr",
]

# Any other key containing one of these fragments is treated as an identifier
PERSONNEL_ID_FRAGMENTS = ["personeels", "stamnr", "id", "nummer"]

COACHING_ID_KEYS = ["P-nr", "p-nr", "Personeelsnr", "PersoneelsNr"]

CONVERSATION_ID_KEYS = ["nummer", "Nummer", "NUMMER"]
CONVERSATION_DATE_KEYS = ["datum", "Datum", "DATUM", "Datum gesprek"]

AUTH_NAME_KEYS = ["Naam", "naam"]
AUTH_PASSWORD_KEYS = ["Paswoord", "paswoord"]

# Lower-cased, trimmed header spellings on the seniority sheet
SENIORITY_YEARS_KEYS = ["dienstjaren", "dienstjaar"]
SENIORITY_DAMAGE_KEYS = ["schades", "schade", "aantal"]
