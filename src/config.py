"""
Configuration module for loading environment variables.

This module loads environment variables from .env file and exposes
configuration values for the FTP file share and the workbook layout.
"""

import os
from dotenv import load_dotenv
load_dotenv()


def _clean(value):
    """Strip quotes that sometimes end up around values copied into .env files."""
    return (value or "").replace('"', "").replace("'", "").strip()


# FTP configuration
FTP_HOST = _clean(os.getenv("FTP_HOST"))
FTP_USER = _clean(os.getenv("FTP_USER"))
FTP_PASSWORD = _clean(os.getenv("FTP_PASSWORD"))
FTP_PATH = _clean(os.getenv("FTP_PATH"))
if not FTP_PATH or FTP_PATH == "/":
    FTP_PATH = "schade met macro.xlsm"
FTP_TIMEOUT = int(os.getenv("FTP_TIMEOUT", "30"))
FTP_SECURE = os.getenv("FTP_SECURE", "false").lower() in ("true", "1", "yes", "on")

# Local directory used instead of the FTP share (development, offline reports)
LOCAL_DATA_DIR = _clean(os.getenv("LOCAL_DATA_DIR")) or None

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Primary workbook layout
PRIMARY_SHEET = "BRON"
SENIORITY_SHEET_NAMES = ("schades-dienstjaar", "schadesdienstjaar")

# Auxiliary files, expected next to the primary workbook
PERSONNEL_FILE = "personeelsficheGB.json"
COACHING_FILE = "Coachingslijst.xlsx"
COACHING_REQUESTED_SHEET = "Coaching"
COACHING_COMPLETED_SHEET = "Voltooide coachings"
AUTH_FILE = "toegestaan_gebruik.xlsx"
CONVERSATIONS_FILE = "Overzicht gesprekken (aangepast).xlsx"
CONVERSATIONS_FILE_ALT = "Overzicht gesprekken (aangepast).xslx"


def missing_ftp_settings():
    """Return the names of the FTP variables that are not configured."""
    missing = []
    if not FTP_HOST:
        missing.append("FTP_HOST")
    if not FTP_USER:
        missing.append("FTP_USER")
    if not FTP_PASSWORD:
        missing.append("FTP_PASSWORD")
    return missing
