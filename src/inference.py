"""
Header inference for inconsistently labeled spreadsheet rows.

The damage log has been edited by hand for years, so the same logical
column shows up as "Personeelsnr", "personeels-nr", "Personeels Nr" and so
on. Lookups compare normalized header names, first exactly and then, when
asked to, by substring containment.
"""

import logging
import re
from typing import Any, Dict, Optional, Sequence

from mappings import VEHICLE_CATEGORY_KEYWORDS
from schema import OTHER_CATEGORY

logger = logging.getLogger(__name__)

HEADER_NOISE = re.compile(r"[\s\-_]+")


def normalize_header(header: Any) -> str:
    """
    Normalize a header for comparison.

    Args:
        header: Raw header (usually a string)

    Returns:
        Lower-cased header with whitespace, hyphens and underscores removed
    """
    if header is None:
        return ""
    return HEADER_NOISE.sub("", str(header).lower())


def find_value(row: Dict[str, Any], candidates: Sequence[str], aggressive: bool = False) -> Optional[Any]:
    """
    Find the value of a logical field in a row.

    Columns are scanned in the row's own order, so when several columns
    match, the leftmost one wins regardless of candidate order.

    Args:
        row: Mapping of column header to cell value
        candidates: Known spellings of the column
        aggressive: Fall back to substring matching when no header matches exactly

    Returns:
        The cell value, or None when no column matches
    """
    targets = [normalize_header(c) for c in candidates]
    targets = [t for t in targets if t]
    if not row or not targets:
        return None

    normalized_columns = [(normalize_header(key), key) for key in row.keys()]

    for column, key in normalized_columns:
        if column in targets:
            return row[key]

    if not aggressive:
        return None

    for column, key in normalized_columns:
        if not column:
            continue
        for target in targets:
            if target in column or column in target:
                logger.debug(f"[Headers] Substring match '{key}' for candidate '{target}'")
                return row[key]

    return None


def classify_vehicle_category(raw_type: Any) -> str:
    """
    Map a free text vehicle type onto a coarse category.

    The first keyword found (case-insensitive) wins; unrecognized text is
    kept verbatim, and empty text falls back to the "Overig" category.
    """
    text = "" if raw_type is None else str(raw_type).strip()
    lowered = text.lower()

    for keyword, category in VEHICLE_CATEGORY_KEYWORDS:
        if keyword in lowered:
            return category

    return text if text else OTHER_CATEGORY
