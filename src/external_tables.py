"""
External tables processing module.

Converts workbook bytes → worksheets → list of row dicts keyed by header,
the shape every other module works with.
"""
import io
import logging
from typing import Any, Dict, List, Optional

from openpyxl import load_workbook

logger = logging.getLogger(__name__)


def clean_header(h: Any) -> str:
    """
    Clean a header cell for use as a row key.

    Args:
        h: Raw header cell

    Returns:
        Header text with surrounding whitespace removed ("" for empty cells)
    """
    if h is None:
        return ""
    return str(h).strip()


def clean_text(value: Any) -> str:
    """
    Normalize text field values.

    Args:
        value: Cell value (string, number, None, or whitespace)

    Returns:
        Empty string for None/whitespace, otherwise trimmed string. Whole
        floats lose their ".0" so numeric ids read back as typed.
    """
    if value is None:
        return ""

    if isinstance(value, float) and value.is_integer():
        value = int(value)

    return str(value).strip()


def is_empty(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def rows2d_to_objects(values, header_row_index=0) -> List[Dict[str, Any]]:
    """
    Convert a 2D list of cell values to a list of dictionaries.

    Empty cells are left out of each row dict and columns without a header
    are skipped. Repeated headers get a numeric suffix ("Datum", "Datum_1").

    Args:
        values: 2D list where the header_row_index row contains headers
        header_row_index: Index of the row containing headers (default: 0)

    Returns:
        List of dictionaries, one per data row
    """
    if not values or len(values) <= header_row_index:
        return []

    headers = []
    seen: Dict[str, int] = {}
    for h in values[header_row_index]:
        header = clean_header(h)
        if header and header in seen:
            seen[header] += 1
            header = f"{header}_{seen[header]}"
        elif header:
            seen[header] = 0
        headers.append(header)

    objects = []
    for row in values[header_row_index + 1:]:
        obj = {}
        for i, header in enumerate(headers):
            if not header or i >= len(row):
                continue
            value = row[i]
            if is_empty(value):
                continue
            obj[header] = value
        objects.append(obj)

    return objects


def drop_empty_rows(rows):
    """
    Remove rows that are empty or contain only empty/None values.

    Args:
        rows: List of dictionaries

    Returns:
        List of dictionaries with empty rows removed
    """
    return [row for row in rows if any(not is_empty(value) for value in row.values())]


def read_workbook(data: bytes):
    """
    Load workbook bytes with openpyxl.

    Formulas are read as their cached values; .xlsm macros are ignored.
    """
    return load_workbook(io.BytesIO(data), data_only=True)


def sheet_to_rows(worksheet) -> List[Dict[str, Any]]:
    """Convert a worksheet to row dicts, using its first row as headers."""
    values = [list(row) for row in worksheet.iter_rows(values_only=True)]
    rows = drop_empty_rows(rows2d_to_objects(values))
    logger.debug(f"[Sheets] '{worksheet.title}': {len(rows)} rows")
    return rows


def find_sheet(workbook, names) -> Optional[str]:
    """
    Find a sheet whose name matches one of ``names``.

    Sheet names are compared lower-cased with whitespace removed.
    """
    wanted = {"".join(n.lower().split()) for n in names}
    for sheet_name in workbook.sheetnames:
        if "".join(sheet_name.lower().split()) in wanted:
            return sheet_name
    return None


def read_sheet(data: bytes, sheet_name: Optional[str] = None) -> Optional[List[Dict[str, Any]]]:
    """
    Read one sheet of a workbook as row dicts.

    Args:
        data: Workbook bytes
        sheet_name: Sheet to read; the first sheet when omitted

    Returns:
        Row dicts, or None when the sheet does not exist
    """
    workbook = read_workbook(data)
    try:
        if sheet_name is None:
            if not workbook.sheetnames:
                return None
            sheet_name = workbook.sheetnames[0]
        if sheet_name not in workbook.sheetnames:
            return None
        return sheet_to_rows(workbook[sheet_name])
    finally:
        workbook.close()
