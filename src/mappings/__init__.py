"""
Mappings module - Contains all dataset mapping configurations
"""

from .damage_mappings import DAMAGE_MAPPINGS, EXCLUDED_HEADERS, VEHICLE_CATEGORY_KEYWORDS
from .reference_mappings import (
    PERSONNEL_ID_KEYS,
    PERSONNEL_ID_FRAGMENTS,
    COACHING_ID_KEYS,
    CONVERSATION_ID_KEYS,
    CONVERSATION_DATE_KEYS,
    AUTH_NAME_KEYS,
    AUTH_PASSWORD_KEYS,
    SENIORITY_YEARS_KEYS,
    SENIORITY_DAMAGE_KEYS,
)

DEFAULT_DAMAGE_MAPPING_ID = "source_bron_damage_log"


def get_mapping_by_id(mapping_id: str):
    """
    Get a mapping configuration by its ID.

    Args:
        mapping_id: The unique ID of the mapping configuration

    Returns:
        Mapping configuration dictionary or None if not found
    """
    for mapping in DAMAGE_MAPPINGS:
        if mapping.get("id") == mapping_id:
            return mapping

    return None


def get_field_mapping(mapping: dict, target_field: str):
    """
    Get the field entry for a target field within a mapping configuration.

    Raises:
        KeyError: If the mapping has no entry for the field
    """
    for entry in mapping.get("mappings", []):
        if entry.get("target_field") == target_field:
            return entry
    raise KeyError(f"Mapping '{mapping.get('id')}' has no field '{target_field}'.")
