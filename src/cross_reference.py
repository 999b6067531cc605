"""
Cross-reference lookups over the auxiliary datasets.

The personnel directory, the coaching lists and the conversation log all
refer to drivers by personnel number, but each file pads that number
differently ("007" in one, 7 in another). Identifiers are therefore compared
case-insensitively and, failing that, with leading zeros stripped.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from external_tables import clean_text
from mappings import (
    AUTH_NAME_KEYS,
    AUTH_PASSWORD_KEYS,
    COACHING_ID_KEYS,
    CONVERSATION_DATE_KEYS,
    CONVERSATION_ID_KEYS,
    PERSONNEL_ID_FRAGMENTS,
    PERSONNEL_ID_KEYS,
)
from transforms import parse_date

logger = logging.getLogger(__name__)


def normalize_id(value: Any) -> str:
    """Lower-case, trimmed text form of an identifier."""
    return clean_text(value).lower()


def strip_leading_zeros(value: str) -> str:
    return value.lstrip("0")


def ids_match(a: Any, b: Any) -> bool:
    """
    Compare two identifiers.

    Equal when their normalized forms match, or when they match after
    stripping leading zeros from both. Empty identifiers never match.
    """
    left = normalize_id(a)
    right = normalize_id(b)
    if not left or not right:
        return False
    return left == right or strip_leading_zeros(left) == strip_leading_zeros(right)


def first_value(row: Dict[str, Any], keys: Iterable[str]) -> Any:
    """Value of the first key in ``keys`` that holds a truthy value."""
    for key in keys:
        value = row.get(key)
        if value:
            return value
    return None


class IdentifierSet:
    """Set of normalized identifiers with leading-zero-insensitive membership."""

    def __init__(self, values: Iterable[Any] = ()):
        self._exact = set()
        self._stripped = set()
        for value in values:
            self.add(value)

    def add(self, value: Any) -> None:
        normalized = normalize_id(value)
        if not normalized:
            return
        self._exact.add(normalized)
        self._stripped.add(strip_leading_zeros(normalized))

    def __contains__(self, value: Any) -> bool:
        normalized = normalize_id(value)
        if not normalized:
            return False
        return normalized in self._exact or strip_leading_zeros(normalized) in self._stripped

    def __len__(self) -> int:
        return len(self._exact)


def coaching_ids(rows: List[Dict[str, Any]]) -> IdentifierSet:
    """Identifiers found in the P-number column of a coaching list."""
    return IdentifierSet(first_value(row, COACHING_ID_KEYS) for row in rows)


@dataclass
class PersonnelEntry:
    """
    One person from the personnel directory.

    Attributes:
        identifier_candidates: Fields whose key looks like an identifier
        fields: The full record as found in the directory
        key: The directory key when the directory is an object keyed by id
    """
    identifier_candidates: Dict[str, Any]
    fields: Dict[str, Any]
    key: Optional[str] = None

    def matches(self, query: Any) -> bool:
        known = first_value(self.fields, PERSONNEL_ID_KEYS)
        if known is not None and ids_match(known, query):
            return True
        return any(ids_match(value, query) for value in self.identifier_candidates.values())


def _identifier_candidates(person: Dict[str, Any]) -> Dict[str, Any]:
    candidates = {}
    for key, value in person.items():
        lower_key = str(key).lower()
        if any(fragment in lower_key for fragment in PERSONNEL_ID_FRAGMENTS):
            candidates[key] = value
    return candidates


def build_personnel_entries(directory: Any) -> List[PersonnelEntry]:
    """
    Canonicalize the personnel directory.

    Accepts either a list of person objects or an object mapping keys
    (usually personnel numbers) to person objects. Anything that is not a
    person object is skipped.
    """
    if not directory:
        return []

    if isinstance(directory, dict):
        items = [(str(key), value) for key, value in directory.items()]
    elif isinstance(directory, list):
        items = [(None, value) for value in directory]
    else:
        logger.warning(f"[Personnel] Unsupported directory shape: {type(directory).__name__}")
        return []

    entries = []
    for key, person in items:
        if not isinstance(person, dict):
            continue
        entries.append(PersonnelEntry(
            identifier_candidates=_identifier_candidates(person),
            fields=person,
            key=key,
        ))
    return entries


@dataclass
class CoachingMatches:
    requested: List[Dict[str, Any]] = field(default_factory=list)
    completed: List[Dict[str, Any]] = field(default_factory=list)


class CrossReferenceIndex:
    """
    Point lookups on the auxiliary datasets for one snapshot.

    Args:
        personnel: Personnel directory (list or object of person objects)
        coaching_requested: Rows of the "Coaching" sheet
        coaching_completed: Rows of the "Voltooide coachings" sheet
        conversations: Rows of the conversation log
        allowed_users: Rows of the authorization list
    """

    def __init__(
        self,
        personnel: Any = None,
        coaching_requested: Optional[List[Dict[str, Any]]] = None,
        coaching_completed: Optional[List[Dict[str, Any]]] = None,
        conversations: Optional[List[Dict[str, Any]]] = None,
        allowed_users: Optional[List[Dict[str, Any]]] = None,
    ):
        self.personnel = build_personnel_entries(personnel)
        self.keyed_directory = isinstance(personnel, dict)
        self.coaching_requested = coaching_requested or []
        self.coaching_completed = coaching_completed or []
        self.conversations = conversations or []
        self.allowed_users = allowed_users or []

    def find_personnel(self, query: Any) -> Optional[Dict[str, Any]]:
        """
        Find a person by personnel number.

        When the directory is keyed by id, the keys are tried before the
        person objects themselves.
        """
        if not normalize_id(query):
            return None

        if self.keyed_directory:
            for entry in self.personnel:
                if ids_match(entry.key, query):
                    return entry.fields

        for entry in self.personnel:
            if entry.matches(query):
                return entry.fields

        return None

    def filter_coaching(self, query: Any) -> CoachingMatches:
        """Requested and completed coaching rows for one driver."""
        if not normalize_id(query):
            return CoachingMatches()

        def belongs(row):
            return ids_match(first_value(row, COACHING_ID_KEYS), query)

        return CoachingMatches(
            requested=[row for row in self.coaching_requested if belongs(row)],
            completed=[row for row in self.coaching_completed if belongs(row)],
        )

    def filter_conversations(self, query: Any) -> List[Dict[str, Any]]:
        """
        Conversation log rows for one driver, newest first.

        Rows whose date cannot be parsed follow the dated ones in their
        original order.
        """
        if not normalize_id(query):
            return []

        matches = [
            row for row in self.conversations
            if ids_match(first_value(row, CONVERSATION_ID_KEYS), query)
        ]
        dated = [(parse_date(first_value(row, CONVERSATION_DATE_KEYS)), row) for row in matches]
        with_date = sorted(
            [(d, row) for d, row in dated if d is not None],
            key=lambda item: item[0].replace(tzinfo=None),
            reverse=True,
        )
        without_date = [row for d, row in dated if d is None]
        return [row for _, row in with_date] + without_date

    def authenticate(self, user: str, password: str) -> bool:
        """
        Check a name/password pair against the authorization list.

        Plain comparison, no hashing: the list is maintained by hand next to
        the damage log and only gates the internal dashboard.
        """
        if not user or not password:
            return False

        for row in self.allowed_users:
            name = clean_text(first_value(row, AUTH_NAME_KEYS))
            secret = clean_text(first_value(row, AUTH_PASSWORD_KEYS))
            if name == user and secret == password:
                return True

        logger.info(f"[Auth] Rejected login for '{user}'")
        return False
