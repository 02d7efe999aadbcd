"""
Contact draft validation and the filtered/sorted view of a contact list.
Pure functions: no I/O, inputs are never mutated.
"""

import re
import unicodedata
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[\d\s\-()]{6,}$")

NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255
MESSAGE_MAX_LENGTH = 1000


class SortOption(str, Enum):
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    DATE_ASC = "date-asc"
    DATE_DESC = "date-desc"


SORT_CYCLE = [SortOption.NAME_ASC, SortOption.NAME_DESC, SortOption.DATE_DESC, SortOption.DATE_ASC]

SORT_LABELS = {
    SortOption.NAME_ASC: "A → Z",
    SortOption.NAME_DESC: "Z → A",
    SortOption.DATE_ASC: "Oldest",
    SortOption.DATE_DESC: "Newest",
}


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _name_error(name: str) -> str | None:
    name = name.strip()
    if not name:
        return "Name is required"
    if len(name) > NAME_MAX_LENGTH:
        return "Name must be less than 100 characters"
    return None


def _email_error(email: str) -> str | None:
    email = email.strip()
    if not email:
        return "Email is required"
    if not EMAIL_RE.match(email):
        return "Please enter a valid email address"
    if len(email) > EMAIL_MAX_LENGTH:
        return "Email must be less than 255 characters"
    return None


def _phone_error(phone: str) -> str | None:
    phone = phone.strip()
    if not phone:
        return "Phone number is required"
    if not PHONE_RE.match(phone):
        return "Please enter a valid phone number"
    return None


def _message_error(message: str) -> str | None:
    if len(message) > MESSAGE_MAX_LENGTH:
        return "Message must be less than 1000 characters"
    return None


_RULES = {
    "name": _name_error,
    "email": _email_error,
    "phone": _phone_error,
    "message": _message_error,
}


def validate_contact(draft: Mapping[str, Any]) -> Dict[str, str]:
    """
    Validate a contact draft. Returns {field: message}; a missing key means the field is valid.
    Missing required fields are treated as empty.
    """
    errors: Dict[str, str] = {}
    for field, rule in _RULES.items():
        error = rule(_text(draft.get(field)))
        if error:
            errors[field] = error
    return errors


def validate_partial(fields: Mapping[str, Any]) -> Dict[str, str]:
    """Validate only the fields present in a partial update."""
    errors: Dict[str, str] = {}
    for field, rule in _RULES.items():
        if field not in fields:
            continue
        if fields[field] is None and field == "message":
            continue
        error = rule(_text(fields[field]))
        if error:
            errors[field] = error
    return errors


def is_submittable(draft: Mapping[str, Any]) -> bool:
    return not validate_contact(draft)


def _get(contact: Any, attr: str) -> Any:
    if isinstance(contact, Mapping):
        return contact.get(attr)
    return getattr(contact, attr, None)


def _collation_key(name: Any) -> str:
    """Accent- and case-insensitive key, close to what a locale collator compares."""
    decomposed = unicodedata.normalize("NFKD", _text(name))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _created_at(contact: Any) -> datetime:
    value = _get(contact, "created_at")
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if not isinstance(value, datetime):
        raise ValueError(f"Contact {_get(contact, 'id')!r} has no created_at")
    return value


def _matches(contact: Any, term: str) -> bool:
    company = _get(contact, "company")
    return (
        term in _text(_get(contact, "name")).lower()
        or term in _text(_get(contact, "email")).lower()
        or term in _text(_get(contact, "phone"))
        or bool(company and term in company.lower())
    )


def filter_and_sort(contacts: Iterable[Any], search_term: str, sort_mode: SortOption | str) -> List[Any]:
    """
    Contacts matching `search_term` (name, email, phone or company) ordered by `sort_mode`.
    Equal keys keep their input order in every mode.
    """
    mode = SortOption(sort_mode)
    result = list(contacts)

    term = (search_term or "").strip().lower()
    if term:
        result = [c for c in result if _matches(c, term)]

    descending = mode in (SortOption.NAME_DESC, SortOption.DATE_DESC)
    if mode in (SortOption.NAME_ASC, SortOption.NAME_DESC):
        result.sort(key=lambda c: _collation_key(_get(c, "name")), reverse=descending)
    else:
        result.sort(key=_created_at, reverse=descending)
    return result


def cycle_sort_option(current: SortOption | str) -> SortOption:
    index = SORT_CYCLE.index(SortOption(current))
    return SORT_CYCLE[(index + 1) % len(SORT_CYCLE)]


def sort_label(mode: SortOption | str) -> str:
    return SORT_LABELS[SortOption(mode)]
