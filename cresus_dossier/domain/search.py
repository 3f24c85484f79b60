"""Name-based filtering of the advisor's dossier list"""

from typing import Any, Iterable, List, Mapping, TypeVar

T = TypeVar("T")


def matches_name(contact: Mapping[str, Any], search: str) -> bool:
    """Case-insensitive substring match on last name or first name"""
    needle = (search or "").lower()
    last_name = str(contact.get("last_name") or "").lower()
    first_name = str(contact.get("first_name") or "").lower()
    return needle in last_name or needle in first_name


def filter_by_name(items: Iterable[T], search: str, contact_of=lambda item: item["contact"]) -> List[T]:
    """Keep the items whose contact matches ``search``; an empty search keeps everything"""
    return [item for item in items if matches_name(contact_of(item) or {}, search)]
