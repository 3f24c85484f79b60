"""Date manipulation utilities"""

from datetime import datetime, timezone
from typing import Optional

FRENCH_MONTHS = [
    "janvier",
    "février",
    "mars",
    "avril",
    "mai",
    "juin",
    "juillet",
    "août",
    "septembre",
    "octobre",
    "novembre",
    "décembre",
]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_french_date(value: Optional[datetime]) -> str:
    """Long fr-FR date with a two-digit day, e.g. "05 mars 2025"; "—" when unknown"""
    if value is None:
        return "—"
    return f"{value.day:02d} {FRENCH_MONTHS[value.month - 1]} {value.year}"


def epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)
